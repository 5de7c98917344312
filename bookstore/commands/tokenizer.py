"""
Line Tokenizer and Option Parser

Tokenizing rules:
- Runs of the space character separate tokens.
- A double-quoted segment is one token, taken verbatim (spaces allowed,
  the quote character itself excluded).
- A token that starts right where the previous one ended, with no space
  in between, is marked `glued`. This is how `-name="Two Words"` stays
  recognisable as one option.

DESIGN DECISION: Options are parsed as whole `-key=value` units. Unknown
keys, positional words and repeated keys are all structural errors found
in this single pass, before any value is validated.
"""

import re
from typing import NamedTuple

from bookstore.errors import FormatError


QUOTE = '"'
SEPARATOR = " "

_OPTION_RE = re.compile(r"-([A-Za-z]+)=(.*)", re.DOTALL)


class TokenizeError(FormatError):
    """The line cannot be split into tokens (e.g. an unterminated quote)."""
    pass


class OptionError(FormatError):
    """A malformed, unknown or repeated -key=value option."""
    pass


class Token(NamedTuple):
    text: str
    quoted: bool = False
    glued: bool = False


def is_blank(line: str) -> bool:
    """Lines made only of spaces are skipped without output."""
    return line.strip(SEPARATOR) == ""


def tokenize(line: str) -> list[Token]:
    """
    Split a command line into tokens.

    Raises:
        TokenizeError: If a quote is opened but never closed
    """
    tokens: list[Token] = []
    current: list[str] = []
    in_quote = False
    glued = False      # the token being built touches the previous one
    touching = False   # the previous token ended exactly here

    for c in line:
        if in_quote:
            if c == QUOTE:
                tokens.append(Token("".join(current), quoted=True, glued=glued))
                current = []
                in_quote = False
                touching = True
            else:
                current.append(c)
        elif c == QUOTE:
            if current:
                tokens.append(Token("".join(current), glued=glued))
                current = []
                touching = True
            glued = touching
            in_quote = True
        elif c == SEPARATOR:
            if current:
                tokens.append(Token("".join(current), glued=glued))
                current = []
            touching = False
        else:
            if not current:
                glued = touching
            current.append(c)
            touching = False

    if in_quote:
        raise TokenizeError("Unterminated quote")
    if current:
        tokens.append(Token("".join(current), glued=glued))
    return tokens


def group_glued(tokens: list[Token]) -> list[list[Token]]:
    """Group tokens into words: each glued token joins the word before it."""
    words: list[list[Token]] = []
    for token in tokens:
        if token.glued and words:
            words[-1].append(token)
        else:
            words.append([token])
    return words


def parse_options(tokens: list[Token], allowed: frozenset[str]) -> dict[str, str]:
    """
    Parse `-key=value` options.

    Args:
        tokens: The tokens after the command word
        allowed: Option keys accepted by the command

    Returns:
        Mapping of key to raw (not yet validated) value, in input order

    Raises:
        OptionError: On a positional word, unknown key or repeated key
    """
    options: dict[str, str] = {}
    for word in group_glued(tokens):
        head = word[0]
        match = None if head.quoted else _OPTION_RE.fullmatch(head.text)
        if match is None:
            raise OptionError(f"Expected -key=value, got {head.text!r}")

        key = match.group(1)
        if key not in allowed:
            raise OptionError(f"Unknown option -{key}")
        if key in options:
            raise OptionError(f"Option -{key} given twice")
        options[key] = match.group(2) + "".join(t.text for t in word[1:])
    return options
