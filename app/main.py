"""
Console Frontend for Bookstore Console

Reads one command per line from stdin and writes results to stdout.
Records live in the data directory (BOOKSTORE_STORAGE_DATA_DIR,
default: the working directory).

Usage:
    python -m app.main < commands.txt
"""

import sys

from bookstore.orchestrator import main


if __name__ == "__main__":
    sys.exit(main())
