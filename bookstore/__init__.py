"""
Bookstore Console - Source Package

A line-oriented command interpreter for a small bookstore: user accounts,
book inventory and a financial ledger, guarded by role-based privileges
and a nested login session stack.

DESIGN PRINCIPLES:
1. Validate everything before mutating anything
2. Every reject looks the same from the outside ("Invalid")
3. Internally, every reject carries a reason
4. Every successful command is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Bookstore Console Team"
