"""
General use constants.
"""

from __future__ import annotations
from typing import Final

import math
import re

BINARY: Final[frozenset[str]] = frozenset({"0", "1"})
OCTAL: Final[frozenset[str]] = frozenset({"0", "1", "2", "3", "4", "5", "6", "7"})
DECIMAL: Final[frozenset[str]] = frozenset({"0", "1", "2", "3", "4", "5", "6", "7", "8", "9"})
HEXADECIMAL: Final[frozenset[str]] = DECIMAL | {"a", "b", "c", "d", "e", "f", "A", "B", "C", "D", "E", "F"}
ALPHABETIC: Final[frozenset[str]] = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
ALNUM: Final[frozenset[str]] = ALPHABETIC | DECIMAL

UNBOUNDED: Final[float] = math.inf
"""Upper bound for repetitions with no maximum."""

EXCERPT_LENGTH: Final[int] = 12
"""How many characters of the input `format_error()` shows after the failure position."""
CARET_CONTEXT: Final[int] = 20
"""How many characters `ParseError` shows on each side of the caret."""

ALLOWED_REGEX_FLAGS: Final[int] = re.IGNORECASE | re.MULTILINE | re.DOTALL | re.VERBOSE | re.ASCII | re.UNICODE
"""Flags that only change what a pattern matches. Everything else is rejected by `regex()`."""
REGEX_FLAG_LETTERS: Final[tuple[tuple[re.RegexFlag, str], ...]] = (
    (re.IGNORECASE, "i"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
    (re.ASCII, "a"),
)
