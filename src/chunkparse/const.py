"""
General use constants.
"""

from __future__ import annotations
from typing import Final

END_OF_INPUT: Final[str] = "end of input"
"""What errors report as found when the input ran out."""

LINE_TERMINATORS: Final[frozenset[str]] = frozenset({"\n", "\r", "\u2028", "\u2029"})
WHITESPACES: Final[frozenset[str]] = frozenset({" ", "\t", "\n", "\r", "\f", "\v"})
DECIMAL: Final[frozenset[str]] = frozenset({"0", "1", "2", "3", "4", "5", "6", "7", "8", "9"})
ALPHABETIC: Final[frozenset[str]] = frozenset({"a", "b", "c", "d", "e", "f", "g", "h", "i", "j", "k", "l", "m", "n", "o", "p", "q", "r", "s", "t", "u", "v", "w", "x", "y", "z", "A", "B", "C", "D", "E", "F", "G", "H", "I", "J", "K", "L", "M", "N", "O", "P", "Q", "R", "S", "T", "U", "V", "W", "X", "Y", "Z"})
