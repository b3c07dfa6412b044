"""
General purpose parsers for text input, built only from the combinators in `chunkparse.main`.

They work on any input whose elements are single characters, such as a `str` or a list of
one-character strings.
"""

from __future__ import annotations
from typing import Any, Callable, Final
from collections.abc import Iterable

from functools import partial
import operator

from chunkparse import *
import chunkparse.const as const


def expect_error(expected: str) -> Callable[[int, Any], ExpectError]:
    """Error factory for `token()` that reports `expected`."""
    def factory(pos: int, element: Any) -> ExpectError:
        return ExpectError(pos, expected, element)
    return factory

def character(c: str) -> Parser[str]:
    """Matches the single character `c`."""
    return token(partial(operator.eq, c), expect_error(c))

def _string_error(literal: str, index: int, pos: int, element: Any) -> ExpectError:
    prefix = literal[:index]
    if element is END:
        return ExpectError(pos - index, literal, prefix or END)
    return ExpectError(pos - index, literal, f"{prefix}{element}")

def string(literal: str) -> Parser[str]:
    """
    Matches `literal`, one character per element. Succeeds with `literal`.

    Doesn't consume anything if it fails. The error is positioned at the start of the literal:
    ```
    run(string("abc"), "abx")   # ExpectError: At position 0: Expected abc, found abx
    ```
    """
    parser: Parser[str] = always(literal)
    for index in reversed(range(len(literal))):
        parser = next_(token(partial(operator.eq, literal[index]), partial(_string_error, literal, index)), parser)
    return attempt(parser)


class Trie:
    """
    Prefix tree of literals.

    Compiles into a single parser that reads every shared prefix only once:
    ```
    keywords = Trie.from_words(["cat", "car", "cart"]).compile()
    run(keywords, "cart")   # "cart"
    ```
    """

    def __init__(self) -> None:
        self.children: dict[str, Trie] = {}
        self.terminal: bool = False
        """Whether a word ends at this node."""

    @classmethod
    def from_words(cls, words: Iterable[str]) -> Trie:
        trie = cls()
        for word in words:
            trie.insert(word)
        return trie

    def insert(self, word: str) -> None:
        node = self
        for c in word:
            node = node.children.setdefault(c, Trie())
        node.terminal = True

    def __contains__(self, word: str) -> bool:
        node = self
        for c in word:
            if c not in node.children:
                return False
            node = node.children[c]
        return node.terminal

    def compile(self) -> Parser[str]:
        """
        Builds the parser. Longer words are preferred over their prefixes.

        Later changes to the trie don't affect parsers that were already compiled.
        """
        if not self.children and not self.terminal:
            raise ValueError("At least one word required.")
        return attempt(self._compile(""))

    def _compile(self, prefix: str) -> Parser[str]:
        choices: list[Parser[str]] = [
            next_(character(c), child._compile(prefix + c))
            for c, child in self.children.items()
        ]
        if self.terminal:
            # a longer word failing further in falls back to this one
            choices = [attempt(branch) for branch in choices]
            choices.append(always(prefix))
        return choice(*choices)

def trie(words: Iterable[str]) -> Parser[str]:
    """Matches the longest of the given words. Same as `Trie.from_words(words).compile()`."""
    return Trie.from_words(words).compile()


def _is_any_char(element: Any) -> bool:
    return isinstance(element, str) and len(element) == 1 and element not in const.LINE_TERMINATORS

def _one_of(chars: frozenset[str]) -> Callable[[Any], bool]:
    return lambda element: isinstance(element, str) and element in chars

any_char: Final[Parser[str]] = token(_is_any_char, expect_error("any character"))
"""A pre-defined parser (not a factory). Matches any single character except line terminators."""

letter: Final[Parser[str]] = token(_one_of(const.ALPHABETIC), expect_error("any letter character"))
"""A pre-defined parser (not a factory). Matches one ASCII letter."""

space: Final[Parser[str]] = token(_one_of(const.WHITESPACES), expect_error("any space character"))
"""A pre-defined parser (not a factory). Matches one whitespace character."""

digit: Final[Parser[str]] = token(_one_of(const.DECIMAL), expect_error("any digit character"))
"""A pre-defined parser (not a factory). Matches one decimal digit."""
