"""Tests for the general purpose text parsers."""

import pytest

from chunkparse import ExpectError, choice, eager, finish, get_position, many, next_, parse, provide, run, sequence
from chunkparse.general import (
    Trie,
    any_char,
    character,
    digit,
    letter,
    space,
    string,
    trie,
)


class TestCharacter:

    def test_match(self):
        assert run(character("a"), "a") == "a"

    def test_mismatch(self):
        with pytest.raises(ExpectError) as e:
            run(character("a"), "b")
        assert e.value.to_dict() == {
            "kind": "ExpectError",
            "position": 0,
            "expected": "a",
            "found": "b",
        }


class TestString:

    def test_simple(self):
        p = string("abc")
        assert run(p, "abc") == "abc"
        assert run(p, "abcd") == "abc"
        with pytest.raises(ExpectError):
            run(p, "ab")

    def test_end_of_input_error(self):
        with pytest.raises(ExpectError) as e:
            run(string("abc"), "ab")
        assert e.value.position == 0
        assert e.value.expected == "abc"
        assert e.value.found == "ab"

    def test_mismatch_error(self):
        with pytest.raises(ExpectError) as e:
            run(string("abc"), "abx")
        assert e.value.position == 0
        assert e.value.found == "abx"

    def test_error_is_positioned_at_literal_start(self):
        with pytest.raises(ExpectError) as e:
            run(sequence(string("xy"), string("ab")), "xyac")
        assert e.value.position == 2
        assert e.value.expected == "ab"
        assert e.value.found == "ac"

    def test_empty_input(self):
        with pytest.raises(ExpectError) as e:
            run(string("abc"), "")
        assert e.value.found == "end of input"

    def test_list_input(self):
        p = string("ab")
        assert run(p, ["a", "b"]) == "ab"
        with pytest.raises(ExpectError):
            run(p, ["ab"])

    def test_does_not_consume_on_failure(self):
        assert run(choice(string("abc"), string("abd")), "abd") == "abd"

    def test_chunks(self):
        session = parse(string("abc"))
        for c in "abc":
            session = provide(session, c)
        assert finish(session) == "abc"


class TestTrie:

    def test_match(self):
        p = trie(["cat", "car"])
        assert run(p, "car") == "car"
        assert run(p, "cat") == "cat"

    def test_alternatives_error(self):
        with pytest.raises(ExpectError) as e:
            run(trie(["cat", "car"]), "ca")
        assert e.value.position == 2
        assert set(e.value.alternatives) == {"t", "r"}
        assert e.value.found == "end of input"

    def test_alternatives_error_across_chunks(self):
        session = provide(provide(parse(trie(["cat", "car"])), "c"), "a")
        with pytest.raises(ExpectError) as e:
            finish(session)
        assert set(e.value.alternatives) == {"t", "r"}

    def test_longest_match(self):
        p = trie(["car", "cart"])
        assert run(p, "cart") == "cart"
        assert run(p, "carx") == "car"
        assert run(p, "car") == "car"

    def test_falls_back_to_shorter_word(self):
        p = trie(["ca", "cart"])
        assert run(p, "carx") == "ca"
        assert run(p, "car") == "ca"
        assert run(p, "cart") == "cart"

    def test_falls_back_across_chunks(self):
        session = parse(next_(trie(["ca", "cart"]), get_position))
        for c in "carx":
            session = provide(session, c)
        assert finish(session) == 2

    def test_does_not_consume_on_failure(self):
        assert run(choice(trie(["cat"]), string("cow")), "cow") == "cow"

    def test_requires_words(self):
        with pytest.raises(ValueError):
            trie([])

    def test_contains(self):
        t = Trie.from_words(["cat", "car"])
        assert "cat" in t
        assert "ca" not in t
        assert "cart" not in t

    def test_compiled_parser_is_frozen(self):
        t = Trie.from_words(["cat"])
        p = t.compile()
        t.insert("dog")
        assert run(t.compile(), "dog") == "dog"
        with pytest.raises(ExpectError):
            run(p, "dog")


class TestCharacterClasses:

    def test_any_char(self):
        assert run(any_char, "?") == "?"
        with pytest.raises(ExpectError):
            run(any_char, [1])

    @pytest.mark.parametrize("terminator", ["\n", "\r", "\u2028", "\u2029"])
    def test_any_char_rejects_line_terminators(self, terminator):
        with pytest.raises(ExpectError) as e:
            run(any_char, terminator)
        assert e.value.expected == "any character"

    def test_letter(self):
        assert run(letter, "x") == "x"
        with pytest.raises(ExpectError) as e:
            run(letter, "1")
        assert e.value.expected == "any letter character"

    def test_space(self):
        assert run(space, "\t") == "\t"

    def test_digit(self):
        assert run(eager(many(digit)), "123a") == ["1", "2", "3"]
        with pytest.raises(ExpectError) as e:
            run(digit, "x")
        assert e.value.expected == "any digit character"

    def test_non_string_elements(self):
        with pytest.raises(ExpectError):
            run(digit, [5])
