"""
The implementations of the main classes.

Parsers are immutable descriptions. Running one is done by a small machine that keeps its
continuation as an immutable linked stack of frames, so a suspended parse is plain data that
can be resumed any number of times.
"""

from __future__ import annotations
from typing import Any, Generic, Final, Literal, TypeVar, Callable, Union
from collections.abc import Iterator, Iterable, Sequence

import logging

import chunkparse.const as const


log = logging.getLogger("chunkparse")

_T = TypeVar("_T")
_U = TypeVar("_U")
_DataCovT = TypeVar("_DataCovT", covariant=True)


class _Sentinel:
    def __init__(self, name: str) -> None:
        self.name: Final[str] = name

    def __repr__(self) -> str:
        return f"<{self.name}>"

END: Final = _Sentinel("END")
"""Returned by `InputBuffer.get()` when the input is closed and exhausted."""
MISSING: Final = _Sentinel("MISSING")
"""Returned by `InputBuffer.get()` when the input is exhausted but more may arrive."""
_SUSPEND: Final = _Sentinel("SUSPEND")



class ParseError(Exception):
    """
    The exception that's raised when a parse fails.

    Inside the machine failures are plain values (`Failed`); the error only gets raised by
    `Session.finish()` and `run()`.
    """

    def __init__(self, position: int, msg: str | None = None) -> None:
        """
        `position`: The position of the error.
        `msg`: The reason for the error.
        """
        if msg is None:
            super().__init__(f"At position {position}")
        else:
            super().__init__(f"At position {position}: {msg}")
        self.position: int = position
        self.msg: str | None = msg

    def merge(self, other: ParseError) -> ParseError:
        """
        Combines the errors of two alternatives.

        The error that got further wins. On a tie the later one is kept.
        """
        if self.position > other.position:
            return self
        return other

class ExpectError(ParseError):
    """
    "Expected X, found Y" error.

    `expected` can be a single description or several alternatives. Merging two of these at the
    same position unions their alternatives.

    ```
    try:
        run(parser, "abc")
    except ExpectError as e:
        e.position, e.expected, e.found
    ```
    """

    def __init__(self, position: int, expected: str | Sequence[str], found: Any = END) -> None:
        """
        `expected`: Description of what was expected, or a sequence of alternatives.
        `found`: What was found instead. `END` means the end of the input.
        """
        if isinstance(expected, str):
            self.alternatives: tuple[str, ...] = (expected,)
        else:
            self.alternatives = tuple(str(e) for e in expected)
        self.found: Any = const.END_OF_INPUT if found is END else found
        super().__init__(position, f"Expected {self.expected}, found {self.found}")

    @property
    def expected(self) -> str:
        return " or ".join(self.alternatives)

    def merge(self, other: ParseError) -> ParseError:
        if isinstance(other, ExpectError) and other.position == self.position:
            alternatives = tuple(dict.fromkeys(self.alternatives + other.alternatives))
            return ExpectError(self.position, alternatives, self.found)
        return super().merge(other)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "ExpectError",
            "position": self.position,
            "expected": self.expected,
            "found": str(self.found),
        }



class Matched(Generic[_DataCovT]):
    """
    A successful outcome.

    ```
    if outcome:
        outcome.value   # `outcome` is a `Matched` object
    ```
    """
    def __init__(self, value: _DataCovT, pos: int) -> None:
        self.value: Final[_DataCovT] = value
        self.pos: Final[int] = pos

    def __bool__(self) -> Literal[True]:
        return True

    def __repr__(self) -> str:
        return f"<Matched {self.pos} {{{self.value!r}}}>"

class Failed:
    """A failed outcome. `pos` is where the failing parser left the input."""
    def __init__(self, error: ParseError, pos: int) -> None:
        self.error: Final[ParseError] = error
        self.pos: Final[int] = pos

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> str:
        return f"<Failed {self.pos} {self.error}>"

class NeedsMore:
    """
    A suspended outcome.

    `parser` is the primitive that ran out of input, `pos` its position and `stack` the
    continuation frames above it. None of them are ever mutated, so the same suspended
    state can be resumed along several different inputs.
    """
    def __init__(self, parser: Parser, pos: int, stack: _Stack) -> None:
        self.parser: Final[Parser] = parser
        self.pos: Final[int] = pos
        self.stack: Final[_Stack] = stack

    def watermark(self) -> int:
        """The oldest position that may still be read after resuming."""
        lowest = self.pos
        stack = self.stack
        while stack is not None:
            frame, stack = stack
            if frame.watermark is not None and frame.watermark < lowest:
                lowest = frame.watermark
        return lowest

    def __repr__(self) -> str:
        return f"<NeedsMore {self.pos}>"

Outcome = Union[Matched[Any], Failed, NeedsMore]


class Stream(Generic[_DataCovT]):
    """
    Immutable lazy sequence of collected values.

    Values are kept as a linked list in reverse order while they're being collected.
    They're only put in order when iterated.
    """
    def __init__(self, cells: tuple[Any, Any] | None = None, length: int = 0) -> None:
        self._cells: Final[tuple[Any, Any] | None] = cells
        self._length: Final[int] = length

    def cons(self, value: Any) -> Stream:
        """Returns a new stream with `value` appended at the end."""
        return Stream((value, self._cells), self._length + 1)

    def __iter__(self) -> Iterator[_DataCovT]:
        items: list[_DataCovT] = []
        cells = self._cells
        while cells is not None:
            value, cells = cells
            items.append(value)
        return reversed(items)

    def __len__(self) -> int:
        return self._length

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (Stream, list, tuple)):
            return list(self) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Stream({list(self)!r})"



class InputBuffer:
    """
    Window over the logical input of one session.

    Appending, closing and releasing return new buffers; the elements tuple is shared
    where possible and never modified.
    """

    def __init__(self, elements: tuple[Any, ...] = (), offset: int = 0, closed: bool = False) -> None:
        self.elements: Final[tuple[Any, ...]] = elements
        """The retained elements."""
        self.offset: Final[int] = offset
        """The absolute position of `elements[0]`."""
        self.closed: Final[bool] = closed
        """Whether no more input will arrive."""

    def __len__(self) -> int:
        return len(self.elements)

    @property
    def end(self) -> int:
        """The position right after the last received element."""
        return self.offset + len(self.elements)

    def get(self, pos: int) -> Any:
        """
        Returns the element at `pos`.

        Returns `END` if there isn't one and the input is closed, `MISSING` if more may arrive.
        """
        index = pos - self.offset
        if index < 0:
            raise IndexError(f"Position {pos} was already released (buffer starts at {self.offset}).")
        if index < len(self.elements):
            return self.elements[index]
        return END if self.closed else MISSING

    def extend(self, chunk: Iterable[Any]) -> InputBuffer:
        if self.closed:
            raise ValueError("Can't provide more input after the end of the input.")
        return InputBuffer(self.elements + tuple(chunk), self.offset, False)

    def close(self) -> InputBuffer:
        return InputBuffer(self.elements, self.offset, True)

    def release(self, watermark: int) -> InputBuffer:
        """Drops the elements before `watermark`."""
        if watermark <= self.offset:
            return self
        drop = min(watermark, self.end) - self.offset
        return InputBuffer(self.elements[drop:], self.offset + drop, self.closed)



class _Run:
    """Machine instruction: push `frame` (if any) and run `parser` at `pos`."""
    def __init__(self, parser: Parser, pos: int, frame: _Frame | None = None) -> None:
        self.parser: Final[Parser] = parser
        self.pos: Final[int] = pos
        self.frame: Final[_Frame | None] = frame

_Step = Union[Matched[Any], Failed, _Run, _Sentinel]
_Stack = Union[tuple["_Frame", "_Stack"], None]


def _drive(parser: Parser, pos: int, stack: _Stack, buffer: InputBuffer) -> Outcome:
    """Runs until the parse resolves or a primitive needs input that isn't there yet."""
    step: _Step = _Run(parser, pos)
    while True:
        if isinstance(step, _Run):
            if step.frame is not None:
                stack = (step.frame, stack)
            parser = step.parser
            pos = step.pos
            step = parser._step(pos, buffer)
            if step is _SUSPEND:
                return NeedsMore(parser, pos, stack)
        elif stack is None:
            assert isinstance(step, (Matched, Failed))
            return step
        else:
            frame, stack = stack
            if isinstance(step, Matched):
                step = frame.matched(step.value, step.pos)
            else:
                assert isinstance(step, Failed)
                step = frame.failed(step.error, step.pos)


class _Frame:
    """
    A pending continuation.

    `watermark` is the oldest position the frame may rewind to, or `None` if it never rewinds.
    """
    watermark: int | None = None

    def matched(self, value: Any, pos: int) -> _Step:
        return Matched(value, pos)

    def failed(self, error: ParseError, pos: int) -> _Step:
        return Failed(error, pos)

class _BindFrame(_Frame):
    def __init__(self, f: Callable[[Any], Parser]) -> None:
        self.f: Final = f

    def matched(self, value: Any, pos: int) -> _Step:
        return _Run(self.f(value), pos)

class _ChoiceFrame(_Frame):
    def __init__(self, rest: tuple[Parser, ...], start: int, error: ParseError | None) -> None:
        self.rest: Final[tuple[Parser, ...]] = rest
        self.start: Final[int] = start
        self.error: Final[ParseError | None] = error

    def failed(self, error: ParseError, pos: int) -> _Step:
        if pos != self.start:
            # consumed, so no other alternative gets tried
            return Failed(error, pos)
        merged = error if self.error is None else self.error.merge(error)
        if not self.rest:
            return Failed(merged, pos)
        return _Run(self.rest[0], self.start, _ChoiceFrame(self.rest[1:], self.start, merged))

class _AttemptFrame(_Frame):
    def __init__(self, start: int) -> None:
        self.start: Final[int] = start
        self.watermark = start

    def failed(self, error: ParseError, pos: int) -> _Step:
        return Failed(error, self.start)

class _SequenceFrame(_Frame):
    def __init__(self, parsers: tuple[Parser, ...], index: int, collected: Any, collect: bool) -> None:
        self.parsers: Final[tuple[Parser, ...]] = parsers
        self.index: Final[int] = index
        self.collected: Final[Any] = collected
        self.collect: Final[bool] = collect

    def matched(self, value: Any, pos: int) -> _Step:
        collected = self.collected.cons(value) if self.collect else value
        if self.index >= len(self.parsers):
            return Matched(collected, pos)
        return _Run(self.parsers[self.index], pos, _SequenceFrame(self.parsers, self.index + 1, collected, self.collect))

class _ManyFrame(_Frame):
    def __init__(self, parser: Parser, start: int, collected: Stream) -> None:
        self.parser: Final[Parser] = parser
        self.start: Final[int] = start
        self.collected: Final[Stream] = collected

    def matched(self, value: Any, pos: int) -> _Step:
        if pos == self.start:
            # matched without consuming, stop instead of looping forever
            return Matched(self.collected, pos)
        return _Run(self.parser, pos, _ManyFrame(self.parser, pos, self.collected.cons(value)))

    def failed(self, error: ParseError, pos: int) -> _Step:
        if pos != self.start:
            return Failed(error, pos)
        return Matched(self.collected, self.start)

class _LookaheadFrame(_Frame):
    def __init__(self, start: int) -> None:
        self.start: Final[int] = start
        self.watermark = start

    def matched(self, value: Any, pos: int) -> _Step:
        return Matched(value, self.start)

class _NotFollowedByFrame(_Frame):
    def __init__(self, start: int, label: str) -> None:
        self.start: Final[int] = start
        self.watermark = start
        self.label: Final[str] = label

    def matched(self, value: Any, pos: int) -> _Step:
        return Failed(ExpectError(self.start, self.label, value), self.start)

    def failed(self, error: ParseError, pos: int) -> _Step:
        return Matched(None, self.start)

class _ExpectedFrame(_Frame):
    def __init__(self, start: int, label: str) -> None:
        self.start: Final[int] = start
        self.label: Final[str] = label

    def failed(self, error: ParseError, pos: int) -> _Step:
        if pos == self.start and error.position == self.start:
            found = error.found if isinstance(error, ExpectError) else END
            return Failed(ExpectError(self.start, self.label, found), pos)
        return Failed(error, pos)



class Parser(Generic[_DataCovT]):
    """
    Base class of all parsers.

    A parser is an immutable description of how to match. It holds no state of its own
    while running, so one parser can be used by any number of sessions at the same time.

    Subclasses implement `_step()`, which either resolves (`Matched` / `Failed`), asks
    the machine to run another parser (`_Run`), or suspends because the input ran out.
    """

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        raise NotImplementedError

class _Token(Parser[Any]):
    def __init__(self, predicate: Callable[[Any], bool], error_factory: Callable[[int, Any], ParseError]) -> None:
        self.predicate: Final = predicate
        self.error_factory: Final = error_factory

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        element = buffer.get(pos)
        if element is MISSING:
            return _SUSPEND
        if element is END:
            return Failed(self.error_factory(pos, END), pos)
        if self.predicate(element):
            return Matched(element, pos + 1)
        return Failed(self.error_factory(pos, element), pos)

class _Always(Parser[_DataCovT]):
    def __init__(self, value: _DataCovT) -> None:
        self.value: Final[_DataCovT] = value

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        return Matched(self.value, pos)

class _Fail(Parser[Any]):
    def __init__(self, error: ParseError | str | None) -> None:
        self.error: Final[ParseError | str | None] = error

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        if isinstance(self.error, ParseError):
            return Failed(self.error, pos)
        return Failed(ParseError(pos, self.error), pos)

class _GetPosition(Parser[int]):
    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        return Matched(pos, pos)

class _Eof(Parser[None]):
    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        element = buffer.get(pos)
        if element is MISSING:
            return _SUSPEND
        if element is END:
            return Matched(None, pos)
        return Failed(ExpectError(pos, const.END_OF_INPUT, element), pos)

class _Bind(Parser[Any]):
    def __init__(self, parser: Parser, f: Callable[[Any], Parser]) -> None:
        self.parser: Final[Parser] = parser
        self.f: Final = f

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        return _Run(self.parser, pos, _BindFrame(self.f))

class _Choice(Parser[Any]):
    def __init__(self, parsers: tuple[Parser, ...]) -> None:
        self.parsers: Final[tuple[Parser, ...]] = parsers

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        return _Run(self.parsers[0], pos, _ChoiceFrame(self.parsers[1:], pos, None))

class _Attempt(Parser[Any]):
    def __init__(self, parser: Parser) -> None:
        self.parser: Final[Parser] = parser

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        return _Run(self.parser, pos, _AttemptFrame(pos))

class _Sequence(Parser[Any]):
    def __init__(self, parsers: tuple[Parser, ...], collect: bool) -> None:
        self.parsers: Final[tuple[Parser, ...]] = parsers
        self.collect: Final[bool] = collect

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        initial = Stream() if self.collect else None
        if not self.parsers:
            return Matched(initial, pos)
        return _Run(self.parsers[0], pos, _SequenceFrame(self.parsers, 1, initial, self.collect))

class _Many(Parser[Stream]):
    def __init__(self, parser: Parser) -> None:
        self.parser: Final[Parser] = parser

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        return _Run(self.parser, pos, _ManyFrame(self.parser, pos, Stream()))

class _Lookahead(Parser[Any]):
    def __init__(self, parser: Parser) -> None:
        self.parser: Final[Parser] = parser

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        return _Run(self.parser, pos, _LookaheadFrame(pos))

class _NotFollowedBy(Parser[None]):
    def __init__(self, parser: Parser, label: str) -> None:
        self.parser: Final[Parser] = parser
        self.label: Final[str] = label

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        return _Run(self.parser, pos, _NotFollowedByFrame(pos, self.label))

class _Expected(Parser[Any]):
    def __init__(self, label: str, parser: Parser) -> None:
        self.label: Final[str] = label
        self.parser: Final[Parser] = parser

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        return _Run(self.parser, pos, _ExpectedFrame(pos, self.label))

class _Late(Parser[Any]):
    def __init__(self, factory: Callable[[], Parser]) -> None:
        self.factory: Final = factory

    def _step(self, pos: int, buffer: InputBuffer) -> _Step:
        return _Run(self.factory(), pos)


def _check_parsers(parsers: tuple[Any, ...]) -> tuple[Parser, ...]:
    for parser in parsers:
        if not isinstance(parser, Parser):
            raise TypeError(f"Expected a parser, got {parser!r}.")
    return parsers



def _default_error_factory(pos: int, element: Any) -> ParseError:
    return ExpectError(pos, "token", element)

def token(predicate: Callable[[Any], bool], error_factory: Callable[[int, Any], ParseError] | None = None) -> Parser[Any]:
    """
    Matches one element for which `predicate` returns true. Succeeds with that element.

    On a mismatch fails without consuming, with `error_factory(position, element)`.
    At the end of the input `element` is the `END` sentinel.

    Suspends when the input runs out and more of it may still arrive.
    """
    return _Token(predicate, error_factory or _default_error_factory)

def always(value: _T) -> Parser[_T]:
    """Succeeds with `value` without consuming."""
    return _Always(value)

def fail(error: ParseError | str | None = None) -> Parser[Any]:
    """
    Fails without consuming.

    `error` can be a `ParseError` instance, or a message for a `ParseError` at the current position.
    """
    return _Fail(error)

get_position: Final[Parser[int]] = _GetPosition()
"""A pre-defined parser (not a factory). Succeeds with the current position."""

eof: Final[Parser[None]] = _Eof()
"""
A pre-defined parser (not a factory). Succeeds with `None` at the end of the input.

Only resolves once the input is closed. Until then it asks for more input.
"""

def bind(parser: Parser[_T], f: Callable[[_T], Parser[_U]]) -> Parser[_U]:
    """Runs `parser`, then the parser returned by `f(value)`. Failures propagate untouched."""
    _check_parsers((parser,))
    return _Bind(parser, f)

def next_(parser: Parser[Any], other: Parser[_U]) -> Parser[_U]:
    """Runs `parser`, then `other`. Succeeds with the value of `other`."""
    _check_parsers((parser, other))
    return _Bind(parser, lambda _: other)

def then(parser: Parser[_T], other: Parser[Any]) -> Parser[_T]:
    """Runs `parser`, then `other`. Succeeds with the value of `parser`."""
    _check_parsers((parser, other))
    return _Bind(parser, lambda value: _Bind(other, lambda _: _Always(value)))

def map_value(parser: Parser[_T], f: Callable[[_T], _U]) -> Parser[_U]:
    """Runs `parser` and succeeds with `f(value)`."""
    _check_parsers((parser,))
    return _Bind(parser, lambda value: _Always(f(value)))

def choice(*parsers: Parser[Any]) -> Parser[Any]:
    """
    Tries the parsers in order, until one matches.

    An alternative that fails without consuming lets the next one try at the same position,
    and their errors get merged. An alternative that fails after consuming fails the whole
    choice. Wrap alternatives in `attempt()` to backtrack instead.
    """
    if len(parsers) <= 0:
        raise ValueError("At least one parser required.")
    return _Choice(_check_parsers(parsers))

def either(parser: Parser[Any], other: Parser[Any]) -> Parser[Any]:
    """`choice()` with exactly two alternatives."""
    return choice(parser, other)

def attempt(parser: Parser[_T]) -> Parser[_T]:
    """
    If `parser` fails, reports the failure at the starting position, as if nothing was consumed.

    The error itself is kept, so it still points to where the mismatch happened.
    """
    _check_parsers((parser,))
    return _Attempt(parser)

def sequence(*parsers: Parser[Any]) -> Parser[Any]:
    """
    All the given parsers must match in order. Succeeds with the value of the last one.

    Fails at the first failure, without backtracking.
    """
    return _Sequence(_check_parsers(parsers), collect=False)

def enumeration(*parsers: Parser[Any]) -> Parser[Stream]:
    """Like `sequence()`, but succeeds with a `Stream` of all the values."""
    return _Sequence(_check_parsers(parsers), collect=True)

def many(parser: Parser[_T]) -> Parser[Stream[_T]]:
    """
    Repeatedly matches `parser` until it fails. Never fails itself unless an iteration fails
    after consuming.

    Succeeds with a `Stream` of the values. Use `eager()` to get a list.
    """
    _check_parsers((parser,))
    return _Many(parser)

def many1(parser: Parser[_T]) -> Parser[Stream[_T]]:
    """Like `many()`, but requires at least one match."""
    _check_parsers((parser,))
    return _Bind(parser, lambda first: map_value(_Many(parser), lambda rest: _prepend(first, rest)))

def _prepend(value: Any, stream: Stream) -> Stream:
    result = Stream().cons(value)
    for item in stream:
        result = result.cons(item)
    return result

def eager(parser: Parser[Iterable[_T]]) -> Parser[list[_T]]:
    """Turns the (lazy) iterable value of `parser` into a list."""
    return map_value(parser, list)

def optional(parser: Parser[_T], default: _U = None) -> Parser[_T | _U]:
    """Matches `parser` or nothing. Succeeds with `default` if `parser` failed without consuming."""
    return choice(parser, _Always(default))

def between(opening: Parser[Any], closing: Parser[Any], parser: Parser[_T]) -> Parser[_T]:
    """Matches `opening`, `parser` and `closing`. Succeeds with the value of `parser`."""
    return next_(opening, then(parser, closing))

def sep_by(parser: Parser[_T], separator: Parser[Any]) -> Parser[Stream[_T]]:
    """Zero or more `parser` matches, separated by `separator`."""
    _check_parsers((parser, separator))
    return optional(_sep_by1(parser, separator), Stream())

def _sep_by1(parser: Parser[_T], separator: Parser[Any]) -> Parser[Stream[_T]]:
    return _Bind(parser, lambda first: map_value(_Many(next_(separator, parser)), lambda rest: _prepend(first, rest)))

def lookahead(parser: Parser[_T]) -> Parser[_T]:
    """Matches `parser` without advancing."""
    _check_parsers((parser,))
    return _Lookahead(parser)

def not_followed_by(parser: Parser[Any], label: str = "no match") -> Parser[None]:
    """Succeeds without consuming if `parser` does not match here. Fails if it does."""
    _check_parsers((parser,))
    return _NotFollowedBy(parser, label)

def expected(label: str, parser: Parser[_T]) -> Parser[_T]:
    """If `parser` fails without consuming, reports `label` as what was expected."""
    _check_parsers((parser,))
    return _Expected(label, parser)

def late(factory: Callable[[], Parser[_T]]) -> Parser[_T]:
    """
    Builds the parser by calling `factory` when it runs. For recursive grammars:

    ```
    value = choice(digit, late(lambda: nested))
    nested = between(character("["), character("]"), value)
    ```
    """
    return _Late(factory)



class Session(Generic[_DataCovT]):
    """
    An incrementally fed parse.

    Sessions are values: `provide()` returns a new session and leaves the old one usable,
    so a partially fed session can be continued along several different inputs.

    ```
    s = parse(parser)
    s = s.provide("ab")
    s = s.provide("c")
    value = s.finish()      # raises a `ParseError` on failure
    ```
    """

    def __init__(self, outcome: Outcome, buffer: InputBuffer) -> None:
        """
        Create using `parse()` instead.
        """
        self.outcome: Final[Outcome] = outcome
        self.buffer: Final[InputBuffer] = buffer

    @classmethod
    def start(cls, parser: Parser[_DataCovT]) -> Session[_DataCovT]:
        _check_parsers((parser,))
        buffer = InputBuffer()
        return cls(_drive(parser, 0, None, buffer), buffer)

    @property
    def done(self) -> bool:
        """Whether the parse has resolved and won't read any more input."""
        return not isinstance(self.outcome, NeedsMore)

    @property
    def position(self) -> int:
        return self.outcome.pos

    def provide(self, chunk: Iterable[Any]) -> Session[_DataCovT]:
        """
        Feeds more elements and runs the parse as far as it goes.

        Input given to a resolved session is discarded.
        """
        outcome = self.outcome
        if not isinstance(outcome, NeedsMore):
            log.debug("session already resolved at %d, discarding input", outcome.pos)
            return self
        buffer = self.buffer.extend(chunk)
        log.debug("provided %d elements, resuming at %d", len(buffer) - len(self.buffer), outcome.pos)
        outcome = _drive(outcome.parser, outcome.pos, outcome.stack, buffer)
        if isinstance(outcome, NeedsMore):
            released = buffer.release(outcome.watermark())
            if released is not buffer:
                log.debug("released %d buffered elements", released.offset - buffer.offset)
            log.debug("suspended at %d", outcome.pos)
            return Session(outcome, released)
        log.debug("resolved at %d", outcome.pos)
        return Session(outcome, buffer.release(outcome.pos))

    def finish(self) -> _DataCovT:
        """
        Signals the end of the input and returns the parsed value.

        Raises the `ParseError` if the parse failed, or if it still wants more input.
        """
        outcome = self.outcome
        if isinstance(outcome, NeedsMore):
            outcome = _drive(outcome.parser, outcome.pos, outcome.stack, self.buffer.close())
        if isinstance(outcome, Matched):
            log.debug("finished at %d", outcome.pos)
            return outcome.value
        if isinstance(outcome, Failed):
            log.debug("failed: %s", outcome.error)
            raise outcome.error
        log.debug("still suspended at %d after the end of the input", outcome.pos)
        raise ExpectError(outcome.pos, "more input")

    def __repr__(self) -> str:
        return f"<Session {self.outcome!r}>"


def parse(parser: Parser[_T]) -> Session[_T]:
    """Starts a new session of `parser`, with no input yet."""
    return Session.start(parser)

def provide(session: Session[_T], chunk: Iterable[Any]) -> Session[_T]:
    """Same as `Session.provide()`."""
    return session.provide(chunk)

def finish(session: Session[_T]) -> _T:
    """Same as `Session.finish()`."""
    return session.finish()

def run(parser: Parser[_T], data: Iterable[Any]) -> _T:
    """
    Parses the whole input at once.

    Same as `finish(provide(parse(parser), data))`.
    """
    return parse(parser).provide(data).finish()
