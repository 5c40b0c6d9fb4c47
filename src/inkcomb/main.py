"""
The implementations of the main classes.
"""

from __future__ import annotations
from typing import Any, Self, Literal, TypeVar, Generic, Final, Callable, Protocol
from collections.abc import Iterator, Sequence, Collection

import logging
import math
import re
import threading

import inkcomb.const as const

log = logging.getLogger(__name__)


def repeat(*, start: int = 0, step: int = 1) -> Iterator[int]:
    """
    `range()` with no end.
    """
    i = start
    while True:
        yield i
        i += step


_T = TypeVar("_T")
_U = TypeVar("_U")
_DataCovT = TypeVar("_DataCovT", covariant=True)



class SourcePosition:
    """
    A position in the parsed string.

    Only the offset is stored. The line and column are computed the first time they're accessed, so creating one is cheap.
    """
    def __init__(self, src: str, offset: int) -> None:
        self.src: Final[str] = src
        """The string that was being parsed."""
        self.offset: Final[int] = offset
        """Zero-based character offset."""
        self._line_column: tuple[int, int] | None = None

    def _resolve(self) -> tuple[int, int]:
        if self._line_column is None:
            pos = min(self.offset, len(self.src))
            # should still work with CRLF
            line = self.src.count("\n", 0, pos) + 1
            column = pos - self.src.rfind("\n", 0, pos) # magically works even when it returns -1
            self._line_column = (line, column)
        return self._line_column

    @property
    def line(self) -> int:
        """One-based line number."""
        return self._resolve()[0]

    @property
    def column(self) -> int:
        """One-based column number."""
        return self._resolve()[1]

    def as_dict(self) -> dict[str, int]:
        return {"offset": self.offset, "line": self.line, "column": self.column}

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SourcePosition):
            return (self.offset, self.line, self.column) == (other.offset, other.line, other.column)
        elif isinstance(other, tuple):
            return (self.offset, self.line, self.column) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.offset, self.line, self.column))

    def __repr__(self) -> str:
        return f"<SourcePosition {self.offset} (line {self.line}, column {self.column})>"


class Mark(Generic[_DataCovT]):
    """The value produced by `Parser.mark()`. The span of the wrapped parser along with its value."""
    def __init__(self, start: SourcePosition, value: _DataCovT, end: SourcePosition) -> None:
        self.start: Final[SourcePosition] = start
        self.value: Final[_DataCovT] = value
        self.end: Final[SourcePosition] = end

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mark):
            return NotImplemented
        return (self.start, self.value, self.end) == (other.start, other.value, other.end)

    def __repr__(self) -> str:
        return f"<Mark {self.start.offset}..{self.end.offset} {{{self.value!r}}}>"



class Success(Generic[_DataCovT]):
    """
    Returned from `Parser.run()` when the parser matched.

    `furthest` and `expected` describe the deepest failure seen while producing this success, for example an alternative that was tried and discarded. `furthest` is `-1` if nothing failed.

    ```
    r = parser.run(src, pos)
    if r:
        ... # `r` is a `Success` object
    else:
        ... # `r` is a `Failure` object
    ```
    """
    def __init__(self, index: int, value: _DataCovT, furthest: int = -1, expected: tuple[str, ...] = ()) -> None:
        self.index: Final[int] = index
        """The position right after the matched text."""
        self.value: Final[_DataCovT] = value
        self.furthest: Final[int] = furthest
        self.expected: Final[tuple[str, ...]] = expected
        """Sorted and deduplicated."""

    def with_furthest(self, furthest: int, expected: tuple[str, ...]) -> Success[_DataCovT]:
        """Creates a copy of this success with a different furthest failure."""
        return Success(self.index, self.value, furthest, expected)

    def __bool__(self) -> Literal[True]:
        return True

    def __repr__(self) -> str:
        return f"<Success {self.index} {{{self.value!r}}}>"

class Failure:
    """
    Returned from `Parser.run()` when the parser didn't match.

    `furthest` is the deepest position any attempt failed at, and `expected` the labels of everything that was expected there.
    """
    def __init__(self, furthest: int, expected: tuple[str, ...]) -> None:
        self.furthest: Final[int] = furthest
        self.expected: Final[tuple[str, ...]] = expected
        """Sorted and deduplicated."""

    def with_furthest(self, furthest: int, expected: tuple[str, ...]) -> Failure:
        """Creates a copy of this failure with a different furthest failure."""
        return Failure(furthest, expected)

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> str:
        return f"<Failure {self.furthest} {list(self.expected)!r}>"

Reply = Success[Any] | Failure

_ReplyT = TypeVar("_ReplyT", Success[Any], Failure)


def union_expected(xs: tuple[str, ...], ys: tuple[str, ...]) -> tuple[str, ...]:
    """
    Sorted set union of two label tuples.

    If either side is empty the other one is returned as-is. Labels always start out as `()` or `(label,)`, so anything merged through this stays sorted.
    """
    if not xs:
        return ys
    if not ys:
        return xs
    return tuple(sorted(set(xs) | set(ys)))

def merge(reply: _ReplyT, last: Reply | None) -> _ReplyT:
    """
    Combines the furthest failure of `last` into `reply`.

    The status, index and value always come from `reply`. The greater furthest position wins, and the labels are unioned when both are at the same position.
    """
    if last is None:
        return reply
    if reply.furthest > last.furthest:
        return reply
    if reply.furthest == last.furthest:
        expected = union_expected(reply.expected, last.expected)
        if expected is reply.expected:
            return reply
    else:
        expected = last.expected
    return reply.with_furthest(last.furthest, expected)



class Action(Protocol):
    """The function wrapped by a `Parser`. Attempts to match `src` starting from `pos`."""
    def __call__(self, src: str, pos: int) -> Reply: ...


def check_function(fn: object) -> None:
    if not callable(fn):
        raise TypeError(f"Not a function: {fn!r}")

def is_parser(obj: object) -> bool:
    return isinstance(obj, Parser)

def check_parser(parser: object) -> None:
    if not is_parser(parser):
        raise TypeError(f"Not a parser: {parser!r}")

def check_count(count: object, name: str) -> None:
    if isinstance(count, bool) or not isinstance(count, int):
        raise TypeError(f"`{name}` must be an integer, not {count!r}.")
    if count < 0:
        raise ValueError(f"`{name}` can't be negative. ({count})")

def convert_parameter(parser: Parser[_T] | str | re.Pattern[str]) -> Parser[_T]:
    """Strings become `literal()` parsers, compiled patterns become `regex()` parsers."""
    if isinstance(parser, Parser):
        return parser
    elif isinstance(parser, str):
        return literal(parser)
    elif isinstance(parser, re.Pattern):
        return regex(parser)
    else:
        raise TypeError(f"Not a parser: {parser!r}")

def convert_parameters(parsers: Sequence[Parser[Any] | str | re.Pattern[str]]) -> tuple[Parser[Any], ...]:
    return tuple(convert_parameter(parser) for parser in parsers)

def describe_function(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)



class Parser(Generic[_DataCovT]):
    """
    Wraps a single action: "try to match at this position".

    Don't subclass this. Build parsers from the primitive parsers and combinators instead, or use `custom()` for new primitives.

    ```
    number = regex(r"[0-9]+").map(int)
    numbers = sep_by(number, ",")

    r = numbers.parse("1,2,3")
    if r:
        r.value     # [1, 2, 3]
    else:
        format_error("1,2,3", r)
    ```

    Parsers are immutable (except for the one-time resolution of `lazy()` parsers) and can be shared between threads.
    """
    def __init__(self, action: Action) -> None:
        check_function(action)
        self._action: Action = action

    def run(self, src: str, pos: int = 0) -> Reply:
        """
        Attempts to match `src` starting from `pos`. Doesn't require the whole string to match.

        Returns a `Success` or a `Failure`.
        """
        return self._action(src, pos)

    def parse(self, src: str) -> Parsed[_DataCovT] | ParseFailure:
        """
        Matches the whole string.

        Returns a `Parsed` object on success, and a `ParseFailure` positioned at the furthest failure otherwise.
        """
        if not isinstance(src, str):
            raise TypeError(f"`parse()` must be called with a string, not {src!r}.")
        reply = self.skip(eof).run(src, 0)
        if reply:
            return Parsed(reply.value)
        log.debug("Parse failed at offset %d, expected %s", reply.furthest, list(reply.expected))
        return ParseFailure(src, SourcePosition(src, reply.furthest), list(reply.expected))

    def try_parse(self, src: str) -> _DataCovT:
        """
        Same as `parse()`, but returns the value directly.

        Raises a `ParseError` on failure.
        """
        r = self.parse(src)
        if not r:
            raise r.error()
        return r.value

    def map(self, fn: Callable[[_DataCovT], _U]) -> Parser[_U]:
        """Transforms the value on success."""
        check_function(fn)
        def action(src: str, pos: int) -> Reply:
            reply = self.run(src, pos)
            if not reply:
                return reply
            return merge(Success(reply.index, fn(reply.value)), reply)
        return Parser(action)

    def result(self, value: _U) -> Parser[_U]:
        """Replaces the value on success."""
        return self.map(lambda _: value)

    def chain(self, fn: Callable[[_DataCovT], Parser[_U]]) -> Parser[_U]:
        """
        On success, calls `fn` with the value and runs the parser it returns right after.

        For grammars where what comes next depends on what was just parsed:
        ```
        length_prefixed = regex(r"[0-9]+").skip(":").chain(lambda n: any_char.times(int(n)))
        ```
        """
        check_function(fn)
        def action(src: str, pos: int) -> Reply:
            reply = self.run(src, pos)
            if not reply:
                return reply
            next_parser = fn(reply.value)
            check_parser(next_parser)
            return merge(next_parser.run(src, reply.index), reply)
        return Parser(action)

    def then(self, next_parser: Parser[_U] | str | re.Pattern[str]) -> Parser[_U]:
        """Matches both in sequence and keeps the value of `next_parser`."""
        return seq(self, next_parser).map(lambda values: values[1])

    def skip(self, next_parser: Parser[Any] | str | re.Pattern[str]) -> Parser[_DataCovT]:
        """Matches both in sequence and keeps the value of this parser."""
        return seq(self, next_parser).map(lambda values: values[0])

    def or_(self, alternative: Parser[_U] | str | re.Pattern[str]) -> Parser[_DataCovT | _U]:
        """Same as `alt(self, alternative)`."""
        return alt(self, alternative)

    def __or__(self, alternative: Parser[_U] | str | re.Pattern[str]) -> Parser[_DataCovT | _U]:
        return alt(self, alternative)

    def __ror__(self, alternative: str | re.Pattern[str]) -> Parser[Any]:
        return alt(alternative, self)

    concat = or_

    def ap(self, other: Parser[Any] | str | re.Pattern[str]) -> Parser[Any]:
        """Matches this parser, then `other`, and calls the function this parser produced with the value of `other`."""
        return seq_map(self, other, lambda fn, value: fn(value))

    @staticmethod
    def of(value: _T) -> Parser[_T]:
        """Same as `succeed(value)`."""
        return succeed(value)

    @staticmethod
    def empty() -> Parser[Any]:
        """A parser that always fails."""
        return empty()

    def desc(self, expected: str) -> Parser[_DataCovT]:
        """
        Replaces the expectation labels when this parser fails right at its starting position.

        Failures that got further than the starting position keep their own labels.
        """
        if not isinstance(expected, str):
            raise TypeError(f"Not a string: {expected!r}")
        labels = (expected,)
        def action(src: str, pos: int) -> Reply:
            reply = self.run(src, pos)
            if not reply and reply.furthest == pos:
                return Failure(pos, labels)
            return reply
        return Parser(action)

    def mark(self) -> Parser[Mark[_DataCovT]]:
        """Wraps the value in a `Mark`, along with the start and end positions."""
        return seq_map(index, self, index, Mark)

    def times(self, min_count: int, max_count: int | float | None = None) -> Parser[list[_DataCovT]]:
        """
        Matches this parser repeatedly. Returns a list of the values.

        The first `min_count` matches are required. Matches after that are optional, up to `max_count`.

        If `max_count` is omitted, matches exactly `min_count` times. Use `UNBOUNDED` for no upper limit.

        An unbounded repetition stops after an iteration that doesn't consume anything, since every iteration after that would do the same.
        """
        if max_count is None:
            max_count = min_count
        check_count(min_count, "min_count")
        unbounded = max_count == math.inf
        if not unbounded:
            check_count(max_count, "max_count")
        if max_count < min_count:
            raise ValueError(f"`max_count` ({max_count}) can't be less than `min_count` ({min_count}).")
        def action(src: str, pos: int) -> Reply:
            values: list[Any] = []
            last: Reply | None = None
            for _ in range(min_count):
                reply = self.run(src, pos)
                last = merge(reply, last)
                if not reply:
                    return last
                values.append(reply.value)
                pos = reply.index
            for _ in (repeat(start=min_count) if unbounded else range(min_count, int(max_count))):
                reply = self.run(src, pos)
                last = merge(reply, last)
                if not reply:
                    break
                values.append(reply.value)
                if unbounded and reply.index == pos:
                    break
                pos = reply.index
            return merge(Success(pos, values), last)
        return Parser(action)

    def many(self) -> Parser[list[_DataCovT]]:
        """Zero or more times."""
        return self.times(0, math.inf)

    def at_least(self, count: int) -> Parser[list[_DataCovT]]:
        return self.times(count, math.inf)

    def at_most(self, count: int) -> Parser[list[_DataCovT]]:
        return self.times(0, count)


class Parsed(Generic[_DataCovT]):
    """
    Returned from `Parser.parse()` when the whole string matched.

    ```
    r = parser.parse(src)
    if r:
        r.value     # `r` is a `Parsed` object
    else:
        ...         # `r` is a `ParseFailure` object
    ```
    """
    success: Final = True

    def __init__(self, value: _DataCovT) -> None:
        self.value: Final[_DataCovT] = value

    def __bool__(self) -> Literal[True]:
        return True

    def __repr__(self) -> str:
        return f"<Parsed {{{self.value!r}}}>"

class ParseFailure:
    """
    Returned from `Parser.parse()` when the string didn't match. Can be converted into a `ParseError`.

    Use `format_error()` (or `str()`) for a human readable message.
    """
    success: Final = False

    def __init__(self, src: str, position: SourcePosition, expected: list[str]) -> None:
        """
        `src`: The string that was being parsed.
        `position`: The furthest position any parser failed at.
        `expected`: What was expected at that position. Sorted and deduplicated.
        """
        self.src: Final[str] = src
        self.position: Final[SourcePosition] = position
        self.expected: Final[list[str]] = expected

    def as_dict(self) -> dict[str, Any]:
        return {"success": False, "position": self.position.as_dict(), "expected": list(self.expected)}

    def error(self) -> ParseError:
        """Converts this to a ParseError."""
        return ParseError(self.src, self.position, self.expected)

    def __bool__(self) -> Literal[False]:
        return False

    def __str__(self) -> str:
        return format_error(self.src, self)

    def __repr__(self) -> str:
        return f"<ParseFailure {self.position.offset} {self.expected!r}>"

class ParseError(Exception):
    """
    The exception that's raised by `Parser.try_parse()`.

    The message is the same as `format_error()`. A note pointing at the failure position is added to the exception.
    """

    def __init__(self, src: str, position: SourcePosition, expected: list[str]) -> None:
        """
        `src`: The string that was being parsed.
        `position`: The position of the error.
        `expected`: What was expected at that position.
        """
        self.src: str = src
        self.position: SourcePosition = position
        self.expected: list[str] = expected
        super().__init__(format_error(src, self))
        self.append_pos_note(position)

    def append_pos_note(self, position: SourcePosition, msg: str | None = None) -> Self:
        note: list[str] = [] if msg is None else [msg]

        line = position.line
        column = position.column
        note.append(f"At position {position.offset} (line {line}, column {column})")

        lines = self.src.split("\n")
        if len(lines) > line-1:
            line_str = lines[line-1].rstrip("\r")
            context = const.CARET_CONTEXT
            if len(line_str) + 1 >= column:
                if column <= context:
                    note.append(f"{line_str[:context*2]}\n{' '*(column-1)}^")
                else:
                    note.append(f"{line_str[(column-1-context):(column-1+context)]}\n{' '*context}^")
        self.add_note("\n".join(note))
        return self


def format_expected(expected: Sequence[str]) -> str:
    if len(expected) == 1:
        return expected[0]
    return "one of " + ", ".join(expected)

def format_got(src: str, position: SourcePosition, excerpt_length: int = const.EXCERPT_LENGTH) -> str:
    offset = position.offset
    if offset >= len(src):
        return ", got the end of the stream"
    prefix = "'..." if offset > 0 else "'"
    suffix = "...'" if len(src) - offset > excerpt_length else "'"
    return (
        f" at line {position.line} column {position.column}"
        f", got {prefix}{src[offset:offset+excerpt_length]}{suffix}"
    )

def format_error(src: str, failure: ParseFailure | ParseError, *, excerpt_length: int = const.EXCERPT_LENGTH) -> str:
    """
    Renders a failure as a human readable message.

    ```
    expected one of '+', '-' at line 1 column 4, got '...abc'
    expected ')', got the end of the stream
    ```
    """
    return "expected " + format_expected(failure.expected) + format_got(src, failure.position, excerpt_length)



def custom(action: Action) -> Parser[Any]:
    """
    Creates a primitive parser from a function. Can be used as a decorator.

    The function must return a `Success` or `Failure`, and should merge the replies of any parsers it runs with `merge()`.
    ```
    @custom
    def upper(src: str, pos: int) -> Reply:
        if pos < len(src) and src[pos].isupper():
            return Success(pos+1, src[pos])
        return Failure(pos, ("an uppercase letter",))
    ```
    """
    return Parser(action)

def literal(*values: str) -> Parser[str]:
    """
    Matches the given string. If multiple strings are given, matches the first one that matches.

    Label: The quoted string.
    """
    if len(values) <= 0:
        raise ValueError("At least one literal required.")
    for value in values:
        if not isinstance(value, str):
            raise TypeError(f"Not a string: {value!r}")
    if len(values) > 1:
        return alt(*(literal(value) for value in values))
    text = values[0]
    labels = (f"'{text}'",)
    def action(src: str, pos: int) -> Reply:
        if src.startswith(text, pos):
            return Success(pos+len(text), text)
        return Failure(pos, labels)
    return Parser(action)

def compile_pattern(pattern: str | re.Pattern[str], flags: int) -> re.Pattern[str]:
    if isinstance(pattern, str):
        if flags & ~const.ALLOWED_REGEX_FLAGS:
            raise ValueError(f"Unsupported regex flags: {re.RegexFlag(flags & ~const.ALLOWED_REGEX_FLAGS)!r}")
        return re.compile(pattern, flags)
    elif isinstance(pattern, re.Pattern):
        if flags:
            raise ValueError("Can't pass flags with a compiled pattern.")
        if not isinstance(pattern.pattern, str):
            raise TypeError(f"Bytes patterns aren't supported: {pattern!r}")
        if pattern.flags & ~const.ALLOWED_REGEX_FLAGS:
            raise ValueError(f"Unsupported regex flags: {re.RegexFlag(pattern.flags & ~const.ALLOWED_REGEX_FLAGS)!r}")
        return pattern
    else:
        raise TypeError(f"Not a regex: {pattern!r}")

def check_group(compiled: re.Pattern[str], group: int | str) -> None:
    if isinstance(group, str):
        if group not in compiled.groupindex:
            raise ValueError(f"No group named {group!r} in {compiled.pattern!r}.")
    elif isinstance(group, int) and not isinstance(group, bool):
        if not 0 <= group <= compiled.groups:
            raise ValueError(f"Group {group} is out of range for {compiled.pattern!r}.")
    else:
        raise TypeError(f"A group must be an integer or a name, not {group!r}")

def regex(pattern: str | re.Pattern[str], group: int | str = 0, flags: int | re.RegexFlag = 0) -> Parser[str]:
    """
    Matches the regex at the current position. Returns the matched string, or the given capture group.

    Fails if the capture group didn't participate in the match.

    The pattern is matched against the whole string starting from the current position, so `^` only matches at the start of the string (or after a newline with `MULTILINE`), not at the current position. Patterns don't need `^`, they always match at the current position.

    Label: `/pattern/flags`
    """
    compiled = compile_pattern(pattern, flags)
    check_group(compiled, group)
    letters = "".join(letter for flag, letter in const.REGEX_FLAG_LETTERS if compiled.flags & flag)
    labels = (f"/{compiled.pattern}/{letters}",)
    def action(src: str, pos: int) -> Reply:
        m = compiled.match(src, pos)
        if m is not None:
            value = m.group(group)
            if value is not None:
                return Success(m.end(), value)
        return Failure(pos, labels)
    return Parser(action)

def _char_test(predicate: Callable[[str], object], expected: str) -> Parser[str]:
    labels = (expected,)
    def action(src: str, pos: int) -> Reply:
        if pos < len(src) and predicate(src[pos]):
            return Success(pos+1, src[pos])
        return Failure(pos, labels)
    return Parser(action)

def satisfy(predicate: Callable[[str], object]) -> Parser[str]:
    """
    Matches a single character if `predicate` returns a truthy value for it.

    Label: `a character matching <predicate name>`
    """
    check_function(predicate)
    return _char_test(predicate, f"a character matching {describe_function(predicate)}")

def _chars_repr(chars: Collection[str]) -> str:
    return repr(chars if isinstance(chars, str) else "".join(sorted(chars)))

def one_of(chars: Collection[str]) -> Parser[str]:
    """Matches a single character that's in `chars`."""
    if isinstance(chars, (bytes, bytearray)) or not isinstance(chars, Collection):
        raise TypeError(f"Not a collection of characters: {chars!r}")
    return _char_test(lambda c: c in chars, f"a character matching one_of({_chars_repr(chars)})")

def none_of(chars: Collection[str]) -> Parser[str]:
    """Matches a single character that's not in `chars`."""
    if isinstance(chars, (bytes, bytearray)) or not isinstance(chars, Collection):
        raise TypeError(f"Not a collection of characters: {chars!r}")
    return _char_test(lambda c: c not in chars, f"a character matching none_of({_chars_repr(chars)})")

def take_while(predicate: Callable[[str], object]) -> Parser[str]:
    """Matches as many characters as `predicate` accepts. Never fails."""
    check_function(predicate)
    def action(src: str, pos: int) -> Reply:
        end = pos
        while end < len(src) and predicate(src[end]):
            end += 1
        return Success(end, src[pos:end])
    return Parser(action)

def succeed(value: _T) -> Parser[_T]:
    """Succeeds without consuming anything."""
    return Parser(lambda src, pos: Success(pos, value))

def fail(expected: str) -> Parser[Any]:
    """Always fails with the given label."""
    if not isinstance(expected, str):
        raise TypeError(f"Not a string: {expected!r}")
    labels = (expected,)
    return Parser(lambda src, pos: Failure(pos, labels))

def empty() -> Parser[Any]:
    """Always fails, with the label `fantasy-land/empty`."""
    return fail("fantasy-land/empty")

def _eof(src: str, pos: int) -> Reply:
    if pos < len(src):
        return Failure(pos, ("EOF",))
    return Success(pos, None)

eof: Final[Parser[None]] = Parser(_eof)
"""Only matches at the end of the string."""

index: Final[Parser[SourcePosition]] = Parser(lambda src, pos: Success(pos, SourcePosition(src, pos)))
"""Returns the current position without consuming anything."""

def _any_char(src: str, pos: int) -> Reply:
    if pos >= len(src):
        return Failure(pos, ("any character",))
    return Success(pos+1, src[pos])

any_char: Final[Parser[str]] = Parser(_any_char)
"""Matches any single character."""

rest: Final[Parser[str]] = Parser(lambda src, pos: Success(len(src), src[pos:]))
"""Consumes the rest of the string."""



def seq(*parsers: Parser[Any] | str | re.Pattern[str]) -> Parser[list[Any]]:
    """
    All the given parsers must match in sequence. Returns a list of their values.

    Fails with the first failure.
    """
    new_parsers = convert_parameters(parsers)
    def action(src: str, pos: int) -> Reply:
        values: list[Any] = []
        last: Reply | None = None
        for parser in new_parsers:
            reply = merge(parser.run(src, pos), last)
            if not reply:
                return reply
            values.append(reply.value)
            pos = reply.index
            last = reply
        return merge(Success(pos, values), last)
    return Parser(action)

def seq_map(*args: Any) -> Parser[Any]:
    """
    `seq()` with a function at the end, which gets called with the values as arguments.

    ```
    pair = seq_map(key, ":", value, lambda k, _, v: (k, v))
    ```
    """
    if len(args) <= 0:
        raise ValueError("`seq_map()` needs at least one argument.")
    *parsers, fn = args
    check_function(fn)
    return seq(*parsers).map(lambda values: fn(*values))

def alt(*parsers: Parser[Any] | str | re.Pattern[str]) -> Parser[Any]:
    """
    Attempts to match any of the parsers, in order, until one matches.

    If none match, fails with the furthest failure out of all of them.
    """
    if len(parsers) <= 0:
        return fail("zero alternates")
    new_parsers = convert_parameters(parsers)
    def action(src: str, pos: int) -> Reply:
        reply: Reply | None = None
        for parser in new_parsers:
            reply = merge(parser.run(src, pos), reply)
            if reply:
                return reply
        assert reply is not None
        return reply
    return Parser(action)

def sep_by1(parser: Parser[_T] | str | re.Pattern[str], separator: Parser[Any] | str | re.Pattern[str]) -> Parser[list[_T]]:
    """One or more of `parser`, separated by `separator`. Returns the values of `parser`."""
    element = convert_parameter(parser)
    pairs = convert_parameter(separator).then(element).many()
    return seq_map(element, pairs, lambda first, others: [first, *others])

def sep_by(parser: Parser[_T] | str | re.Pattern[str], separator: Parser[Any] | str | re.Pattern[str]) -> Parser[list[_T]]:
    """Zero or more of `parser`, separated by `separator`."""
    return alt(sep_by1(parser, separator), succeed(None).map(lambda _: []))

def optional(parser: Parser[_T] | str | re.Pattern[str], default: _U = None) -> Parser[_T | _U]:
    """Returns `default` without consuming anything if the parser doesn't match."""
    return alt(parser, succeed(default))

def lookahead(parser: Parser[_T] | str | re.Pattern[str]) -> Parser[_T]:
    """Matches without advancing."""
    new_parser = convert_parameter(parser)
    def action(src: str, pos: int) -> Reply:
        reply = new_parser.run(src, pos)
        if not reply:
            return reply
        return merge(Success(pos, reply.value), reply)
    return Parser(action)

def not_followed_by(parser: Parser[Any] | str | re.Pattern[str], expected: str = "something else") -> Parser[None]:
    """
    Succeeds without consuming anything if the parser doesn't match here. Fails with `expected` if it does.
    """
    new_parser = convert_parameter(parser)
    labels = (expected,)
    def action(src: str, pos: int) -> Reply:
        if new_parser.run(src, pos):
            return Failure(pos, labels)
        return Success(pos, None)
    return Parser(action)

def lazy(builder: Callable[[], Parser[_T]], desc: str | None = None) -> Parser[_T]:
    """
    A parser that's built the first time it's used. For recursive grammars.

    `builder` is called at most once. After that, the parser behaves exactly like the one `builder` returned.
    ```
    balanced = lazy(lambda: optional(seq("(", balanced, ")")))
    ```

    `desc`: Same as calling `.desc(desc)` on the result.
    """
    check_function(builder)
    lock = threading.Lock()
    def resolve(src: str, pos: int) -> Reply:
        with lock:
            if parser._action is resolve:
                resolved = builder()
                check_parser(resolved)
                if resolved is parser:
                    raise ValueError("A lazy parser can't resolve to itself.")
                log.debug("Resolved lazy parser %s", describe_function(builder))
                parser._action = resolved.run
        return parser._action(src, pos)
    parser: Parser[_T] = Parser(resolve)
    if desc is not None:
        return parser.desc(desc)
    return parser
