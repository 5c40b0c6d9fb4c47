"""
Pre-built parsers, and general purpose parser factories you can use as examples.
"""

from __future__ import annotations
from typing import Final

from collections.abc import Collection, Mapping, Sequence

import inkcomb.const as const
from inkcomb.main import (
    Parser,
    alt,
    any_char,
    literal,
    not_followed_by,
    one_of,
    optional,
    regex,
    seq_map,
    take_while,
)

# characters

digit: Final[Parser[str]] = one_of(const.DECIMAL).desc("a digit")
digits: Final[Parser[str]] = take_while(const.DECIMAL.__contains__)
letter: Final[Parser[str]] = one_of(const.ALPHABETIC).desc("a letter")
letters: Final[Parser[str]] = take_while(const.ALPHABETIC.__contains__)
alnum: Final[Parser[str]] = one_of(const.ALNUM).desc("a letter or digit")
alnums: Final[Parser[str]] = take_while(const.ALNUM.__contains__)
whitespace: Final[Parser[str]] = regex(r"\s+").desc("whitespace")
opt_whitespace: Final[Parser[str]] = regex(r"\s*")

def lexeme(parser: Parser) -> Parser:
    """Skips any whitespace after the parser."""
    return parser.skip(opt_whitespace)

# quoted string

GENERAL_ESCAPES: Final[dict[str, str]] = {
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
}

unicode_escape: Final[Parser[str]] = (
    regex(r"[0-9a-fA-F]{4}")
    .desc("4 hexadecimal characters after unicode escape sequence")
    .map(lambda code: chr(int(code, base=16)))
)

def quoted_string(
    *,
    start: Sequence[str] = ('"', "'"),
    end: Sequence[str] = ('"', "'"),
    escape: str = '\\',
    custom_escapes: Mapping[str, str] = GENERAL_ESCAPES,
    advanced_escapes: Mapping[str, Parser[str]] = {'u': unicode_escape},
) -> Parser[str]:
    """
    A quoted string with escape sequences. Returns the unescaped contents.

    `custom_escapes`: Escape sequences that are replaced with a fixed string.
    `advanced_escapes`: Parsers to run after the given escape sequences. Once the sequence matches, the parser has to match too.

    Escaping any other character results in the character itself.
    """
    if len(start) != len(end):
        raise ValueError("The number of starting quotes and ending quotes don't match.")
    escaped = literal(escape).then(alt(
        *(literal(sequence).result(result) for sequence, result in custom_escapes.items()),
        *(literal(sequence).then(parser) for sequence, parser in advanced_escapes.items()),
        not_followed_by(alt(*advanced_escapes)).then(any_char) if advanced_escapes else any_char,
    ))
    quotes = []
    for opening, closing in zip(start, end):
        char = not_followed_by(alt(closing, escape)).then(any_char)
        quotes.append(seq_map(
            literal(opening),
            alt(escaped, char).many(),
            literal(closing),
            lambda _, data, __: "".join(data),
        ))
    return alt(*quotes)

def raw_quoted_string(
    *,
    start: Sequence[str] = ('r"', "r'"),
    end: Sequence[str] = ('"', "'"),
) -> Parser[str]:
    """A quoted string without escape sequences."""
    if len(start) != len(end):
        raise ValueError("The number of starting quotes and ending quotes don't match.")
    return alt(*(
        seq_map(
            literal(opening),
            not_followed_by(closing).then(any_char).many(),
            literal(closing),
            lambda _, data, __: "".join(data),
        )
        for opening, closing in zip(start, end)
    ))

# numbers

BASE_DIGITS: Final[dict[int, tuple[frozenset[str], str]]] = {
    2: (const.BINARY, "a binary digit"),
    8: (const.OCTAL, "an octal digit"),
    10: (const.DECIMAL, "a digit"),
    16: (const.HEXADECIMAL, "a hexadecimal digit"),
}
BASE_PREFIXES: Final[dict[str, int]] = {"0b": 2, "0o": 8, "0x": 16}

def digits_of(chars: Collection[str], label: str) -> Parser[str]:
    """One or more characters out of `chars`."""
    return one_of(chars).desc(label).at_least(1).map("".join)

def _unsigned(base: int) -> Parser[int]:
    chars, label = BASE_DIGITS[base]
    return digits_of(chars, label).map(lambda data: int(data, base=base))

def integer_number(base: int = 0) -> Parser[int]:
    """
    An optionally negative integer.

    If `base` is 0, the base is interpreted from the string.
    - `0b`: Binary
    - `0o`: Octal
    - `0x`: Hexadecimal
    """
    if base == 0:
        body = alt(
            *(literal(prefix).then(_unsigned(prefix_base)) for prefix, prefix_base in BASE_PREFIXES.items()),
            _unsigned(10),
        )
    elif base in BASE_DIGITS:
        body = _unsigned(base)
    else:
        raise ValueError(f"Unsupported base: {base}")
    return seq_map(optional(literal("-"), ""), body, lambda sign, number: -number if sign else number)

_EXPONENT = r"[eE][+-]?[0-9]+"

float_number: Final[Parser[float]] = regex(
    rf"-?(?:[0-9]+(?:\.[0-9]+(?:{_EXPONENT})?|\.?{_EXPONENT})|\.[0-9]+(?:{_EXPONENT})?)"
).desc("a float").map(float)
"""A float that has a fractional part, an exponent, or both."""
