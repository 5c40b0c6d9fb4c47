"""
Parser combinators for writing backtracking string parsers.

See the objects for more explanations.

See the `inkcomb.general` module for pre-built parsers you can use as examples.

Defining parsers:
```
number = regex(r"[0-9]+").map(int)
expr = lazy(lambda: alt(
    seq_map(term, "+", expr, lambda a, _, b: a + b),
    term,
))
term = alt(number, literal("(").then(expr).skip(")"))
```

Using parsers:
```
result = expr.parse("1+(2+3)")
if result:
    ... # `result` is a `Parsed` object, `result.value` is 6
else:
    ... # `result` is a `ParseFailure` object
    print(format_error("1+(2+3)", result))
```
"""

import logging

import inkcomb.const as const
import inkcomb.main
from inkcomb.const import UNBOUNDED
from inkcomb.main import (
    repeat,
    SourcePosition,
    Mark,
    Success,
    Failure,
    Reply,
    merge,
    Parser,
    Parsed,
    ParseFailure,
    ParseError,
    format_error,
    custom,
    literal,
    regex,
    satisfy,
    one_of,
    none_of,
    take_while,
    succeed,
    fail,
    eof,
    index,
    any_char,
    rest,
    seq,
    seq_map,
    alt,
    sep_by,
    sep_by1,
    optional,
    lookahead,
    not_followed_by,
    empty,
    lazy,
    is_parser,
)
import inkcomb.general as general
from inkcomb.general import (
    digit,
    digits,
    letter,
    letters,
    alnum,
    alnums,
    whitespace,
    opt_whitespace,
    lexeme,
    quoted_string,
    raw_quoted_string,
    integer_number,
    float_number,
)

# Stay silent unless the application configures logging.
logging.getLogger("inkcomb").addHandler(logging.NullHandler())
