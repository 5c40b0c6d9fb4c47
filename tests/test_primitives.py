"""Tests for the primitive parsers."""

from __future__ import annotations

import re

import pytest

from inkcomb import (
    Failure,
    SourcePosition,
    Success,
    any_char,
    custom,
    eof,
    fail,
    index,
    literal,
    none_of,
    one_of,
    regex,
    rest,
    satisfy,
    succeed,
    take_while,
)


class TestLiteral:
    def test_match(self):
        reply = literal("abc").run("abcdef", 0)
        assert reply
        assert reply.index == 3
        assert reply.value == "abc"

    def test_match_at_offset(self):
        reply = literal("def").run("abcdef", 3)
        assert reply.index == 6

    def test_mismatch_label_is_quoted(self):
        reply = literal("abc").run("abx", 0)
        assert not reply
        assert reply.furthest == 0
        assert reply.expected == ("'abc'",)

    def test_past_the_end(self):
        assert not literal("abc").run("ab", 0)

    def test_empty_literal(self):
        reply = literal("").run("abc", 1)
        assert reply.index == 1
        assert reply.value == ""

    def test_multiple_values(self):
        parser = literal("<=", "<")
        assert parser.run("<=", 0).value == "<="
        assert parser.run("<", 0).value == "<"
        assert parser.run("x", 0).expected == ("'<'", "'<='")

    def test_construction_errors(self):
        with pytest.raises(ValueError):
            literal()
        with pytest.raises(TypeError):
            literal(5)


class TestRegex:
    def test_anchored_at_cursor(self):
        parser = regex(r"[0-9]+")
        assert not parser.run("ab12", 0)
        reply = parser.run("ab12", 2)
        assert reply.index == 4
        assert reply.value == "12"

    def test_caret_only_matches_at_string_start(self):
        assert regex(r"^a").parse("a")
        assert not literal("x").then(regex(r"^a")).parse("xa")
        assert literal("x").then(regex(r"a")).parse("xa").value == "a"

    def test_caret_after_newline_with_multiline(self):
        parser = literal("\n").then(regex(r"^a", flags=re.MULTILINE))
        assert parser.parse("\na").value == "a"

    def test_label_is_pattern_source(self):
        assert regex(r"[0-9]+").run("x", 0).expected == ("/[0-9]+/",)

    def test_label_includes_flags(self):
        assert regex(r"[a-z]", flags=re.IGNORECASE).run("1", 0).expected == ("/[a-z]/i",)

    def test_capture_group(self):
        reply = regex(r"([a-z]+)=([0-9]+)", 2).run("key=42;", 0)
        assert reply.value == "42"
        assert reply.index == 6

    def test_named_group(self):
        assert regex(r"(?P<name>[a-z]+)!", "name").run("hey!", 0).value == "hey"

    def test_group_that_did_not_participate(self):
        parser = regex(r"a|(b)", 1)
        assert parser.run("b", 0).value == "b"
        assert not parser.run("a", 0)

    def test_compiled_pattern(self):
        assert regex(re.compile(r"\d+")).run("77", 0).value == "77"

    def test_repeated_use_is_independent(self):
        parser = regex(r"[a-z]")
        assert parser.run("ab", 0).index == 1
        assert parser.run("ab", 1).index == 2
        assert parser.run("ab", 0).index == 1

    def test_unsupported_flag(self):
        with pytest.raises(ValueError):
            regex(r"a", flags=re.DEBUG)

    def test_flags_with_compiled_pattern(self):
        with pytest.raises(ValueError):
            regex(re.compile("a"), flags=re.IGNORECASE)

    def test_bytes_pattern(self):
        with pytest.raises(TypeError):
            regex(re.compile(b"a"))

    def test_not_a_pattern(self):
        with pytest.raises(TypeError):
            regex(42)

    def test_bad_groups(self):
        with pytest.raises(ValueError):
            regex(r"(a)", 2)
        with pytest.raises(ValueError):
            regex(r"(a)", "missing")
        with pytest.raises(TypeError):
            regex(r"(a)", 1.0)


class TestCharacterPredicates:
    def test_satisfy(self):
        parser = satisfy(str.isupper)
        assert parser.run("Ab", 0).value == "A"
        reply = parser.run("ab", 0)
        assert not reply
        assert reply.expected == ("a character matching str.isupper",)

    def test_satisfy_at_end(self):
        assert not satisfy(str.isupper).run("", 0)

    def test_satisfy_needs_a_function(self):
        with pytest.raises(TypeError):
            satisfy("a")

    def test_one_of(self):
        parser = one_of("abc")
        assert parser.run("b", 0).value == "b"
        reply = parser.run("d", 0)
        assert reply.expected == ("a character matching one_of('abc')",)

    def test_one_of_set(self):
        assert one_of(frozenset("ba")).run("x", 0).expected == ("a character matching one_of('ab')",)

    def test_none_of(self):
        parser = none_of("abc")
        assert parser.run("d", 0).value == "d"
        assert not parser.run("a", 0)
        assert not parser.run("", 0)

    def test_one_of_needs_characters(self):
        with pytest.raises(TypeError):
            one_of(5)


class TestTakeWhile:
    def test_greedy(self):
        reply = take_while(str.isdigit).run("123abc", 0)
        assert reply.index == 3
        assert reply.value == "123"

    def test_zero_characters(self):
        reply = take_while(str.isdigit).run("abc", 0)
        assert reply
        assert reply.index == 0
        assert reply.value == ""


class TestConstantParsers:
    def test_succeed(self):
        reply = succeed(10).run("abc", 2)
        assert reply.index == 2
        assert reply.value == 10

    def test_fail(self):
        reply = fail("something").run("abc", 1)
        assert not reply
        assert reply.furthest == 1
        assert reply.expected == ("something",)

    def test_fail_needs_a_label(self):
        with pytest.raises(TypeError):
            fail(None)

    def test_eof(self):
        assert eof.run("ab", 2).value is None
        reply = eof.run("ab", 1)
        assert not reply
        assert reply.expected == ("EOF",)

    def test_index(self):
        reply = index.run("a\nbc", 3)
        assert reply.index == 3
        assert reply.value == SourcePosition("a\nbc", 3)
        assert (reply.value.line, reply.value.column) == (2, 2)

    def test_any_char(self):
        assert any_char.run("xy", 1).value == "y"
        assert any_char.run("xy", 2).expected == ("any character",)

    def test_rest(self):
        reply = rest.run("abcdef", 2)
        assert reply.index == 6
        assert reply.value == "cdef"


class TestCustom:
    def test_decorator(self):
        @custom
        def upper(src: str, pos: int):
            if pos < len(src) and src[pos].isupper():
                return Success(pos+1, src[pos])
            return Failure(pos, ("an uppercase letter",))

        assert upper.parse("Q").value == "Q"
        assert upper.parse("q").expected == ["an uppercase letter"]

    def test_needs_a_function(self):
        with pytest.raises(TypeError):
            custom("not callable")
