"""Tests for replies, furthest-failure merging and source positions."""

from __future__ import annotations

from inkcomb import Failure, SourcePosition, Success, merge
from inkcomb.main import union_expected


class TestUnionExpected:
    def test_empty_sides_return_the_other(self):
        xs = ("'a'",)
        assert union_expected((), xs) is xs
        assert union_expected(xs, ()) is xs

    def test_union_is_sorted_and_deduplicated(self):
        assert union_expected(("'b'", "'c'"), ("'a'", "'b'")) == ("'a'", "'b'", "'c'")

    def test_union_is_commutative(self):
        xs = ("'x'",)
        ys = ("'a'", "'m'")
        assert union_expected(xs, ys) == union_expected(ys, xs)


class TestMerge:
    def test_no_previous_reply_is_identity(self):
        reply = Failure(3, ("'a'",))
        assert merge(reply, None) is reply

    def test_greater_offset_wins(self):
        merged = merge(Failure(3, ("'a'",)), Failure(7, ("'b'",)))
        assert merged.furthest == 7
        assert merged.expected == ("'b'",)

    def test_own_greater_offset_is_kept(self):
        reply = Failure(7, ("'b'",))
        assert merge(reply, Failure(3, ("'a'",))) is reply

    def test_tie_unions_labels(self):
        merged = merge(Failure(4, ("'z'",)), Failure(4, ("'a'", "'z'")))
        assert merged.furthest == 4
        assert merged.expected == ("'a'", "'z'")

    def test_success_keeps_status_and_value(self):
        merged = merge(Success(5, "value"), Failure(2, ("'x'",)))
        assert merged
        assert isinstance(merged, Success)
        assert merged.index == 5
        assert merged.value == "value"
        assert merged.furthest == 2
        assert merged.expected == ("'x'",)

    def test_inputs_are_not_mutated(self):
        reply = Failure(4, ("'b'",))
        last = Failure(4, ("'a'",))
        merge(reply, last)
        assert reply.expected == ("'b'",)
        assert last.expected == ("'a'",)

    def test_plain_successes_stay_clean(self):
        merged = merge(Success(2, "b"), Success(1, "a"))
        assert merged.furthest == -1
        assert merged.expected == ()


class TestReplyTruthiness:
    def test_success_is_truthy(self):
        assert Success(0, None)

    def test_failure_is_falsy(self):
        assert not Failure(0, ("EOF",))


class TestSourcePosition:
    def test_start(self):
        pos = SourcePosition("abc", 0)
        assert (pos.line, pos.column) == (1, 1)

    def test_first_line(self):
        assert SourcePosition("123abc", 3) == (3, 1, 4)

    def test_after_newlines(self):
        pos = SourcePosition("ab\ncd\nef", 7)
        assert pos.line == 3
        assert pos.column == 2

    def test_right_after_newline(self):
        pos = SourcePosition("ab\ncd", 3)
        assert (pos.line, pos.column) == (2, 1)

    def test_crlf(self):
        pos = SourcePosition("ab\r\ncd", 5)
        assert (pos.line, pos.column) == (2, 2)

    def test_end_of_input(self):
        pos = SourcePosition("ab\n", 3)
        assert (pos.line, pos.column) == (2, 1)

    def test_as_dict(self):
        assert SourcePosition("a\nb", 2).as_dict() == {"offset": 2, "line": 2, "column": 1}

    def test_equality(self):
        assert SourcePosition("abc", 1) == SourcePosition("abc", 1)
        assert SourcePosition("abc", 1) != SourcePosition("abc", 2)
        assert len({SourcePosition("abc", 1), SourcePosition("abc", 1)}) == 1
