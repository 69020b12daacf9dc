"""Tests for free-text fields and bracketed item lists."""

import pytest

from policy.errors import ErrorKind, PolicySyntaxError
from policy.lexer import tokenize
from policy.nodes import Literal, LiteralKind
from policy.parser import TokenStream, parse_items, parse_text
from policy.tokens import TokenKind


def _stream(source):
    return TokenStream(tokenize(source), source)


class TestText:
    def test_stops_before_field_keyword(self):
        stream = _stream("Outbound condition: fd.sport = 22")
        text = parse_text(stream)
        assert text.raw == "Outbound"
        assert stream.peek().kind == TokenKind.COND

    def test_multi_word_text(self):
        stream = _stream("Suspicious outbound connection desc: x")
        assert parse_text(stream).raw == "Suspicious outbound connection"

    def test_runs_to_end_of_input(self):
        stream = _stream("Shell spawned (user=%user.name cmd=%proc.cmdline)")
        assert parse_text(stream).raw == "Shell spawned (user=%user.name cmd=%proc.cmdline)"
        assert stream.at_end()

    def test_whitespace_is_preserved(self):
        stream = _stream("Shell in\n    container\npriority: high")
        text = parse_text(stream)
        assert text.raw == "Shell in\n    container"
        assert text.normalized == "Shell in container"

    def test_without_source_adjacent_tokens_stay_joined(self):
        stream = TokenStream(tokenize("Shell spawned (user=%user.name)\n  desc: x"))
        assert parse_text(stream).raw == "Shell spawned (user=%user.name)"

    def test_without_source_whitespace_collapses(self):
        stream = TokenStream(tokenize("Shell in\n    container"))
        assert parse_text(stream).raw == "Shell in container"

    def test_other_keywords_do_not_stop_text(self):
        stream = _stream("rule and list in macro tags: []")
        assert parse_text(stream).raw == "rule and list in macro"

    def test_quoted_field_keyword_is_text(self):
        stream = _stream('"desc" desc: x')
        assert parse_text(stream).raw == '"desc"'

    def test_empty_before_keyword(self):
        with pytest.raises(PolicySyntaxError) as exc:
            parse_text(_stream("desc: x"))
        assert exc.value.kind == ErrorKind.EMPTY_TEXT_FIELD

    def test_empty_at_end_of_input(self):
        with pytest.raises(PolicySyntaxError) as exc:
            parse_text(_stream(""))
        assert exc.value.kind == ErrorKind.EMPTY_TEXT_FIELD


class TestItems:
    def test_empty_list(self):
        assert parse_items(_stream("[]")) == ()

    def test_literal_kinds(self):
        items = parse_items(_stream('[bash, /bin/sh, "a b", 22]'))
        assert [i.kind for i in items] == [
            LiteralKind.IDENTIFIER, LiteralKind.PATH, LiteralKind.STRING, LiteralKind.NUMBER,
        ]
        assert items[2].value == "a b"

    def test_duplicates_are_kept(self):
        items = parse_items(_stream("[a, a]"))
        assert items == (Literal(LiteralKind.IDENTIFIER, "a"),) * 2

    def test_trailing_separator(self):
        with pytest.raises(PolicySyntaxError) as exc:
            parse_items(_stream("[a,]"))
        assert exc.value.kind == ErrorKind.TRAILING_SEPARATOR

    def test_missing_separator(self):
        with pytest.raises(PolicySyntaxError) as exc:
            parse_items(_stream("[a b]"))
        assert exc.value.kind == ErrorKind.EXPECTED_TOKEN

    def test_unclosed_list(self):
        with pytest.raises(PolicySyntaxError) as exc:
            parse_items(_stream("[a, b"))
        assert exc.value.kind == ErrorKind.EXPECTED_TOKEN

    def test_requires_bracket(self):
        with pytest.raises(PolicySyntaxError) as exc:
            parse_items(_stream("a, b"))
        assert exc.value.kind == ErrorKind.EXPECTED_TOKEN
