"""Tests for condition expressions and their precedence."""

import pytest

from policy.errors import ErrorKind, PolicySyntaxError
from policy.nodes import (
    And,
    BinaryOp,
    BinaryTest,
    Grouped,
    Items,
    Literal,
    LiteralKind,
    Not,
    Or,
    SetOp,
    SetTest,
    UnaryOp,
    UnaryTest,
    VariableRef,
)
from policy.parser import parse_expression_source as parse
from policy.printer import format_expression


def _id(text):
    return Literal(LiteralKind.IDENTIFIER, text)


def _path(text):
    return Literal(LiteralKind.PATH, text)


def _error_kind(source):
    with pytest.raises(PolicySyntaxError) as exc:
        parse(source)
    return exc.value.kind


# ---------------------------------------------------------------------------
# and / or / not
# ---------------------------------------------------------------------------

class TestLogicalTiers:
    def test_single_reference_is_unwrapped(self):
        assert parse("spawned_process") == VariableRef("spawned_process")

    def test_and_chain_is_flat(self):
        assert parse("a and b and c") == And(
            (VariableRef("a"), VariableRef("b"), VariableRef("c"))
        )

    def test_or_chain_is_flat(self):
        assert parse("a or b or c") == Or(
            (VariableRef("a"), VariableRef("b"), VariableRef("c"))
        )

    def test_and_binds_tighter_than_or(self):
        assert parse("a or b and c") == Or(
            (VariableRef("a"), And((VariableRef("b"), VariableRef("c"))))
        )

    def test_or_between_and_chains(self):
        assert parse("a and b or c and d") == Or((
            And((VariableRef("a"), VariableRef("b"))),
            And((VariableRef("c"), VariableRef("d"))),
        ))

    def test_double_negation(self):
        assert parse("not not x") == Not(Not(VariableRef("x")))

    def test_not_binds_to_one_term(self):
        assert parse("not a and b") == And((Not(VariableRef("a")), VariableRef("b")))

    def test_group_overrides_precedence(self):
        assert parse("(a or b) and c") == And((
            Grouped(Or((VariableRef("a"), VariableRef("b")))),
            VariableRef("c"),
        ))

    def test_child_order_is_preserved(self):
        assert parse("b or a") != parse("a or b")


# ---------------------------------------------------------------------------
# Term forms
# ---------------------------------------------------------------------------

class TestTerms:
    def test_binary_comparison(self):
        assert parse("proc.name = bash") == BinaryTest(_id("proc.name"), BinaryOp.EQ, _id("bash"))

    def test_string_operators(self):
        expr = parse("fd.name startswith /etc")
        assert expr == BinaryTest(_id("fd.name"), BinaryOp.STARTSWITH, _path("/etc"))
        assert parse("fd.name endswith .sh").op == BinaryOp.ENDSWITH
        assert parse("proc.cmdline icontains curl").op == BinaryOp.ICONTAINS

    def test_number_literal_kind(self):
        expr = parse("fd.sport >= 1024")
        assert expr.op == BinaryOp.GE
        assert expr.right == Literal(LiteralKind.NUMBER, "1024")

    def test_quoted_string_keeps_quotes_in_text(self):
        expr = parse('proc.cmdline contains "rm -rf"')
        assert expr.right.kind == LiteralKind.STRING
        assert expr.right.text == '"rm -rf"'
        assert expr.right.value == "rm -rf"

    def test_exists(self):
        assert parse("evt.res exists") == UnaryTest(_id("evt.res"), UnaryOp.EXISTS)

    def test_in_with_literals(self):
        assert parse("proc.name in (bash, sh)") == SetTest(
            _id("proc.name"), SetOp.IN, (_id("bash"), _id("sh"))
        )

    def test_in_with_nested_lists(self):
        expr = parse("proc.name in ([a,b],[c,d])")
        assert expr == SetTest(
            _id("proc.name"),
            SetOp.IN,
            (Items((_id("a"), _id("b"))), Items((_id("c"), _id("d")))),
        )

    def test_pmatch_mixes_literals_and_lists(self):
        expr = parse("fd.name pmatch (/tmp, [/etc, /usr])")
        assert expr.op == SetOp.PMATCH
        assert expr.candidates == (_path("/tmp"), Items((_path("/etc"), _path("/usr"))))

    def test_empty_operand_list_is_allowed(self):
        assert parse("proc.name in ()") == SetTest(_id("proc.name"), SetOp.IN, ())

    def test_angle_bracket_as_right_value(self):
        assert parse("fd.name = <") == BinaryTest(_id("fd.name"), BinaryOp.EQ, _path("<"))

    def test_angle_bracket_as_left_value(self):
        assert parse("< != x") == BinaryTest(_path("<"), BinaryOp.NEQ, _id("x"))

    def test_angle_bracket_as_operator(self):
        assert parse("a < b") == BinaryTest(_id("a"), BinaryOp.LT, _id("b"))
        assert parse("a > >") == BinaryTest(_id("a"), BinaryOp.GT, _path(">"))

    def test_severity_word_is_a_value(self):
        assert parse("evt.level = high") == BinaryTest(_id("evt.level"), BinaryOp.EQ, _id("high"))

    def test_reference_next_to_comparison(self):
        assert parse("open_write and fd.num > 2") == And((
            VariableRef("open_write"),
            BinaryTest(_id("fd.num"), BinaryOp.GT, Literal(LiteralKind.NUMBER, "2")),
        ))


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TestErrors:
    def test_unclosed_group(self):
        assert _error_kind("(a and b") == ErrorKind.UNBALANCED_GROUP

    def test_stray_close_paren(self):
        assert _error_kind("a and b)") == ErrorKind.UNBALANCED_GROUP

    def test_missing_right_operand(self):
        assert _error_kind("proc.name =") == ErrorKind.MISSING_OPERAND

    def test_missing_term_after_and(self):
        assert _error_kind("a and") == ErrorKind.MISSING_OPERAND

    def test_missing_term_after_not(self):
        assert _error_kind("not") == ErrorKind.MISSING_OPERAND

    def test_unterminated_operand_list(self):
        assert _error_kind("proc.name in (a, b") == ErrorKind.UNTERMINATED_OPERAND_LIST

    def test_unterminated_empty_operand_list(self):
        assert _error_kind("proc.name in (") == ErrorKind.UNTERMINATED_OPERAND_LIST

    def test_operand_list_ending_after_comma(self):
        assert _error_kind("proc.name in (a,") == ErrorKind.UNTERMINATED_OPERAND_LIST

    def test_missing_operand_after_comma(self):
        assert _error_kind("proc.name in (a, and b)") == ErrorKind.MISSING_OPERAND

    def test_set_operator_without_list(self):
        assert _error_kind("proc.name in") == ErrorKind.MISSING_OPERAND
        assert _error_kind("fd.name pmatch and x") == ErrorKind.MISSING_OPERAND

    def test_group_opened_at_end(self):
        assert _error_kind("a or (") == ErrorKind.MISSING_OPERAND
        assert _error_kind("()") == ErrorKind.MISSING_OPERAND

    def test_trailing_comma_in_operand_list(self):
        assert _error_kind("proc.name in (a,)") == ErrorKind.TRAILING_SEPARATOR

    def test_in_requires_parenthesis(self):
        assert _error_kind("proc.name in a") == ErrorKind.EXPECTED_TOKEN

    def test_value_without_operator(self):
        assert _error_kind("5 6") == ErrorKind.EXPECTED_TOKEN

    def test_empty_expression(self):
        assert _error_kind("") == ErrorKind.EXPECTED_TOKEN

    def test_error_position(self):
        with pytest.raises(PolicySyntaxError) as exc:
            parse("a and\n  (b or c")
        assert (exc.value.line, exc.value.column) == (2, 3)


# ---------------------------------------------------------------------------
# Printing
# ---------------------------------------------------------------------------

_ROUND_TRIP = [
    "a",
    "a and b and c",
    "a or b and c or d",
    "not not x",
    "not (a or b)",
    "a and (b or c)",
    "((a))",
    "proc.name in ([a, b], [c, d]) and not evt.res exists",
    "fd.name pmatch (/tmp, [/etc, /usr]) or fd.sport >= 1024",
    'proc.cmdline contains "rm -rf" and fd.name = <',
    "proc.name in ()",
    "< = > or a > >",
]


class TestRoundTrip:
    @pytest.mark.parametrize("source", _ROUND_TRIP)
    def test_print_then_parse_is_stable(self, source):
        expr = parse(source)
        assert parse(format_expression(expr)) == expr

    def test_whitespace_is_normalized(self):
        assert format_expression(parse("a   and\n   b")) == "a and b"

    def test_nested_or_inside_and_gets_parentheses(self):
        expr = And((Or((VariableRef("a"), VariableRef("b"))), VariableRef("c")))
        assert format_expression(expr) == "(a or b) and c"
