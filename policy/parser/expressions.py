"""Boolean condition expressions.

Grammar, loosest binding first::

    expression := or_expr
    or_expr    := and_expr ('or' and_expr)*
    and_expr   := term ('and' term)*
    term       := ID                                  -- variable reference
                | 'not' term
                | atom 'exists'
                | atom binary_op atom
                | atom ('in' | 'pmatch') '(' [operand (',' operand)*] ')'
                | '(' expression ')'
    operand    := atom | items

Chains of ``or``/``and`` become one node holding every operand; a single
operand is returned unwrapped.  Which term alternative applies is decided by
looking one token past the leading atom, never by retokenizing: ``<`` and
``>`` are values where an atom is expected and operators right after one.
"""

from policy.errors import ErrorKind, PolicySyntaxError, describe
from policy.nodes import (
    And,
    BinaryOp,
    BinaryTest,
    Expression,
    Grouped,
    Items,
    Not,
    Operand,
    Or,
    SetOp,
    SetTest,
    UnaryOp,
    UnaryTest,
    VariableRef,
)
from policy.parser.items import is_atom, parse_atom, parse_items
from policy.parser.stream import TokenStream
from policy.tokens import (
    ALL_OPERATORS,
    BINARY_OPERATORS,
    SET_OPERATORS,
    UNARY_OPERATORS,
    Token,
    TokenKind,
)

_BINARY_OP = {op.value: op for op in BinaryOp}
_UNARY_OP = {op.value: op for op in UnaryOp}
_SET_OP = {op.value: op for op in SetOp}

_VARIABLE_KINDS = frozenset({TokenKind.ID, TokenKind.SEVERITY})


def parse_expression(stream: TokenStream) -> Expression:
    """Parse a full condition; a stray ')' after it is an unbalanced group."""
    expr = _parse_or(stream)
    tok = stream.peek()
    if tok.kind == TokenKind.RPAREN:
        raise PolicySyntaxError.at(ErrorKind.UNBALANCED_GROUP, "unmatched ')'", tok)
    return expr


# ---------------------------------------------------------------------------
# Logical tiers
# ---------------------------------------------------------------------------

def _parse_or(stream: TokenStream, after: Token | None = None) -> Expression:
    children = [_parse_and(stream, after)]
    while stream.check(TokenKind.OR):
        op = stream.advance()
        children.append(_parse_and(stream, after=op))
    return children[0] if len(children) == 1 else Or(tuple(children))


def _parse_and(stream: TokenStream, after: Token | None = None) -> Expression:
    children = [_parse_term(stream, after)]
    while stream.check(TokenKind.AND):
        op = stream.advance()
        children.append(_parse_term(stream, after=op))
    return children[0] if len(children) == 1 else And(tuple(children))


# ---------------------------------------------------------------------------
# Terms
# ---------------------------------------------------------------------------

def _parse_term(stream: TokenStream, after: Token | None = None) -> Expression:
    tok = stream.peek()

    if tok.kind == TokenKind.NOT:
        stream.advance()
        return Not(_parse_term(stream, after=tok))

    if tok.kind == TokenKind.LPAREN:
        stream.advance()
        inner = _parse_or(stream, after=tok)
        if stream.match(TokenKind.RPAREN) is None:
            raise PolicySyntaxError.at(
                ErrorKind.UNBALANCED_GROUP,
                f"'(' opened at line {tok.line}, column {tok.column} is never closed; "
                f"got {describe(stream.peek())}",
                tok,
            )
        return Grouped(inner)

    if is_atom(stream):
        if tok.kind in _VARIABLE_KINDS and stream.peek(1).kind not in ALL_OPERATORS:
            stream.advance()
            return VariableRef(tok.text, tok.line, tok.column)
        return _parse_test(stream)

    if after is not None:
        raise PolicySyntaxError.at(
            ErrorKind.MISSING_OPERAND,
            f"missing operand after {after.text!r}, got {describe(tok)}",
            tok,
        )
    raise PolicySyntaxError.at(
        ErrorKind.EXPECTED_TOKEN,
        f"expected an expression, got {describe(tok)}",
        tok,
    )


def _parse_test(stream: TokenStream) -> Expression:
    operand = parse_atom(stream)
    op = stream.peek()

    if op.kind in UNARY_OPERATORS:
        stream.advance()
        return UnaryTest(operand, _UNARY_OP[op.text])

    if op.kind in BINARY_OPERATORS:
        stream.advance()
        if not is_atom(stream):
            raise PolicySyntaxError.at(
                ErrorKind.MISSING_OPERAND,
                f"missing right operand of {op.text!r}, got {describe(stream.peek())}",
                stream.peek(),
            )
        return BinaryTest(operand, _BINARY_OP[op.text], parse_atom(stream))

    if op.kind in SET_OPERATORS:
        stream.advance()
        if not stream.check(TokenKind.LPAREN) and not _starts_operand(stream):
            raise PolicySyntaxError.at(
                ErrorKind.MISSING_OPERAND,
                f"missing operand list after {op.text!r}, got {describe(stream.peek())}",
                stream.peek(),
            )
        return SetTest(operand, _SET_OP[op.text], _parse_operand_list(stream))

    raise PolicySyntaxError.at(
        ErrorKind.EXPECTED_TOKEN,
        f"expected an operator after {operand.text!r}, got {describe(op)}",
        op,
    )


def _parse_operand_list(stream: TokenStream) -> tuple[Operand, ...]:
    lparen = stream.expect(TokenKind.LPAREN)
    if stream.match(TokenKind.RPAREN):
        return ()
    if not _starts_operand(stream):
        raise _unterminated(lparen, stream.peek())

    candidates = [_parse_operand(stream)]
    while True:
        if stream.match(TokenKind.RPAREN):
            return tuple(candidates)
        sep = stream.match(TokenKind.LISTSEP)
        if sep is None:
            raise _unterminated(lparen, stream.peek())
        if stream.check(TokenKind.RPAREN):
            raise PolicySyntaxError.at(
                ErrorKind.TRAILING_SEPARATOR, "trailing ',' before ')'", sep
            )
        if stream.at_end():
            raise _unterminated(lparen, stream.peek())
        if not _starts_operand(stream):
            raise PolicySyntaxError.at(
                ErrorKind.MISSING_OPERAND,
                f"missing operand after ',', got {describe(stream.peek())}",
                stream.peek(),
            )
        candidates.append(_parse_operand(stream))


def _starts_operand(stream: TokenStream) -> bool:
    return stream.check(TokenKind.LBRACK) or is_atom(stream)


def _parse_operand(stream: TokenStream) -> Operand:
    if stream.check(TokenKind.LBRACK):
        return Items(parse_items(stream))
    return parse_atom(stream)


def _unterminated(lparen: Token, tok: Token) -> PolicySyntaxError:
    return PolicySyntaxError.at(
        ErrorKind.UNTERMINATED_OPERAND_LIST,
        f"operand list opened at line {lparen.line}, column {lparen.column} "
        f"is not closed; got {describe(tok)}",
        tok,
    )
