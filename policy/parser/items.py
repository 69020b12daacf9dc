"""Bracketed literal lists: ``[a, "b c", /bin/sh]``.

Used for list bodies, rule tags, and inline candidates of ``in``/``pmatch``.
"""

from policy.errors import ErrorKind, PolicySyntaxError, describe
from policy.nodes import Literal, LiteralKind
from policy.parser.stream import TokenStream
from policy.tokens import ATOM_KINDS, TokenKind

_LITERAL_KIND = {
    TokenKind.ID: LiteralKind.IDENTIFIER,
    TokenKind.SEVERITY: LiteralKind.IDENTIFIER,
    TokenKind.NUMBER: LiteralKind.NUMBER,
    TokenKind.PATH: LiteralKind.PATH,
    TokenKind.LT: LiteralKind.PATH,
    TokenKind.GT: LiteralKind.PATH,
    TokenKind.STRING: LiteralKind.STRING,
}


def is_atom(stream: TokenStream, offset: int = 0) -> bool:
    return stream.peek(offset).kind in ATOM_KINDS


def parse_atom(stream: TokenStream) -> Literal:
    tok = stream.peek()
    if tok.kind not in ATOM_KINDS:
        raise PolicySyntaxError.at(
            ErrorKind.EXPECTED_TOKEN,
            f"expected a literal value, got {describe(tok)}",
            tok,
        )
    stream.advance()
    return Literal(_LITERAL_KIND[tok.kind], tok.text, tok.line, tok.column)


def parse_items(stream: TokenStream) -> tuple[Literal, ...]:
    stream.expect(TokenKind.LBRACK)
    if stream.match(TokenKind.RBRACK):
        return ()

    items = [parse_atom(stream)]
    while True:
        tok = stream.peek()
        if tok.kind == TokenKind.RBRACK:
            stream.advance()
            return tuple(items)
        if tok.kind != TokenKind.LISTSEP:
            raise PolicySyntaxError.at(
                ErrorKind.EXPECTED_TOKEN,
                f"expected ',' or ']', got {describe(tok)}",
                tok,
            )
        stream.advance()
        if stream.check(TokenKind.RBRACK):
            raise PolicySyntaxError.at(
                ErrorKind.TRAILING_SEPARATOR,
                "trailing ',' before ']'",
                tok,
            )
        items.append(parse_atom(stream))
