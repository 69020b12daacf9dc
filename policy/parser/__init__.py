"""Policy parser: turns a token stream into a PolicyDocument.

Parsing never stops at the first bad declaration.  Each failure is recorded
and the parser resynchronizes on the next ``- rule:``/``- filter:``/
``- macro:``/``- list:`` header, so one pass over a file reports every
broken declaration and still returns the ones that parsed.

Usage:
    document, errors = parse_source(text)
    if errors:
        ...  # policy rejected; document still holds the good declarations
"""

from policy.errors import ErrorKind, PolicySyntaxError
from policy.lexer import tokenize
from policy.nodes import PolicyDocument
from policy.parser.declarations import parse_declaration
from policy.parser.expressions import parse_expression
from policy.parser.items import parse_items
from policy.parser.stream import TokenStream
from policy.parser.text import parse_text
from policy.tokens import DECLARATION_KINDS, Token, TokenKind

__all__ = [
    "TokenStream",
    "parse",
    "parse_declaration",
    "parse_expression",
    "parse_expression_source",
    "parse_items",
    "parse_source",
    "parse_text",
]


def parse(tokens: list[Token], source: str = "") -> tuple[PolicyDocument, list[PolicySyntaxError]]:
    """Parse every declaration in *tokens*.

    *source* is the text the tokens came from; text fields are sliced out
    of it verbatim.  Without it ``Text.raw`` is rebuilt from the tokens and
    every run of whitespace becomes a single space.  Returns the document (well-formed declarations only)
    and the syntax errors in source order.
    """
    stream = TokenStream(tokens, source)
    declarations = []
    errors = []

    while not stream.at_end():
        start = stream.position
        try:
            declarations.append(parse_declaration(stream))
        except PolicySyntaxError as e:
            errors.append(e)
            if not _synchronize(stream, start + 1):
                break

    if not declarations and not errors:
        eof = stream.peek()
        errors.append(PolicySyntaxError.at(
            ErrorKind.EMPTY_DOCUMENT, "expected at least one declaration", eof,
        ))

    return PolicyDocument(tuple(declarations)), errors


def parse_source(source: str) -> tuple[PolicyDocument, list[PolicySyntaxError]]:
    return parse(tokenize(source), source)


def parse_expression_source(source: str):
    """Parse a standalone condition; raises PolicySyntaxError if malformed."""
    stream = TokenStream(tokenize(source), source)
    expr = parse_expression(stream)
    stream.expect(TokenKind.EOF, "end of expression")
    return expr


def _synchronize(stream: TokenStream, position: int) -> bool:
    """Move to the first declaration header at or after *position*.

    Returns False (leaving the stream at EOF) when there is none.
    """
    stream.reset(position)
    while not stream.at_end():
        if (
            stream.check(TokenKind.DECL)
            and stream.peek(1).kind in DECLARATION_KINDS
            and stream.peek(2).kind == TokenKind.DEF
        ):
            return True
        stream.advance()
    return False
