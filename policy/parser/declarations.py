"""Declarations: rule, filter, macro and list.

Each kind has a fixed field order and every field is introduced by
``keyword:``::

    - rule: <text>
      desc: <text>
      condition: <expression>
      output: <text>            (or action: <text>)
      priority: <severity>
      tags: [<literal>, ...]    (optional)

    - macro: <id>               (filter has the same shape)
      condition: <expression>

    - list: <id>
      items: [<literal>, ...]
"""

from policy.errors import ErrorKind, PolicySyntaxError, describe
from policy.nodes import (
    Declaration,
    Effect,
    EffectKind,
    FilterDecl,
    ListDecl,
    MacroDecl,
    RuleDecl,
    SeverityLevel,
)
from policy.parser.expressions import parse_expression
from policy.parser.items import parse_items
from policy.parser.stream import TokenStream
from policy.parser.text import parse_text
from policy.tokens import Token, TokenKind

_ID_KINDS = (TokenKind.ID, TokenKind.SEVERITY)


def parse_declaration(stream: TokenStream) -> Declaration:
    decl = stream.expect(TokenKind.DECL, "'-' to start a declaration")
    keyword = stream.peek()

    if keyword.kind == TokenKind.RULE:
        result = _parse_rule(stream, decl)
    elif keyword.kind == TokenKind.FILTER:
        ident, condition = _parse_named_condition(stream, TokenKind.FILTER)
        result = FilterDecl(ident, condition, decl.line)
    elif keyword.kind == TokenKind.MACRO:
        ident, condition = _parse_named_condition(stream, TokenKind.MACRO)
        result = MacroDecl(ident, condition, decl.line)
    elif keyword.kind == TokenKind.LIST:
        result = _parse_list(stream, decl)
    else:
        raise PolicySyntaxError.at(
            ErrorKind.UNKNOWN_DECLARATION_KEYWORD,
            f"expected 'rule', 'filter', 'macro' or 'list', got {describe(keyword)}",
            keyword,
        )

    # A declaration ends where the next one starts.
    tok = stream.peek()
    if tok.kind not in (TokenKind.DECL, TokenKind.EOF):
        raise PolicySyntaxError.at(
            ErrorKind.EXPECTED_TOKEN,
            f"expected a new declaration or end of input, got {describe(tok)}",
            tok,
        )
    return result


def _field(stream: TokenStream, keyword: TokenKind) -> Token:
    """Consume ``keyword :`` and return the keyword token."""
    tok = stream.expect(keyword)
    stream.expect(TokenKind.DEF, f"':' after {keyword.value!r}")
    return tok


def _identifier(stream: TokenStream, what: str) -> str:
    tok = stream.peek()
    if tok.kind not in _ID_KINDS:
        raise PolicySyntaxError.at(
            ErrorKind.EXPECTED_TOKEN,
            f"expected {what} identifier, got {describe(tok)}",
            tok,
        )
    return stream.advance().text


# ---------------------------------------------------------------------------
# Declaration kinds
# ---------------------------------------------------------------------------

def _parse_rule(stream: TokenStream, decl: Token) -> RuleDecl:
    _field(stream, TokenKind.RULE)
    name = parse_text(stream)
    _field(stream, TokenKind.DESC)
    description = parse_text(stream)
    _field(stream, TokenKind.COND)
    condition = parse_expression(stream)

    tok = stream.peek()
    if tok.kind == TokenKind.ACTION:
        kind = EffectKind.ACTION
    elif tok.kind == TokenKind.OUTPUT:
        kind = EffectKind.OUTPUT
    else:
        raise PolicySyntaxError.at(
            ErrorKind.EXPECTED_TOKEN,
            f"expected 'action' or 'output', got {describe(tok)}",
            tok,
        )
    _field(stream, tok.kind)
    effect = Effect(kind, parse_text(stream))

    _field(stream, TokenKind.PRIORITY)
    severity = stream.expect(TokenKind.SEVERITY, "a severity level")
    priority = SeverityLevel.from_text(severity.text)

    tags = ()
    if stream.check(TokenKind.TAGS):
        _field(stream, TokenKind.TAGS)
        tags = parse_items(stream)

    return RuleDecl(name, description, condition, effect, priority, tags, decl.line)


def _parse_named_condition(stream: TokenStream, keyword: TokenKind):
    _field(stream, keyword)
    ident = _identifier(stream, keyword.value)
    _field(stream, TokenKind.COND)
    return ident, parse_expression(stream)


def _parse_list(stream: TokenStream, decl: Token) -> ListDecl:
    _field(stream, TokenKind.LIST)
    ident = _identifier(stream, "list")
    _field(stream, TokenKind.ITEMS)
    return ListDecl(ident, parse_items(stream), decl.line)
