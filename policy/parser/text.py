"""Free-form text fields (rule names, descriptions, outputs).

A text field is every token up to, but not including, the next reserved
field keyword.  The stop check compares token *text*, so a value equal to
one of those words cannot end an unquoted text field; quote it instead.
"""

from policy.errors import ErrorKind, PolicySyntaxError, describe
from policy.nodes import Text
from policy.parser.stream import TokenStream
from policy.tokens import FIELD_KEYWORDS, Token, TokenKind


def stops_text(tok: Token) -> bool:
    return tok.kind == TokenKind.EOF or tok.text in FIELD_KEYWORDS


def parse_text(stream: TokenStream) -> Text:
    first = stream.peek()
    if stops_text(first):
        raise PolicySyntaxError.at(
            ErrorKind.EMPTY_TEXT_FIELD,
            f"expected text, got {describe(first)}",
            first,
        )

    last = stream.advance()
    while not stops_text(stream.peek()):
        last = stream.advance()
    return Text(stream.slice_source(first, last))
