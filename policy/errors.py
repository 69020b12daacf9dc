"""Syntax errors reported by the policy parser.

Sub-parsers raise PolicySyntaxError; the top-level driver catches it per
declaration, records it, and carries on with the next declaration.
"""

from enum import Enum

from policy.tokens import Token, TokenKind


class ErrorKind(Enum):
    EXPECTED_TOKEN = "ExpectedToken"
    EMPTY_TEXT_FIELD = "EmptyTextField"
    UNBALANCED_GROUP = "UnbalancedGroup"
    MISSING_OPERAND = "MissingOperand"
    UNTERMINATED_OPERAND_LIST = "UnterminatedOperandList"
    TRAILING_SEPARATOR = "TrailingSeparator"
    UNKNOWN_DECLARATION_KEYWORD = "UnknownDeclarationKeyword"
    EMPTY_DOCUMENT = "EmptyDocument"


class PolicySyntaxError(Exception):
    """A syntax error at a given source position.

    Attributes:
        kind: which ErrorKind this is.
        message: human-readable description, without the position.
        line: 1-based line number.
        column: 1-based column number.
    """

    def __init__(self, kind: ErrorKind, message: str, line: int, column: int):
        super().__init__(f"line {line}, column {column}: {message}")
        self.kind = kind
        self.message = message
        self.line = line
        self.column = column

    @classmethod
    def at(cls, kind: ErrorKind, message: str, token: Token) -> "PolicySyntaxError":
        return cls(kind, message, token.line, token.column)

    def __repr__(self) -> str:
        return f"PolicySyntaxError({self.kind.value}, {str(self)!r})"


def describe(token: Token) -> str:
    """Render a token for use in an error message."""
    if token.kind == TokenKind.EOF:
        return "end of input"
    return repr(token.text)
