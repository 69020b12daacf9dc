"""Token kinds and reserved words of the policy language.

Keyword and operator tables are built once at import time and never
mutated, so they can be shared freely between parser instances.
"""

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    # Declaration keywords
    RULE = "rule"
    FILTER = "filter"
    MACRO = "macro"
    LIST = "list"

    # Field keywords
    NAME = "name"
    ITEMS = "items"
    COND = "condition"
    DESC = "desc"
    ACTION = "action"
    OUTPUT = "output"
    PRIORITY = "priority"
    TAGS = "tags"

    # Logical operators
    AND = "and"
    OR = "or"
    NOT = "not"

    # Comparison / membership operators
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "="
    NEQ = "!="
    IN = "in"
    CONTAINS = "contains"
    ICONTAINS = "icontains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"
    PMATCH = "pmatch"
    EXISTS = "exists"

    # Punctuation
    LBRACK = "["
    RBRACK = "]"
    LPAREN = "("
    RPAREN = ")"
    LISTSEP = ","
    DECL = "-"
    DEF = ":"

    # Classified values
    SEVERITY = "severity"
    ID = "identifier"
    NUMBER = "number"
    PATH = "path"
    STRING = "string"
    ANY = "character"
    EOF = "end of input"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int
    start: int  # offset of the first character in the source
    end: int  # offset one past the last character

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r}, {self.line}:{self.column})"


# ---------------------------------------------------------------------------
# Reserved words
# ---------------------------------------------------------------------------
KEYWORDS: dict[str, TokenKind] = {
    kind.value: kind
    for kind in (
        TokenKind.RULE, TokenKind.FILTER, TokenKind.MACRO, TokenKind.LIST,
        TokenKind.NAME, TokenKind.ITEMS, TokenKind.COND, TokenKind.DESC,
        TokenKind.ACTION, TokenKind.OUTPUT, TokenKind.PRIORITY, TokenKind.TAGS,
        TokenKind.AND, TokenKind.OR, TokenKind.NOT,
        TokenKind.IN, TokenKind.CONTAINS, TokenKind.ICONTAINS,
        TokenKind.STARTSWITH, TokenKind.ENDSWITH, TokenKind.PMATCH,
        TokenKind.EXISTS,
    )
}

# Longest first, so "<=" wins over "<".
OPERATORS: tuple[tuple[str, TokenKind], ...] = (
    ("<=", TokenKind.LE),
    (">=", TokenKind.GE),
    ("!=", TokenKind.NEQ),
    ("<", TokenKind.LT),
    (">", TokenKind.GT),
    ("=", TokenKind.EQ),
    ("[", TokenKind.LBRACK),
    ("]", TokenKind.RBRACK),
    ("(", TokenKind.LPAREN),
    (")", TokenKind.RPAREN),
    (",", TokenKind.LISTSEP),
    ("-", TokenKind.DECL),
    (":", TokenKind.DEF),
)

# A text field runs until one of these words (compared by token text).
FIELD_KEYWORDS = frozenset({"desc", "condition", "action", "output", "priority", "tags"})

DECLARATION_KINDS = frozenset({
    TokenKind.RULE, TokenKind.FILTER, TokenKind.MACRO, TokenKind.LIST,
})

UNARY_OPERATORS = frozenset({TokenKind.EXISTS})

BINARY_OPERATORS = frozenset({
    TokenKind.LT, TokenKind.LE, TokenKind.GT, TokenKind.GE,
    TokenKind.EQ, TokenKind.NEQ,
    TokenKind.CONTAINS, TokenKind.ICONTAINS,
    TokenKind.STARTSWITH, TokenKind.ENDSWITH,
})

SET_OPERATORS = frozenset({TokenKind.IN, TokenKind.PMATCH})

ALL_OPERATORS = UNARY_OPERATORS | BINARY_OPERATORS | SET_OPERATORS

# Tokens usable as a literal value.  "<" and ">" are both operators and
# values; which one they are depends on where the parser meets them.
ATOM_KINDS = frozenset({
    TokenKind.ID, TokenKind.NUMBER, TokenKind.PATH, TokenKind.STRING,
    TokenKind.LT, TokenKind.GT, TokenKind.SEVERITY,
})
