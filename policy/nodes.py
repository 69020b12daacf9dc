"""AST for policy documents.

Every node is a frozen dataclass.  Source positions are carried for
diagnostics but excluded from equality, so two parses of equivalent text
compare equal regardless of layout.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

# ---------------------------------------------------------------------------
# Severity and priority
# ---------------------------------------------------------------------------


class Priority(Enum):
    """Coarse priority bucket used by the detection engine."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SeverityLevel(Enum):
    EMERGENCY = "emergency"
    ALERT = "alert"
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    NOTICE = "notice"
    INFORMATIONAL = "informational"
    INFO = "info"
    DEBUG = "debug"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_text(cls, text: str) -> "SeverityLevel":
        return cls(text.lower())

    @property
    def priority(self) -> Priority:
        return _PRIORITY_OF[self]


# Falco-style levels collapse onto three engine priorities.
_PRIORITY_OF = {
    SeverityLevel.EMERGENCY: Priority.HIGH,
    SeverityLevel.ALERT: Priority.HIGH,
    SeverityLevel.CRITICAL: Priority.HIGH,
    SeverityLevel.ERROR: Priority.HIGH,
    SeverityLevel.WARNING: Priority.MEDIUM,
    SeverityLevel.NOTICE: Priority.LOW,
    SeverityLevel.INFORMATIONAL: Priority.LOW,
    SeverityLevel.INFO: Priority.LOW,
    SeverityLevel.DEBUG: Priority.LOW,
    SeverityLevel.HIGH: Priority.HIGH,
    SeverityLevel.MEDIUM: Priority.MEDIUM,
    SeverityLevel.LOW: Priority.LOW,
}

SEVERITY_WORDS = frozenset(level.value for level in SeverityLevel)

# ---------------------------------------------------------------------------
# Literals and text
# ---------------------------------------------------------------------------


class LiteralKind(Enum):
    IDENTIFIER = "identifier"
    NUMBER = "number"
    PATH = "path"
    STRING = "string"


@dataclass(frozen=True)
class Literal:
    kind: LiteralKind
    text: str
    line: int = field(default=0, compare=False, repr=False)
    column: int = field(default=0, compare=False, repr=False)

    @property
    def value(self) -> str:
        """The literal's text with bounding quotes removed."""
        if self.kind == LiteralKind.STRING and len(self.text) >= 2:
            return self.text[1:-1]
        return self.text


@dataclass(frozen=True)
class Items:
    """A bracketed literal list used inline as a set-test candidate."""

    elements: tuple[Literal, ...]


Operand = Union[Literal, Items]

_WS = re.compile(r"\s+")


@dataclass(frozen=True)
class Text:
    """Raw source text of a free-form field, whitespace preserved."""

    raw: str

    @property
    def normalized(self) -> str:
        return _WS.sub(" ", self.raw).strip()

    def __str__(self) -> str:
        return self.raw


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


class BinaryOp(Enum):
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "="
    NEQ = "!="
    CONTAINS = "contains"
    ICONTAINS = "icontains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"


class UnaryOp(Enum):
    EXISTS = "exists"


class SetOp(Enum):
    IN = "in"
    PMATCH = "pmatch"


@dataclass(frozen=True)
class Or:
    children: tuple["Expression", ...]


@dataclass(frozen=True)
class And:
    children: tuple["Expression", ...]


@dataclass(frozen=True)
class Not:
    inner: "Expression"


@dataclass(frozen=True)
class VariableRef:
    """Reference to a macro, list or boolean field; resolved later."""

    name: str
    line: int = field(default=0, compare=False, repr=False)
    column: int = field(default=0, compare=False, repr=False)


@dataclass(frozen=True)
class UnaryTest:
    operand: Literal
    op: UnaryOp


@dataclass(frozen=True)
class BinaryTest:
    left: Literal
    op: BinaryOp
    right: Literal


@dataclass(frozen=True)
class SetTest:
    operand: Literal
    op: SetOp
    candidates: tuple[Operand, ...]


@dataclass(frozen=True)
class Grouped:
    inner: "Expression"


Expression = Union[Or, And, Not, VariableRef, UnaryTest, BinaryTest, SetTest, Grouped]

# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class EffectKind(Enum):
    ACTION = "action"
    OUTPUT = "output"


@dataclass(frozen=True)
class Effect:
    kind: EffectKind
    text: Text


@dataclass(frozen=True)
class RuleDecl:
    name: Text
    description: Text
    condition: Expression
    effect: Effect
    priority: SeverityLevel
    tags: tuple[Literal, ...] = ()
    line: int = field(default=0, compare=False, repr=False)


@dataclass(frozen=True)
class FilterDecl:
    id: str
    condition: Expression
    line: int = field(default=0, compare=False, repr=False)


@dataclass(frozen=True)
class MacroDecl:
    id: str
    condition: Expression
    line: int = field(default=0, compare=False, repr=False)


@dataclass(frozen=True)
class ListDecl:
    id: str
    items: tuple[Literal, ...]
    line: int = field(default=0, compare=False, repr=False)


Declaration = Union[RuleDecl, FilterDecl, MacroDecl, ListDecl]


@dataclass(frozen=True)
class PolicyDocument:
    declarations: tuple[Declaration, ...] = ()

    def __len__(self) -> int:
        return len(self.declarations)

    def __iter__(self):
        return iter(self.declarations)

    @property
    def rules(self) -> list[RuleDecl]:
        return [d for d in self.declarations if isinstance(d, RuleDecl)]

    @property
    def filters(self) -> list[FilterDecl]:
        return [d for d in self.declarations if isinstance(d, FilterDecl)]

    @property
    def macros(self) -> list[MacroDecl]:
        return [d for d in self.declarations if isinstance(d, MacroDecl)]

    @property
    def lists(self) -> list[ListDecl]:
        return [d for d in self.declarations if isinstance(d, ListDecl)]
