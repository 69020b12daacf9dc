"""Render AST nodes back to policy syntax.

format_expression() output re-parses to a structurally equal expression
for anything the parser produced: operand order is kept, and parentheses
are only added where the parser itself would have needed a group.
"""

from policy.nodes import (
    And,
    BinaryTest,
    Declaration,
    Expression,
    FilterDecl,
    Grouped,
    Items,
    ListDecl,
    MacroDecl,
    Not,
    Operand,
    Or,
    RuleDecl,
    SetTest,
    UnaryTest,
    VariableRef,
)


def format_items(items) -> str:
    return "[" + ", ".join(lit.text for lit in items) + "]"


def _format_operand(operand: Operand) -> str:
    if isinstance(operand, Items):
        return format_items(operand.elements)
    return operand.text


def format_expression(expr: Expression) -> str:
    if isinstance(expr, Or):
        return " or ".join(_wrap(c, (Or,)) for c in expr.children)
    if isinstance(expr, And):
        return " and ".join(_wrap(c, (Or, And)) for c in expr.children)
    if isinstance(expr, Not):
        return "not " + _wrap(expr.inner, (Or, And))
    if isinstance(expr, Grouped):
        return "(" + format_expression(expr.inner) + ")"
    if isinstance(expr, VariableRef):
        return expr.name
    if isinstance(expr, UnaryTest):
        return f"{expr.operand.text} {expr.op.value}"
    if isinstance(expr, BinaryTest):
        return f"{expr.left.text} {expr.op.value} {expr.right.text}"
    if isinstance(expr, SetTest):
        candidates = ", ".join(_format_operand(c) for c in expr.candidates)
        return f"{expr.operand.text} {expr.op.value} ({candidates})"
    raise TypeError(f"not an expression node: {expr!r}")


def _wrap(expr: Expression, needs_parens: tuple) -> str:
    text = format_expression(expr)
    if isinstance(expr, needs_parens):
        return "(" + text + ")"
    return text


def format_declaration(decl: Declaration) -> str:
    """Canonical multi-line form of one declaration."""
    if isinstance(decl, RuleDecl):
        lines = [
            f"- rule: {decl.name.normalized}",
            f"  desc: {decl.description.normalized}",
            f"  condition: {format_expression(decl.condition)}",
            f"  {decl.effect.kind.value}: {decl.effect.text.normalized}",
            f"  priority: {decl.priority.value}",
        ]
        if decl.tags:
            lines.append(f"  tags: {format_items(decl.tags)}")
        return "\n".join(lines)
    if isinstance(decl, (FilterDecl, MacroDecl)):
        keyword = "filter" if isinstance(decl, FilterDecl) else "macro"
        return (
            f"- {keyword}: {decl.id}\n"
            f"  condition: {format_expression(decl.condition)}"
        )
    if isinstance(decl, ListDecl):
        return f"- list: {decl.id}\n  items: {format_items(decl.items)}"
    raise TypeError(f"not a declaration node: {decl!r}")


def format_policy(document) -> str:
    return "\n\n".join(format_declaration(d) for d in document) + "\n"


def flatten(expr: Expression) -> Expression:
    """Drop explicit groups and merge nested or/and chains of the same kind."""
    if isinstance(expr, Grouped):
        return flatten(expr.inner)
    if isinstance(expr, Not):
        return Not(flatten(expr.inner))
    if isinstance(expr, (Or, And)):
        kind = type(expr)
        children = []
        for child in expr.children:
            child = flatten(child)
            if isinstance(child, kind):
                children.extend(child.children)
            else:
                children.append(child)
        return children[0] if len(children) == 1 else kind(tuple(children))
    return expr
