"""Tokenizer for policy source text.

Longest match wins; on a tie the earlier rule wins (operators, then
numbers, identifiers, paths, strings).  Whitespace, newlines and ``#``
comments are skipped, but every token keeps its source offsets so text
fields can later be sliced out of the source verbatim.  Characters no rule
accepts become single ANY tokens; the parser decides whether they are
legal where they appear (inside free text they are).
"""

import re

from policy.nodes import SEVERITY_WORDS
from policy.tokens import KEYWORDS, OPERATORS, Token, TokenKind

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")
_ID = re.compile(r"[A-Za-z_][A-Za-z0-9_.\-]*(?:\[\d+\])?")
_PATH = re.compile(r"[A-Za-z0-9_./*~\-+%@$]+")
_STRING = re.compile(r"\"(?:[^\"\\\n]|\\.)*\"|'(?:[^'\\\n]|\\.)*'")
_SKIP = re.compile(r"(?:[ \t\r\n\f]+|#[^\n]*)+")

# Tried in order; a later rule must be strictly longer to win.
_CLASSES = (
    (_NUMBER, TokenKind.NUMBER),
    (_ID, TokenKind.ID),
    (_PATH, TokenKind.PATH),
    (_STRING, TokenKind.STRING),
)


def tokenize(source: str) -> list[Token]:
    """Split *source* into tokens.  The result always ends with one EOF."""
    tokens = []
    pos = 0
    line = 1
    line_start = 0
    size = len(source)

    while True:
        skipped = _SKIP.match(source, pos)
        if skipped:
            newlines = skipped.group().count("\n")
            if newlines:
                line += newlines
                line_start = source.rfind("\n", pos, skipped.end()) + 1
            pos = skipped.end()
        if pos >= size:
            break

        kind, end = _longest_match(source, pos)
        text = source[pos:end]
        if kind == TokenKind.ID:
            kind = _classify_word(text)
        tokens.append(Token(kind, text, line, pos - line_start + 1, pos, end))
        pos = end

    tokens.append(Token(TokenKind.EOF, "", line, pos - line_start + 1, pos, pos))
    return tokens


def _longest_match(source: str, pos: int) -> tuple[TokenKind, int]:
    best_kind, best_end = TokenKind.ANY, pos + 1

    for literal, kind in OPERATORS:
        if source.startswith(literal, pos):
            best_kind, best_end = kind, pos + len(literal)
            break
    else:
        best_end = pos  # nothing matched yet; ANY is the fallback

    for pattern, kind in _CLASSES:
        m = pattern.match(source, pos)
        if m and m.end() > best_end:
            best_kind, best_end = kind, m.end()

    if best_end == pos:
        return TokenKind.ANY, pos + 1
    return best_kind, best_end


def _classify_word(text: str) -> TokenKind:
    kind = KEYWORDS.get(text)
    if kind is not None:
        return kind
    if text.lower() in SEVERITY_WORDS:
        return TokenKind.SEVERITY
    return TokenKind.ID
