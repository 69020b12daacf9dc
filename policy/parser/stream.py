"""Cursor over a token list with lookahead."""

from policy.errors import ErrorKind, PolicySyntaxError, describe
from policy.tokens import Token, TokenKind


class TokenStream:
    __slots__ = ("source", "_tokens", "_pos")

    def __init__(self, tokens: list[Token], source: str = ""):
        if not tokens or tokens[-1].kind != TokenKind.EOF:
            raise ValueError("token list must end with an EOF token")
        self.source = source
        self._tokens = tokens
        self._pos = 0

    # ------------------------------------------------------------------
    # Lookahead
    # ------------------------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        """Token *offset* positions ahead; EOF once past the end."""
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def check(self, *kinds: TokenKind) -> bool:
        return self.peek().kind in kinds

    def at_end(self) -> bool:
        return self.peek().kind == TokenKind.EOF

    # ------------------------------------------------------------------
    # Consumption
    # ------------------------------------------------------------------

    def advance(self) -> Token:
        """Consume and return the current token.  EOF is never stepped over."""
        tok = self._tokens[self._pos]
        if tok.kind != TokenKind.EOF:
            self._pos += 1
        return tok

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.check(*kinds):
            return self.advance()
        return None

    def expect(self, kind: TokenKind, what: str | None = None) -> Token:
        tok = self.peek()
        if tok.kind != kind:
            expected = what or repr(kind.value)
            raise PolicySyntaxError.at(
                ErrorKind.EXPECTED_TOKEN,
                f"expected {expected}, got {describe(tok)}",
                tok,
            )
        return self.advance()

    # ------------------------------------------------------------------
    # Positioning (used by error recovery)
    # ------------------------------------------------------------------

    @property
    def position(self) -> int:
        return self._pos

    def reset(self, position: int) -> None:
        self._pos = max(0, min(position, len(self._tokens) - 1))

    def slice_source(self, first: Token, last: Token) -> str:
        """Source text from the start of *first* to the end of *last*."""
        if self.source:
            return self.source[first.start:last.end]
        # No source kept: rebuild from the token texts, one space per gap.
        i = self._tokens.index(first)
        j = self._tokens.index(last)
        parts = [first.text]
        for prev, tok in zip(self._tokens[i:j], self._tokens[i + 1:j + 1]):
            if tok.start > prev.end:
                parts.append(" ")
            parts.append(tok.text)
        return "".join(parts)
