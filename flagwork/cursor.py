"""
Token cursor: a mutable view over the argument list.

The cursor starts before the first token; advance() moves onto the next one and
reports whether it did. skip_current() steps over the token after the current
one, which is how a flag consumes its value. splice_at() is the only rewrite
used during a scan (POSIX normalization replaces one packed token with the
tokens it expands to); replace_all() swaps the whole stream in place.
"""


class TokenCursor:
    __slots__ = ("_tokens", "_position")

    def __init__(self, tokens=(), /):
        if isinstance(tokens, str):
            raise TypeError("token-cursor tokens must be an iterable of strings, not a string")
        self._tokens = list(tokens)
        if not all(isinstance(token, str) for token in self._tokens):
            raise TypeError("token-cursor tokens must be strings")
        self._position = -1

    def __len__(self):
        return len(self._tokens)

    def __repr__(self):
        return f"token-cursor(position={self._position!r}, tokens={self._tokens!r})"

    @property
    def position(self):
        return self._position

    @property
    def tokens(self):
        return tuple(self._tokens)

    def current(self):
        """the token under the cursor (IndexError before the first advance)."""
        if not 0 <= self._position < len(self._tokens):
            raise IndexError("token-cursor is not positioned on a token")
        return self._tokens[self._position]

    def peek(self):
        """the token after the current one, or None at the end of input."""
        if self._position + 1 < len(self._tokens):
            return self._tokens[self._position + 1]
        return None

    def advance(self):
        """move onto the next token; False (and no move) at the end of input."""
        if self._position + 1 < len(self._tokens):
            self._position += 1
            return True
        return False

    def skip_current(self):
        """step over the next token so the following advance() lands after it."""
        if self._position + 1 >= len(self._tokens):
            raise IndexError("token-cursor has no token to skip")
        self._position += 1

    def splice_at(self, position, tokens, /):
        """replace the token at position with the given tokens."""
        if not 0 <= position < len(self._tokens):
            raise IndexError("token-cursor splice position out of range")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("token-cursor tokens must be strings")
        self._tokens[position:position + 1] = tokens

    def replace_all(self, tokens, /):
        """swap the whole stream, keeping the position (clamped to the new length)."""
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("token-cursor tokens must be strings")
        self._tokens = tokens
        self._position = min(self._position, len(tokens) - 1)


__all__ = (
    "TokenCursor",
)
