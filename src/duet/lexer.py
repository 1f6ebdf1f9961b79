"""Lexer for duet module files.

Produces a token stream from source text. Whitespace and comments are
skipped between tokens. Package names are lexed only where the grammar
expects one, since they share characters with identifiers and dots.

Lexical failures do not raise here: an ERROR token is emitted and lexing
stops. The parser raises ``LexError`` when it reaches that token, so the
failure that comes first in the source is the one reported.
"""

from __future__ import annotations

from duet.source import Span
from duet.tokens import KEYWORDS, Token, TokenKind

_PUNCTUATION: dict[str, TokenKind] = {
    ':': TokenKind.COLON,
    ',': TokenKind.COMMA,
    '.': TokenKind.DOT,
    '|': TokenKind.PIPE,
    '=': TokenKind.ASSIGN,
    '<': TokenKind.LANGLE,
    '>': TokenKind.RANGLE,
    '{': TokenKind.LBRACE,
    '}': TokenKind.RBRACE,
    '[': TokenKind.LBRACKET,
    ']': TokenKind.RBRACKET,
}

_ESCAPES: dict[str, str] = {
    'n': '\n', 'r': '\r', 't': '\t', '0': '\0',
    'a': '\a', 'b': '\b', 'f': '\f', 'v': '\v',
    '\\': '\\', '"': '"', "'": "'",
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

# Export header keywords whose ':' is followed by a package name.
_HEADER_KEYWORDS = frozenset({TokenKind.SCALA, TokenKind.PURS})


class Lexer:
    """Tokenizes duet source code."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens: list[Token] = []
        self._failed = False

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        while not self._failed:
            self._skip_trivia()
            if self._failed or self.pos >= len(self.source):
                break
            ch = self.source[self.pos]
            if self._expects_package_name():
                self._lex_package_name()
            elif ch == '"':
                self._lex_string()
            elif ch.isalpha():
                self._lex_word()
            elif ch in _PUNCTUATION:
                start_line, start_col = self.line, self.col
                self._advance()
                self._emit(_PUNCTUATION[ch], ch, start_line, start_col)
            else:
                self._error(f"unexpected character {ch!r}", self.line, self.col)

        self._emit(TokenKind.EOF, "", self.line, self.col)
        return self.tokens

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _emit(self, kind: TokenKind, value: str, start_line: int, start_col: int) -> Token:
        end_col = self.col - 1 if self.col > 1 else 1
        span = Span(self.filename, start_line, start_col, self.line, end_col)
        tok = Token(kind, value, span)
        self.tokens.append(tok)
        return tok

    def _error(self, message: str, line: int, col: int) -> None:
        span = Span(self.filename, line, col, line, col)
        self.tokens.append(Token(TokenKind.ERROR, message, span))
        self._failed = True

    @property
    def _prev_kind(self) -> TokenKind | None:
        return self.tokens[-1].kind if self.tokens else None

    # ── Whitespace and comments ──────────────────────────────────

    def _skip_trivia(self) -> None:
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch.isspace():
                self._advance()
            elif ch == '/' and self._peek(1) == '/':
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self._advance()
            elif ch == '/' and self._peek(1) == '*':
                self._skip_block_comment()
                if self._failed:
                    return
            else:
                return

    def _skip_block_comment(self) -> None:
        """Skip a ``/* ... */`` comment. Block comments nest."""
        start_line, start_col = self.line, self.col
        self._advance()
        self._advance()
        depth = 1
        while self.pos < len(self.source):
            if self.source[self.pos] == '/' and self._peek(1) == '*':
                self._advance()
                self._advance()
                depth += 1
            elif self.source[self.pos] == '*' and self._peek(1) == '/':
                self._advance()
                self._advance()
                depth -= 1
                if depth == 0:
                    return
            else:
                self._advance()
        self._error("unterminated block comment", start_line, start_col)

    # ── Package names ────────────────────────────────────────────

    def _expects_package_name(self) -> bool:
        """True right after ``import`` or after ``scala :`` / ``purs :``."""
        prev = self._prev_kind
        if prev == TokenKind.IMPORT:
            return True
        return (
            prev == TokenKind.COLON
            and len(self.tokens) >= 2
            and self.tokens[-2].kind in _HEADER_KEYWORDS
        )

    def _lex_package_name(self) -> None:
        start_line, start_col = self.line, self.col
        text = []
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if not (ch.isalnum() or ch == '.'):
                break
            text.append(self._advance())
        name = ''.join(text)
        if not name:
            self._error("expected package name", start_line, start_col)
            return
        if any(not segment for segment in name.split('.')):
            self._error(f"malformed package name {name!r}", start_line, start_col)
            return
        self._emit(TokenKind.PACKAGE_NAME, name, start_line, start_col)

    # ── Strings ──────────────────────────────────────────────────

    def _lex_string(self) -> None:
        start_line, start_col = self.line, self.col
        self._advance()  # skip opening "
        text = []
        while self.pos < len(self.source) and self.source[self.pos] not in ('"', '\n'):
            if self.source[self.pos] == '\\':
                ch = self._lex_escape_sequence()
                if ch is None:
                    return
                text.append(ch)
            else:
                text.append(self._advance())

        if self.pos >= len(self.source) or self.source[self.pos] == '\n':
            self._error("unterminated string literal", start_line, start_col)
            return

        self._advance()  # skip closing "
        self._emit(TokenKind.STRING_LIT, ''.join(text), start_line, start_col)

    def _lex_escape_sequence(self) -> str | None:
        esc_line, esc_col = self.line, self.col
        self._advance()  # skip backslash
        if self.pos >= len(self.source):
            self._error("unexpected end of escape sequence", esc_line, esc_col)
            return None
        ch = self._advance()
        if ch in _ESCAPES:
            return _ESCAPES[ch]
        if ch in ('x', 'u'):
            width = 2 if ch == 'x' else 4
            digits = self.source[self.pos:self.pos + width]
            if len(digits) != width or not all(d in _HEX_DIGITS for d in digits):
                self._error(
                    f"expected {width} hex digits after \\{ch}", esc_line, esc_col,
                )
                return None
            for _ in range(width):
                self._advance()
            return chr(int(digits, 16))
        self._error(f"unknown escape sequence: \\{ch}", esc_line, esc_col)
        return None

    # ── Identifiers and keywords ─────────────────────────────────

    def _lex_word(self) -> None:
        start_line, start_col = self.line, self.col
        first = self.source[self.pos]
        if not (first.islower() or first.isupper()):
            self._error(
                f"identifier must start with a cased letter, got {first!r}",
                start_line, start_col,
            )
            return
        text = []
        while self.pos < len(self.source) and self.source[self.pos].isalnum():
            text.append(self._advance())
        word = ''.join(text)

        if word in KEYWORDS:
            self._emit(KEYWORDS[word], word, start_line, start_col)
        elif first.isupper():
            self._emit(TokenKind.TYPE_IDENTIFIER, word, start_line, start_col)
        else:
            self._emit(TokenKind.IDENTIFIER, word, start_line, start_col)
