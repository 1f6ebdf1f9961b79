"""Tests for the duet lexer."""

from __future__ import annotations

import pytest

from duet.lexer import Lexer
from duet.tokens import KEYWORDS, TokenKind


def lex(source: str) -> list[tuple[TokenKind, str]]:
    """Helper: lex source and return (kind, value) pairs, excluding EOF."""
    tokens = Lexer(source).lex()
    return [(t.kind, t.value) for t in tokens if t.kind != TokenKind.EOF]


def kinds(source: str) -> list[TokenKind]:
    """Helper: lex source and return just the token kinds, excluding EOF."""
    tokens = Lexer(source).lex()
    return [t.kind for t in tokens if t.kind != TokenKind.EOF]


def error_of(source: str):
    """Helper: lex source and return its ERROR token."""
    tokens = Lexer(source).lex()
    errors = [t for t in tokens if t.kind == TokenKind.ERROR]
    assert len(errors) == 1, tokens
    return errors[0]


class TestLexerBasic:
    def test_empty_source(self):
        tokens = Lexer("").lex()
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.EOF

    def test_whitespace_only(self):
        assert kinds("  \n\t\r\n ") == []

    def test_lowercase_identifier(self):
        assert lex("fieldName2") == [(TokenKind.IDENTIFIER, "fieldName2")]

    def test_uppercase_identifier(self):
        assert lex("OrderItem") == [(TokenKind.TYPE_IDENTIFIER, "OrderItem")]

    def test_single_uppercase_letter(self):
        assert lex("T") == [(TokenKind.TYPE_IDENTIFIER, "T")]

    def test_keywords(self):
        for word, kind in KEYWORDS.items():
            assert lex(word) == [(kind, word)], word

    def test_keyword_prefix_is_identifier(self):
        assert lex("types") == [(TokenKind.IDENTIFIER, "types")]
        assert lex("Integer") == [(TokenKind.TYPE_IDENTIFIER, "Integer")]
        assert lex("Maybes") == [(TokenKind.TYPE_IDENTIFIER, "Maybes")]

    def test_underscore_is_not_an_identifier_character(self):
        tok = error_of("created_at")
        assert "unexpected character" in tok.value
        assert tok.span.start_col == 8

    def test_punctuation(self):
        assert kinds(": , . | = < > { } [ ]") == [
            TokenKind.COLON, TokenKind.COMMA, TokenKind.DOT, TokenKind.PIPE,
            TokenKind.ASSIGN, TokenKind.LANGLE, TokenKind.RANGLE,
            TokenKind.LBRACE, TokenKind.RBRACE,
            TokenKind.LBRACKET, TokenKind.RBRACKET,
        ]

    def test_dotted_type_reference(self):
        assert kinds("Other.Thing") == [
            TokenKind.TYPE_IDENTIFIER, TokenKind.DOT, TokenKind.TYPE_IDENTIFIER,
        ]

    def test_generic_type(self):
        assert kinds("Array<Maybe<Foo>>") == [
            TokenKind.ARRAY, TokenKind.LANGLE, TokenKind.MAYBE, TokenKind.LANGLE,
            TokenKind.TYPE_IDENTIFIER, TokenKind.RANGLE, TokenKind.RANGLE,
        ]

    def test_unexpected_character(self):
        tok = error_of("type Foo : ;")
        assert tok.value == "unexpected character ';'"
        assert (tok.span.start_line, tok.span.start_col) == (1, 12)

    def test_digit_outside_package_name(self):
        tok = error_of("{ x: 1 }")
        assert "unexpected character '1'" in tok.value

    def test_lexing_stops_at_first_error(self):
        tokens = Lexer("a ; b ; c").lex()
        assert [t.kind for t in tokens] == [
            TokenKind.IDENTIFIER, TokenKind.ERROR, TokenKind.EOF,
        ]


class TestLexerPackageNames:
    def test_after_import(self):
        assert lex("import com.example.Common") == [
            (TokenKind.IMPORT, "import"),
            (TokenKind.PACKAGE_NAME, "com.example.Common"),
        ]

    def test_after_export_header(self):
        assert lex("scala: a.b.c\npurs: X.y2") == [
            (TokenKind.SCALA, "scala"),
            (TokenKind.COLON, ":"),
            (TokenKind.PACKAGE_NAME, "a.b.c"),
            (TokenKind.PURS, "purs"),
            (TokenKind.COLON, ":"),
            (TokenKind.PACKAGE_NAME, "X.y2"),
        ]

    def test_whitespace_and_comments_before_package_name(self):
        assert lex("scala /* c */ :\n  // line\n  a.b") == [
            (TokenKind.SCALA, "scala"),
            (TokenKind.COLON, ":"),
            (TokenKind.PACKAGE_NAME, "a.b"),
        ]

    def test_package_name_may_start_with_digit(self):
        assert lex("import 2fa.codes") == [
            (TokenKind.IMPORT, "import"),
            (TokenKind.PACKAGE_NAME, "2fa.codes"),
        ]

    def test_package_name_may_be_reserved_word(self):
        assert lex("import type") == [
            (TokenKind.IMPORT, "import"),
            (TokenKind.PACKAGE_NAME, "type"),
        ]

    def test_not_a_package_name_elsewhere(self):
        assert kinds("x: a.b") == [
            TokenKind.IDENTIFIER, TokenKind.COLON,
            TokenKind.IDENTIFIER, TokenKind.DOT, TokenKind.IDENTIFIER,
        ]

    @pytest.mark.parametrize("name", [".a", "a.", "a..b"])
    def test_malformed_package_name(self, name):
        tok = error_of(f"import {name}")
        assert "malformed package name" in tok.value
        assert tok.span.start_col == 8

    def test_missing_package_name(self):
        tok = error_of("import {")
        assert tok.value == "expected package name"


class TestLexerStrings:
    def test_simple_string(self):
        assert lex('"hello world"') == [(TokenKind.STRING_LIT, "hello world")]

    def test_empty_string(self):
        assert lex('""') == [(TokenKind.STRING_LIT, "")]

    def test_escape_sequences(self):
        result = lex(r'"a\nb\t\"q\"\\ \x41é\0"')
        assert result == [(TokenKind.STRING_LIT, 'a\nb\t"q"\\ Aé\0')]

    def test_single_quote_escape(self):
        assert lex(r'"it\'s"') == [(TokenKind.STRING_LIT, "it's")]

    def test_unknown_escape(self):
        tok = error_of(r'"bad \q"')
        assert tok.value == "unknown escape sequence: \\q"
        assert tok.span.start_col == 6

    def test_short_hex_escape(self):
        tok = error_of(r'"\x4"')
        assert "expected 2 hex digits" in tok.value

    def test_unterminated_string(self):
        tok = error_of('"never closed')
        assert tok.value == "unterminated string literal"
        assert tok.span.start_col == 1

    def test_newline_in_string(self):
        tok = error_of('"line one\nline two"')
        assert tok.value == "unterminated string literal"

    def test_string_span(self):
        tokens = Lexer('  "abc"').lex()
        span = tokens[0].span
        assert (span.start_col, span.end_col) == (3, 7)


class TestLexerComments:
    def test_line_comment(self):
        assert kinds("// whole line\ntype") == [TokenKind.TYPE]

    def test_trailing_line_comment(self):
        assert kinds("type // trailing") == [TokenKind.TYPE]

    def test_block_comment(self):
        assert kinds("type /* inline */ wrap") == [TokenKind.TYPE, TokenKind.WRAP]

    def test_nested_block_comment(self):
        assert kinds("/* outer /* inner */ still outer */ wrap") == [TokenKind.WRAP]

    def test_unterminated_block_comment(self):
        tok = error_of("type /* never closed")
        assert tok.value == "unterminated block comment"
        assert tok.span.start_col == 6

    def test_single_slash_is_unexpected(self):
        tok = error_of("type / x")
        assert tok.value == "unexpected character '/'"


class TestLexerPositions:
    def test_line_and_column(self):
        tokens = Lexer("type Foo :\n  { x: Bar }", "m.duet").lex()
        bar = next(t for t in tokens if t.value == "Bar")
        assert bar.span.file == "m.duet"
        assert (bar.span.start_line, bar.span.start_col) == (2, 8)
        assert bar.span.end_col == 10

    def test_eof_position(self):
        tokens = Lexer("type\n").lex()
        assert tokens[-1].kind == TokenKind.EOF
        assert tokens[-1].span.start_line == 2
