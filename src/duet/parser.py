"""Parser for duet module files.

Recursive descent over the lexer's token stream. Every alternation is
decided by the kind of the current token, so no production backtracks
and the first error reached is also the deepest one. Parsing stops at
that error; there is no recovery.
"""

from __future__ import annotations

import logging

from duet.ast_nodes import (
    AliasType,
    Annotation,
    AnnotationParam,
    ArrayType,
    Exports,
    Module,
    OptionType,
    PrimitiveKind,
    PrimitiveType,
    RecordProp,
    RecordType,
    RefType,
    SumType,
    TopType,
    Type,
    TypeDecl,
    TypeReference,
    WrapType,
)
from duet.errors import IncompleteParseError, LexError, UnexpectedTokenError
from duet.lexer import Lexer
from duet.source import KNOWN_EXTENSIONS, Source, logical_name
from duet.tokens import KEYWORDS, PRIMITIVE_KEYWORDS, Token, TokenKind, describe

logger = logging.getLogger(__name__)

_PRIMITIVES: dict[TokenKind, PrimitiveKind] = {
    TokenKind.BOOLEAN: PrimitiveKind.BOOLEAN,
    TokenKind.INT: PrimitiveKind.INT,
    TokenKind.DECIMAL: PrimitiveKind.DECIMAL,
    TokenKind.STRING: PrimitiveKind.STRING,
}

_RESERVED = frozenset(KEYWORDS.values())

# Tokens that can start a type expression.
_TYPE_START = PRIMITIVE_KEYWORDS | {
    TokenKind.ARRAY, TokenKind.MAYBE, TokenKind.TYPE_IDENTIFIER,
}


def _token_text(tok: Token) -> str:
    if tok.kind == TokenKind.EOF:
        return "end of input"
    if tok.kind in (TokenKind.IDENTIFIER, TokenKind.TYPE_IDENTIFIER,
                    TokenKind.PACKAGE_NAME, TokenKind.STRING_LIT):
        return f"{describe(tok.kind)} {tok.value!r}"
    return describe(tok.kind)


class Parser:
    """Parses a list of tokens into a duet Module."""

    def __init__(self, tokens: list[Token], filename: str = "<stdin>") -> None:
        self.tokens = tokens
        self.pos = 0
        self.filename = filename

    # ── Token access ─────────────────────────────────────────────

    def _current(self) -> Token:
        tok = self.tokens[self.pos] if self.pos < len(self.tokens) else self.tokens[-1]
        if tok.kind == TokenKind.ERROR:
            raise LexError(tok.value, tok.span)
        return tok

    def _at(self, kind: TokenKind) -> bool:
        return self._current().kind == kind

    def _advance(self) -> Token:
        tok = self._current()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def _fail(self, expected: str) -> UnexpectedTokenError:
        tok = self._current()
        return UnexpectedTokenError(f"expected {expected}, got {_token_text(tok)}", tok.span)

    def _expect(self, kind: TokenKind) -> Token:
        if self._at(kind):
            return self._advance()
        tok = self._current()
        if kind in _RESERVED and tok.kind in (TokenKind.IDENTIFIER, TokenKind.TYPE_IDENTIFIER):
            raise LexError(
                f"expected reserved word {describe(kind)}, got identifier {tok.value!r}",
                tok.span,
            )
        raise self._fail(describe(kind))

    def _expect_name(self, kind: TokenKind, what: str) -> Token:
        """Expect an identifier of the given casing class."""
        tok = self._current()
        if tok.kind == kind:
            return self._advance()
        if tok.kind in _RESERVED:
            raise LexError(
                f"reserved word {tok.value!r} cannot be used as {what}", tok.span,
            )
        raise self._fail(what)

    def _expect_identifier(self, what: str = "lowercase identifier") -> str:
        return self._expect_name(TokenKind.IDENTIFIER, what).value

    def _expect_type_name(self, what: str = "uppercase identifier") -> str:
        return self._expect_name(TokenKind.TYPE_IDENTIFIER, what).value

    # ── Module ───────────────────────────────────────────────────

    def parse(self) -> Module:
        """Parse the entire token stream into a Module.

        The module's name and template path are left empty; see
        ``Module.with_name``.
        """
        exports = self._parse_exports()
        imports = self._parse_imports()
        annotations = self._parse_annotations()

        type_decls: list[TypeDecl] = []
        while self._at(TokenKind.TYPE):
            try:
                type_decls.append(self._parse_type_decl())
            except RecursionError:
                # Array</Maybe< nesting deeper than the interpreter stack.
                raise UnexpectedTokenError(
                    "type expression nested too deeply", self._current().span,
                ) from None

        if not self._at(TokenKind.EOF):
            tok = self._current()
            raise IncompleteParseError(
                f"unexpected {_token_text(tok)}; expected 'type' or end of input",
                tok.span,
            )

        return Module(
            name="",
            exports=exports,
            imports=tuple(imports),
            type_decls=tuple(type_decls),
            annotations=tuple(annotations),
        )

    def _parse_exports(self) -> Exports:
        self._expect(TokenKind.SCALA)
        self._expect(TokenKind.COLON)
        scala = self._expect(TokenKind.PACKAGE_NAME).value
        self._expect(TokenKind.PURS)
        self._expect(TokenKind.COLON)
        purs = self._expect(TokenKind.PACKAGE_NAME).value
        return Exports(scala=scala, purs=purs)

    def _parse_imports(self) -> list[str]:
        imports: list[str] = []
        while self._at(TokenKind.IMPORT):
            self._advance()
            imports.append(self._expect(TokenKind.PACKAGE_NAME).value)
        return imports

    # ── Declarations ─────────────────────────────────────────────

    def _parse_type_decl(self) -> TypeDecl:
        self._expect(TokenKind.TYPE)
        name = self._expect_type_name("type name")
        self._expect(TokenKind.COLON)
        body = self._parse_top_type()
        annotations = self._parse_annotations()
        return TypeDecl(name=name, body=body, annotations=tuple(annotations))

    def _parse_top_type(self) -> TopType:
        kind = self._current().kind
        if kind in _TYPE_START:
            return AliasType(self._parse_type())
        if kind == TokenKind.LBRACE:
            return self._parse_record()
        if kind == TokenKind.LBRACKET:
            return self._parse_sum()
        if kind == TokenKind.WRAP:
            self._advance()
            return WrapType(self._parse_type())
        raise self._fail("type, '{', '[' or 'wrap'")

    def _parse_record(self) -> RecordType:
        self._expect(TokenKind.LBRACE)
        props: list[RecordProp] = []
        if not self._at(TokenKind.RBRACE):
            props.append(self._parse_record_prop())
            while self._at(TokenKind.COMMA):
                self._advance()
                props.append(self._parse_record_prop())
        if not self._at(TokenKind.RBRACE):
            raise self._fail("',' or '}'")
        self._advance()
        return RecordType(tuple(props))

    def _parse_record_prop(self) -> RecordProp:
        name = self._expect_identifier("field name")
        self._expect(TokenKind.COLON)
        typ = self._parse_type()
        annotations = self._parse_annotations()
        return RecordProp(name=name, typ=typ, annotations=tuple(annotations))

    def _parse_sum(self) -> SumType:
        self._expect(TokenKind.LBRACKET)
        variants = [self._expect_type_name("variant name")]
        while self._at(TokenKind.PIPE):
            self._advance()
            variants.append(self._expect_type_name("variant name"))
        if not self._at(TokenKind.RBRACKET):
            raise self._fail("'|' or ']'")
        self._advance()
        return SumType(tuple(variants))

    # ── Type expressions ─────────────────────────────────────────

    def _parse_type(self) -> Type:
        tok = self._current()
        if tok.kind in _PRIMITIVES:
            self._advance()
            return PrimitiveType(_PRIMITIVES[tok.kind])
        if tok.kind == TokenKind.ARRAY:
            return ArrayType(self._parse_type_argument())
        if tok.kind == TokenKind.MAYBE:
            return OptionType(self._parse_type_argument())
        if tok.kind == TokenKind.TYPE_IDENTIFIER:
            return self._parse_type_reference()
        raise self._fail("type")

    def _parse_type_argument(self) -> Type:
        """Parse ``<T>`` after ``Array`` or ``Maybe``."""
        self._advance()
        self._expect(TokenKind.LANGLE)
        inner = self._parse_type()
        self._expect(TokenKind.RANGLE)
        return inner

    def _parse_type_reference(self) -> RefType:
        position = self._current().span.start
        segments = [self._expect_type_name()]
        while self._at(TokenKind.DOT):
            self._advance()
            segments.append(self._expect_type_name())
        module = ".".join(segments[:-1]) or None
        return RefType(position, TypeReference(module=module, name=segments[-1]))

    # ── Annotations ──────────────────────────────────────────────

    def _parse_annotations(self) -> list[Annotation]:
        annotations: list[Annotation] = []
        while self._at(TokenKind.LANGLE):
            annotations.append(self._parse_annotation())
        return annotations

    def _parse_annotation(self) -> Annotation:
        position = self._advance().span.start  # '<'
        name = self._expect_identifier("annotation name")
        params: list[AnnotationParam] = []
        while self._at(TokenKind.IDENTIFIER):
            params.append(self._parse_annotation_param())
        if not self._at(TokenKind.RANGLE):
            tok = self._current()
            if tok.kind in _RESERVED:
                raise LexError(
                    f"reserved word {tok.value!r} cannot be used as parameter name",
                    tok.span,
                )
            raise self._fail("parameter name or '>'")
        self._advance()
        return Annotation(name=name, position=position, params=tuple(params))

    def _parse_annotation_param(self) -> AnnotationParam:
        tok = self._advance()
        value = None
        if self._at(TokenKind.ASSIGN):
            self._advance()
            value = self._expect(TokenKind.STRING_LIT).value
        return AnnotationParam(name=tok.value, position=tok.span.start, value=value)


# ── Entry points ─────────────────────────────────────────────────


def parse_module(text: str, filename: str = "<stdin>") -> Module:
    """Lex and parse one module. The result has no logical name yet."""
    tokens = Lexer(text, filename).lex()
    module = Parser(tokens, filename).parse()
    logger.debug(
        "parsed %s: %d import(s), %d type declaration(s)",
        filename, len(module.imports), len(module.type_decls),
    )
    return module


def parse_source(
    path: str,
    text: str,
    extensions: tuple[str, ...] = KNOWN_EXTENSIONS,
) -> Source[Module]:
    """Parse a file's contents and name the module after the file."""
    module = parse_module(text, path)
    name = logical_name(path, extensions)
    return Source(path=path, value=module.with_name(name))
