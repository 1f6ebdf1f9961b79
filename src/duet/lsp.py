"""duet language server: pygls-based LSP for module files.

Provides parse diagnostics, hover, document symbols, and formatting via
stdio transport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from duet import __version__
from duet.ast_nodes import Module, RecordType, SumType, TypeDecl
from duet.errors import ParseError
from duet.formatter import DuetFormatter
from duet.lexer import Lexer
from duet.parser import Parser
from duet.source import Span
from duet.tokens import Token, TokenKind

logger = logging.getLogger(__name__)


def span_to_range(span: Span) -> lsp.Range:
    """Convert a 1-indexed Span to a 0-indexed LSP Range."""
    return lsp.Range(
        start=lsp.Position(line=span.start_line - 1, character=span.start_col - 1),
        end=lsp.Position(line=span.end_line - 1, character=span.end_col),
    )


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    tokens: list[Token] = field(default_factory=list)
    module: Module | None = None
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


server = LanguageServer(
    "duet-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _parse_diag(error: ParseError) -> lsp.Diagnostic:
    return lsp.Diagnostic(
        range=span_to_range(error.span),
        severity=lsp.DiagnosticSeverity.Error,
        source="duet",
        code=error.code,
        message=error.message,
    )


def _analyze(uri: str, source: str) -> DocumentState:
    """Lex and parse a document, cache the results, return the state."""
    ds = DocumentState(source=source)
    ds.tokens = Lexer(source, uri).lex()
    try:
        ds.module = Parser(ds.tokens, uri).parse()
    except ParseError as e:
        logger.debug("%s: %s", uri, e)
        ds.diagnostics = [_parse_diag(e)]
    _state[uri] = ds
    return ds


def _decl_spans(tokens: list[Token]) -> dict[str, Span]:
    """Map each declared type name to the span of its name token."""
    spans: dict[str, Span] = {}
    for prev, tok in zip(tokens, tokens[1:]):
        if prev.kind == TokenKind.TYPE and tok.kind == TokenKind.TYPE_IDENTIFIER:
            spans.setdefault(tok.value, tok.span)
    return spans


def _decl_extents(tokens: list[Token]) -> dict[str, Span]:
    """Map each declared type name to the span of its whole declaration."""
    extents: dict[str, Span] = {}
    starts = [
        i for i in range(len(tokens) - 1)
        if tokens[i].kind == TokenKind.TYPE and tokens[i + 1].kind == TokenKind.TYPE_IDENTIFIER
    ]
    for n, start in enumerate(starts):
        # Ends at the next declaration, or before EOF.
        end = (starts[n + 1] if n + 1 < len(starts) else len(tokens) - 1) - 1
        first, last = tokens[start].span, tokens[end].span
        extents.setdefault(tokens[start + 1].value, Span(
            first.file, first.start_line, first.start_col, last.end_line, last.end_col,
        ))
    return extents


def _member_spans(tokens: list[Token]) -> dict[str, list[Span]]:
    """Map each declared type name to its field or variant name spans, in order."""
    members: dict[str, list[Span]] = {}
    current: list[Span] | None = None
    for i, tok in enumerate(tokens):
        prev = tokens[i - 1] if i else None
        nxt = tokens[i + 1] if i + 1 < len(tokens) else None
        if prev is not None and prev.kind == TokenKind.TYPE and tok.kind == TokenKind.TYPE_IDENTIFIER:
            # A repeated declaration name keeps the first declaration's spans.
            current = []
            members.setdefault(tok.value, current)
        elif current is None or prev is None:
            continue
        elif tok.kind == TokenKind.IDENTIFIER and nxt is not None and nxt.kind == TokenKind.COLON:
            current.append(tok.span)
        elif tok.kind == TokenKind.TYPE_IDENTIFIER and prev.kind in (TokenKind.LBRACKET, TokenKind.PIPE):
            current.append(tok.span)
    return members


def _get_word_at(source: str, line: int, character: int) -> str:
    """Extract the (possibly dotted) word at the given 0-indexed position."""
    lines = source.splitlines()
    if line < 0 or line >= len(lines):
        return ""
    text = lines[line]
    if character >= len(text) or not text[character].isalnum():
        if character > 0 and character <= len(text) and text[character - 1].isalnum():
            character -= 1
        else:
            return ""

    start = character
    while start > 0 and (text[start - 1].isalnum() or text[start - 1] == "."):
        start -= 1
    end = character
    while end < len(text) and text[end].isalnum():
        end += 1
    return text[start:end].strip(".")


def _decl_to_symbol(
    decl: TypeDecl,
    span: Span,
    member_spans: list[Span] | None = None,
    extent: Span | None = None,
) -> lsp.DocumentSymbol:
    rng = span_to_range(span)
    members = iter(member_spans or [])
    children: list[lsp.DocumentSymbol] = []
    body = decl.body
    if isinstance(body, RecordType):
        fmt = DuetFormatter()
        for prop in body.props:
            child = span_to_range(next(members, span))
            children.append(lsp.DocumentSymbol(
                name=prop.name,
                kind=lsp.SymbolKind.Field,
                range=child,
                selection_range=child,
                detail=fmt.format_type(prop.typ),
            ))
        kind = lsp.SymbolKind.Struct
    elif isinstance(body, SumType):
        for variant in body.variants:
            child = span_to_range(next(members, span))
            children.append(lsp.DocumentSymbol(
                name=variant,
                kind=lsp.SymbolKind.EnumMember,
                range=child,
                selection_range=child,
            ))
        kind = lsp.SymbolKind.Enum
    else:
        kind = lsp.SymbolKind.Class
    return lsp.DocumentSymbol(
        name=decl.name,
        kind=kind,
        range=span_to_range(extent or span),
        selection_range=rng,
        children=children or None,
    )


def _symbols(ds: DocumentState) -> list[lsp.DocumentSymbol]:
    if ds.module is None:
        return []
    spans = _decl_spans(ds.tokens)
    members = _member_spans(ds.tokens)
    extents = _decl_extents(ds.tokens)
    return [
        _decl_to_symbol(
            decl, spans[decl.name], members.get(decl.name), extents.get(decl.name),
        )
        for decl in ds.module.type_decls
        if decl.name in spans
    ]


def _doc_text(decl: TypeDecl) -> str | None:
    """The text of a declaration's ``<doc text="...">`` annotation, if any."""
    for annotation in decl.annotations:
        if annotation.name == "doc":
            param = annotation.param("text")
            if param is not None and param.value is not None:
                return param.value
    return None


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: take last content change
    source = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, source)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.module is None:
        return None
    word = _get_word_at(ds.source, params.position.line, params.position.character)
    decl = ds.module.find(word)
    if decl is None:
        return None
    value = f"```duet\n{DuetFormatter().format_type_decl(decl)}\n```"
    doc = _doc_text(decl)
    if doc:
        value += f"\n\n{doc}"
    return lsp.Hover(contents=lsp.MarkupContent(
        kind=lsp.MarkupKind.Markdown,
        value=value,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return []
    return _symbols(ds)


def _formatting_edits(ds: DocumentState, indent: int = 2) -> list[lsp.TextEdit] | None:
    if ds.module is None:
        return None
    formatted = DuetFormatter(indent=indent).format(ds.module)
    if formatted == ds.source:
        return None

    # Replace entire document
    lines = ds.source.splitlines()
    end_line = len(lines)
    end_char = len(lines[-1]) if lines else 0
    return [lsp.TextEdit(
        range=lsp.Range(
            start=lsp.Position(0, 0),
            end=lsp.Position(end_line, end_char),
        ),
        new_text=formatted,
    )]


@server.feature(lsp.TEXT_DOCUMENT_FORMATTING)
def formatting(params: lsp.DocumentFormattingParams) -> list[lsp.TextEdit] | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    return _formatting_edits(ds, indent=params.options.tab_size)


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the duet language server on stdio."""
    server.start_io()
