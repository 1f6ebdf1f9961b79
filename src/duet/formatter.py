"""AST-walking pretty-printer for duet modules.

Produces the canonical text of a module. Rendering is total and
deterministic, and re-parsing its output renders to the same text again
(see ``duet.roundtrip``).

Comments are not preserved; the lexer discards them.
"""

from __future__ import annotations

from duet.ast_nodes import (
    AliasType,
    Annotation,
    AnnotationParam,
    ArrayType,
    Module,
    OptionType,
    PrimitiveType,
    RecordProp,
    RecordType,
    RefType,
    SumType,
    TopType,
    Type,
    TypeDecl,
    WrapType,
)

_ESCAPES: dict[str, str] = {
    '\\': '\\\\', '"': '\\"', '\n': '\\n', '\r': '\\r', '\t': '\\t',
    '\0': '\\0', '\a': '\\a', '\b': '\\b', '\f': '\\f', '\v': '\\v',
}


def quote(value: str) -> str:
    """Render a string literal the lexer reads back as ``value``."""
    out = ['"']
    for ch in value:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7f:
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    out.append('"')
    return ''.join(out)


class DuetFormatter:
    """Format a parsed duet Module back to canonical source text."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = " " * indent

    # ── Public API ─────────────────────────────────────────────

    def format(self, module: Module) -> str:
        """Format a module to canonical source text."""
        sections = [
            f"scala: {module.exports.scala}\npurs: {module.exports.purs}",
        ]
        if module.imports:
            sections.append("\n".join(f"import {name}" for name in module.imports))
        if module.annotations:
            sections.append(
                "\n".join(self.format_annotation(a) for a in module.annotations)
            )
        sections.extend(self.format_type_decl(decl) for decl in module.type_decls)
        return "\n\n".join(sections) + "\n"

    def format_type_decl(self, decl: TypeDecl) -> str:
        return (
            f"type {decl.name} : {self._format_top_type(decl.body)}"
            f"{self._format_trailing_annotations(decl.annotations)}"
        )

    def format_type(self, typ: Type) -> str:
        if isinstance(typ, PrimitiveType):
            return typ.kind.value
        if isinstance(typ, RefType):
            return str(typ.ref)
        if isinstance(typ, ArrayType):
            return f"Array<{self.format_type(typ.inner)}>"
        if isinstance(typ, OptionType):
            return f"Maybe<{self.format_type(typ.inner)}>"
        raise TypeError(f"not a type expression: {typ!r}")

    def format_annotation(self, annotation: Annotation) -> str:
        parts = [annotation.name]
        parts.extend(self._format_param(p) for p in annotation.params)
        return f"<{' '.join(parts)}>"

    # ── Declarations ───────────────────────────────────────────

    def _format_top_type(self, body: TopType) -> str:
        if isinstance(body, AliasType):
            return self.format_type(body.typ)
        if isinstance(body, RecordType):
            return self._format_record(body)
        if isinstance(body, SumType):
            return f"[ {' | '.join(body.variants)} ]"
        if isinstance(body, WrapType):
            return f"wrap {self.format_type(body.typ)}"
        raise TypeError(f"not a type declaration body: {body!r}")

    def _format_record(self, record: RecordType) -> str:
        if not record.props:
            return "{}"
        fields = ",\n".join(
            f"{self.indent}{self._format_prop(prop)}" for prop in record.props
        )
        return "{\n" + fields + "\n}"

    def _format_prop(self, prop: RecordProp) -> str:
        return (
            f"{prop.name}: {self.format_type(prop.typ)}"
            f"{self._format_trailing_annotations(prop.annotations)}"
        )

    # ── Annotations ────────────────────────────────────────────

    def _format_trailing_annotations(self, annotations: tuple[Annotation, ...]) -> str:
        return "".join(f" {self.format_annotation(a)}" for a in annotations)

    def _format_param(self, param: AnnotationParam) -> str:
        if param.value is None:
            return param.name
        return f"{param.name}={quote(param.value)}"


def format_module(module: Module) -> str:
    """Render a module with the default layout."""
    return DuetFormatter().format(module)
