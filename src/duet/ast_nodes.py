"""AST node definitions for duet modules.

Every node is a frozen dataclass and every sequence is a tuple, so a
parsed tree can be shared freely. The only post-parse change (filling in
a module's logical name) goes through ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

from duet.source import Position, template_path

# ── Type expressions ─────────────────────────────────────────────


class PrimitiveKind(Enum):
    BOOLEAN = "Boolean"
    INT = "Int"
    DECIMAL = "Decimal"
    STRING = "String"
    # Reserved for generators; the grammar has no keywords for these yet.
    DATE = "Date"
    DATETIME = "DateTime"
    TIME = "Time"


@dataclass(frozen=True)
class TypeReference:
    module: str | None  # dotted qualifier, None for a local name
    name: str

    def __str__(self) -> str:
        if self.module is None:
            return self.name
        return f"{self.module}.{self.name}"


@dataclass(frozen=True)
class PrimitiveType:
    kind: PrimitiveKind


@dataclass(frozen=True)
class RefType:
    position: Position
    ref: TypeReference


@dataclass(frozen=True)
class ArrayType:
    inner: Type


@dataclass(frozen=True)
class OptionType:
    inner: Type


Type = Union[PrimitiveType, RefType, ArrayType, OptionType]


# ── Annotations ──────────────────────────────────────────────────


@dataclass(frozen=True)
class AnnotationParam:
    name: str
    position: Position
    value: str | None = None


@dataclass(frozen=True)
class Annotation:
    name: str
    position: Position
    params: tuple[AnnotationParam, ...] = ()

    def param(self, name: str) -> AnnotationParam | None:
        for p in self.params:
            if p.name == name:
                return p
        return None


# ── Type declarations ────────────────────────────────────────────


@dataclass(frozen=True)
class RecordProp:
    name: str
    typ: Type
    annotations: tuple[Annotation, ...] = ()


@dataclass(frozen=True)
class AliasType:
    typ: Type


@dataclass(frozen=True)
class RecordType:
    props: tuple[RecordProp, ...]


@dataclass(frozen=True)
class SumType:
    variants: tuple[str, ...]  # ordinal order


@dataclass(frozen=True)
class WrapType:
    typ: Type


TopType = Union[AliasType, RecordType, SumType, WrapType]


@dataclass(frozen=True)
class TypeDecl:
    name: str
    body: TopType
    annotations: tuple[Annotation, ...] = ()


# ── Modules ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Exports:
    scala: str
    purs: str
    template_path: str = ""


@dataclass(frozen=True)
class Module:
    name: str
    exports: Exports
    imports: tuple[str, ...]
    type_decls: tuple[TypeDecl, ...]
    annotations: tuple[Annotation, ...] = ()

    def with_name(self, name: str) -> Module:
        """Return a copy carrying its logical name and template path."""
        exports = replace(self.exports, template_path=template_path(name))
        return replace(self, name=name, exports=exports)

    def with_imports(self, imports: tuple[str, ...]) -> Module:
        return replace(self, imports=tuple(imports))

    def find(self, name: str) -> TypeDecl | None:
        for decl in self.type_decls:
            if decl.name == name:
                return decl
        return None
