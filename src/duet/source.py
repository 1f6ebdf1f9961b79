"""Source positions, spans, and the file-to-module naming rules."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Generic, TypeVar

T = TypeVar("T")

# Extensions stripped when deriving a module's logical name.
KNOWN_EXTENSIONS: tuple[str, ...] = (".duet", ".idl")


@dataclass(frozen=True)
class Position:
    """A 1-based line/column pair pointing at a single character."""

    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Span:
    """A range within a source file."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    @property
    def start(self) -> Position:
        return Position(self.start_line, self.start_col)

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"


@dataclass(frozen=True)
class Source(Generic[T]):
    """A value paired with the path of the file it was read from."""

    path: str
    value: T


class SourceText:
    """In-memory source text with 1-indexed line access."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.lines = text.splitlines()

    def line_at(self, n: int) -> str | None:
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return None


def logical_name(path: str, extensions: tuple[str, ...] = KNOWN_EXTENSIONS) -> str:
    """Derive a module's logical name from its file path.

    ``models/Billing.Invoice.duet`` becomes ``Billing.Invoice``. Paths with
    an unknown extension keep their full base name.
    """
    base = PurePath(path).name
    for ext in extensions:
        if base.endswith(ext) and len(base) > len(ext):
            return base[: -len(ext)]
    return base


def template_path(name: str) -> str:
    """Map a dotted logical name to the relative path generators emit to."""
    return name.replace(".", "/")
