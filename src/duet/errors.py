"""Parse errors and Rust-style diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from duet.source import SourceText, Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str
    style: str = "primary"  # "primary" or "secondary"


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors.

    Source lines are looked up in ``sources`` first (keyed by the span's
    file name), then read from disk.
    """

    def __init__(
        self,
        *,
        color: bool = True,
        sources: dict[str, str] | None = None,
    ) -> None:
        self.color = color
        self._cache: dict[str, SourceText] = {
            name: SourceText(text) for name, text in (sources or {}).items()
        }

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def _get_source_line(self, filename: str, line_num: int) -> str | None:
        if filename not in self._cache:
            path = Path(filename)
            try:
                text = path.read_text() if path.is_file() else ""
            except OSError:
                text = ""
            self._cache[filename] = SourceText(text)
        return self._cache[filename].line_at(line_num)

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E200]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            span = label.span
            lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {span}")
            gutter = f"{span.start_line:>4}"
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")

            source_line = self._get_source_line(span.file, span.start_line)
            if source_line is not None:
                lines.append(
                    f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source_line}"
                )

            if span.start_line == span.end_line:
                caret_len = max(1, span.end_col - span.start_col + 1)
                padding = " " * (span.start_col - 1)
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                    f"{padding}{self._c(color)}{'^' * caret_len}{self._c(_RESET)}"
                )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


class CompileError(Exception):
    """Error carrying one or more diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")


class ParseError(CompileError):
    """A parse failure at a single source position.

    Parsing stops at the first failure, so a ParseError always carries
    exactly one diagnostic.
    """

    code = "E200"

    def __init__(self, message: str, span: Span, *, notes: list[str] | None = None) -> None:
        self.message = message
        self.span = span
        diag = Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=message,
            labels=[DiagnosticLabel(span=span, message="")],
            notes=list(notes or []),
        )
        super().__init__([diag])

    @property
    def line(self) -> int:
        return self.span.start_line

    @property
    def column(self) -> int:
        return self.span.start_col

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}: {self.message}"


class LexError(ParseError):
    """Unrecognised character or token class."""

    code = "E100"


class UnexpectedTokenError(ParseError):
    """An expected token or production was not found."""

    code = "E200"


class IncompleteParseError(ParseError):
    """Input remains after a structurally complete module."""

    code = "E201"


def format_parse_error(file_name: str, error: ParseError) -> str:
    """Render a parse error as a single human-readable line."""
    return (
        f"Could not parse {file_name}: "
        f"line {error.line}, column {error.column}: {error.message}"
    )
