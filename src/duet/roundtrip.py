"""Render/parse stability check.

For a module ``m`` that parsed (and validated) successfully::

    render(parse(render(m)) with imports := m.imports) == render(m)

Imports are copied over rather than compared, so import formatting may
change without breaking the check. A failed re-parse propagates as
``ParseError``; differing renderings give ``False``. Callers should treat
both outcomes as failures.
"""

from __future__ import annotations

import difflib
import logging
from dataclasses import dataclass
from typing import Callable

from duet.ast_nodes import Module
from duet.formatter import format_module
from duet.parser import parse_module

logger = logging.getLogger(__name__)

Renderer = Callable[[Module], str]


@dataclass(frozen=True)
class RoundTripResult:
    first: str
    second: str

    @property
    def ok(self) -> bool:
        return self.first == self.second

    def diff(self, name: str = "module") -> str:
        return "".join(difflib.unified_diff(
            self.first.splitlines(keepends=True),
            self.second.splitlines(keepends=True),
            fromfile=f"{name} (rendered)",
            tofile=f"{name} (re-rendered)",
        ))


def roundtrip_report(
    module: Module,
    render: Renderer = format_module,
    filename: str = "<roundtrip>",
) -> RoundTripResult:
    """Render, re-parse and re-render ``module``.

    Raises ParseError if the first rendering does not parse.
    """
    first = render(module)
    reparsed = parse_module(first, filename)
    # The logical name is never parsed from text; carry it over like the
    # post-parse naming step does.
    if module.name:
        reparsed = reparsed.with_name(module.name)
    second = render(reparsed.with_imports(module.imports))
    result = RoundTripResult(first, second)
    logger.debug("round trip of %s: %s", module.name or filename,
                 "stable" if result.ok else "unstable")
    return result


def check_roundtrip(module: Module, render: Renderer = format_module) -> bool:
    """True if rendering is stable under re-parsing."""
    return roundtrip_report(module, render).ok
