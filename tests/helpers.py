"""Shared test helpers for the duet test suite."""

from __future__ import annotations

import pytest

from duet.ast_nodes import Module, TopType, Type
from duet.errors import ParseError
from duet.parser import parse_module

HEADER = "scala: a.b\npurs: c.d\n"

SAMPLE = (
    "scala: com.example.billing\n"
    "purs: Example.Billing\n"
    "\n"
    "import Example.Common\n"
    "\n"
    "type Invoice : {\n"
    "  id: InvoiceId <key>,\n"
    "  lines: Array<Line>,\n"
    "  note: Maybe<String>\n"
    "}\n"
    "\n"
    "type InvoiceId : wrap String\n"
    "\n"
    "type Status : [ Draft | Sent | Paid ]\n"
)


def parse(source: str) -> Module:
    """Parse a complete module."""
    return parse_module(source, "test.duet")


def parse_body(body: str) -> TopType:
    """Parse ``type T : <body>`` under a fixed header; return the body."""
    module = parse(f"{HEADER}type T : {body}\n")
    assert len(module.type_decls) == 1
    return module.type_decls[0].body


def parse_type(text: str) -> Type:
    """Parse a type expression used as an alias body."""
    return parse_body(text).typ


def parse_fails(source: str, error: type[ParseError] = ParseError) -> ParseError:
    """Parse source, asserting that it fails with ``error``."""
    with pytest.raises(error) as excinfo:
        parse(source)
    return excinfo.value
