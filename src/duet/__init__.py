"""duet: parser front end for the duet interface-description language."""

from duet.errors import (
    IncompleteParseError,
    LexError,
    ParseError,
    UnexpectedTokenError,
    format_parse_error,
)
from duet.formatter import format_module
from duet.parser import parse_module, parse_source
from duet.roundtrip import check_roundtrip

__version__ = "0.1.0"

__all__ = [
    "IncompleteParseError",
    "LexError",
    "ParseError",
    "UnexpectedTokenError",
    "check_roundtrip",
    "format_module",
    "format_parse_error",
    "parse_module",
    "parse_source",
]
