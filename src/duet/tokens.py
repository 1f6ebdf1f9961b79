"""Token kinds and token representation for the duet lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duet.source import Span


class TokenKind(Enum):
    # Header keywords
    SCALA = auto()
    PURS = auto()
    IMPORT = auto()

    # Declaration keywords
    TYPE = auto()
    WRAP = auto()

    # Primitive types
    BOOLEAN = auto()
    INT = auto()
    DECIMAL = auto()
    STRING = auto()

    # Type constructors
    ARRAY = auto()
    MAYBE = auto()

    # Literals
    STRING_LIT = auto()

    # Identifiers
    IDENTIFIER = auto()
    TYPE_IDENTIFIER = auto()
    PACKAGE_NAME = auto()

    # Punctuation
    COLON = auto()
    COMMA = auto()
    DOT = auto()
    PIPE = auto()
    ASSIGN = auto()
    LANGLE = auto()
    RANGLE = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()

    # Special
    ERROR = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span


KEYWORDS: dict[str, TokenKind] = {
    "scala": TokenKind.SCALA,
    "purs": TokenKind.PURS,
    "import": TokenKind.IMPORT,
    "type": TokenKind.TYPE,
    "wrap": TokenKind.WRAP,
    "Boolean": TokenKind.BOOLEAN,
    "Int": TokenKind.INT,
    "Decimal": TokenKind.DECIMAL,
    "String": TokenKind.STRING,
    "Array": TokenKind.ARRAY,
    "Maybe": TokenKind.MAYBE,
}

PRIMITIVE_KEYWORDS: frozenset[TokenKind] = frozenset({
    TokenKind.BOOLEAN,
    TokenKind.INT,
    TokenKind.DECIMAL,
    TokenKind.STRING,
})

# Human-readable names used in "expected ..." messages.
DESCRIPTIONS: dict[TokenKind, str] = {
    **{kind: f"'{word}'" for word, kind in KEYWORDS.items()},
    TokenKind.STRING_LIT: "string literal",
    TokenKind.IDENTIFIER: "lowercase identifier",
    TokenKind.TYPE_IDENTIFIER: "uppercase identifier",
    TokenKind.PACKAGE_NAME: "package name",
    TokenKind.COLON: "':'",
    TokenKind.COMMA: "','",
    TokenKind.DOT: "'.'",
    TokenKind.PIPE: "'|'",
    TokenKind.ASSIGN: "'='",
    TokenKind.LANGLE: "'<'",
    TokenKind.RANGLE: "'>'",
    TokenKind.LBRACE: "'{'",
    TokenKind.RBRACE: "'}'",
    TokenKind.LBRACKET: "'['",
    TokenKind.RBRACKET: "']'",
    TokenKind.EOF: "end of input",
}


def describe(kind: TokenKind) -> str:
    return DESCRIPTIONS.get(kind, kind.name.lower())
