"""Pygments lexer for duet module files."""

from pygments.lexer import RegexLexer, bygroups, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Operator,
    Punctuation,
    String,
    Text,
)


class DuetLexer(RegexLexer):
    """Pygments lexer for the duet interface-description language."""

    name = "duet"
    aliases = ["duet"]
    filenames = ["*.duet", "*.idl"]
    mimetypes = ["text/x-duet"]

    tokens = {
        "root": [
            # Whitespace
            (r"\s+", Text),
            # Comments
            (r"//.*$", Comment.Single),
            (r"/\*", Comment.Multiline, "comment"),
            # Export header: scala: a.b.c / purs: a.b.c
            (
                r"\b(scala|purs)(\s*)(:)(\s*)([A-Za-z0-9.]+)",
                bygroups(Keyword.Namespace, Text, Punctuation, Text, Name.Namespace),
            ),
            # Imports
            (
                r"\b(import)(\s+)([A-Za-z0-9.]+)",
                bygroups(Keyword.Namespace, Text, Name.Namespace),
            ),
            # Declared type name
            (
                r"\b(type)(\s+)([A-Z][A-Za-z0-9]*)",
                bygroups(Keyword.Declaration, Text, Name.Class),
            ),
            (words(("type", "wrap"), prefix=r"\b", suffix=r"\b"), Keyword.Declaration),
            # Primitive types and type constructors
            (
                words(
                    ("Boolean", "Int", "Decimal", "String", "Array", "Maybe"),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword.Type,
            ),
            # Annotation opener: <name
            (r"(<)(\s*)([a-z][A-Za-z0-9]*)", bygroups(Punctuation, Text, Name.Decorator), "annotation"),
            (r"<", Punctuation),
            # Field names (word followed by colon)
            (r"[a-z][A-Za-z0-9]*(?=\s*:)", Name.Attribute),
            # Type references and variants
            (r"[A-Z][A-Za-z0-9]*", Name.Class),
            (r"[a-z][A-Za-z0-9]*", Name),
            (r"\|", Operator),
            (r"[{}\[\]:,.>]", Punctuation),
        ],
        "comment": [
            (r"[^*/]+", Comment.Multiline),
            (r"/\*", Comment.Multiline, "#push"),
            (r"\*/", Comment.Multiline, "#pop"),
            (r"[*/]", Comment.Multiline),
        ],
        # Inside an annotation: params until '>'. Entered only after the
        # annotation name, so Maybe<String> stays in root.
        "annotation": [
            (r"\s+", Text),
            (r">", Punctuation, "#pop"),
            (r"[a-z][A-Za-z0-9]*", Name.Attribute),
            (r"=", Operator),
            (r'"', String, "string"),
        ],
        "string": [
            (r'\\(x[0-9a-fA-F]{2}|u[0-9a-fA-F]{4}|[nrt0abfv\\"\'])', String.Escape),
            (r'[^"\\\n]+', String),
            (r'"', String, "#pop"),
        ],
    }
