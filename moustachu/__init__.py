# moustachu/__init__.py
"""
moustachu: a mustache template renderer.

    >>> from moustachu import render
    >>> render("Hello, {{name}}!", {"name": "World"})
    'Hello, World!'
"""
__version__ = "0.1.0"

from moustachu.core import (
    Context,
    ContextKind,
    Renderer,
    Token,
    TokenType,
    escape_html,
    render,
    tokenize,
)
from moustachu.exceptions import (
    MoustachuError,
    ConfigError,
    DataLoadError,
    OutputError,
    TemplateError,
    TemplateSyntaxError,
    SectionMismatchError,
    PartialRecursionError,
)

__all__ = [
    "__version__",
    "Context",
    "ContextKind",
    "Renderer",
    "Token",
    "TokenType",
    "escape_html",
    "render",
    "tokenize",
    "MoustachuError",
    "ConfigError",
    "DataLoadError",
    "OutputError",
    "TemplateError",
    "TemplateSyntaxError",
    "SectionMismatchError",
    "PartialRecursionError",
]
