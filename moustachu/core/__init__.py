# moustachu/core/__init__.py
"""
Rendering engine for moustachu.

Provides the Context data model, the tokenizer, the HTML escaper and the
Renderer that ties them together.
"""
from .context import Context, ContextKind, resolve
from .escaper import escape_html, parallel_replace
from .renderer import Renderer, render
from .tokenizer import Token, TokenType, tokenize

__all__ = [
    "Context",
    "ContextKind",
    "resolve",
    "escape_html",
    "parallel_replace",
    "Renderer",
    "render",
    "Token",
    "TokenType",
    "tokenize",
]
