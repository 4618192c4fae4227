# moustachu/core/tokenizer.py
"""
Turns raw template text into a flat stream of typed tokens.

The tokenizer knows the tag grammar and the standalone-line convention but
nothing about sections or data: it never checks that sections are balanced
and never looks anything up.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

import structlog

from moustachu.exceptions import TemplateSyntaxError

log = structlog.get_logger(__name__)

DEFAULT_DELIMITERS: Tuple[str, str] = ("{{", "}}")


class TokenType(Enum):
    TEXT = "text"
    COMMENT = "comment"
    ESCAPED_VARIABLE = "escaped_variable"
    UNESCAPED_VARIABLE = "unescaped_variable"
    SECTION = "section"
    INVERTED_SECTION = "inverted_section"
    ENDER = "ender"
    PARTIAL = "partial"
    INDENTER = "indenter"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str


_SIGILS = {
    "#": TokenType.SECTION,
    "^": TokenType.INVERTED_SECTION,
    "/": TokenType.ENDER,
    "!": TokenType.COMMENT,
    ">": TokenType.PARTIAL,
    "&": TokenType.UNESCAPED_VARIABLE,
}
# characters a plain variable key may start with, besides letters and digits
_KEY_START_CHARS = "_.-@"

# tag types that may sit on a line of their own and swallow it
_STANDALONE_TYPES = frozenset({
    TokenType.SECTION, TokenType.INVERTED_SECTION, TokenType.ENDER,
    TokenType.COMMENT, TokenType.PARTIAL,
})


def _line_number(template: str, pos: int) -> int:
    return template.count("\n", 0, pos) + 1


def _is_blank(s: str) -> bool:
    return s.strip(" \t\r") == ""


def _parse_delimiters(content: str, line: int) -> Tuple[str, str]:
    parts = content.split()
    if len(parts) != 2:
        raise TemplateSyntaxError(f"invalid delimiter change '{content}': expected two delimiters", line)
    return parts[0], parts[1]


def _classify(content: str, line: int) -> Tuple[TokenType, str]:
    sigil = content[:1]
    if sigil in _SIGILS:
        token_type, key = _SIGILS[sigil], content[1:].strip()
    elif sigil and not (sigil.isalnum() or not sigil.isascii() or sigil in _KEY_START_CHARS):
        # inheritance tags (< and $) and any other unknown sigil
        raise TemplateSyntaxError(f"unsupported tag type '{sigil}'", line)
    else:
        token_type, key = TokenType.ESCAPED_VARIABLE, content
    if not key and token_type is not TokenType.COMMENT:
        raise TemplateSyntaxError(f"empty {token_type.value} tag", line)
    return token_type, key


def tokenize(template: str, delimiters: Tuple[str, str] = DEFAULT_DELIMITERS) -> Iterator[Token]:
    """Yields the tokens of `template` in order.

    Standalone section, inverted-section, ender, comment, partial and
    delimiter-change tags consume their whole line. For a standalone partial
    the leading whitespace is yielded as an INDENTER token right before it.

    Raises TemplateSyntaxError for unterminated or malformed tags.
    """
    open_tag, close_tag = delimiters
    pos = 0
    length = len(template)

    while pos < length:
        tag_start = template.find(open_tag, pos)
        if tag_start == -1:
            yield Token(TokenType.TEXT, template[pos:])
            return

        line = _line_number(template, tag_start)
        content_start = tag_start + len(open_tag)
        new_delimiters: Optional[Tuple[str, str]] = None
        is_triple = template.startswith("{", content_start)
        is_delimiter_change = not is_triple and template.startswith("=", content_start)
        if is_triple:
            closer = "}" + close_tag
            content_start += 1
        elif is_delimiter_change:
            closer = "=" + close_tag
            content_start += 1
        else:
            closer = close_tag

        content_end = template.find(closer, content_start)
        if content_end == -1:
            raise TemplateSyntaxError(f"unterminated tag, expected '{closer}'", line)
        tag_end = content_end + len(closer)
        content = template[content_start:content_end].strip()

        token: Optional[Token] = None
        if is_delimiter_change:
            new_delimiters = _parse_delimiters(content, line)
        elif is_triple:
            if not content:
                raise TemplateSyntaxError("empty unescaped_variable tag", line)
            token = Token(TokenType.UNESCAPED_VARIABLE, content)
        else:
            token = Token(*_classify(content, line))

        text_end, next_pos = tag_start, tag_end
        indentation: Optional[str] = None
        if new_delimiters is not None or token.type in _STANDALONE_TYPES:
            line_start = template.rfind("\n", 0, tag_start) + 1
            line_end = template.find("\n", tag_end)
            tail_end = length if line_end == -1 else line_end
            leading = template[line_start:tag_start]
            if line_start >= pos and _is_blank(leading) and _is_blank(template[tag_end:tail_end]):
                text_end = line_start
                next_pos = length if line_end == -1 else line_end + 1
                if token is not None and token.type is TokenType.PARTIAL:
                    indentation = leading

        if text_end > pos:
            yield Token(TokenType.TEXT, template[pos:text_end])
        if indentation is not None:
            yield Token(TokenType.INDENTER, indentation)
        if token is not None:
            yield token
        else:
            if structlog.is_configured():
                log.debug("delimiters_changed", open=new_delimiters[0], close=new_delimiters[1], line=line)
            open_tag, close_tag = new_delimiters
        pos = next_pos
