# moustachu/core/renderer.py
"""
Contains the Renderer, the interpreter that walks a token list against a
context stack and produces the output string.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import structlog

from moustachu.exceptions import PartialRecursionError, SectionMismatchError
from .context import Context, ContextKind, resolve, to_string
from .escaper import escape_html
from .tokenizer import Token, TokenType, tokenize

log = structlog.get_logger(__name__)

DEFAULT_MAX_PARTIAL_DEPTH = 100

_OPENERS = (TokenType.SECTION, TokenType.INVERTED_SECTION)


class _SectionKind(Enum):
    # what an open section did on entry, so its ender knows how to unwind.
    OBJECT = "object"
    LOOP = "loop"
    SCALAR = "scalar"
    INVERTED = "inverted"


@dataclass
class _OpenSection:
    name: str
    kind: _SectionKind
    items: Optional[Context] = None


def match_sections(tokens: Sequence[Token]) -> Dict[int, int]:
    """Pairs every section opener with its ender by nesting depth.

    Returns a map from opener index to ender index. Raises
    SectionMismatchError for an ender that does not close the innermost open
    section, or for sections still open at the end.
    """
    jumps: Dict[int, int] = {}
    open_indices: List[int] = []
    for index, token in enumerate(tokens):
        if token.type in _OPENERS:
            open_indices.append(index)
        elif token.type is TokenType.ENDER:
            if not open_indices:
                raise SectionMismatchError(f"closing tag '{token.value}' has no open section")
            opener = open_indices.pop()
            if tokens[opener].value != token.value:
                raise SectionMismatchError(
                    f"closing tag '{token.value}' does not match open section '{tokens[opener].value}'")
            jumps[opener] = index
    if open_indices:
        names = [tokens[i].value for i in open_indices]
        raise SectionMismatchError(f"unclosed section(s): {names}")
    return jumps


class Renderer:
    """Renders templates against a Context.

    Every call builds its own render state, so one Renderer can be used from
    several threads as long as the contexts passed in are not mutated.
    """
    def __init__(self, max_partial_depth: int = DEFAULT_MAX_PARTIAL_DEPTH):
        self.max_partial_depth = max_partial_depth

    def render(self, template: str, context: Any) -> str:
        """Renders `template` with `context`, a Context or plain Python data."""
        root = Context.from_data(context)
        if structlog.is_configured():
            log.debug("render_started", template_length=len(template), root_kind=root.kind.value)
        return self._render(template, [root], depth=0)

    def _render(self, template: str, context_stack: List[Context], depth: int) -> str:
        tokens = list(tokenize(template))
        jumps = match_sections(tokens)

        renderings: List[str] = []
        sections: List[_OpenSection] = []
        loop_start_positions: List[int] = []
        loop_counters: List[int] = []
        indentation = ""

        index = 0
        token_count = len(tokens)
        while index < token_count:
            token = tokens[index]
            token_type = token.type

            if token_type is TokenType.TEXT:
                renderings.append(token.value)

            elif token_type is TokenType.COMMENT:
                pass

            elif token_type is TokenType.ESCAPED_VARIABLE:
                renderings.append(escape_html(to_string(resolve(context_stack, token.value))))

            elif token_type is TokenType.UNESCAPED_VARIABLE:
                renderings.append(to_string(resolve(context_stack, token.value)))

            elif token_type is TokenType.SECTION:
                ctx = resolve(context_stack, token.value)
                if ctx is None or not ctx:
                    index = jumps[index] + 1
                    continue
                if ctx.kind is ContextKind.OBJECT:
                    context_stack.append(ctx)
                    sections.append(_OpenSection(token.value, _SectionKind.OBJECT))
                elif ctx.kind is ContextKind.ARRAY:
                    index += 1
                    loop_start_positions.append(index)
                    loop_counters.append(len(ctx))
                    sections.append(_OpenSection(token.value, _SectionKind.LOOP, items=ctx))
                    context_stack.append(ctx[0])
                    continue
                else:
                    sections.append(_OpenSection(token.value, _SectionKind.SCALAR))

            elif token_type is TokenType.INVERTED_SECTION:
                ctx = resolve(context_stack, token.value)
                if ctx is not None and ctx:
                    index = jumps[index] + 1
                    continue
                sections.append(_OpenSection(token.value, _SectionKind.INVERTED))

            elif token_type is TokenType.ENDER:
                section = sections[-1]
                if section.kind is _SectionKind.OBJECT:
                    context_stack.pop()
                    sections.pop()
                elif section.kind is _SectionKind.LOOP:
                    loop_counters[-1] -= 1
                    context_stack.pop()
                    if loop_counters[-1] == 0:
                        loop_counters.pop()
                        loop_start_positions.pop()
                        sections.pop()
                    else:
                        index = loop_start_positions[-1]
                        items = section.items
                        context_stack.append(items[len(items) - loop_counters[-1]])
                        continue
                else:
                    sections.pop()

            elif token_type is TokenType.INDENTER:
                if token.value:
                    indentation = token.value
                    renderings.append(indentation)

            elif token_type is TokenType.PARTIAL:
                partial_template = to_string(resolve(context_stack, token.value))
                partial_template = partial_template.replace("\n", "\n" + indentation)
                if indentation:
                    partial_template = partial_template.rstrip(" ")
                indentation = ""
                renderings.append(self._render_partial(token.value, partial_template, context_stack, depth))

            index += 1

        return "".join(renderings)

    def _render_partial(self, name: str, partial_template: str, context_stack: List[Context], depth: int) -> str:
        if depth >= self.max_partial_depth:
            raise PartialRecursionError(
                f"partial '{name}' exceeds the maximum nesting depth of {self.max_partial_depth}")
        if structlog.is_configured():
            log.debug("expanding_partial", name=name, depth=depth + 1)
        return self._render(partial_template, list(context_stack), depth + 1)


_default_renderer = Renderer()


def render(template: str, context: Any) -> str:
    """Renders `template` against `context` with default settings."""
    return _default_renderer.render(template, context)
