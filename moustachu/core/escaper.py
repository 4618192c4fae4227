# moustachu/core/escaper.py
"""Single-pass, multi-pattern substitution used for escaped variables."""
from typing import Sequence, Tuple

HTML_ESCAPE_RULES: Tuple[Tuple[str, str], ...] = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ("\\", "&#92;"),
    ('"', "&quot;"),
)


def parallel_replace(text: str, substitutions: Sequence[Tuple[str, str]]) -> str:
    """Applies all substitutions in one left-to-right pass.

    At each position the first pattern that matches wins; its replacement is
    emitted and the cursor skips the matched text, so replacements are never
    rescanned.
    """
    out = []
    i = 0
    length = len(text)
    while i < length:
        for pattern, replacement in substitutions:
            if pattern and text.startswith(pattern, i):
                out.append(replacement)
                i += len(pattern)
                break
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def escape_html(text: str) -> str:
    return parallel_replace(text, HTML_ESCAPE_RULES)
