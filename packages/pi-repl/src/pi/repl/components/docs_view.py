"""DocsView component: documentation for the candidate under the pointer.

Docs are markdown (docstrings, API notes). They are parsed with
``markdown-it-py`` and flattened to wrapped terminal lines: headings in bold,
paragraphs and list items wrapped, code blocks kept verbatim.
"""

from __future__ import annotations

from markdown_it import MarkdownIt
from markdown_it.token import Token

from pi.repl.utils import truncate_to_width, wrap_words

_BOLD = "\x1b[1m"
_NORMAL = "\x1b[22m"
_ITALIC = "\x1b[3m"
_NO_ITALIC = "\x1b[23m"
_DIM = "\x1b[2m"

_md_parser = MarkdownIt("commonmark")


def _render_inline(tok: Token) -> str:
    if not tok.children:
        return tok.content
    parts: list[str] = []
    for child in tok.children:
        ct = child.type
        if ct == "text":
            parts.append(child.content)
        elif ct == "code_inline":
            parts.append(f"`{child.content}`")
        elif ct == "softbreak":
            parts.append(" ")
        elif ct == "hardbreak":
            parts.append("\n")
        elif ct == "strong_open":
            parts.append(_BOLD)
        elif ct == "strong_close":
            parts.append(_NORMAL)
        elif ct == "em_open":
            parts.append(_ITALIC)
        elif ct == "em_close":
            parts.append(_NO_ITALIC)
    return "".join(parts)


def render_markdown(text: str, width: int) -> list[str]:
    """Flatten markdown *text* into lines no wider than *width*."""
    lines: list[str] = []
    list_stack: list[int | None] = []  # None for bullets, next number otherwise
    item_prefix = ""
    tokens = _md_parser.parse(text)

    for i, tok in enumerate(tokens):
        t = tok.type
        if t == "bullet_list_open":
            list_stack.append(None)
        elif t == "ordered_list_open":
            list_stack.append(int(tok.attrs.get("start", 1) or 1))
        elif t in ("bullet_list_close", "ordered_list_close"):
            list_stack.pop()
            if not list_stack:
                lines.append("")
        elif t == "list_item_open":
            indent = "  " * (len(list_stack) - 1)
            number = list_stack[-1]
            if number is None:
                item_prefix = f"{indent}- "
            else:
                item_prefix = f"{indent}{number}. "
                list_stack[-1] = number + 1
        elif t == "inline":
            parent = tokens[i - 1].type if i > 0 else ""
            content = _render_inline(tok)
            if parent == "heading_open":
                lines.extend(f"{_BOLD}{line}{_NORMAL}" for line in wrap_words(content, width))
                lines.append("")
            elif list_stack:
                lead = item_prefix or "  " * len(list_stack)
                item_prefix = ""
                wrapped = wrap_words(content, max(1, width - len(lead)))
                lines.append(lead + wrapped[0])
                lines.extend(" " * len(lead) + line for line in wrapped[1:])
            else:
                lines.extend(wrap_words(content, width))
                lines.append("")
        elif t in ("fence", "code_block"):
            code = tok.content[:-1] if tok.content.endswith("\n") else tok.content
            lines.extend(
                f"{_DIM}{truncate_to_width(line, width, '')}{_NORMAL}" for line in code.split("\n")
            )
            lines.append("")

    while lines and lines[-1] == "":
        lines.pop()
    return lines


class DocsView:
    """Shows documentation text, or a placeholder when there is none."""

    PLACEHOLDER = "This is where docs show up"

    def __init__(self, max_lines: int = 10) -> None:
        self._docs: str | None = None
        self._max_lines = max(1, max_lines)

    def set_docs(self, docs: str | None) -> None:
        self._docs = docs

    def invalidate(self) -> None:
        pass

    def render(self, width: int) -> list[str]:
        if not self._docs or not self._docs.strip():
            return [f"{_DIM}{truncate_to_width(self.PLACEHOLDER, width, '')}{_NORMAL}"]
        lines = render_markdown(self._docs, width)
        if len(lines) > self._max_lines:
            lines = lines[: self._max_lines - 1] + [truncate_to_width("…", width, "")]
        return lines
