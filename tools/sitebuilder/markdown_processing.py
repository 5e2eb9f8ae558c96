from __future__ import annotations

import markdown

from .config import (
    BLOCK_HTML,
    FENCE,
    MARKDOWN_EXTENSIONS,
)
from .utils import normalize_markdown_light


def pad_block_html(md: str) -> str:
    lines, out, in_code = md.splitlines(), [], False
    for i, line in enumerate(lines):
        if line.strip().startswith(("```", "~~~")):
            in_code = not in_code
        if (not in_code) and BLOCK_HTML.match(line):
            if out and out[-1] != "":
                out.append("")
            out.append(line)
            if i + 1 < len(lines) and lines[i + 1].strip() != "":
                out.append("")
            continue
        out.append(line)
    return "\n".join(out)


def map_noncode(md: str, fn):
    parts, last = [], 0
    for m in FENCE.finditer(md):
        pre = md[last : m.start()]
        parts.append(fn(pre))
        parts.append(md[m.start() : m.end()])
        last = m.end()
    parts.append(fn(md[last:]))
    return "".join(parts)


def markdown_to_html(md_text: str) -> str:
    """Render a markdown body to an HTML fragment."""
    md_text = map_noncode(md_text, pad_block_html)
    md_text = map_noncode(md_text, normalize_markdown_light)
    converter = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)
    return converter.convert(md_text)
