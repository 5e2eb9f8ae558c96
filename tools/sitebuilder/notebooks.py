from __future__ import annotations

import base64
import copy
import pathlib
from typing import Any, Dict, Tuple

import nbformat
from nbconvert import HTMLExporter
from nbformat import NotebookNode
from nbformat.reader import NotJSONError
from nbformat.validator import ValidationError, validate

from .assets import publish_bytes, rewrite_urls_and_copy_assets
from .config import ATTACHMENT_URL, H1_RE
from .errors import ContentError
from .utils import _norm_text

_HIDDEN_INPUT_TAGS = {"hide-input", "remove-input", "hide_input", "remove_input"}
_HIDDEN_OUTPUT_TAGS = {"hide-output", "remove-output", "hide_output", "remove_output"}
_REMOVE_CELL_TAGS = {"remove-cell", "hide-cell", "remove_cell", "hide_cell"}

_ATTACHMENT_EXT = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/svg+xml": ".svg",
    "image/webp": ".webp",
}


def _tags(cell: NotebookNode) -> set:
    md = cell.get("metadata") or {}
    return set(md.get("tags") or [])


def _is_effectively_empty(cell: NotebookNode) -> bool:
    src = _norm_text(cell.get("source", "")).strip()
    if src:
        return False
    if cell.get("cell_type") == "markdown":
        return not cell.get("attachments")
    if cell.get("cell_type") == "code":
        return not cell.get("outputs")
    return True


def _apply_hidden_flags(cell: NotebookNode):
    c = copy.deepcopy(cell)
    md = c.get("metadata") or {}
    jup = md.get("jupyter") if isinstance(md.get("jupyter"), dict) else {}
    tags = _tags(c)

    if tags & _REMOVE_CELL_TAGS:
        return None

    source_hidden = (
        bool(jup.get("source_hidden"))
        or bool(tags & _HIDDEN_INPUT_TAGS)
        or bool(md.get("source_hidden"))
    )
    if source_hidden:
        if c.get("cell_type") == "markdown":
            return None
        if c.get("cell_type") == "code":
            c["source"] = ""

    outputs_hidden = (
        bool(jup.get("outputs_hidden"))
        or bool(tags & _HIDDEN_OUTPUT_TAGS)
        or bool(md.get("outputs_hidden"))
    )
    if outputs_hidden and c.get("cell_type") == "code":
        c["outputs"] = []
        c["execution_count"] = None

    return c


def filter_and_apply_visibility(nb: NotebookNode) -> None:
    new_cells = []
    for cell in nb.cells:
        cell2 = _apply_hidden_flags(cell)
        if cell2 is None or _is_effectively_empty(cell2):
            continue
        new_cells.append(cell2)
    nb.cells = new_cells


def extract_markdown_attachments(
    cell: NotebookNode, static_out: pathlib.Path
) -> str:
    text = _norm_text(cell.get("source", ""))
    atts = cell.get("attachments") or {}

    def _repl(m):
        name = m.group("name")
        blob = atts.get(name)
        if not blob:
            return m.group(0)
        mime, b64 = next(iter(blob.items()))
        ext = _ATTACHMENT_EXT.get(mime, ".bin")
        stem = pathlib.PurePosixPath(name).stem
        return publish_bytes(base64.b64decode(b64), f"att-{stem}", ext, static_out)

    return ATTACHMENT_URL.sub(_repl, text)


def first_heading(nb: NotebookNode) -> str | None:
    for cell in nb.cells:
        if cell.get("cell_type") != "markdown":
            continue
        m = H1_RE.search(cell.get("source", ""))
        if m:
            return m.group(1).strip()
    return None


def read_notebook(
    path: pathlib.Path, static_out: pathlib.Path
) -> Tuple[Dict[str, Any], str]:
    """
    Load a notebook and return ``(frontmatter, body_html)``.

    Front-matter fields come from the notebook metadata; a missing title
    falls back to the first H1 of a markdown cell.
    """
    try:
        nb = nbformat.read(str(path), as_version=4)
        validate(nb)
    except (ValidationError, NotJSONError) as e:
        raise ContentError(f"invalid notebook {path}: {e}") from e

    filter_and_apply_visibility(nb)

    for cell in nb.cells:
        if cell.get("cell_type") != "markdown":
            continue
        raw = extract_markdown_attachments(cell, static_out)
        cell["source"] = rewrite_urls_and_copy_assets(
            raw, path.parent, static_out
        )
        cell.pop("attachments", None)

    fm = {
        k: nb.metadata[k]
        for k in ("title", "date", "excerpt", "order", "image", "slug", "draft")
        if k in nb.metadata
    }
    if not fm.get("title"):
        heading = first_heading(nb)
        if heading:
            fm["title"] = heading

    exporter = HTMLExporter(
        template_name="basic",
        exclude_input_prompt=True,
        exclude_output_prompt=True,
    )
    body, _ = exporter.from_notebook_node(nb)
    return fm, body
