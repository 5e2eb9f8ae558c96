from __future__ import annotations

import hashlib
import re
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

import yaml

from .config import (
    SLUG_RE,
    SPACES_EOL,
)
from .errors import FrontmatterError


def slugify(s: str) -> str:
    return re.sub(r"-{2,}", "-", SLUG_RE.sub("-", s.lower()).strip("-"))


def natural_key(s: str):
    return [int(t) if t.isdigit() else t for t in re.split(r'(\d+)', s.lower())]


def bytes_hash(data: bytes, length: int = 8) -> str:
    return hashlib.sha256(data).hexdigest()[:length]


def _norm_text(s: str) -> str:
    return s.replace('\r\n', '\n').replace('\r', '\n').lstrip('\ufeff')


def coerce_date(v) -> Optional[date]:
    """Best-effort conversion of a front-matter value to a ``date``."""
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        s = v.strip().strip('"').strip("'")
        try:
            return date.fromisoformat(s[:10])
        except ValueError:
            return None
    return None


def format_display_date(d: Optional[date]) -> str:
    # "D MMMM YYYY", e.g. 3 March 2020
    if d is None:
        return ""
    return f"{d.day} {d:%B %Y}"


def parse_frontmatter(text: str) -> Tuple[Optional[Dict[str, Any]], str]:
    s = text.lstrip()
    if not s.startswith("---\n") and not s.startswith("---\r\n"):
        return None, text

    lines = s.splitlines(keepends=True)
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            fm_text = "".join(lines[1:i])
            body = "".join(lines[i + 1 :])
            try:
                fm = yaml.safe_load(fm_text) or {}
            except yaml.YAMLError as e:
                raise FrontmatterError(f"invalid front-matter: {e}") from e
            if not isinstance(fm, dict):
                raise FrontmatterError(
                    f"front-matter must be a mapping, got {type(fm).__name__}"
                )
            return fm, body
    return None, text


def normalize_markdown_light(md: str) -> str:
    md = SPACES_EOL.sub("", md)
    md = re.sub(r'\n{3,}', '\n\n', md)
    md = re.sub(r'([^\n])\n(#{1,6}\s)', r'\1\n\n\2', md)
    return md


def route_path(path: str) -> str:
    """Normalise a site path to ``/a/b/`` form (``/`` for the root)."""
    parts = [p for p in path.split("/") if p]
    if not parts:
        return "/"
    return "/" + "/".join(parts) + "/"
