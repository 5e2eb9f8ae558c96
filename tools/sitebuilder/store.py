"""
Build-time content store.

Every markdown document (and notebook) under the content directory becomes
a frozen ``ContentEntry``. Pages ask the store for entries with `query`
(path filter, stable sort, limit) or resolve one entry with `get_by_slug`.
"""

from __future__ import annotations

import pathlib
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from .assets import resolve_image, rewrite_urls_and_copy_assets
from .config import CONTENT_SUFFIXES
from .errors import (
    ContentError,
    DuplicateSlugError,
    EntryNotFound,
    FrontmatterError,
)
from .markdown_processing import markdown_to_html
from .notebooks import read_notebook
from .utils import (
    _norm_text,
    bytes_hash,
    coerce_date,
    format_display_date,
    natural_key,
    parse_frontmatter,
    route_path,
    slugify,
)


@dataclass(frozen=True)
class Image:
    public_url: str


@dataclass(frozen=True)
class ContentEntry:
    id: str
    title: str
    slug: str
    source_path: str
    body_html: str = ""
    date: Optional[date] = None
    excerpt: Optional[str] = None
    image: Optional[Image] = None
    order: Optional[float] = None

    @property
    def date_display(self) -> str:
        return format_display_date(self.date)


def slug_for(rel_path: str) -> str:
    """
    `blog/My Post.md` -> `/blog/my-post/`
    `blog/my-post/index.md` -> `/blog/my-post/`
    """
    parts = pathlib.PurePosixPath(rel_path).with_suffix("").parts
    if parts and parts[-1] == "index":
        parts = parts[:-1]
    return route_path("/".join(slugify(p) for p in parts))


def _coerce_order(v) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _frontmatter_slug(value, rel_path: str) -> str:
    slug = route_path(str(value))
    if any(p in (".", "..") for p in slug.split("/")):
        raise FrontmatterError(
            f"{rel_path}: slug {value!r} may not contain . or .. segments"
        )
    return slug


def make_entry(
    rel_path: str,
    fm: Dict[str, Any],
    body_html: str,
    base_dir: pathlib.Path,
    static_out: pathlib.Path,
) -> ContentEntry:
    stem = pathlib.PurePosixPath(rel_path).stem
    if stem == "index":
        stem = pathlib.PurePosixPath(rel_path).parent.name or stem
    title = fm.get("title") or stem.replace("-", " ").replace("_", " ").title()

    image_url = resolve_image(fm.get("image"), base_dir, static_out, rel_path)
    excerpt = fm.get("excerpt")

    return ContentEntry(
        id=bytes_hash(rel_path.encode("utf-8"), 16),
        title=str(title),
        slug=(
            _frontmatter_slug(fm["slug"], rel_path)
            if fm.get("slug")
            else slug_for(rel_path)
        ),
        source_path=rel_path,
        body_html=body_html,
        date=coerce_date(fm.get("date")),
        excerpt=str(excerpt) if excerpt else None,
        image=Image(image_url) if image_url else None,
        order=_coerce_order(fm.get("order")),
    )


def read_markdown(path: pathlib.Path, static_out: pathlib.Path):
    text = _norm_text(path.read_text(encoding="utf-8"))
    try:
        fm, body = parse_frontmatter(text)
    except FrontmatterError as e:
        raise FrontmatterError(f"{path}: {e}") from e
    body = rewrite_urls_and_copy_assets(body, path.parent, static_out)
    return fm or {}, markdown_to_html(body)


def _sort_entries(
    entries: List[ContentEntry], key: str, descending: bool
) -> List[ContentEntry]:
    # sorted() is stable, including with reverse=True
    present = [e for e in entries if getattr(e, key) is not None]
    missing = [e for e in entries if getattr(e, key) is None]
    present = sorted(present, key=lambda e: getattr(e, key), reverse=descending)
    return present + missing


class ContentStore:
    def __init__(self, entries: Sequence[ContentEntry] = ()):
        self._entries: List[ContentEntry] = list(entries)
        self._by_slug: Dict[str, ContentEntry] = {}
        for e in self._entries:
            other = self._by_slug.get(e.slug)
            if other is not None:
                raise DuplicateSlugError(
                    f"{e.source_path} and {other.source_path} "
                    f"both resolve to {e.slug}"
                )
            self._by_slug[e.slug] = e

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @classmethod
    def load(
        cls, content_dir: pathlib.Path, static_out: pathlib.Path
    ) -> "ContentStore":
        files = [
            p
            for p in content_dir.rglob("*")
            if p.is_file()
            and p.suffix.lower() in CONTENT_SUFFIXES
            and ".ipynb_checkpoints" not in p.parts
        ]
        files.sort(key=lambda p: natural_key(p.relative_to(content_dir).as_posix()))

        entries: List[ContentEntry] = []
        for p in files:
            rel = p.relative_to(content_dir).as_posix()
            if p.suffix.lower() == ".ipynb":
                fm, body_html = read_notebook(p, static_out)
            else:
                fm, body_html = read_markdown(p, static_out)
            if fm.get("draft"):
                print(f"- {rel} is a draft, skipping")
                continue
            entries.append(make_entry(rel, fm, body_html, p.parent, static_out))

        print(f"✓ loaded {len(entries)} entries from {content_dir}")
        return cls(entries)

    def query(
        self,
        pattern: Optional[str] = None,
        sort: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[ContentEntry]:
        """
        Entries whose ``/<source path>`` matches `pattern`, optionally
        sorted by the `sort` attribute and truncated to `limit`.

        Entries without a value for the sort key come last.
        """
        result = list(self._entries)
        if pattern:
            try:
                rx = re.compile(pattern)
            except re.error as e:
                raise ContentError(f"invalid path pattern {pattern!r}: {e}") from e
            result = [e for e in result if rx.search("/" + e.source_path)]
        if sort:
            result = _sort_entries(result, sort, descending)
        if limit is not None:
            result = result[: max(limit, 0)]
        return result

    def get_by_slug(self, slug: str) -> ContentEntry:
        entry = self._by_slug.get(route_path(slug))
        if entry is None:
            raise EntryNotFound(f"no content entry with slug {slug!r}")
        return entry
