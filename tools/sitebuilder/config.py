#!/usr/bin/env python3
from __future__ import annotations

import pathlib
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from .errors import ContentError

# ---------- Paths

# This assumes config.py sits in tools/sitebuilder/ at the repo root.
ROOT = pathlib.Path(__file__).resolve().parents[2]
TEMPLATE_DIR = pathlib.Path(__file__).resolve().parent / "templates"
SITE_FILE = "site.yml"

# ---------- Config

STATIC_DIR_NAME = "static"
CONTENT_SUFFIXES = (".md", ".ipynb")
BLOG_PATTERN = "blog"
BLOG_PATH = "/blog/"
DEFAULT_RECENT_POSTS = 3
GENERATOR_NAME = "Jinja"
GENERATOR_URL = "https://jinja.palletsprojects.com/"

DEFAULT_SECTIONS = (
    {"title": "Can it be done in React Web?", "pattern": "react-web"},
    {"title": "Other Projects", "pattern": "other"},
)

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "toc", "sane_lists"]

# Some shared regexes

MD_LINK_IMG = re.compile(
    r'(!?)\[(?P<alt>[^\]]*)\]\((?P<url>[^)\s]+)(?:\s+"[^"]*")?\)'
)
HTML_SRC_OR_HREF = re.compile(
    r'(?P<attr>\bsrc\b|\bhref\b)\s*=\s*([\'"])(?P<url>[^\'"]+)\2'
)
ATTACHMENT_URL = re.compile(r'\battachment:(?P<name>[^)\s"\']+)')
BLOCK_HTML = re.compile(
    r'^(<(?P<tag>(div|table|figure|video|iframe|details|summary|blockquote)\b)'
    r'[\s\S]*?>[\s\S]*?</(?P=tag)>)$',
    re.MULTILINE,
)
FENCE = re.compile(r"(^```.*?$)(.*?)(^```$)",
                   re.MULTILINE | re.DOTALL)
H1_RE = re.compile(r'^\s*#\s+(.+?)\s*$', re.MULTILINE)
SPACES_EOL = re.compile(r'[ \t]+$', re.MULTILINE)
SLUG_RE = re.compile(r"[^a-z0-9-]+")
ABSOLUTE_URL = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*://')


@dataclass
class Section:
    title: str
    pattern: str


@dataclass
class SiteConfig:
    """Site-wide metadata read from ``site.yml``."""

    title: str = ""
    author: str = ""
    description: str = ""
    recent_posts: int = DEFAULT_RECENT_POSTS
    sections: List[Section] = field(
        default_factory=lambda: [Section(**s) for s in DEFAULT_SECTIONS]
    )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SiteConfig":
        data = data or {}
        cfg = cls(
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            description=str(data.get("description") or ""),
        )
        if data.get("recent_posts") is not None:
            try:
                cfg.recent_posts = max(int(data["recent_posts"]), 0)
            except (TypeError, ValueError) as e:
                raise ContentError(
                    f"recent_posts must be a number, got {data['recent_posts']!r}"
                ) from e
        sections = data.get("sections")
        if sections:
            cfg.sections = [
                Section(
                    title=str(s.get("title") or ""),
                    pattern=str(s.get("pattern") or ""),
                )
                for s in sections
                if isinstance(s, dict) and s.get("pattern")
            ]
            for s in cfg.sections:
                try:
                    re.compile(s.pattern)
                except re.error as e:
                    raise ContentError(
                        f"invalid pattern {s.pattern!r} for section {s.title!r}: {e}"
                    ) from e
        return cfg


def load_site_config(root: pathlib.Path = ROOT) -> SiteConfig:
    path = root / SITE_FILE
    if not path.exists():
        print(f"- no {SITE_FILE} in {root}, using defaults")
        return SiteConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ContentError(f"invalid {path}: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ContentError(f"{path} must be a mapping")
    return SiteConfig.from_dict(data)
