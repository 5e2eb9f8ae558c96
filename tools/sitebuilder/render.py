from __future__ import annotations

import pathlib
from datetime import datetime
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .config import (
    BLOG_PATH,
    GENERATOR_NAME,
    GENERATOR_URL,
    TEMPLATE_DIR,
    SiteConfig,
)
from .utils import route_path

NAV_LINKS = (
    ("Projects", "/"),
    ("Blog", BLOG_PATH),
)


def make_env(root: Optional[pathlib.Path] = None) -> Environment:
    """Templates under ``<root>/templates`` shadow the bundled ones."""
    search = []
    if root is not None and (root / "templates").is_dir():
        search.append(str(root / "templates"))
    search.append(str(TEMPLATE_DIR))
    return Environment(
        loader=FileSystemLoader(search),
        autoescape=select_autoescape(["html", "xml", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def nav_links(current: str) -> List[Dict[str, Any]]:
    here = route_path(current)
    return [
        {"title": title, "href": href, "active": route_path(href) == here}
        for title, href in NAV_LINKS
    ]


def render_page(
    env: Environment,
    template: str,
    path: str,
    title: str,
    site: SiteConfig,
    year: Optional[int] = None,
    **context: Any,
) -> str:
    tpl = env.get_template(template)
    return tpl.render(
        site=site,
        site_title=site.title or "",
        page_title=title,
        current_path=route_path(path),
        nav=nav_links(path),
        year=year or datetime.now().year,
        generator={"name": GENERATOR_NAME, "url": GENERATOR_URL},
        blog_path=BLOG_PATH,
        **context,
    )
