"""
Page definitions.

Each page resolves its queries against the content store and hands the
results to a template. Rendering happens later in `main.build_site`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .config import BLOG_PATH, BLOG_PATTERN, SiteConfig
from .store import ContentStore


@dataclass
class Page:
    path: str
    template: str
    title: str
    context: Dict[str, Any] = field(default_factory=dict)


def query_blog_posts(store: ContentStore, limit=None):
    return store.query(BLOG_PATTERN, sort="date", descending=True, limit=limit)


def index_page(store: ContentStore, site: SiteConfig) -> Page:
    sections = [
        {
            "title": s.title,
            "entries": store.query(s.pattern, sort="order"),
        }
        for s in site.sections
    ]
    recent = None
    if site.recent_posts:
        recent = query_blog_posts(store, limit=site.recent_posts)
    return Page(
        path="/",
        template="index.html.j2",
        title="Home",
        context={"sections": sections, "recent_posts": recent},
    )


def blog_page(store: ContentStore) -> Page:
    return Page(
        path=BLOG_PATH,
        template="blog.html.j2",
        title="Blog",
        context={"posts": query_blog_posts(store)},
    )


def blog_post_page(store: ContentStore, slug: str) -> Page:
    post = store.get_by_slug(slug)
    return Page(
        path=post.slug,
        template="blog_post.html.j2",
        title=f"Blog - {post.title}",
        context={"post": post},
    )


def all_pages(store: ContentStore, site: SiteConfig) -> List[Page]:
    pages = [index_page(store, site), blog_page(store)]
    for post in query_blog_posts(store):
        pages.append(blog_post_page(store, post.slug))
    return pages
