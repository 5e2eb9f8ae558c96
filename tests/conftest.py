"""Shared fixtures for sitebuilder tests."""

from datetime import date
from pathlib import Path

import pytest
import yaml

from sitebuilder.config import SiteConfig
from sitebuilder.render import make_env, render_page
from sitebuilder.store import ContentEntry


def write_doc(base: Path, rel: str, body: str = "", **frontmatter) -> Path:
    """Write a markdown document with YAML front-matter under `base`."""
    path = base / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    text = ""
    if frontmatter:
        dumped = yaml.safe_dump(frontmatter, sort_keys=False).rstrip()
        text = f"---\n{dumped}\n---\n\n"
    path.write_text(text + body, encoding="utf-8")
    return path


def make_entry(rel: str, **kwargs) -> ContentEntry:
    defaults = {
        "id": rel,
        "title": Path(rel).stem.replace("-", " ").title(),
        "slug": "/" + str(Path(rel).with_suffix("")) + "/",
        "source_path": rel,
        "body_html": "<p>Body of " + rel + "</p>",
    }
    defaults.update(kwargs)
    return ContentEntry(**defaults)


def render(page, site=None, year=2031) -> str:
    site = site or SiteConfig(title="Test Site", author="Test Author")
    return render_page(
        make_env(),
        page.template,
        page.path,
        page.title,
        site,
        year=year,
        **page.context,
    )


@pytest.fixture
def content_dir(tmp_path):
    d = tmp_path / "content"
    d.mkdir()
    return d


@pytest.fixture
def static_out(tmp_path):
    return tmp_path / "public" / "static"


@pytest.fixture
def site_root(tmp_path):
    """A small but complete site: projects, posts, an image and static files."""
    root = tmp_path / "site"
    content = root / "content"
    (root / "static").mkdir(parents=True)
    (root / "static" / "robots.txt").write_text("User-agent: *\n", encoding="utf-8")
    (root / "site.yml").write_text(
        "title: Test Site\nauthor: Test Author\nrecent_posts: 2\n",
        encoding="utf-8",
    )

    write_doc(content, "react-web/b.md", "Second flagship.", title="Flagship B", order=2)
    write_doc(content, "react-web/a.md", "First flagship.", title="Flagship A", order=1)
    (content / "react-web" / "hero.png").write_bytes(b"\x89PNG fake image")
    write_doc(
        content,
        "react-web/c.md",
        "Third flagship.",
        title="Flagship C",
        order=3,
        image="./hero.png",
    )
    write_doc(content, "other/tool.md", "A tool.", title="Tool", order=1)

    write_doc(content, "blog/old.md", "Old post.", title="Old", date=date(2019, 1, 5))
    write_doc(content, "blog/new.md", "New post.", title="New", date=date(2021, 6, 1))
    write_doc(
        content,
        "blog/middle/index.md",
        "Middle post.",
        title="Middle",
        date=date(2020, 3, 3),
        excerpt="The one in the middle.",
    )
    return root
