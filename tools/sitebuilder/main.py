#!/usr/bin/env python3
"""
Static site builder for the portfolio/blog.

- content/**/*.md (YAML front-matter) and content/**/*.ipynb -> content store
- Pages:
  /                 flagship + other projects (ascending `order`),
                    most recent blog posts (descending `date`, capped)
  /blog/            every blog post, newest first
  /<post slug>/     one page per blog post
- static/ is copied to the output root, referenced images are copied to
  public/static/ under content-hashed names
- site.yml: title, author, description, recent_posts, sections
"""

from __future__ import annotations

import argparse
import pathlib
import shutil
import sys
import tempfile
from typing import List, Optional

from .assets import ensure_dir, mirror_tree
from .config import (
    ROOT,
    STATIC_DIR_NAME,
    TEMPLATE_DIR,
    load_site_config,
)
from .errors import ContentError
from .pages import Page, all_pages
from .render import make_env, render_page
from .store import ContentStore

STYLESHEET = "layout.css"


def page_output_path(out_dir: pathlib.Path, page: Page) -> pathlib.Path:
    parts = [p for p in page.path.split("/") if p]
    out_path = out_dir.joinpath(*parts, "index.html")
    base = out_dir.resolve()
    if base not in out_path.resolve().parents:
        raise ContentError(f"page {page.path} would be written outside {out_dir}")
    return out_path


def _is_within(path: pathlib.Path, other: pathlib.Path) -> bool:
    return path == other or other in path.parents


def check_output_dir(root: pathlib.Path, out_dir: pathlib.Path) -> None:
    """Refuse output directories that overlap the site's sources."""
    out = out_dir.resolve()
    root = root.resolve()
    sources = (root / "content", root / "static")
    for src in (root,) + sources:
        if _is_within(src, out):
            raise ContentError(
                f"output directory {out_dir} would replace site sources at {src}"
            )
    for src in sources:
        if _is_within(out, src):
            raise ContentError(
                f"output directory {out_dir} is inside site sources at {src}"
            )


def build_site(
    root: pathlib.Path = ROOT,
    out_dir: Optional[pathlib.Path] = None,
    year: Optional[int] = None,
) -> List[Page]:
    root = pathlib.Path(root)
    out_dir = pathlib.Path(out_dir) if out_dir else root / "public"
    content_dir = root / "content"

    if not content_dir.is_dir():
        raise FileNotFoundError(f"content directory missing: {content_dir}")
    check_output_dir(root, out_dir)

    site = load_site_config(root)

    # out_dir is only replaced after the whole site rendered into staging
    ensure_dir(out_dir.parent)
    staging = pathlib.Path(
        tempfile.mkdtemp(prefix=f".{out_dir.name}-", dir=out_dir.parent)
    )
    staging.chmod(0o755)
    try:
        pages = _build_into(root, content_dir, staging, site, year)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    if out_dir.exists():
        shutil.rmtree(out_dir)
    staging.rename(out_dir)
    for page in pages:
        print(f"✓ wrote {page.path}")
    return pages


def _build_into(root, content_dir, out_dir, site, year) -> List[Page]:
    mirror_tree(root / "static", out_dir)
    if not (out_dir / STYLESHEET).exists():
        shutil.copy2(TEMPLATE_DIR / STYLESHEET, out_dir / STYLESHEET)

    store = ContentStore.load(content_dir, out_dir / STATIC_DIR_NAME)
    pages = all_pages(store, site)

    seen = {}
    for page in pages:
        if page.path in seen:
            raise ContentError(
                f"two pages render to {page.path}: "
                f"{seen[page.path].title!r} and {page.title!r}"
            )
        seen[page.path] = page

    env = make_env(root)
    for page in pages:
        html = render_page(
            env,
            page.template,
            page.path,
            page.title,
            site,
            year=year,
            **page.context,
        )
        out_path = page_output_path(out_dir, page)
        ensure_dir(out_path.parent)
        out_path.write_text(html, encoding="utf-8")

    return pages


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Build the portfolio/blog static site."
    )
    parser.add_argument(
        "--root",
        type=pathlib.Path,
        default=ROOT,
        help="site root holding content/, static/ and site.yml",
    )
    parser.add_argument(
        "--out",
        type=pathlib.Path,
        default=None,
        help="output directory (default: <root>/public)",
    )
    args = parser.parse_args(argv)

    try:
        pages = build_site(args.root, args.out)
    except (FileNotFoundError, ContentError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"✓ built {len(pages)} pages")


if __name__ == "__main__":
    main()
