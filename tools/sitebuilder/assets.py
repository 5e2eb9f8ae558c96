from __future__ import annotations

import hashlib
import pathlib
import shutil
from typing import Optional

from .config import (
    ABSOLUTE_URL,
    HTML_SRC_OR_HREF,
    MD_LINK_IMG,
    STATIC_DIR_NAME,
)
from .utils import bytes_hash, slugify


def ensure_dir(p: pathlib.Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def is_relative_local(url: str) -> bool:
    if not url:
        return False
    if ABSOLUTE_URL.match(url):
        return False
    if url.startswith(("data:", "#", "/", "mailto:")):
        return False
    return True


def publish_file(src: pathlib.Path, static_out: pathlib.Path) -> str:
    """
    Copy `src` into `static_out` under a content-hashed name and return
    its public URL (``/static/<stem>-<hash><ext>``).
    """
    data = src.read_bytes()
    return publish_bytes(data, src.stem, src.suffix, static_out)


def publish_bytes(
    data: bytes, stem: str, ext: str, static_out: pathlib.Path
) -> str:
    safe_stem = slugify(stem) or "asset"
    fname = f"{safe_stem}-{bytes_hash(data)}{ext.lower()}"
    ensure_dir(static_out)
    out_path = static_out / fname
    if not out_path.exists():
        out_path.write_bytes(data)
    return f"/{STATIC_DIR_NAME}/{fname}"


def resolve_asset_candidate(
    base_dir: pathlib.Path, url: str
) -> Optional[pathlib.Path]:
    cand = (base_dir / url.split("#")[0].split("?")[0]).resolve()
    if cand.exists() and cand.is_file():
        return cand
    return None


def resolve_image(
    value, base_dir: pathlib.Path, static_out: pathlib.Path, label: str
) -> Optional[str]:
    """
    Returns the public URL for a front-matter image reference.

    - Absolute URLs and site paths are passed through.
    - Local relative paths are copied into `static_out`.
    - If the file cannot be found, returns None.
    """
    if isinstance(value, dict):
        value = value.get("publicURL") or value.get("src")
    if not value or not isinstance(value, str):
        return None
    if not is_relative_local(value):
        return value
    src = resolve_asset_candidate(base_dir, value)
    if src is None:
        print(f"! image not found for {label}: {value}")
        return None
    return publish_file(src, static_out)


def rewrite_urls_and_copy_assets(
    text: str,
    base_dir: pathlib.Path,
    static_out: pathlib.Path,
) -> str:
    """
    Rewrite markdown/HTML URLs that are local relative paths by:
    - looking up the source file next to the document
    - copying it to static_out with a hashed name
    - returning the ``/static/...`` URL in its place
    Links to other content documents are left alone.
    """

    def _publish(url: str) -> Optional[str]:
        if not is_relative_local(url) or url.endswith((".md", ".ipynb")):
            return None
        src = resolve_asset_candidate(base_dir, url)
        if src is None:
            return None
        return publish_file(src, static_out)

    def _md_repl(m):
        bang = m.group(1)
        alt = m.group("alt")
        new_url = _publish(m.group("url"))
        if new_url:
            return f"{bang}[{alt}]({new_url})"
        return m.group(0)

    def _html_repl(m):
        attr = m.group("attr")
        new_url = _publish(m.group("url"))
        if new_url:
            return f'{attr}="{new_url}"'
        return m.group(0)

    text = MD_LINK_IMG.sub(_md_repl, text)
    text = HTML_SRC_OR_HREF.sub(_html_repl, text)
    return text


def mirror_tree(src_dir: pathlib.Path, dst_dir: pathlib.Path) -> None:
    """Make `dst_dir` hold exactly the files of `src_dir`."""
    if not src_dir.exists():
        return

    def walk_files(base: pathlib.Path) -> set[str]:
        out = set()
        for p in base.rglob("*"):
            if p.is_file():
                out.add(p.relative_to(base).as_posix())
        return out

    src_files = walk_files(src_dir)
    dst_files = walk_files(dst_dir) if dst_dir.exists() else set()

    ensure_dir(dst_dir)

    for rel in sorted(src_files):
        s = src_dir / rel
        d = dst_dir / rel
        ensure_dir(d.parent)
        if (not d.exists()) or (
            hashlib.sha256(s.read_bytes()).hexdigest()
            != hashlib.sha256(d.read_bytes()).hexdigest()
        ):
            shutil.copy2(s, d)

    for rel in sorted(dst_files - src_files):
        (dst_dir / rel).unlink()
