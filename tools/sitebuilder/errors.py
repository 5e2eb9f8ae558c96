from __future__ import annotations


class ContentError(Exception):
    """Content that cannot be turned into a page."""


class FrontmatterError(ContentError):
    pass


class EntryNotFound(ContentError, LookupError):
    pass


class DuplicateSlugError(ContentError):
    pass
