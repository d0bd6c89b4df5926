from __future__ import annotations

from css_concat.model import ParsedStylesheet


class StylesheetCache:
    """
    Memo of parsed URL stylesheets, keyed by the literal URL string.

    No TTL, no size bound. Entries live until clear() or until the cache
    object itself is dropped.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ParsedStylesheet] = {}

    def get(self, url: str) -> ParsedStylesheet | None:
        return self._entries.get(url)

    def set(self, url: str, parsed: ParsedStylesheet) -> None:
        self._entries[url] = parsed

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)


_DEFAULT_CACHE = StylesheetCache()


def default_cache() -> StylesheetCache:
    return _DEFAULT_CACHE


def clear_cache() -> None:
    """Empty the process-wide cache used when concat() gets no explicit cache."""
    _DEFAULT_CACHE.clear()
