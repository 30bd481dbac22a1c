"""Bounded, write-once cache of calorie estimates keyed by meal text."""

import re
from collections import OrderedDict
from dataclasses import dataclass

from health_advisor.domain.estimates import FoodEstimate

DEFAULT_MAX_ENTRIES = 500

_WHITESPACE = re.compile(r"\s+")


def normalize_key(text: str) -> str:
    """Return the cache key for meal text: trimmed, case-folded, single-spaced."""
    return _WHITESPACE.sub(" ", text.strip()).casefold()


@dataclass(frozen=True)
class CacheEntry:
    estimate: FoodEstimate
    is_ai: bool


class EstimateCache:
    """In-memory side table of estimates, evicting the oldest entries first."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and normalize_key(text) in self._entries

    def get(self, text: str) -> CacheEntry | None:
        """Return the cached entry for meal text, if present."""
        return self._entries.get(normalize_key(text))

    def put(self, text: str, estimate: FoodEstimate, *, is_ai: bool) -> CacheEntry:
        """Store an estimate unless the key already exists; return the kept entry."""
        key = normalize_key(text)
        existing = self._entries.get(key)
        if existing is not None:
            return existing
        entry = CacheEntry(estimate=estimate, is_ai=is_ai)
        self._entries[key] = entry
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        return entry

    def clear(self) -> None:
        """Drop every cached estimate."""
        self._entries.clear()
