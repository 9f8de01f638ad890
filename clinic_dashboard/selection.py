from __future__ import annotations

from typing import Optional, Sequence

from .models import DateBucket


class SelectionState:
    """Which day bucket the operator is looking at.

    In accordion mode the selection doubles as the single expanded bucket and
    ``toggle`` can close it again. A selection whose bucket disappears is left
    as is unless ``auto_advance`` is set.
    """

    def __init__(self, accordion: bool = False, auto_advance: bool = False):
        self.accordion = accordion
        self.auto_advance = auto_advance
        self._current: Optional[str] = None

    def select(self, key: str) -> None:
        self._current = key

    def current_selection(self) -> Optional[str]:
        return self._current

    def toggle(self, key: str) -> None:
        if self.accordion and self._current == key:
            self._current = None
        else:
            self._current = key

    def is_expanded(self, key: str) -> bool:
        return self._current == key

    def clear(self) -> None:
        self._current = None

    def ensure_default(self, buckets: Sequence[DateBucket]) -> None:
        """After a load, pick the earliest bucket if nothing is selected yet."""
        if self._current is None and buckets:
            self._current = buckets[0].key

    def resolve(self, buckets: Sequence[DateBucket]) -> Optional[DateBucket]:
        for bucket in buckets:
            if bucket.key == self._current:
                return bucket
        if self.auto_advance and self._current is not None and buckets:
            self._current = buckets[0].key
            return buckets[0]
        return None
