"""LRU memo of text -> embedding vector.

Keeps the most recently *used* vectors so repeated texts (the same query
routed again, a keyword shared by several tools) skip the provider. When
capacity is exceeded, the least-recently-used entry is evicted.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Optional

from .base import Vector


class EmbeddingMemo:
    """Bounded, thread-safe LRU of embedded texts."""

    def __init__(self, max_size: int = 500):
        self._max_size = max_size
        self._lock = threading.Lock()
        self._vectors: OrderedDict[str, Vector] = OrderedDict()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, text: str) -> Optional[Vector]:
        """Return the memoised vector (and mark it recently used), if any."""
        with self._lock:
            vector = self._vectors.get(text)
            if vector is not None:
                self._vectors.move_to_end(text)
            return vector

    def put(self, text: str, vector: Vector) -> None:
        """Store a vector, evicting the oldest entry when full."""
        if self._max_size <= 0:
            return
        with self._lock:
            if text in self._vectors:
                self._vectors.move_to_end(text)
            elif len(self._vectors) >= self._max_size:
                self._vectors.popitem(last=False)  # evict oldest
            self._vectors[text] = vector

    def clear(self) -> None:
        with self._lock:
            self._vectors.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._vectors)

    def __contains__(self, text: str) -> bool:
        with self._lock:
            return text in self._vectors
