"""Abstract interface for embedding providers.

Implement ``EmbeddingProvider`` to plug in any embedding backend (a hosted
API, a local model, a deterministic test double) without changing the
router logic. Batch embedding and cosine similarity are plain module-level
helpers so concrete providers can reuse them without inheriting behaviour.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence


Vector = List[float]


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def embed_sequentially(provider: "EmbeddingProvider", texts: Sequence[str]) -> List[Optional[Vector]]:
    """Embed each text with an independent ``provider.embed`` call."""
    return [provider.embed(text) for text in texts]


def cosine_similarity(v1: Sequence[float], v2: Sequence[float]) -> float:
    """Dot product over the product of Euclidean norms.

    Returns 0.0 for empty vectors, zero-norm vectors and vectors whose
    dimensions differ.
    """
    if not v1 or len(v1) != len(v2):
        return 0.0
    dot = sum(a * b for a, b in zip(v1, v2))
    norm1 = math.sqrt(sum(a * a for a in v1))
    norm2 = math.sqrt(sum(b * b for b in v2))
    if norm1 * norm2 == 0:
        return 0.0
    return dot / (norm1 * norm2)


# ---------------------------------------------------------------------------
# Abstract provider
# ---------------------------------------------------------------------------

class EmbeddingProvider(ABC):
    """Synchronous embedding provider.

    Must be sync because routing is a non-blocking call: the query is
    embedded inline while the router scores tools. ``embed`` signals a
    failure for a single text by returning ``None`` and should never raise.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier; changing it invalidates persisted caches."""
        ...

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Declared vector width."""
        ...

    @abstractmethod
    def embed(self, text: str) -> Optional[Vector]:
        """Embed one text, or return ``None`` if it cannot be embedded."""
        ...

    def embed_batch(self, texts: Sequence[str]) -> List[Optional[Vector]]:
        """Embed several texts; ``None`` marks the items that failed."""
        return embed_sequentially(self, texts)

    def cosine_similarity(self, v1: Sequence[float], v2: Sequence[float]) -> float:
        return cosine_similarity(v1, v2)

    def is_available(self) -> bool:
        return True
