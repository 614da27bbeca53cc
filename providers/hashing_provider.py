"""Offline embedding provider based on feature hashing.

Needs no model download and no network. Word tokens and their character
trigrams are hashed into a fixed number of buckets with a signed weight,
then the vector is L2-normalised. Texts sharing words (or word stems) end
up close; unrelated texts are near-orthogonal. Good enough as a default
and for development; plug in a real model for production-quality matches.
"""

from __future__ import annotations

import hashlib
import math
import re
from typing import List, Optional

from .base import EmbeddingProvider, Vector

_WORD_PATTERN = re.compile(r"\w+", re.UNICODE)


class HashingEmbeddingProvider(EmbeddingProvider):
    """Deterministic bag-of-words embeddings via signed feature hashing."""

    def __init__(self, dimension: int = 256, trigram_weight: float = 0.5):
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self._dimension = dimension
        self._trigram_weight = trigram_weight

    @property
    def name(self) -> str:
        return f"hashing-{self._dimension}"

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> Optional[Vector]:
        tokens = _WORD_PATTERN.findall(text.lower())
        if not tokens:
            return None

        vector = [0.0] * self._dimension
        for token in tokens:
            self._add_feature(vector, token, 1.0)
            for gram in _trigrams(token):
                self._add_feature(vector, gram, self._trigram_weight)

        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            return None
        return [v / norm for v in vector]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _add_feature(self, vector: List[float], feature: str, weight: float) -> None:
        # hashlib rather than hash(): must be stable across processes
        # because vectors are persisted to disk.
        digest = hashlib.blake2b(feature.encode("utf-8"), digest_size=8).digest()
        bucket = int.from_bytes(digest[:4], "big") % self._dimension
        sign = 1.0 if digest[4] & 1 else -1.0
        vector[bucket] += sign * weight


def _trigrams(token: str) -> List[str]:
    padded = f"#{token}#"
    return [padded[i:i + 3] for i in range(len(padded) - 2)]
