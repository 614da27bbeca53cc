"""Dedalus Labs SDK implementation of the embedding provider interface."""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional, Sequence

from dedalus_labs import Dedalus

from .base import EmbeddingProvider, Vector
from .memo import EmbeddingMemo

logger = logging.getLogger(__name__)

# Native output width of the embedding models we know about. Unknown models
# declare 0, which disables the width check on cached vectors.
MODEL_DIMENSIONS: Dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class DedalusEmbeddingProvider(EmbeddingProvider):
    """Embedding provider using the Dedalus Labs sync client.

    API errors never escape: a failed single embed returns ``None`` and a
    failed batch request is retried item by item so one bad text does not
    sink the others. Successful vectors are memoised in a bounded LRU, so
    routing the same text again costs no request.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "text-embedding-3-small",
        dimension: Optional[int] = None,
        *,
        client=None,
        max_cache_size: int = 500,
    ):
        self._client = client or Dedalus(api_key=api_key or os.getenv("DEDALUS_API_KEY"))
        self._model = model
        self._dimension = dimension if dimension is not None else MODEL_DIMENSIONS.get(model, 0)
        self._memo = EmbeddingMemo(max_size=max_cache_size)

    @property
    def name(self) -> str:
        return f"dedalus/{self._model}"

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> Optional[Vector]:
        cached = self._memo.get(text)
        if cached is not None:
            return cached
        try:
            vector = self._create([text])[0]
        except Exception as e:
            logger.warning("Dedalus embedding failed for %r: %s", text[:60], e)
            return None
        self._memo.put(text, vector)
        return vector

    def embed_batch(self, texts: Sequence[str]) -> List[Optional[Vector]]:
        found: Dict[str, Optional[Vector]] = {}
        for text in texts:
            if text not in found:
                found[text] = self._memo.get(text)
        missing = [text for text, vector in found.items() if vector is None]

        if missing:
            try:
                for text, vector in zip(missing, self._create(missing)):
                    self._memo.put(text, vector)
                    found[text] = vector
            except Exception as e:
                logger.warning("Dedalus batch embedding of %d text(s) failed, retrying one by one: %s", len(missing), e)
                for text in missing:
                    found[text] = self.embed(text)

        return [found[text] for text in texts]

    def clear_cache(self) -> None:
        """Forget every memoised vector."""
        self._memo.clear()

    # ------------------------------------------------------------------

    def _create(self, texts: Sequence[str]) -> List[Vector]:
        response = self._client.embeddings.create(
            model=self._model,
            input=list(texts),
        )
        vectors = [list(d.embedding) for d in response.data]
        if len(vectors) != len(texts):
            raise ValueError(f"expected {len(texts)} embeddings, got {len(vectors)}")
        return vectors
