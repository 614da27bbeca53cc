"""Semantic scoring of tools against the embedding cache."""

from __future__ import annotations

import logging
from typing import List

from providers.base import EmbeddingProvider

from .embedding_cache import EmbeddingCache
from .models import ToolScore

logger = logging.getLogger(__name__)


class SemanticMatcher:
    """Scores every cached tool against the query embedding.

    ``score = description_weight * sim(query, description)
              + keyword_weight * max(sim(query, keyword_i), default 0)``
    """

    def __init__(
        self,
        cache: EmbeddingCache,
        provider: EmbeddingProvider,
        *,
        similarity_threshold: float = 0.25,
        max_tools: int = 10,
        description_weight: float = 0.6,
        keyword_weight: float = 0.4,
    ):
        self._cache = cache
        self._provider = provider
        self._similarity_threshold = similarity_threshold
        self._max_tools = max_tools
        self._description_weight = description_weight
        self._keyword_weight = keyword_weight

    def match(self, query: str) -> List[ToolScore]:
        """Tools at or above the threshold, best first, at most ``max_tools``.

        Empty while the cache is not ready or the query cannot be embedded.
        """
        entries = self._cache.snapshot()
        if entries is None:
            logger.debug("Embedding cache not ready; semantic stage skipped")
            return []
        if not entries or not self._provider.is_available():
            return []

        try:
            query_vector = self._provider.embed(query)
        except Exception:
            logger.warning("Embedding provider %s raised on query", self._provider.name, exc_info=True)
            return []
        if not query_vector:
            return []

        similarity = self._provider.cosine_similarity
        scores: List[ToolScore] = []
        for name, cached in entries.items():
            desc_score = similarity(query_vector, cached.description_vector)

            max_keyword_score = 0.0
            for keyword_vector in cached.keyword_vectors:
                max_keyword_score = max(max_keyword_score, similarity(query_vector, keyword_vector))

            combined = self._description_weight * desc_score + self._keyword_weight * max_keyword_score
            if combined >= self._similarity_threshold:
                scores.append(ToolScore(tool_name=name, score=combined))

        # Tool name breaks ties so equal scores order the same on every run.
        scores.sort(key=lambda s: (-s.score, s.tool_name))
        return scores[:self._max_tools]
