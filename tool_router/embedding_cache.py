"""Per-tool embedding cache with a write-once readiness transition.

Lifecycle: ``NOT_READY -> LOADING -> READY``. ``initialize`` runs once on
a background worker: it adopts a valid disk record if there is one,
otherwise embeds every tool and persists the result. The finished map is
published with a single assignment under the lock, and ``READY`` never
reverts, so readers either see nothing or the complete map.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from providers.base import EmbeddingProvider, Vector

from .disk_cache import CACHE_VERSION, CacheRecord, CachedEmbedding, DiskCache, compute_tools_hash
from .errors import CacheLoadFailed, CacheSaveFailed, ToolRouterError
from .models import RoutableTool

logger = logging.getLogger(__name__)

CacheErrorCallback = Callable[[ToolRouterError], None]


class CacheState(str, Enum):
    NOT_READY = "not_ready"
    LOADING = "loading"
    READY = "ready"


class EmbeddingCache:
    """Owns the tool-name -> ``CachedEmbedding`` map and its readiness flag."""

    def __init__(
        self,
        tools: Sequence[RoutableTool],
        provider: EmbeddingProvider,
        disk_cache: Optional[DiskCache] = None,
        on_error: Optional[CacheErrorCallback] = None,
    ):
        self._tools = list(tools)
        self._provider = provider
        self._disk_cache = disk_cache
        self._on_error = on_error

        # Guards _entries and _state.
        self._lock = threading.Lock()
        self._entries: Mapping[str, CachedEmbedding] = MappingProxyType({})
        self._state = CacheState.NOT_READY
        self._rejected_widths: List[int] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> CacheState:
        with self._lock:
            return self._state

    @property
    def is_ready(self) -> bool:
        return self.state is CacheState.READY

    def snapshot(self) -> Optional[Mapping[str, CachedEmbedding]]:
        """The complete map once ready, else ``None``. The map is read-only."""
        with self._lock:
            if self._state is not CacheState.READY:
                return None
            return self._entries

    def set_error_callback(self, callback: Optional[CacheErrorCallback]) -> None:
        with self._lock:
            self._on_error = callback

    # ------------------------------------------------------------------
    # Initialization (background worker)
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        with self._lock:
            if self._state is not CacheState.NOT_READY:
                return
            self._state = CacheState.LOADING

        tools_hash = compute_tools_hash(self._tools)
        provider_name = self._provider.name

        entries = self._load_from_disk(tools_hash, provider_name)
        if entries is not None:
            logger.info("Loaded embeddings for %d tool(s) from %s", len(entries), self._disk_cache.path)
        else:
            entries = self._compute()
            logger.info("Computed embeddings for %d of %d tool(s)", len(entries), len(self._tools))
            if self._disk_cache is not None:
                self._save_to_disk(CacheRecord(
                    version=CACHE_VERSION,
                    tools_hash=tools_hash,
                    provider_name=provider_name,
                    embeddings=entries,
                ))

        with self._lock:
            self._entries = MappingProxyType(dict(entries))
            self._state = CacheState.READY

    def _load_from_disk(self, tools_hash: str, provider_name: str) -> Optional[Dict[str, CachedEmbedding]]:
        if self._disk_cache is None:
            return None
        try:
            record = self._disk_cache.load()
        except CacheLoadFailed as e:
            logger.warning("Discarding unreadable embedding cache %s: %s", self._disk_cache.path, e.cause)
            self._disk_cache.clear()
            self._report(e)
            return None

        if record is None:
            return None
        if not record.matches(tools_hash, provider_name):
            logger.warning("Discarding stale embedding cache %s", self._disk_cache.path)
            self._disk_cache.clear()
            self._report(CacheLoadFailed(
                f"stale record (version={record.version}, provider={record.provider_name!r})"
            ))
            return None
        return dict(record.embeddings)

    def _save_to_disk(self, record: CacheRecord) -> None:
        try:
            self._disk_cache.save(record)
        except CacheSaveFailed as e:
            logger.warning("Could not persist embedding cache %s: %s", self._disk_cache.path, e.cause)
            self._report(e)
            return
        logger.info("Saved embedding cache to %s", self._disk_cache.path)

    def _compute(self) -> Dict[str, CachedEmbedding]:
        entries: Dict[str, CachedEmbedding] = {}
        self._rejected_widths = []
        for tool in self._tools:
            keywords = list(tool.keywords)
            vectors = self._embed_batch([tool.description] + keywords)

            description_vector = vectors[0]
            if description_vector is None:
                logger.debug("No description embedding for %s; skipping tool", tool.name)
                continue

            entries[tool.name] = CachedEmbedding(
                name=tool.name,
                description=tool.description,
                description_vector=description_vector,
                keywords=tuple(keywords),
                keyword_vectors=tuple(v for v in vectors[1:] if v is not None),
            )

        if self._rejected_widths:
            logger.warning(
                "Dropped %d vector(s) of width %s; provider %s declares dimension %d",
                len(self._rejected_widths),
                ", ".join(str(w) for w in sorted(set(self._rejected_widths))),
                self._provider.name,
                self._provider.dimension,
            )
        return entries

    def _embed_batch(self, texts: List[str]) -> List[Optional[Vector]]:
        try:
            vectors = list(self._provider.embed_batch(texts))
        except Exception:
            logger.warning("Embedding provider %s raised; treating batch as failed", self._provider.name, exc_info=True)
            return [None] * len(texts)
        if len(vectors) != len(texts):
            logger.warning(
                "Embedding provider %s returned %d vector(s) for %d text(s)",
                self._provider.name, len(vectors), len(texts),
            )
            return [None] * len(texts)
        return [self._checked(v) for v in vectors]

    def _checked(self, vector: Optional[Vector]) -> Optional[Vector]:
        if vector is None:
            return None
        dimension = self._provider.dimension
        if dimension > 0 and len(vector) != dimension:
            self._rejected_widths.append(len(vector))
            return None
        return [float(x) for x in vector]

    def _report(self, error: ToolRouterError) -> None:
        with self._lock:
            callback = self._on_error
        if callback is None:
            return
        try:
            callback(error)
        except Exception:
            logger.warning("Cache error callback raised", exc_info=True)
