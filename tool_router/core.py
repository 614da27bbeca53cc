"""ToolRouter: the main orchestrator.

Picks, for one piece of user text, the subset of a tool catalog worth
sending to an LLM call instead of the whole catalog.

Flow per call (first stage that produces something wins):
  0. Greeting / too-short input → skip, no tools.
  1. Keyword matching → matched tools + their groups, confidence 1.0.
  2. Semantic matching against cached embeddings → top tools + their
     groups, confidence = mean score.
  3. Fallback → the entire catalog, confidence 0.0.

Embeddings are built (or loaded from disk) once on a background worker
started by the constructor. ``route`` never waits for it: until the cache
is ready the semantic stage simply yields nothing.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Generic, List, Optional, Sequence, Set

from providers.base import EmbeddingProvider
from providers.hashing_provider import HashingEmbeddingProvider

from .config import RouterConfig, default_cache_dir
from .disk_cache import DiskCache
from .embedding_cache import CacheErrorCallback, CacheState, EmbeddingCache
from .errors import RouterTimeoutError
from .greeting import GreetingDetector
from .groups import expand_with_groups
from .keywords import KeywordMatcher
from .models import DebugInfo, MatchMethod, RouteResult, T, ToolScore
from .semantic import SemanticMatcher

logger = logging.getLogger(__name__)


class ToolRouter(Generic[T]):
    """Multi-stage tool router with a lazily built embedding index."""

    def __init__(
        self,
        tools: Sequence[T],
        config: Optional[RouterConfig] = None,
        embedding_provider: Optional[EmbeddingProvider] = None,
        *,
        on_cache_error: Optional[CacheErrorCallback] = None,
    ):
        self._tools: List[T] = list(tools)
        self._config = config or RouterConfig()
        self._provider = embedding_provider or HashingEmbeddingProvider()

        names = [t.name for t in self._tools]
        if len(set(names)) != len(names):
            duplicates = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"tool names must be unique: {', '.join(duplicates)}")

        # Sub-systems
        self._greeting = GreetingDetector(
            self._config.greeting_patterns,
            min_input_length=self._config.min_input_length,
        )
        self._keywords = KeywordMatcher(self._tools)
        self._disk_cache = self._make_disk_cache()
        self._cache = EmbeddingCache(
            self._tools,
            self._provider,
            disk_cache=self._disk_cache if self._config.enable_disk_cache else None,
            on_error=on_cache_error,
        )
        self._semantic = SemanticMatcher(
            self._cache,
            self._provider,
            similarity_threshold=self._config.similarity_threshold,
            max_tools=self._config.max_tools,
            description_weight=self._config.description_weight,
            keyword_weight=self._config.keyword_weight,
        )

        self._ready: Future = self._start_background_init()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _start_background_init(self) -> Future:
        if not self._config.enable_semantic_matching:
            done: Future = Future()
            done.set_result(None)
            return done

        # One worker, one job: the executor is released right away and its
        # thread exits once the cache is built.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tool-router-embeddings")
        try:
            return executor.submit(self._cache.initialize)
        finally:
            executor.shutdown(wait=False)

    def wait_for_ready(self, timeout: Optional[float] = None) -> None:
        """Block until the embedding cache is ready.

        With a timeout, raises ``RouterTimeoutError`` when it elapses; the
        background work is not cancelled and later calls see the cache
        once it finishes.
        """
        try:
            self._ready.result(timeout=timeout)
        except FutureTimeoutError:
            raise RouterTimeoutError(timeout) from None

    @property
    def is_ready(self) -> bool:
        if not self._config.enable_semantic_matching:
            return True
        return self._cache.is_ready

    @property
    def cache_state(self) -> CacheState:
        return self._cache.state

    def set_on_cache_error(self, callback: Optional[CacheErrorCallback]) -> None:
        """Observe ``CacheLoadFailed`` / ``CacheSaveFailed``; called on the worker thread."""
        self._cache.set_error_callback(callback)

    def clear_disk_cache(self) -> None:
        """Delete this configuration's cache file, if any."""
        self._disk_cache.clear()

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def route(self, text: str, context: Optional[Sequence[str]] = None) -> RouteResult[T]:
        """Route user text to the relevant tools. Never raises.

        ``context`` holds prior conversation lines; the last
        ``config.context_window`` of them are prepended to ``text``.
        Keyword matches are returned in full; ``config.max_tools`` caps only
        the semantic stage.
        """
        if context:
            window = self._config.context_window
            recent = list(context)[-window:] if window else []
            text = " ".join(recent + [text])

        start = time.perf_counter()

        # --- Stage 0: greeting / chit-chat ---
        if self._greeting.should_skip(text):
            logger.debug("Skipping tool matching for %r", text[:60])
            return RouteResult.skip(self._debug(text, [], start))

        # --- Stage 1: keywords ---
        if self._config.enable_keyword_matching:
            matched = self._keywords.match(text)
            if matched:
                expanded = expand_with_groups(matched, self._config.tool_groups)
                tools = [t for t in self._tools if t.name in expanded]
                scores = [
                    ToolScore(tool_name=name, score=1.0, matched_keyword=kw)
                    for name, kw in matched.items()
                ]
                logger.debug("Keyword match: %s", ", ".join(sorted(expanded)))
                return RouteResult(
                    tools=tools,
                    confidence=1.0,
                    method=MatchMethod.KEYWORD,
                    debug_info=self._debug(text, scores, start),
                )

        # --- Stage 2: semantic ---
        if self._config.enable_semantic_matching:
            scores = self._semantic.match(text)
            if scores:
                selected = self._expand_semantic(scores)
                tools = [t for t in self._tools if t.name in selected]
                confidence = min(1.0, max(0.0, sum(s.score for s in scores) / len(scores)))
                logger.debug("Semantic match: %s (confidence %.3f)", ", ".join(sorted(selected)), confidence)
                return RouteResult(
                    tools=tools,
                    confidence=confidence,
                    method=MatchMethod.SEMANTIC,
                    debug_info=self._debug(text, scores, start),
                )

        # --- Stage 3: fallback ---
        logger.debug("No match for %r; falling back to all %d tool(s)", text[:60], len(self._tools))
        return RouteResult(
            tools=list(self._tools),
            confidence=0.0,
            method=MatchMethod.FALLBACK,
            debug_info=self._debug(text, [], start),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _expand_semantic(self, scores: List[ToolScore]) -> Set[str]:
        """Group-expand the scored tools without exceeding ``max_tools``.

        Scored tools always stay; group members fill the remaining slots
        in group order.
        """
        scored = [s.tool_name for s in scores]
        selected = set(scored)
        extras = expand_with_groups(scored, self._config.tool_groups) - selected
        for group in self._config.tool_groups:
            for name in group:
                if len(selected) >= self._config.max_tools:
                    return selected
                if name in extras:
                    selected.add(name)
                    extras.discard(name)
        return selected

    def _debug(self, text: str, scores: List[ToolScore], start: float) -> Optional[DebugInfo]:
        if not self._config.enable_debug_info:
            return None
        return DebugInfo(input=text, scores=list(scores), elapsed_time=time.perf_counter() - start)

    def _make_disk_cache(self) -> DiskCache:
        cache_dir = self._config.cache_dir or default_cache_dir()
        return DiskCache(Path(cache_dir) / self._config.cache_file_name)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def all_tools(self) -> List[T]:
        return list(self._tools)

    @property
    def config(self) -> RouterConfig:
        return self._config

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        return self._provider

    @property
    def cache_path(self) -> Path:
        return self._disk_cache.path
