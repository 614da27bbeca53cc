"""Exact keyword matching: the fast path."""

from __future__ import annotations

from typing import Dict, Sequence

from .models import RoutableTool


class KeywordMatcher:
    """Case-insensitive substring matching of tool keywords against the query.

    Presence is binary; there is no partial scoring.
    """

    def __init__(self, tools: Sequence[RoutableTool]):
        # Lowercase once up front; tools are immutable for the router's lifetime.
        self._keywords = [
            (tool.name, [(kw, kw.lower()) for kw in tool.keywords if kw])
            for tool in tools
        ]

    def match(self, query: str) -> Dict[str, str]:
        """Return ``{tool_name: first matching keyword}``."""
        lowered = query.lower()
        matched: Dict[str, str] = {}
        for name, keywords in self._keywords:
            for original, kw in keywords:
                if kw in lowered:
                    matched[name] = original
                    break
        return matched
