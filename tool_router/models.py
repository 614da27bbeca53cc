"""Provider-agnostic data types: tools and route results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Protocol, Sequence, TypeVar, runtime_checkable


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

@runtime_checkable
class RoutableTool(Protocol):
    """Anything with a unique name, a description and trigger keywords."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def keywords(self) -> Sequence[str]: ...


@dataclass(frozen=True)
class Tool:
    """A simple concrete routable tool."""
    name: str
    description: str
    keywords: Sequence[str] = ()

    def __post_init__(self):
        object.__setattr__(self, "keywords", tuple(self.keywords))

    @classmethod
    def from_dict(cls, entry: Dict[str, Any]) -> "Tool":
        """Build from a registry-style dict (``name``, ``description``, ``keywords``)."""
        keywords = entry.get("keywords") or ()
        if isinstance(keywords, str):
            keywords = [k.strip() for k in keywords.split(",") if k.strip()]
        return cls(name=entry["name"], description=entry.get("description", ""), keywords=keywords)


T = TypeVar("T", bound=RoutableTool)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class MatchMethod(str, Enum):
    """Which pipeline stage produced a route result."""
    KEYWORD = "keyword"
    SEMANTIC = "semantic"
    SKIPPED = "skipped"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ToolScore:
    tool_name: str
    score: float
    matched_keyword: Optional[str] = None


@dataclass(frozen=True)
class DebugInfo:
    """What the router looked at, how each tool scored, and how long it took (seconds)."""
    input: str
    scores: List[ToolScore] = field(default_factory=list)
    elapsed_time: float = 0.0


@dataclass
class RouteResult(Generic[T]):
    """Standardized result of a routing call."""
    tools: List[T]
    confidence: float = 1.0
    method: MatchMethod = MatchMethod.KEYWORD
    should_skip: bool = False
    debug_info: Optional[DebugInfo] = None

    @classmethod
    def skip(cls, debug_info: Optional[DebugInfo] = None) -> "RouteResult[T]":
        """No tools needed (greeting, chit-chat, too-short input)."""
        return cls(
            tools=[],
            confidence=1.0,
            method=MatchMethod.SKIPPED,
            should_skip=True,
            debug_info=debug_info,
        )

    @property
    def tool_names(self) -> List[str]:
        return [t.name for t in self.tools]
