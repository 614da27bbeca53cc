"""Router configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

from dotenv import find_dotenv, load_dotenv


DEFAULT_GREETING_PATTERNS: Tuple[str, ...] = (
    # Chinese
    "你好", "您好", "嗨", "哈喽",
    "早上好", "下午好", "晚上好", "早安", "晚安",
    "谢谢", "感谢", "多谢",
    "再见", "拜拜", "回见",
    "好的", "是的", "对", "行", "可以",
    "你是谁", "介绍一下", "你能做什么", "帮助",
    # English
    "hi", "hello", "hey", "howdy",
    "good morning", "good afternoon", "good evening", "good night",
    "thanks", "thank you", "thx",
    "bye", "goodbye", "see you",
    "ok", "okay", "yes", "sure", "alright",
)

DEFAULT_CACHE_FILE_NAME = "SemanticToolRouterCache.json"

ENV_PREFIX = "TOOL_ROUTER_"


@dataclass(frozen=True)
class RouterConfig:
    """All tunables for the ToolRouter. Immutable once built."""

    # --- Matching ---
    similarity_threshold: float = 0.25
    max_tools: int = 10
    enable_keyword_matching: bool = True
    enable_semantic_matching: bool = True

    # --- Semantic score blend ---
    description_weight: float = 0.6
    keyword_weight: float = 0.4

    # --- Greeting detection ---
    greeting_patterns: Sequence[str] = DEFAULT_GREETING_PATTERNS
    min_input_length: int = 3

    # --- Tool groups (one match pulls in related tools) ---
    tool_groups: Sequence[Sequence[str]] = field(default_factory=tuple)

    # --- Conversation ---
    context_window: int = 4

    # --- Disk cache ---
    enable_disk_cache: bool = True
    cache_file_name: str = DEFAULT_CACHE_FILE_NAME
    cache_dir: Optional[Path] = None  # None -> platform cache directory

    # --- Debug ---
    enable_debug_info: bool = False

    def __post_init__(self):
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(f"similarity_threshold must be within [0, 1], got {self.similarity_threshold}")
        for name in ("max_tools", "min_input_length", "context_window"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if self.description_weight < 0 or self.keyword_weight < 0:
            raise ValueError("score weights must be >= 0")
        if not self.cache_file_name:
            raise ValueError("cache_file_name must not be empty")

        # Patterns are compared against trimmed, lowercased input.
        patterns = tuple(p.strip().lower() for p in self.greeting_patterns if p.strip())
        object.__setattr__(self, "greeting_patterns", patterns)
        object.__setattr__(self, "tool_groups", tuple(tuple(g) for g in self.tool_groups))
        if self.cache_dir is not None:
            object.__setattr__(self, "cache_dir", Path(self.cache_dir))

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides: Any) -> "RouterConfig":
        """Build a config from ``TOOL_ROUTER_*`` variables (and a ``.env`` file).

        Keyword overrides take precedence over the environment.
        """
        # .env is looked up from the working directory, not from this package.
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))

        readers = {
            "similarity_threshold": float,
            "max_tools": int,
            "enable_keyword_matching": _parse_bool,
            "enable_semantic_matching": _parse_bool,
            "min_input_length": int,
            "enable_disk_cache": _parse_bool,
            "cache_file_name": str,
            "cache_dir": Path,
            "enable_debug_info": _parse_bool,
        }
        values = {}
        for name, parse in readers.items():
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None and raw.strip() != "":
                values[name] = parse(raw.strip())
        values.update(overrides)
        return cls(**values)


def default_cache_dir() -> Path:
    """``$XDG_CACHE_HOME/semantic-tool-router``, else ``~/.cache/semantic-tool-router``."""
    base = os.getenv("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "semantic-tool-router"


def _parse_bool(raw: str) -> bool:
    value = raw.lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {raw!r}")
