"""Shared fixtures and deterministic embedding providers for the router tests."""

import re
import threading
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest

from providers.base import EmbeddingProvider
from tool_router.config import RouterConfig
from tool_router.models import Tool


# ---------------------------------------------------------------------------
# Mock providers
# ---------------------------------------------------------------------------

# Each concept owns one axis; words not in any concept land on the last axis.
CONCEPTS: Dict[str, List[str]] = {
    "weather": ["weather", "temperature", "forecast", "outside", "rain", "sunny"],
    "humor": ["joke", "funny", "programming", "laugh"],
    "email": ["email", "mail", "inbox", "send"],
    "files": ["file", "files", "read", "write", "delete", "disk"],
}
_AXES = list(CONCEPTS)
DIMENSION = len(_AXES) + 1


class ConceptProvider(EmbeddingProvider):
    """Maps related words to the same axis so related texts are near-identical
    and unrelated texts are orthogonal."""

    def __init__(self, name: str = "concept-mock"):
        self._name = name
        self.calls: List[str] = []
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def dimension(self) -> int:
        return DIMENSION

    def embed(self, text: str) -> Optional[List[float]]:
        with self._lock:
            self.calls.append(text)
        words = re.findall(r"\w+", text.lower())
        if not words:
            return None
        vector = [0.0] * DIMENSION
        for word in words:
            for i, concept in enumerate(_AXES):
                if word in CONCEPTS[concept]:
                    vector[i] += 1.0
                    break
        if not any(vector):
            vector[-1] = 1.0
        return vector


class BlockingProvider(ConceptProvider):
    """Blocks every embed call until ``release`` is set."""

    def __init__(self, name: str = "blocking-mock"):
        super().__init__(name)
        self.release = threading.Event()

    def embed(self, text: str) -> Optional[List[float]]:
        self.release.wait(timeout=10)
        return super().embed(text)


class SelectiveFailureProvider(ConceptProvider):
    """Returns ``None`` for any text listed in ``failures``."""

    def __init__(self, failures, name: str = "selective-mock"):
        super().__init__(name)
        self.failures = set(failures)

    def embed(self, text: str) -> Optional[List[float]]:
        if text in self.failures:
            return None
        return super().embed(text)


class FakeEmbeddings:
    """Stands in for ``client.embeddings``; records every request."""

    def __init__(self, fail_on=None):
        self.requests = []
        self.fail_on = set(fail_on or ())

    def create(self, model, input):
        self.requests.append((model, list(input)))
        if self.fail_on.intersection(input):
            raise RuntimeError("bad input")
        return SimpleNamespace(data=[
            SimpleNamespace(embedding=[float(len(text)), 1.0]) for text in input
        ])


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def catalog():
    return [
        Tool(
            name="get_weather",
            description="Get weather information for a location",
            keywords=["天气", "气温", "温度", "weather", "forecast"],
        ),
        Tool(
            name="send_email",
            description="Send an email message",
            keywords=["邮件", "发邮件", "email", "send mail"],
        ),
        Tool(
            name="calculator",
            description="Perform mathematical calculations",
            keywords=["计算", "算一下", "calculate", "+", "-"],
        ),
        Tool(
            name="create_reminder",
            description="Create a reminder",
            keywords=["提醒", "提醒我", "remind", "reminder"],
        ),
        Tool(
            name="get_calendar",
            description="Get calendar events",
            keywords=["日程", "日历", "calendar", "schedule"],
        ),
    ]


@pytest.fixture
def keyword_config():
    """Keyword-only routing; no background work, no disk access."""
    return RouterConfig(enable_semantic_matching=False, enable_disk_cache=False)


@pytest.fixture
def semantic_config(tmp_path):
    def make(**overrides):
        values = dict(
            enable_keyword_matching=False,
            enable_semantic_matching=True,
            enable_disk_cache=False,
            cache_dir=tmp_path,
        )
        values.update(overrides)
        return RouterConfig(**values)
    return make


@pytest.fixture
def provider():
    return ConceptProvider()
