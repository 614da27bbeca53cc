"""Tests for the disk cache record format, tools hash and file handling."""

import json

import pytest

from tool_router.disk_cache import (
    CACHE_VERSION,
    CacheRecord,
    CachedEmbedding,
    DiskCache,
    compute_tools_hash,
)
from tool_router.errors import CacheLoadFailed, CacheSaveFailed
from tool_router.models import Tool


def make_record(tools_hash="abc", provider_name="p"):
    return CacheRecord(
        version=CACHE_VERSION,
        tools_hash=tools_hash,
        provider_name=provider_name,
        embeddings={
            "weather": CachedEmbedding(
                name="weather",
                description="Get weather",
                description_vector=[1.0, 0.0],
                keywords=("weather", "rain"),
                keyword_vectors=([1.0, 0.0],),
            )
        },
    )


class TestToolsHash:
    TOOLS = [
        Tool("a", "first tool", ["x", "y"]),
        Tool("b", "second tool", []),
    ]

    def test_order_independent(self):
        assert compute_tools_hash(self.TOOLS) == compute_tools_hash(list(reversed(self.TOOLS)))

    @pytest.mark.parametrize("changed", [
        [Tool("a2", "first tool", ["x", "y"]), Tool("b", "second tool", [])],
        [Tool("a", "first tool!", ["x", "y"]), Tool("b", "second tool", [])],
        [Tool("a", "first tool", ["x"]), Tool("b", "second tool", [])],
        [Tool("a", "first tool", ["y", "x"]), Tool("b", "second tool", [])],
        [Tool("a", "first tool", ["x", "y"])],
        [Tool("a", "first tool", ["x", "y"]), Tool("b", "second tool", []), Tool("c", "third", [])],
    ])
    def test_any_edit_changes_hash(self, changed):
        assert compute_tools_hash(changed) != compute_tools_hash(self.TOOLS)


class TestDiskCache:
    def test_missing_file_loads_none(self, tmp_path):
        assert DiskCache(tmp_path / "cache.json").load() is None

    def test_save_then_load(self, tmp_path):
        cache = DiskCache(tmp_path / "nested" / "cache.json")
        record = make_record()
        cache.save(record)
        assert cache.load() == record

    def test_file_layout(self, tmp_path):
        cache = DiskCache(tmp_path / "cache.json")
        cache.save(make_record())
        data = json.loads(cache.path.read_text(encoding="utf-8"))
        assert set(data) == {"version", "toolsHash", "providerName", "embeddings"}
        entry = data["embeddings"]["weather"]
        assert set(entry) == {"name", "description", "embedding", "keywords", "keywordEmbeddings"}

    def test_no_temp_files_left_behind(self, tmp_path):
        cache = DiskCache(tmp_path / "cache.json")
        cache.save(make_record())
        cache.save(make_record(tools_hash="def"))
        assert [p.name for p in tmp_path.iterdir()] == ["cache.json"]
        assert cache.load().tools_hash == "def"

    @pytest.mark.parametrize("content", [
        "invalid json content",
        "[]",
        json.dumps({"version": 1}),
        json.dumps({"version": 1, "toolsHash": "x", "providerName": "p", "embeddings": {"t": {"name": "t"}}}),
    ])
    def test_corrupt_file_raises_load_failed(self, tmp_path, content):
        path = tmp_path / "cache.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(CacheLoadFailed) as exc_info:
            DiskCache(path).load()
        assert exc_info.value.cause is not None

    def test_unwritable_location_raises_save_failed(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(CacheSaveFailed):
            DiskCache(blocker / "cache.json").save(make_record())

    def test_clear_is_best_effort(self, tmp_path):
        cache = DiskCache(tmp_path / "cache.json")
        cache.clear()
        cache.save(make_record())
        cache.clear()
        assert not cache.path.exists()


class TestCacheRecord:
    def test_matches_requires_all_three(self):
        record = make_record(tools_hash="h", provider_name="p")
        assert record.matches("h", "p")
        assert not record.matches("other", "p")
        assert not record.matches("h", "other")
        old = CacheRecord(version=CACHE_VERSION - 1, tools_hash="h", provider_name="p")
        assert not old.matches("h", "p")
