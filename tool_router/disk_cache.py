"""On-disk persistence of tool embeddings.

One JSON file per configuration::

    {
      "version": 1,
      "toolsHash": "<sha256 over the sorted (name, description, keywords) tuples>",
      "providerName": "...",
      "embeddings": {
        "<tool name>": {"name", "description", "embedding", "keywords", "keywordEmbeddings"}
      }
    }

A record is reusable only when version, tools hash and provider name all
match what the live router expects. Writes go to a temp file in the same
directory and are moved into place with ``os.replace`` so a concurrent
reader never sees a partial file.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from providers.base import Vector

from .errors import CacheLoadFailed, CacheSaveFailed
from .models import RoutableTool

logger = logging.getLogger(__name__)

# Bump on any breaking change to the record layout.
CACHE_VERSION = 1


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CachedEmbedding:
    """Vectors for one tool. ``keyword_vectors`` may be shorter than
    ``keywords`` when some keywords failed to embed."""
    name: str
    description: str
    description_vector: Vector
    keywords: Tuple[str, ...] = ()
    keyword_vectors: Tuple[Vector, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "embedding": list(self.description_vector),
            "keywords": list(self.keywords),
            "keywordEmbeddings": [list(v) for v in self.keyword_vectors],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedEmbedding":
        return cls(
            name=str(data["name"]),
            description=str(data["description"]),
            description_vector=[float(x) for x in data["embedding"]],
            keywords=tuple(str(k) for k in data.get("keywords", [])),
            keyword_vectors=tuple(
                [float(x) for x in v] for v in data.get("keywordEmbeddings", [])
            ),
        )


@dataclass(frozen=True)
class CacheRecord:
    version: int
    tools_hash: str
    provider_name: str
    embeddings: Dict[str, CachedEmbedding] = field(default_factory=dict)

    def matches(self, tools_hash: str, provider_name: str) -> bool:
        return (
            self.version == CACHE_VERSION
            and self.tools_hash == tools_hash
            and self.provider_name == provider_name
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "toolsHash": self.tools_hash,
            "providerName": self.provider_name,
            "embeddings": {name: e.to_dict() for name, e in self.embeddings.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheRecord":
        return cls(
            version=int(data["version"]),
            tools_hash=str(data["toolsHash"]),
            provider_name=str(data["providerName"]),
            embeddings={
                str(name): CachedEmbedding.from_dict(entry)
                for name, entry in data["embeddings"].items()
            },
        )


def compute_tools_hash(tools: Sequence[RoutableTool]) -> str:
    """Digest over the name-sorted ``(name, description, keywords)`` tuples.

    Any edit to a name, description or keyword list, and any added or
    removed tool, changes the digest.
    """
    canonical = sorted(
        [t.name, t.description, list(t.keywords)] for t in tools
    )
    payload = json.dumps(canonical, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# File access
# ---------------------------------------------------------------------------

class DiskCache:
    """Reads, writes and deletes the cache record at a single path."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[CacheRecord]:
        """Return the stored record, ``None`` if there is none.

        Raises ``CacheLoadFailed`` if the file exists but cannot be read
        or parsed.
        """
        if not self._path.exists():
            return None
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return CacheRecord.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise CacheLoadFailed(e) from e

    def save(self, record: CacheRecord) -> None:
        """Atomically replace the stored record. Raises ``CacheSaveFailed``."""
        tmp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                suffix=".tmp",
                prefix=self._path.stem + "_",
                dir=self._path.parent,
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f, ensure_ascii=False, separators=(",", ":"))
            os.replace(tmp_path, self._path)  # Atomic on POSIX
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
            raise CacheSaveFailed(e) from e
        logger.debug("Wrote embedding cache to %s", self._path)

    def clear(self) -> None:
        """Delete the record file. Best effort: a missing file is fine."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not delete embedding cache %s: %s", self._path, e)
