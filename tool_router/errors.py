"""Router error types.

None of these ever escape ``ToolRouter.route``. ``RouterTimeoutError`` is
raised by ``wait_for_ready(timeout=...)``; the cache errors are only handed
to the optional cache-error observer.
"""

from __future__ import annotations

from typing import Union


class ToolRouterError(Exception):
    """Base class for router errors."""


class RouterTimeoutError(ToolRouterError, TimeoutError):
    """The embedding cache did not become ready before the deadline.

    The background initialization keeps running.
    """

    def __init__(self, timeout: float):
        super().__init__(f"embedding cache not ready after {timeout:g}s")
        self.timeout = timeout


class CacheLoadFailed(ToolRouterError):
    """A disk cache record was unreadable, unparseable or stale."""

    def __init__(self, cause: Union[BaseException, str]):
        super().__init__(f"failed to load embedding cache: {cause}")
        self.cause = cause


class CacheSaveFailed(ToolRouterError):
    """Writing the disk cache record failed; the in-memory cache is still usable."""

    def __init__(self, cause: Union[BaseException, str]):
        super().__init__(f"failed to save embedding cache: {cause}")
        self.cause = cause
