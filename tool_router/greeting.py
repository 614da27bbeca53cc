"""Greeting / chit-chat detection: decides when no tools are needed at all."""

from __future__ import annotations

from typing import Sequence


class GreetingDetector:
    """Pure, stateless skip classifier."""

    def __init__(self, patterns: Sequence[str], min_input_length: int = 3):
        self._patterns = tuple(patterns)
        self._min_input_length = min_input_length

    def should_skip(self, text: str) -> bool:
        """True for too-short input or input that is just a greeting.

        A pattern hits on exact equality, as a prefix followed by a space,
        as a suffix preceded by a space, or exactly followed by ``!`` / ``.``.
        """
        trimmed = text.strip()
        if len(trimmed) < self._min_input_length:
            return True

        lowered = trimmed.lower()
        for pattern in self._patterns:
            if (
                lowered == pattern
                or lowered.startswith(pattern + " ")
                or lowered.endswith(" " + pattern)
                or lowered == pattern + "!"
                or lowered == pattern + "."
            ):
                return True
        return False
