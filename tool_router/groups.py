"""Tool-group expansion."""

from __future__ import annotations

from typing import Iterable, Sequence, Set

# A matched group contributes at most its first GROUP_EXPANSION_LIMIT members,
# in declared order.
GROUP_EXPANSION_LIMIT = 3


def expand_with_groups(matched: Iterable[str], groups: Sequence[Sequence[str]]) -> Set[str]:
    """Add the leading members of every group that contains a matched tool."""
    matched = set(matched)
    expanded = set(matched)
    for group in groups:
        if any(name in matched for name in group):
            expanded.update(group[:GROUP_EXPANSION_LIMIT])
    return expanded
