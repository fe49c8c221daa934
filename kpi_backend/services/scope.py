"""Team-scope filtering for list endpoints."""

import re
from operator import attrgetter
from typing import Any, Callable, FrozenSet, Iterable, List, Optional, TypeVar

T = TypeVar("T")

_SCOPE_SEPARATORS = re.compile(r"[,;|\s]+")


def parse_scope(scope: Optional[str]) -> FrozenSet[str]:
    """Split a scope string on comma/semicolon/pipe/whitespace runs into upper-cased team tags."""
    return frozenset(
        token.upper() for token in _SCOPE_SEPARATORS.split(scope or "") if token
    )


def filter_by_scope(
    scope: Optional[str],
    candidates: Iterable[T],
    team: Callable[[T], Any] = attrgetter("team_main"),
) -> List[T]:
    """Keep candidates visible under ``scope``, preserving order.

    An empty scope is unrestricted. Candidates without a team tag are always kept.
    """
    items = list(candidates)
    allowed = parse_scope(scope)
    if not allowed:
        return items
    visible = []
    for item in items:
        tag = str(team(item) or "").strip().upper()
        if not tag or tag in allowed:
            visible.append(item)
    return visible
