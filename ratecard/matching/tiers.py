"""Specificity tiers generated from the scope dimensions.

Each tier is a tuple of booleans, one per dimension: ``True`` means the
rule must carry the query's exact value, ``False`` means the rule must be
a wildcard on that dimension.  Dimensions are ordered by significance, so
an exact match on an earlier dimension outranks any combination of the
later ones.  For ``(client, operation_type, product_type)`` this yields::

    1. (T, T, T)   5. (F, T, T)
    2. (T, T, F)   6. (F, T, F)
    3. (T, F, T)   7. (F, F, T)
    4. (T, F, F)   8. (F, F, F)
"""

from __future__ import annotations

from functools import lru_cache
from itertools import product
from typing import Mapping, Sequence

from ratecard.config import SCOPE_DIMENSIONS
from ratecard.models.rule import Scope

Tier = tuple[bool, ...]


@lru_cache(maxsize=None)
def build_tiers(dimension_count: int = len(SCOPE_DIMENSIONS)) -> tuple[Tier, ...]:
    """Return every exact/wildcard combination, most specific first."""
    combos = product((True, False), repeat=dimension_count)
    return tuple(sorted(combos, key=lambda tier: tuple(not exact for exact in tier)))


def ordered_tiers(
    dimension_count: int = len(SCOPE_DIMENSIONS),
    *,
    require_exact: Sequence[int] = (),
) -> list[tuple[int, Tier]]:
    """Return ``(tier_number, tier)`` pairs in cascade order.

    Tier numbers are 1-based positions in the full cascade, so they stay
    stable when *require_exact* drops tiers that are not exact on every
    listed dimension index.
    """
    return [
        (number, tier)
        for number, tier in enumerate(build_tiers(dimension_count), start=1)
        if all(tier[i] for i in require_exact)
    ]


def satisfies(
    scope: Scope,
    query: Mapping[str, str | None],
    tier: Tier,
    dimensions: Sequence[str] = SCOPE_DIMENSIONS,
) -> bool:
    """True if *scope* matches *query* in exactly the shape of *tier*."""
    for name, exact in zip(dimensions, tier):
        dim = scope.dimension(name)
        if exact:
            wanted = query.get(name)
            if dim.is_wildcard or wanted is None or dim.value != wanted:
                return False
        elif not dim.is_wildcard:
            return False
    return True
