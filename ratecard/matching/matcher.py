"""SpecificityMatcher — pick the single most specific rule for a query.

Usage::

    from ratecard.matching.matcher import match

    result = match(candidates, {"client": "ACME", "operation_type": "despacho",
                                "product_type": "fijo"})
    if result is not None:
        result.rule, result.tier
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from pydantic import BaseModel

from ratecard.config import SCOPE_DIMENSIONS, SUBSTRING_TIER
from ratecard.matching.tiers import ordered_tiers, satisfies
from ratecard.models.rule import Rule

logger = logging.getLogger(__name__)


class MatchResult(BaseModel):
    """The winning rule and the tier that selected it."""

    rule: Rule
    tier: int


def query_values(query: Any) -> dict[str, str | None]:
    """Normalise a query (mapping, StandardQuery or record) to dimension values."""
    if isinstance(query, Mapping):
        getter = query.get
    else:
        def getter(name: str) -> Any:
            return getattr(query, name, None)
    values: dict[str, str | None] = {}
    for name in SCOPE_DIMENSIONS:
        raw = getter(name)
        values[name] = str(raw).strip() if raw not in (None, "") else None
    return values


def match(
    candidates: Sequence[Rule],
    query: Any,
    *,
    crew_only: bool = False,
    allow_substring: bool = True,
) -> MatchResult | None:
    """Return the first rule of the most specific tier that has a match.

    Parameters
    ----------
    candidates:
        Rules already narrowed by quantity range.  Input order is the
        tie-break within a tier.
    query:
        Mapping or object with ``client``, ``operation_type`` and
        ``product_type``.
    crew_only:
        Only consider rules scoped to the exact client.  Crew standards
        never fall back to the all-clients rules.
    allow_substring:
        Enable the legacy client-substring fallback when no tier matches.

    Returns
    -------
    MatchResult or None
        ``None`` means no applicable rule; it is never an error.
    """
    if not candidates:
        return None

    values = query_values(query)
    require_exact = (0,) if crew_only else ()

    for number, tier in ordered_tiers(len(SCOPE_DIMENSIONS), require_exact=require_exact):
        for rule in candidates:
            if satisfies(rule.scope, values, tier):
                logger.debug("Tier %d matched rule %s for %s", number, rule.id, values)
                return MatchResult(rule=rule, tier=number)

    if crew_only or not allow_substring:
        return None
    return substring_fallback(candidates, values)


def substring_fallback(
    candidates: Sequence[Rule],
    values: Mapping[str, str | None],
) -> MatchResult | None:
    """Legacy heuristic: a rule whose client is contained in the query client.

    Deprecated.  A client whose name contains another client's name will
    pick up that client's rules, so every hit is logged as a warning.
    The remaining dimensions must match exactly or by wildcard.
    """
    client = values.get(SCOPE_DIMENSIONS[0])
    if not client:
        return None

    for rule in candidates:
        rule_client = rule.scope.client.value
        if not rule_client or rule_client not in client:
            continue
        if all(rule.scope.dimension(d).matches(values.get(d)) for d in SCOPE_DIMENSIONS[1:]):
            logger.warning(
                "Deprecated substring match: query client %r resolved to rule %s scoped to %r",
                client, rule.id, rule_client,
            )
            return MatchResult(rule=rule, tier=SUBSTRING_TIER)
    return None
