"""Quantity range filtering."""

from __future__ import annotations

import logging
from typing import Iterable

from ratecard.config import ROUND_DIGITS
from ratecard.models.rule import QuantityRange, Rule

logger = logging.getLogger(__name__)


def round2(value: float) -> float:
    """Round to the precision used for range comparisons."""
    return round(float(value), ROUND_DIGITS)


def in_range(rng: QuantityRange, quantity: float) -> bool:
    """True if *quantity* lies in ``[rng.min, rng.max]`` after rounding.

    Malformed ranges (``max <= min``) never contain anything.
    """
    return rng.contains(quantity)


def filter_by_range(rules: Iterable[Rule], quantity: float) -> list[Rule]:
    """Keep the rules whose range contains *quantity*, preserving order."""
    kept: list[Rule] = []
    for rule in rules:
        if rule.range.is_malformed:
            logger.warning(
                "Skipping rule %s (%s): malformed range [%s, %s]",
                rule.id, rule.name or rule.scope.key, rule.range.min, rule.range.max,
            )
            continue
        if in_range(rule.range, quantity):
            kept.append(rule)
    return kept
