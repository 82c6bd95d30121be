"""Rule authoring checks: malformed ranges and overlapping scopes.

The matcher tolerates both problems (malformed ranges are skipped and
overlaps resolve to the first rule in input order); these checks are for
the authoring side, before rules reach the store.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from ratecard.models.rule import Rule


class RuleValidationError(ValueError):
    """Raised when a rule is rejected at authoring time."""


def validate_rule(rule: Rule) -> None:
    """Raise RuleValidationError if *rule* can never be applied correctly."""
    if rule.range.is_malformed:
        raise RuleValidationError(
            f"Rule {rule.name or rule.id!r}: max ({rule.range.max}) must be "
            f"greater than min ({rule.range.min})."
        )
    if rule.base_minutes is not None and rule.base_minutes < 0:
        raise RuleValidationError(
            f"Rule {rule.name or rule.id!r}: base minutes cannot be negative."
        )


def find_overlaps(rules: Iterable[Rule]) -> list[tuple[Rule, Rule]]:
    """Return pairs of rules competing for the same scope with overlapping ranges.

    Standards compete with each other; billing concepts only with concepts
    of the same name.  Pairs are reported in input order.  Malformed ranges are ignored since
    they never match anything.
    """
    groups: dict[tuple, list[Rule]] = defaultdict(list)
    for rule in rules:
        if rule.range.is_malformed:
            continue
        concept = rule.name if rule.payload is not None else None
        groups[(concept, rule.scope.key)].append(rule)

    overlaps: list[tuple[Rule, Rule]] = []
    for group in groups.values():
        for i, first in enumerate(group):
            for second in group[i + 1:]:
                if first.range.overlaps(second.range):
                    overlaps.append((first, second))
    return overlaps
