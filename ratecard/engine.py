"""RateEngine — resolve standards and tariffs for operations.

Usage::

    from ratecard import RateEngine, InMemoryRuleRepository

    engine = RateEngine(InMemoryRuleRepository(rules))
    result = engine.resolve(record, "CARGUE")
    row = engine.evaluate(record, "DESCARGUE")

The module-level functions are the pure building blocks the engine
composes; they hold no state and can be called directly.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from pydantic import BaseModel

from ratecard.liquidation.aggregator import aggregate_liquidation
from ratecard.matching.database import RuleDatabase, RuleRepository
from ratecard.matching.matcher import MatchResult, match, query_values
from ratecard.matching.ranges import filter_by_range
from ratecard.models.operation import OperationRecord, ResolutionResult, StandardQuery
from ratecard.models.rule import Rule
from ratecard.performance.duration import adjust_duration, elapsed_minutes
from ratecard.performance.productivity import Indicator, ProductivityContext, classify_productivity
from ratecard.settings import EngineSettings
from ratecard.tariff.resolver import TariffContext, resolve_tariff
from ratecard.tariff.shift import holiday_calendar

logger = logging.getLogger(__name__)

__all__ = [
    "PerformanceRow",
    "RateEngine",
    "adjust_duration",
    "aggregate_liquidation",
    "classify_productivity",
    "match_standard",
    "resolve_standard",
    "resolve_tariff",
]


def match_standard(
    query: Any,
    rules: Iterable[Rule],
    *,
    crew_only: bool = False,
    allow_substring: bool = True,
) -> MatchResult | None:
    """Find the standard for *query* among *rules*, with the tier that chose it.

    Parameters
    ----------
    query:
        :class:`StandardQuery`, :class:`OperationRecord`, or a mapping with
        the three scope dimensions and ``tons``.
    rules:
        Candidate rules in tie-break order.
    crew_only:
        Restrict to rules scoped to the exact client.
    allow_substring:
        Permit the deprecated client-substring fallback.

    Returns
    -------
    MatchResult or None
        ``None`` when the query is incomplete or nothing applies.
    """
    query = _standard_query(query)
    if not query.is_complete:
        return None

    candidates = filter_by_range(rules, query.tons)
    return match(candidates, query, crew_only=crew_only, allow_substring=allow_substring)


def resolve_standard(
    query: Any,
    rules: Iterable[Rule],
    *,
    crew_only: bool = False,
    allow_substring: bool = True,
) -> Rule | None:
    """Return the standard that applies to *query*, or None.

    Same lookup as :func:`match_standard` without the tier.
    """
    found = match_standard(query, rules, crew_only=crew_only, allow_substring=allow_substring)
    return found.rule if found is not None else None


def _standard_query(query: Any) -> StandardQuery:
    if isinstance(query, StandardQuery):
        return query
    if isinstance(query, OperationRecord):
        return query.query()
    if not isinstance(query, Mapping):
        raise TypeError(
            f"Expected StandardQuery, OperationRecord or mapping, got {type(query).__name__}"
        )
    return StandardQuery(**query_values(query), tons=float(query.get("tons") or 0.0))


class PerformanceRow(BaseModel):
    """One line of a crew performance report."""

    record_id: str | None = None
    concept_type: str = ""
    duration: int | None = None
    """Wall-clock minutes between start and end."""

    operational_duration: float | None = None
    """Duration minus justified downtime."""

    standard: Rule | None = None
    tier: int | None = None
    indicator: Indicator

    @property
    def label(self) -> str:
        return self.indicator.label


class RateEngine:
    """Resolve operations against a rule repository.

    Parameters
    ----------
    repository:
        Source of rules.  Re-read on every call so edits are picked up.
        Defaults to a :class:`RuleDatabase` at ``settings.rules_db``.
    settings:
        Engine settings; defaults to :class:`EngineSettings` defaults.
    """

    def __init__(
        self,
        repository: RuleRepository | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.repository = repository if repository is not None else RuleDatabase(self.settings.rules_db)
        if self.settings.holiday_country:
            self.holidays: Any = holiday_calendar(self.settings.holiday_country)
        else:
            self.holidays = frozenset()

    # -- Rule selection -------------------------------------------------------

    def standards(self) -> list[Rule]:
        """Performance standards: rules without a tariff payload."""
        return [r for r in self.repository.list_all() if r.payload is None]

    def concepts(self, name: str) -> list[Rule]:
        """Billing concepts called *name* (case-insensitive)."""
        wanted = name.strip().upper()
        return [
            r for r in self.repository.list_all()
            if r.payload is not None and r.name.strip().upper() == wanted
        ]

    def match_standard(self, query: Any, crew_only: bool = False) -> MatchResult | None:
        return match_standard(
            query,
            self.standards(),
            crew_only=crew_only,
            allow_substring=self.settings.substring_fallback,
        )

    def resolve_standard(self, query: Any, crew_only: bool = False) -> Rule | None:
        found = self.match_standard(query, crew_only=crew_only)
        return found.rule if found is not None else None

    # -- Resolution -----------------------------------------------------------

    def tariff_context(self, record: OperationRecord, specific_tariff_id: str | None = None) -> TariffContext:
        return TariffContext(
            start_time=record.start_time,
            end_time=record.end_time,
            operation_date=record.operation_date,
            tons=record.quantity if record.weight_entered else None,
            vehicle_type=record.vehicle_type,
            specific_tariff_id=specific_tariff_id,
            holiday_dates=self.holidays,
        )

    def resolve(
        self,
        record: OperationRecord,
        concept: str | None = None,
        *,
        specific_tariff_id: str | None = None,
        crew_only: bool = False,
    ) -> ResolutionResult:
        """Resolve *record* to a rule and, for a concept, its unit value.

        Without *concept* the record is matched against the performance
        standards and no tariff is computed.
        """
        if concept is None:
            found = self.match_standard(record, crew_only=crew_only)
            if found is None:
                return ResolutionResult()
            return ResolutionResult(matched_rule=found.rule, tier_used=found.tier)

        candidates = filter_by_range(self.concepts(concept), record.query().tons)
        found = match(
            candidates, record, crew_only=crew_only,
            allow_substring=self.settings.substring_fallback,
        )
        if found is None:
            logger.debug("No %s concept applies to operation %s", concept, record.id)
            return ResolutionResult()

        value = resolve_tariff(found.rule, self.tariff_context(record, specific_tariff_id))
        return ResolutionResult(matched_rule=found.rule, tariff_value=value, tier_used=found.tier)

    def evaluate(
        self,
        record: OperationRecord,
        concept_type: str,
        *,
        crew_only: bool = False,
    ) -> PerformanceRow:
        """Grade *record* for the crew performance report."""
        duration = elapsed_minutes(record.start_time, record.end_time)
        operational = adjust_duration(duration, record.novelties)
        found = self.match_standard(record, crew_only=crew_only)

        context = ProductivityContext(
            concept_type=concept_type,
            weight_entered=record.weight_entered,
            tons=record.quantity if record.weight_entered else None,
            applies_crew=record.applies_crew,
            fixed_product=(record.product_type or "").strip().lower() == "fijo",
        )
        indicator = classify_productivity(
            operational,
            found.rule if found else None,
            context,
            tolerance=self.settings.normal_tolerance_minutes,
        )
        return PerformanceRow(
            record_id=record.id,
            concept_type=concept_type,
            duration=duration,
            operational_duration=operational,
            standard=found.rule if found else None,
            tier=found.tier if found else None,
            indicator=indicator,
        )
