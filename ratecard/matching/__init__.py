"""Rule matching — range filtering, specificity tiers and rule storage."""

from ratecard.matching.database import InMemoryRuleRepository, RuleDatabase, RuleRepository
from ratecard.matching.matcher import MatchResult, match
from ratecard.matching.ranges import filter_by_range
from ratecard.matching.validation import RuleValidationError, find_overlaps, validate_rule

__all__ = [
    "InMemoryRuleRepository",
    "MatchResult",
    "RuleDatabase",
    "RuleRepository",
    "RuleValidationError",
    "filter_by_range",
    "find_overlaps",
    "match",
    "validate_rule",
]
