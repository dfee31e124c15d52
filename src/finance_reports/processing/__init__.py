"""Period resolution, filtering, aggregation and the export pipeline."""

from finance_reports.processing.aggregator import AGGREGATORS, AggregationParams, aggregate
from finance_reports.processing.filter_engine import filter_transactions
from finance_reports.processing.patterns import PatternStrategy, SpendingPatternStrategy
from finance_reports.processing.period_resolver import (
    PeriodKey,
    resolve_custom_period,
    resolve_month,
    resolve_period,
)

__all__ = [
    "AGGREGATORS",
    "AggregationParams",
    "aggregate",
    "filter_transactions",
    "PatternStrategy",
    "SpendingPatternStrategy",
    "PeriodKey",
    "resolve_custom_period",
    "resolve_month",
    "resolve_period",
]
