"""Year-over-year trend analysis for raw metrics and derived ratios.

Series are sorted ascending by financial year here, so callers may pass
records in any order. Wherever a value cannot be computed the result is the
``NO_DATA`` sentinel, which is distinct from a numeric 0.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from app.modules.esg.calculator import calculate_auto_metrics
from app.modules.esg.schemas import NoData, TrendMetric, TrendPoint, YearlyMetrics

NO_DATA: NoData = "N/A"

DERIVED_METRICS: tuple[str, ...] = (
    "carbon_intensity",
    "renewable_electricity_ratio",
    "diversity_ratio",
    "community_spend_ratio",
)

# Metrics where a decrease is the favourable direction
LOWER_IS_BETTER: frozenset[str] = frozenset(
    {
        "carbon_intensity",
        "carbon_emissions",
        "total_fuel_consumption",
        "total_electricity_consumption",
    }
)


# ── Scalar helpers ────────────────────────────────────────────────────────────


def percentage_change(previous: float | None, current: float | None) -> float | NoData:
    """Percent change from previous to current; NO_DATA if either is missing or previous is 0."""
    if previous is None or current is None or previous == 0:
        return NO_DATA
    return (current - previous) / previous * 100


def total_change(start: float | None, end: float | None) -> float | NoData:
    """Percent change across a whole series, first value to last."""
    return percentage_change(start, end)


def _present(values: Iterable[float | None]) -> list[float]:
    return [v for v in values if v is not None]


def average(values: Iterable[float | None]) -> float | NoData:
    valid = _present(values)
    if not valid:
        return NO_DATA
    return sum(valid) / len(valid)


def maximum(values: Iterable[float | None]) -> float | NoData:
    valid = _present(values)
    return max(valid) if valid else NO_DATA


def minimum(values: Iterable[float | None]) -> float | NoData:
    valid = _present(values)
    return min(valid) if valid else NO_DATA


def total(values: Iterable[float | None]) -> float | NoData:
    valid = _present(values)
    return sum(valid) if valid else NO_DATA


# ── Series ────────────────────────────────────────────────────────────────────


def sort_by_year(series: Iterable[YearlyMetrics]) -> list[YearlyMetrics]:
    return sorted(series, key=lambda item: item.financial_year)


def metric_value(item: YearlyMetrics, metric: str) -> float | None:
    """Look up a raw field or recompute a derived ratio for one year."""
    if metric in DERIVED_METRICS:
        return getattr(calculate_auto_metrics(item.metrics), metric)
    if metric not in type(item.metrics).model_fields:
        raise KeyError(f"Unknown ESG metric: {metric}")
    value = getattr(item.metrics, metric)
    if value is None or isinstance(value, str):
        return None
    return float(value)


def is_improvement(metric: str, change: float | NoData) -> bool:
    if change == NO_DATA:
        return False
    if metric in LOWER_IS_BETTER:
        return change < 0
    return change > 0


def analyze_trend(series: Sequence[YearlyMetrics], metric: str) -> TrendMetric:
    """Aggregate one metric over all years: latest change, mean, extremes, direction."""
    ordered = sort_by_year(series)
    values = [metric_value(item, metric) for item in ordered]

    latest = values[-1] if values else None
    previous = values[-2] if len(values) >= 2 else None
    change = percentage_change(previous, latest) if len(values) >= 2 else NO_DATA

    present = _present(values)
    overall = total_change(present[0], present[-1]) if len(present) >= 2 else NO_DATA

    return TrendMetric(
        metric=metric,
        latest=latest,
        previous=previous,
        trend=change,
        total_change=overall,
        average=average(values),
        min=minimum(values),
        max=maximum(values),
        improvement=is_improvement(metric, change),
    )


def analyze_trends(
    series: Sequence[YearlyMetrics], metrics: Iterable[str] = DERIVED_METRICS
) -> dict[str, TrendMetric]:
    return {metric: analyze_trend(series, metric) for metric in metrics}


def prepare_trend_data(series: Sequence[YearlyMetrics]) -> list[TrendPoint]:
    """One chart point per year, ascending. Ratios that cannot be computed stay None."""
    points: list[TrendPoint] = []
    for item in sort_by_year(series):
        derived = calculate_auto_metrics(item.metrics)
        points.append(
            TrendPoint(
                financial_year=item.financial_year,
                carbon_intensity=derived.carbon_intensity,
                renewable_electricity_ratio=derived.renewable_electricity_ratio,
                diversity_ratio=derived.diversity_ratio,
                community_spend_ratio=derived.community_spend_ratio,
            )
        )
    return points
