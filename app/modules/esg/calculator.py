"""Auto-calculated ESG ratios.

Each ratio is produced only when both operands are present, the
denominator is strictly positive and the result is a finite float.
A zero numerator is a real result (e.g. zero emissions gives a carbon
intensity of 0.0), never an omission.
"""

from __future__ import annotations

import math

from app.modules.esg.schemas import DerivedMetrics, RawMetrics


def _safe_div(numerator: float | None, denominator: float | None) -> float | None:
    if numerator is None or denominator is None:
        return None
    if denominator <= 0:
        return None
    try:
        result = numerator / denominator
    except OverflowError:
        return None
    return result if math.isfinite(result) else None


def _pct(numerator: float | None, denominator: float | None) -> float | None:
    result = _safe_div(numerator, denominator)
    if result is None:
        return None
    pct = result * 100
    return pct if math.isfinite(pct) else None


def calculate_auto_metrics(data: RawMetrics) -> DerivedMetrics:
    """Derive carbon intensity and the three percentage ratios from one year's answers."""
    return DerivedMetrics(
        # tCO2e per unit of revenue
        carbon_intensity=_safe_div(data.carbon_emissions, data.total_revenue),
        renewable_electricity_ratio=_pct(
            data.renewable_electricity_consumption, data.total_electricity_consumption
        ),
        diversity_ratio=_pct(data.female_employees, data.total_employees),
        community_spend_ratio=_pct(data.community_investment_spend, data.total_revenue),
    )


def auto_calculated_block(derived: DerivedMetrics) -> dict[str, float]:
    """Serialise derived metrics for storage, dropping every ratio that was not computed."""
    return derived.model_dump(by_alias=True, exclude_none=True)
