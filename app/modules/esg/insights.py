"""Rule-based ESG insights.

Rules run in a fixed order (environmental, social, governance, trend) and
each one appends at most one Insight. A rule whose inputs are missing is
skipped.
"""

from __future__ import annotations

from collections.abc import Sequence

from app.modules.esg.calculator import calculate_auto_metrics
from app.modules.esg.schemas import DerivedMetrics, Insight, RawMetrics, YearlyMetrics
from app.modules.esg.trends import NO_DATA, percentage_change, sort_by_year

RENEWABLE_LEADERSHIP_RATIO = 50.0  # % renewable electricity
LOW_CARBON_INTENSITY = 0.01  # tCO2e per unit revenue
DIVERSITY_GAP_RATIO = 20.0  # % female employees
DIVERSITY_BEST_PRACTICE_RATIO = 30.0
STRONG_DIVERSITY_RATIO = 40.0


def _renewable_leadership(derived: DerivedMetrics) -> Insight | None:
    ratio = derived.renewable_electricity_ratio
    if ratio is None or ratio < RENEWABLE_LEADERSHIP_RATIO:
        return None
    return Insight(
        type="achievement",
        title="Renewable Energy Leadership",
        message=(
            f"Excellent renewable energy adoption at {ratio:.1f}%, "
            f"exceeding {RENEWABLE_LEADERSHIP_RATIO:.0f}% benchmark"
        ),
        impact="high",
    )


def _low_carbon_operations(derived: DerivedMetrics) -> Insight | None:
    intensity = derived.carbon_intensity
    if intensity is None or intensity >= LOW_CARBON_INTENSITY:
        return None
    return Insight(
        type="achievement",
        title="Low Carbon Operations",
        message=f"Carbon intensity of {intensity:.6f} is significantly below industry average",
        impact="high",
    )


def _diversity_gap(derived: DerivedMetrics) -> Insight | None:
    ratio = derived.diversity_ratio
    if ratio is None or ratio >= DIVERSITY_GAP_RATIO:
        return None
    return Insight(
        type="improvement",
        title="Diversity Opportunity",
        message=(
            f"Gender diversity at {ratio:.1f}% is below "
            f"{DIVERSITY_BEST_PRACTICE_RATIO:.0f}% best practice"
        ),
        recommendation="Implement targeted diversity hiring programs",
        impact="medium",
    )


def _strong_diversity(derived: DerivedMetrics) -> Insight | None:
    ratio = derived.diversity_ratio
    if ratio is None or ratio <= STRONG_DIVERSITY_RATIO:
        return None
    return Insight(
        type="achievement",
        title="Strong Workforce Diversity",
        message=f"{ratio:.1f}% diversity ratio demonstrates inclusive practices",
        impact="high",
    )


def _carbon_intensity_improvement(
    derived: DerivedMetrics, history: Sequence[YearlyMetrics]
) -> Insight | None:
    # history includes the current year as its latest entry
    if len(history) < 2:
        return None
    previous_year = sort_by_year(history)[-2]
    previous = calculate_auto_metrics(previous_year.metrics).carbon_intensity

    change = percentage_change(previous, derived.carbon_intensity)
    if change == NO_DATA or change >= 0:
        return None
    return Insight(
        type="trend",
        title="Carbon Intensity Improvement",
        message=f"{-change:.1f}% reduction in carbon intensity year-over-year",
        impact="high",
    )


def generate_insights(
    current: RawMetrics,
    derived: DerivedMetrics | None = None,
    history: Sequence[YearlyMetrics] = (),
) -> list[Insight]:
    """Evaluate every rule against the current year and return the ones that fire."""
    if derived is None:
        derived = calculate_auto_metrics(current)

    candidates = [
        # Environmental
        _renewable_leadership(derived),
        _low_carbon_operations(derived),
        # Social
        _diversity_gap(derived),
        _strong_diversity(derived),
        # Trend
        _carbon_intensity_improvement(derived, history),
    ]
    return [insight for insight in candidates if insight is not None]
