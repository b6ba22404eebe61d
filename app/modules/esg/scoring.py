"""Deterministic ESG scoring. No I/O.

Category scores are built from fixed-weight terms. A term whose input is
missing contributes zero; the weights are never renormalised.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.modules.esg.schemas import DerivedMetrics, ESGScores, NoData, RawMetrics


@dataclass(frozen=True)
class ScoringBenchmarks:
    """Reference points and weights used to turn ratios into 0-100 scores."""

    # Environmental
    renewable_ratio_target: float = 50.0  # %
    renewable_points: float = 50.0
    carbon_intensity_reference: float = 0.02  # tCO2e per unit revenue
    carbon_points: float = 50.0

    # Social
    diversity_ratio_target: float = 30.0  # %
    diversity_points: float = 40.0
    community_spend_ratio_target: float = 5.0  # % of revenue
    community_points: float = 30.0
    training_hours_target: float = 40.0
    training_points: float = 30.0

    # Governance
    data_privacy_bonus: float = 25.0

    # Overall
    env_weight: float = 0.40
    social_weight: float = 0.35
    gov_weight: float = 0.25


DEFAULT_BENCHMARKS = ScoringBenchmarks()

# (minimum overall score, grade), checked top-down
GRADE_THRESHOLDS: list[tuple[float, str]] = [
    (85.0, "A+"),
    (75.0, "A"),
    (65.0, "B+"),
    (55.0, "B"),
    (45.0, "C+"),
]


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _capped_share(value: float | None, target: float) -> float:
    """Fraction of the target reached, capped at 1. Missing input counts as 0."""
    if value is None or target <= 0:
        return 0.0
    return max(0.0, min(value / target, 1.0))


def environmental_score(
    derived: DerivedMetrics, benchmarks: ScoringBenchmarks = DEFAULT_BENCHMARKS
) -> float:
    renewable = (
        _capped_share(derived.renewable_electricity_ratio, benchmarks.renewable_ratio_target)
        * benchmarks.renewable_points
    )

    carbon = 0.0
    if derived.carbon_intensity is not None:
        reference = benchmarks.carbon_intensity_reference
        carbon = max(0.0, (reference - derived.carbon_intensity) / reference) * benchmarks.carbon_points

    return _clamp(renewable + carbon)


def social_score(
    data: RawMetrics,
    derived: DerivedMetrics,
    benchmarks: ScoringBenchmarks = DEFAULT_BENCHMARKS,
) -> float:
    diversity = (
        _capped_share(derived.diversity_ratio, benchmarks.diversity_ratio_target)
        * benchmarks.diversity_points
    )
    community = (
        _capped_share(derived.community_spend_ratio, benchmarks.community_spend_ratio_target)
        * benchmarks.community_points
    )
    training = (
        _capped_share(data.average_training_hours, benchmarks.training_hours_target)
        * benchmarks.training_points
    )
    return _clamp(diversity + community + training)


def governance_score(
    data: RawMetrics, benchmarks: ScoringBenchmarks = DEFAULT_BENCHMARKS
) -> float:
    board = data.independent_board_members or 0.0
    bonus = benchmarks.data_privacy_bonus if data.has_data_privacy_policy == "Yes" else 0.0
    return _clamp(board + bonus)


def calculate_esg_scores(
    data: RawMetrics,
    derived: DerivedMetrics,
    benchmarks: ScoringBenchmarks | None = None,
) -> ESGScores:
    """Combine raw answers and derived ratios into category and overall scores."""
    benchmarks = benchmarks or DEFAULT_BENCHMARKS

    env = environmental_score(derived, benchmarks)
    social = social_score(data, derived, benchmarks)
    gov = governance_score(data, benchmarks)

    overall = (
        env * benchmarks.env_weight
        + social * benchmarks.social_weight
        + gov * benchmarks.gov_weight
    )

    return ESGScores(
        env_score=env,
        social_score=social,
        gov_score=gov,
        overall_score=_clamp(overall),
    )


def esg_grade(scores: ESGScores | None) -> str | NoData:
    """Letter grade for the overall score, as shown on the reports page."""
    if scores is None:
        return "N/A"
    for threshold, grade in GRADE_THRESHOLDS:
        if scores.overall_score >= threshold:
            return grade
    return "C"
