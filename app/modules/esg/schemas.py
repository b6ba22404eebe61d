"""ESG questionnaire: Pydantic schemas.

Field names are snake_case in Python and camelCase on the wire, matching the
keys stored in the ``data`` JSON column.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NoData = Literal["N/A"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Questionnaire input ──────────────────────────────────────────────────────


class RawMetrics(CamelModel):
    """One organisation-year of self-reported answers. Every field is optional."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        allow_inf_nan=False,
    )

    # Environmental
    total_electricity_consumption: float | None = Field(None, ge=0)  # kWh
    renewable_electricity_consumption: float | None = Field(None, ge=0)  # kWh
    total_fuel_consumption: float | None = Field(None, ge=0)  # liters
    carbon_emissions: float | None = Field(None, ge=0)  # tCO2e

    # Social
    total_employees: int | None = Field(None, ge=0)
    female_employees: int | None = Field(None, ge=0)
    average_training_hours: float | None = Field(None, ge=0)
    community_investment_spend: float | None = Field(None, ge=0)

    # Governance
    independent_board_members: float | None = Field(None, ge=0, le=100)  # %
    has_data_privacy_policy: Literal["Yes", "No"] | None = None
    total_revenue: float | None = Field(None, ge=0)


class DerivedMetrics(CamelModel):
    """Ratios computed from RawMetrics. A field is None when it could not be computed."""

    carbon_intensity: float | None = None
    renewable_electricity_ratio: float | None = None
    diversity_ratio: float | None = None
    community_spend_ratio: float | None = None


class ESGResponseData(RawMetrics):
    auto_calculated: DerivedMetrics | None = None


class ESGResponseSubmitRequest(CamelModel):
    financial_year: int = Field(..., strict=True)
    data: RawMetrics


# ── Stored record ────────────────────────────────────────────────────────────


class ESGResponseRecord(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    financial_year: int
    data: ESGResponseData
    created_at: datetime
    updated_at: datetime


class ESGResponseListResponse(CamelModel):
    responses: list[ESGResponseRecord]


class ESGResponseSaveResponse(CamelModel):
    message: str
    response: ESGResponseRecord


class MessageResponse(CamelModel):
    message: str


class YearlyMetrics(CamelModel):
    """A financial year paired with its raw answers: the unit of trend analysis."""

    financial_year: int
    metrics: RawMetrics


# ── Scores / insights / trends ───────────────────────────────────────────────


class ESGScores(CamelModel):
    env_score: float
    social_score: float
    gov_score: float
    overall_score: float


class Insight(CamelModel):
    type: Literal["achievement", "improvement", "trend"]
    title: str
    message: str
    recommendation: str | None = None
    impact: Literal["high", "medium", "low"]


class TrendMetric(CamelModel):
    metric: str
    latest: float | None = None
    previous: float | None = None
    trend: float | NoData
    total_change: float | NoData
    average: float | NoData
    min: float | NoData
    max: float | NoData
    improvement: bool


class TrendPoint(CamelModel):
    financial_year: int
    carbon_intensity: float | None = None
    renewable_electricity_ratio: float | None = None
    diversity_ratio: float | None = None
    community_spend_ratio: float | None = None


class BenchmarkGap(CamelModel):
    name: str
    current: float | None = None
    benchmark: float
    gap: float | None = None


class ESGReportResponse(CamelModel):
    records: list[ESGResponseRecord]
    latest_year: int | None = None
    scores: ESGScores | None = None
    grade: str | NoData = "N/A"
    benchmarks: list[BenchmarkGap] = []
    trends: dict[str, TrendMetric] = {}
    trend_series: list[TrendPoint] = []
    insights: list[Insight] = []
