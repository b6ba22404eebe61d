"""ESG questionnaire service: record lifecycle and report composition."""

from __future__ import annotations

import csv
import io
import uuid

import structlog
from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.esg import ESGResponse
from app.modules.esg.calculator import auto_calculated_block, calculate_auto_metrics
from app.modules.esg.insights import generate_insights
from app.modules.esg.schemas import (
    BenchmarkGap,
    DerivedMetrics,
    ESGReportResponse,
    ESGResponseData,
    ESGResponseRecord,
    RawMetrics,
    YearlyMetrics,
)
from app.modules.esg.scoring import DEFAULT_BENCHMARKS, calculate_esg_scores, esg_grade
from app.modules.esg.trends import analyze_trends, prepare_trend_data

logger = structlog.get_logger()

# Metrics summarised in the report, in display order
REPORT_TREND_METRICS: tuple[str, ...] = (
    "carbon_intensity",
    "renewable_electricity_ratio",
    "diversity_ratio",
    "community_spend_ratio",
    "carbon_emissions",
)


class FinancialYearError(ValueError):
    """financial_year is not an integer within the accepted range."""


class ESGResponseNotFoundError(LookupError):
    """No response stored for the requested (user, financial year)."""

    def __init__(self, user_id: uuid.UUID, financial_year: int) -> None:
        super().__init__(f"No ESG response for financial year {financial_year}")
        self.user_id = user_id
        self.financial_year = financial_year


# ── Helpers ───────────────────────────────────────────────────────────────────


def validate_financial_year(financial_year: object) -> int:
    if isinstance(financial_year, bool) or not isinstance(financial_year, int):
        raise FinancialYearError("Valid financial year required")
    if not settings.MIN_FINANCIAL_YEAR <= financial_year <= settings.MAX_FINANCIAL_YEAR:
        raise FinancialYearError(
            f"Financial year must be between {settings.MIN_FINANCIAL_YEAR} "
            f"and {settings.MAX_FINANCIAL_YEAR}"
        )
    return financial_year


def to_response(r: ESGResponse) -> ESGResponseRecord:
    return ESGResponseRecord(
        id=r.id,
        user_id=r.user_id,
        financial_year=r.financial_year,
        data=ESGResponseData.model_validate(r.data or {}),
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def _yearly(record: ESGResponseRecord) -> YearlyMetrics:
    return YearlyMetrics(financial_year=record.financial_year, metrics=record.data)


def _benchmark_gaps(derived: DerivedMetrics) -> list[BenchmarkGap]:
    rows = [
        ("Renewable Energy", derived.renewable_electricity_ratio, DEFAULT_BENCHMARKS.renewable_ratio_target),
        ("Gender Diversity", derived.diversity_ratio, DEFAULT_BENCHMARKS.diversity_ratio_target),
        ("Community Spend", derived.community_spend_ratio, DEFAULT_BENCHMARKS.community_spend_ratio_target),
    ]
    return [
        BenchmarkGap(
            name=name,
            current=current,
            benchmark=benchmark,
            gap=current - benchmark if current is not None else None,
        )
        for name, current, benchmark in rows
    ]


# ── Lifecycle ─────────────────────────────────────────────────────────────────


def _insert_for(db: AsyncSession):
    """Dialect ``insert`` with ON CONFLICT support for the session's database."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


async def submit_response(
    db: AsyncSession,
    user_id: uuid.UUID,
    financial_year: int,
    metrics: RawMetrics,
) -> ESGResponse:
    """Create or replace the response for a user+financial year.

    The stored ``data`` is the submitted answers plus a freshly computed
    ``autoCalculated`` block. A later submission overwrites the earlier one
    wholesale; nothing is merged. The write is a single INSERT .. ON CONFLICT
    DO UPDATE, so racing submissions for the same year resolve to the last one.
    """
    financial_year = validate_financial_year(financial_year)

    derived = calculate_auto_metrics(metrics)
    payload = metrics.model_dump(by_alias=True, exclude_none=True)
    payload["autoCalculated"] = auto_calculated_block(derived)

    insert = _insert_for(db)
    stmt = insert(ESGResponse).values(
        user_id=user_id,
        financial_year=financial_year,
        data=payload,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "financial_year"],
        set_={"data": stmt.excluded.data, "updated_at": stmt.excluded.updated_at},
    )
    try:
        result = await db.scalars(
            stmt.returning(ESGResponse),
            execution_options={"populate_existing": True},
        )
        response = result.one()
    except SQLAlchemyError as exc:
        logger.error(
            "esg_response_save_failed",
            user_id=str(user_id),
            financial_year=financial_year,
            error=str(exc),
        )
        raise

    logger.info(
        "esg_response_saved",
        user_id=str(user_id),
        financial_year=financial_year,
        derived=sorted(payload["autoCalculated"]),
    )
    return response


async def get_response(
    db: AsyncSession,
    user_id: uuid.UUID,
    financial_year: int,
) -> ESGResponseRecord:
    stmt = select(ESGResponse).where(
        ESGResponse.user_id == user_id,
        ESGResponse.financial_year == financial_year,
    )
    result = await db.execute(stmt)
    response = result.scalar_one_or_none()
    if response is None:
        logger.info(
            "esg_response_not_found", user_id=str(user_id), financial_year=financial_year
        )
        raise ESGResponseNotFoundError(user_id, financial_year)
    return to_response(response)


async def list_responses(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> list[ESGResponseRecord]:
    """Return all of a user's responses, newest financial year first."""
    stmt = (
        select(ESGResponse)
        .where(ESGResponse.user_id == user_id)
        .order_by(ESGResponse.financial_year.desc())
    )
    result = await db.execute(stmt)
    return [to_response(r) for r in result.scalars().all()]


async def remove_response(
    db: AsyncSession,
    user_id: uuid.UUID,
    financial_year: int,
) -> None:
    stmt = delete(ESGResponse).where(
        ESGResponse.user_id == user_id,
        ESGResponse.financial_year == financial_year,
    )
    result = await db.execute(stmt)
    if result.rowcount == 0:
        raise ESGResponseNotFoundError(user_id, financial_year)
    logger.info(
        "esg_response_deleted", user_id=str(user_id), financial_year=financial_year
    )


# ── Report ────────────────────────────────────────────────────────────────────


def compose_report(records: list[ESGResponseRecord]) -> ESGReportResponse:
    """Scores, trends and insights over an already-loaded set of records."""
    if not records:
        return ESGReportResponse(records=[])

    series = [_yearly(r) for r in records]
    latest = max(records, key=lambda r: r.financial_year)
    latest_metrics: RawMetrics = latest.data
    # Reuse the block stored at submit time; recompute only for legacy rows without one
    derived = latest.data.auto_calculated or calculate_auto_metrics(latest_metrics)
    scores = calculate_esg_scores(latest_metrics, derived)

    return ESGReportResponse(
        records=sorted(records, key=lambda r: r.financial_year, reverse=True),
        latest_year=latest.financial_year,
        scores=scores,
        grade=esg_grade(scores),
        benchmarks=_benchmark_gaps(derived),
        trends=analyze_trends(series, REPORT_TREND_METRICS),
        trend_series=prepare_trend_data(series),
        insights=generate_insights(latest_metrics, derived, series),
    )


async def build_report(db: AsyncSession, user_id: uuid.UUID) -> ESGReportResponse:
    records = await list_responses(db, user_id)
    return compose_report(records)


# ── CSV export ────────────────────────────────────────────────────────────────

_RAW_COLUMNS = list(RawMetrics.model_fields)
_DERIVED_COLUMNS = list(DerivedMetrics.model_fields)


async def export_responses_csv(db: AsyncSession, user_id: uuid.UUID) -> str:
    """Return a user's responses as CSV. Missing values are empty cells, never 0."""
    records = await list_responses(db, user_id)

    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["financial_year", *_RAW_COLUMNS, *_DERIVED_COLUMNS])
    for r in records:
        derived = r.data.auto_calculated or calculate_auto_metrics(r.data)
        row: list[object] = [r.financial_year]
        row.extend("" if getattr(r.data, c) is None else getattr(r.data, c) for c in _RAW_COLUMNS)
        row.extend("" if getattr(derived, c) is None else getattr(derived, c) for c in _DERIVED_COLUMNS)
        writer.writerow(row)

    return output.getvalue()
