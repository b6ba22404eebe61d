"""ESG questionnaire API router."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.core.database import get_db
from app.core.errors import ErrorResponse
from app.modules.esg import service
from app.modules.esg.schemas import (
    ESGReportResponse,
    ESGResponseListResponse,
    ESGResponseRecord,
    ESGResponseSaveResponse,
    ESGResponseSubmitRequest,
    MessageResponse,
)
from app.schemas.auth import CurrentUser

logger = structlog.get_logger()

router = APIRouter(prefix="/responses", tags=["responses"])


# ── Collection ────────────────────────────────────────────────────────────────


@router.get(
    "",
    response_model=ESGResponseListResponse,
    response_model_exclude_none=True,
)
async def list_responses(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Return every stored response for the current user, newest year first."""
    records = await service.list_responses(db, current_user.user_id)
    return ESGResponseListResponse(responses=records)


@router.post(
    "",
    response_model=ESGResponseSaveResponse,
    response_model_exclude_none=True,
    responses={422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    status_code=status.HTTP_200_OK,
)
async def save_response(
    body: ESGResponseSubmitRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create or replace the response for a financial year."""
    try:
        response = await service.submit_response(
            db, current_user.user_id, body.financial_year, body.data
        )
        await db.commit()
    except service.FinancialYearError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(
            "esg_response_upsert_failed",
            financial_year=body.financial_year,
            error=str(exc),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save ESG response.",
        ) from exc
    return ESGResponseSaveResponse(
        message="Response saved successfully",
        response=service.to_response(response),
    )


# ── Report / export (declared before /{financial_year}) ───────────────────────


@router.get(
    "/report",
    response_model=ESGReportResponse,
    response_model_exclude_none=True,
)
async def get_report(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Scores for the latest year, per-metric trends and insights across all years."""
    return await service.build_report(db, current_user.user_id)


@router.get("/export")
async def export_responses_csv(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Export all of the user's responses as CSV."""
    csv_content = await service.export_responses_csv(db, current_user.user_id)
    return Response(
        content=csv_content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="esg-responses.csv"'},
    )


# ── Single financial year ─────────────────────────────────────────────────────


@router.get(
    "/{financial_year}",
    response_model=ESGResponseRecord,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
async def get_response(
    financial_year: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.get_response(db, current_user.user_id, financial_year)
    except service.ESGResponseNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Response not found for this year",
        ) from exc


@router.delete(
    "/{financial_year}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_response(
    financial_year: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.remove_response(db, current_user.user_id, financial_year)
        await db.commit()
    except service.ESGResponseNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Response not found",
        ) from exc
    return MessageResponse(message="Response deleted successfully")
