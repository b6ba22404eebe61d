"""ESG questionnaire response model: one row per user per financial year."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import JSONType
from app.models.base import BaseModel


class ESGResponse(BaseModel):
    __tablename__ = "esg_responses"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), nullable=False, index=True
    )
    financial_year: Mapped[int] = mapped_column(Integer, nullable=False)

    # Raw questionnaire answers (camelCase keys) plus the "autoCalculated" block:
    # {"totalRevenue": 1000000, ..., "autoCalculated": {"carbonIntensity": 0.0002}}
    data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("user_id", "financial_year", name="uq_esg_response_user_year"),
    )
