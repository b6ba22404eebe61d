"""Auth schemas: CurrentUser."""

import uuid

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Lightweight user context extracted from the bearer token."""

    user_id: uuid.UUID
    email: str = ""
