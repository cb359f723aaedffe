"""Pydantic schemas for the re-verification API."""

from __future__ import annotations

from typing import Any
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class VerificationRequestSchema(BaseModel):
    """Re-verification request body.

    ``state`` is accepted for client compatibility; the stored billing
    state is what gets scored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    email: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = Field(default=None, alias="useragent")
    state: Optional[str] = None


class VerificationResponseSchema(BaseModel):
    """Re-verification decision body."""

    model_config = ConfigDict(populate_by_name=True)

    code: int
    message: str
    user_data: dict[str, Any] = Field(alias="userData")
