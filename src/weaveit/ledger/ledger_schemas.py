"""Pydantic schemas for balance and payment endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BalanceResponse(BaseModel):
    wallet_address: str
    points: int
    trial_expires_at: datetime | None = None


class AwardRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    wallet_address: str | None = Field(default=None, alias="walletAddress")
    tier: int | str | None = None
    amount: int | str | None = None
    points: int | None = None
    content_type: str | None = Field(default=None, alias="contentType")


class AwardResponse(BaseModel):
    wallet_address: str
    awarded_points: int
    new_total_points: int
    content_type: str | None = None
    content_credits: float | None = None
