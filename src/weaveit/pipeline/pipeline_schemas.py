"""Pydantic schemas for generation requests and responses."""

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    wallet_address: str | None = Field(default=None, alias="walletAddress")
    script: str | None = None
    title: str | None = None


class GenerateResponse(BaseModel):
    job_id: str
    artifact_id: str
    status: str
    credits_deducted: int
    remaining_credits: int
