"""Pydantic models for SOS API responses."""

from pydantic import BaseModel, Field


class EmergencyTypeModel(BaseModel):
    """Display metadata for one emergency type."""

    value: str
    label: str
    color: str = Field(pattern=r"^#[0-9a-f]{6}$")
    icon: str


class EmergencyTypeListResponse(BaseModel):
    """Response body for the emergency type listing."""

    data: list[EmergencyTypeModel]


class PurgeResponse(BaseModel):
    """Response body for the expiry sweep."""

    purged: int = Field(ge=0)
