"""Alert Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AlertCreate(BaseModel):
    """Schema for saving a new alert."""

    alert_type: str = Field(..., description="name, location or phone")
    alert_term: str = Field(..., max_length=200)


class AlertResponse(BaseModel):
    id: str
    alert_type: str
    alert_term: str
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
