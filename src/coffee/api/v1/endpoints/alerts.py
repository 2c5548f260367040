# src/coffee/api/v1/endpoints/alerts.py
"""Alert management endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from coffee.api.v1.dependencies import Guard, SessionDep
from coffee.models import User
from coffee.schemas.alert import AlertCreate, AlertResponse
from coffee.services import alerts as alert_service
from coffee.services.access import Capability

router = APIRouter(prefix="/alerts", tags=["alerts"])

AlertOwnerDep = Annotated[User, Depends(Guard(Capability.MANAGE_ALERTS))]


@router.get("", response_model=list[AlertResponse])
async def list_alerts(user: AlertOwnerDep, db: SessionDep) -> list[AlertResponse]:
    return [AlertResponse.model_validate(a) for a in alert_service.list_alerts(db, user.id)]


@router.post("", response_model=AlertResponse, status_code=status.HTTP_201_CREATED)
async def create_alert(payload: AlertCreate, user: AlertOwnerDep, db: SessionDep) -> AlertResponse:
    alert = alert_service.create_alert(db, user.id, payload.alert_type, payload.alert_term)
    return AlertResponse.model_validate(alert)


@router.delete("/{alert_id}")
async def delete_alert(alert_id: str, user: AlertOwnerDep, db: SessionDep) -> dict[str, bool]:
    alert_service.delete_alert(db, user.id, alert_id)
    return {"success": True}
