from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Any, Optional

from app.api import deps
from app.schemas.actor import Actor
from app.schemas.result import OperationResult
from app.services import notifications

router = APIRouter()

@router.get("/", response_model=OperationResult)
def get_notifications(
    *,
    db: Session = Depends(deps.get_db),
    current_actor: Actor = Depends(deps.get_current_actor),
    limit: Optional[int] = Query(None, ge=1, description="Número máximo de notificaciones"),
) -> Any:
    """
    Notificaciones del usuario actual, las más recientes primero.
    """
    return notifications.list_notifications(db, current_actor, limit)

@router.get("/unread-count", response_model=OperationResult)
def get_unread_count(
    *,
    db: Session = Depends(deps.get_db),
    current_actor: Actor = Depends(deps.get_current_actor),
) -> Any:
    return notifications.unread_count(db, current_actor)

@router.patch("/read-all", response_model=OperationResult)
def mark_all_notifications_as_read(
    *,
    db: Session = Depends(deps.get_db),
    current_actor: Actor = Depends(deps.get_current_actor),
) -> Any:
    result = notifications.mark_all_read(db, current_actor)
    return deps.raise_for_result(result)

@router.patch("/{notification_id}/read", response_model=OperationResult)
def mark_notification_as_read(
    *,
    db: Session = Depends(deps.get_db),
    notification_id: str,
    current_actor: Actor = Depends(deps.get_current_actor),
) -> Any:
    """
    Marcar una notificación propia como leída.
    """
    result = notifications.mark_notification_read(db, current_actor, notification_id)
    return deps.raise_for_result(result)
