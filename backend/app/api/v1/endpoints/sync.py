from datetime import datetime
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import Any, Optional

from app.api import deps
from app.core.config import settings
from app.schemas.actor import Actor
from app.schemas.result import OperationResult
from app.services.sync import get_sync_snapshot

router = APIRouter()

@router.get("/", response_model=OperationResult)
def sync(
    *,
    db: Session = Depends(deps.get_db),
    response: Response,
    current_actor: Actor = Depends(deps.get_current_actor),
    since: Optional[datetime] = Query(None, description="server_time de la sincronización anterior"),
) -> Any:
    """
    Instantánea para el polling del cliente: contadores, bandeja y si hubo cambios.
    """
    response.headers["X-Poll-Interval"] = str(settings.POLL_INTERVAL_SECONDS)
    return get_sync_snapshot(db, current_actor, since)
