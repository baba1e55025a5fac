"""
Contrato de sincronización por polling.

No hay transporte push: los clientes vuelven a pedir esta instantánea
cada POLL_INTERVAL_SECONDS. `server_time` sirve como cursor `since` de la
siguiente petición y `changed` indica si hubo actividad desde entonces.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.utils import normalize_datetime_comparison, utcnow
from app.models.message import Message
from app.models.notification import Notification
from app.schemas.actor import Actor
from app.schemas.result import OperationResult
from app.schemas.sync import SyncSnapshot
from app.services.base import operation
from app.services.messaging import build_conversation_summaries, conversation_columns, count_unread_messages
from app.services.notifications import count_unread_notifications

logger = logging.getLogger(__name__)

def latest_activity(db: Session, actor: Actor) -> Optional[datetime]:
    """Último instante en que se creó o se leyó algo que afecta al actor."""
    own_col, _ = conversation_columns(actor)

    candidates = [
        db.execute(select(func.max(Message.created_at)).where(own_col == actor.id)).scalar(),
        db.execute(select(func.max(Message.updated_at)).where(own_col == actor.id)).scalar(),
        db.execute(
            select(func.max(Notification.created_at)).where(
                Notification.recipient_id == actor.id,
                Notification.recipient_type == actor.kind,
            )
        ).scalar(),
    ]
    candidates = [c for c in candidates if c is not None]
    if not candidates:
        return None
    return max(candidates)

def has_changed_since(db: Session, actor: Actor, since: Optional[datetime]) -> bool:
    """
    Compara la última actividad con `since` menos un intervalo de polling.

    `created_at` se asigna antes del commit, así que una fila confirmada
    después de una consulta puede llevar una fecha anterior a su
    `server_time`. El solape hace que esa fila aparezca en el siguiente
    polling; a cambio `changed` sigue en true un intervalo más.
    """
    if since is None:
        return True

    latest = latest_activity(db, actor)
    if latest is None:
        return False

    # SQLite devuelve fechas naive en UTC
    if latest.tzinfo is None:
        latest = latest.replace(tzinfo=timezone.utc)
    latest, since = normalize_datetime_comparison(latest, since)
    return latest > since - timedelta(seconds=settings.POLL_INTERVAL_SECONDS)

@operation("No se pudo sincronizar", empty=lambda: None)
def get_sync_snapshot(db: Session, actor: Actor, since: Optional[datetime] = None) -> OperationResult:
    server_time = utcnow()
    changed = has_changed_since(db, actor, since)

    snapshot = SyncSnapshot(
        server_time=server_time,
        poll_interval_seconds=settings.POLL_INTERVAL_SECONDS,
        changed=changed,
        unread_messages=count_unread_messages(db, actor),
        unread_notifications=count_unread_notifications(db, actor),
        # Sin cambios no hace falta recalcular la bandeja
        conversations=build_conversation_summaries(db, actor) if changed else [],
    )
    return OperationResult.ok("Sincronización completada", snapshot)
