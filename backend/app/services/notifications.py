"""
Fan-out y agregación de notificaciones.

Cada envío de mensaje crea exactamente una notificación para la otra
parte; no se agrupan ni se deduplican.
"""
import logging
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.core.utils import truncate_preview
from app.models.notification import Notification, NOTIFICATION_TYPES
from app.schemas.actor import Actor
from app.schemas.notification import NotificationResponse, UnreadCount
from app.schemas.message import ReadStateUpdate
from app.schemas.result import OperationResult
from app.services.base import operation, transaction_scope

logger = logging.getLogger(__name__)

def notify(
    db: Session,
    recipient_id: str,
    recipient_type: str,
    title: str,
    body: str,
    related_id: Optional[str] = None,
    related_type: Optional[str] = None,
    type: str = "message",
) -> Notification:
    """
    Inserta una notificación. Propaga los errores de la base al llamante.
    """
    if type not in NOTIFICATION_TYPES:
        raise ValueError(f"Tipo de notificación desconocido: {type}")

    notification = Notification(
        recipient_id=recipient_id,
        recipient_type=recipient_type,
        type=type,
        title=title,
        body=truncate_preview(body, settings.NOTIFICATION_PREVIEW_LENGTH),
        related_id=related_id,
        related_type=related_type,
        is_read=False,
    )
    with transaction_scope(db):
        db.add(notification)

    logger.debug(f"Notificación {notification.id} creada para {recipient_type} {recipient_id}")
    return notification

def _owned_by(actor: Actor):
    return (Notification.recipient_id == actor.id, Notification.recipient_type == actor.kind)

@operation("No se pudieron obtener las notificaciones", empty=list)
def list_notifications(db: Session, actor: Actor, limit: Optional[int] = None) -> OperationResult:
    """Notificaciones del llamante, de la más reciente a la más antigua."""
    page_size = settings.NOTIFICATION_PAGE_SIZE
    if limit is None or limit < 1 or limit > page_size:
        limit = page_size

    stmt = (
        select(Notification)
        .where(*_owned_by(actor))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
    )
    rows = db.execute(stmt).scalars().all()

    return OperationResult.ok(
        "Notificaciones obtenidas",
        [NotificationResponse.model_validate(row) for row in rows],
    )

@operation("No se pudo marcar la notificación como leída")
def mark_notification_read(db: Session, actor: Actor, notification_id: str) -> OperationResult:
    if not notification_id:
        raise ValidationError("Se requiere el id de la notificación")

    # Solo se busca entre las notificaciones propias: una ajena se trata como inexistente
    exists = db.execute(
        select(Notification.id).where(Notification.id == notification_id, *_owned_by(actor))
    ).scalar_one_or_none()
    if exists is None:
        raise NotFoundError("Notificación no encontrada")

    with transaction_scope(db):
        result = db.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                *_owned_by(actor),
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )

    return OperationResult.ok(
        "Notificación marcada como leída",
        ReadStateUpdate(updated=result.rowcount),
    )

@operation("No se pudieron marcar las notificaciones como leídas")
def mark_all_read(db: Session, actor: Actor) -> OperationResult:
    with transaction_scope(db):
        result = db.execute(
            update(Notification)
            .where(*_owned_by(actor), Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )

    logger.info(f"{result.rowcount} notificaciones marcadas como leídas para {actor.kind} {actor.id}")
    return OperationResult.ok(
        "Todas las notificaciones marcadas como leídas",
        ReadStateUpdate(updated=result.rowcount),
    )

def count_unread_notifications(db: Session, actor: Actor) -> int:
    stmt = select(func.count(Notification.id)).where(*_owned_by(actor), Notification.is_read.is_(False))
    return db.execute(stmt).scalar_one()

@operation("No se pudo obtener el contador de notificaciones", empty=lambda: UnreadCount(count=0))
def unread_count(db: Session, actor: Actor) -> OperationResult:
    return OperationResult.ok(
        "Contador obtenido",
        UnreadCount(count=count_unread_notifications(db, actor)),
    )
