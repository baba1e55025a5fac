"""
Conversaciones entre compradores y tiendas.

Una conversación es el conjunto de mensajes que comparten el par
(user_id, seller_id). El campo sender_type indica quién escribió cada
mensaje y, por tanto, quién es el destinatario a efectos de lectura.
"""
import logging
from typing import Tuple

from sqlalchemy import and_, case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, StoreError, ValidationError
from app.core.utils import utcnow
from app.models.message import Message
from app.schemas.actor import Actor
from app.schemas.message import (
    ConversationDetail,
    ConversationSummary,
    MessageResponse,
    ReadStateUpdate,
)
from app.schemas.notification import UnreadCount
from app.schemas.result import OperationResult
from app.services import directory
from app.services.base import operation, transaction_scope
from app.services.notifications import notify

logger = logging.getLogger(__name__)

def _pair(actor: Actor, counterpart_id: str) -> Tuple[str, str]:
    """Devuelve (user_id, seller_id) de la conversación entre el actor y la contraparte."""
    if actor.kind == "user":
        return actor.id, counterpart_id
    return counterpart_id, actor.id

def conversation_columns(actor: Actor):
    """Columnas (propia, de la contraparte) según el lado desde el que se mira."""
    if actor.kind == "user":
        return Message.user_id, Message.seller_id
    return Message.seller_id, Message.user_id

def _not_found(actor: Actor) -> NotFoundError:
    if actor.counterpart_kind == "seller":
        return NotFoundError("Tienda no encontrada")
    return NotFoundError("Usuario no encontrado")

def _notification_title(actor: Actor, sender_record) -> str:
    if actor.kind == "user":
        name = sender_record.display_name if sender_record is not None else "Usuario"
        return f"Nuevo mensaje de {name}"
    name = sender_record.display_name if sender_record is not None else "La tienda"
    return f"{name} respondió a tu mensaje"

@operation("No se pudo enviar el mensaje")
def send_message(db: Session, actor: Actor, counterpart_id: str, body: str) -> OperationResult:
    """
    Envía un mensaje a la otra parte y le crea una notificación.

    El mensaje y la notificación se guardan en sentencias separadas. Si la
    notificación falla, el mensaje queda guardado y el envío se informa
    como fallido; no se reintenta.
    """
    if not counterpart_id:
        raise ValidationError("Se requiere el destinatario")

    text = (body or "").strip()
    if not text:
        raise ValidationError("El mensaje no puede estar vacío")

    if directory.get_actor_record(db, counterpart_id, actor.counterpart_kind) is None:
        raise _not_found(actor)

    sender_record = directory.get_actor_record(db, actor.id, actor.kind)
    user_id, seller_id = _pair(actor, counterpart_id)

    message = Message(
        user_id=user_id,
        seller_id=seller_id,
        sender_type=actor.kind,
        body=text,
        is_read=False,
    )
    with transaction_scope(db):
        db.add(message)

    try:
        notify(
            db,
            recipient_id=counterpart_id,
            recipient_type=message.recipient_type,
            title=_notification_title(actor, sender_record),
            body=text,
            related_id=message.id,
            related_type="message",
            type="message",
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Mensaje {message.id} guardado pero falló la notificación: {str(e)}")
        raise StoreError("El mensaje se guardó, pero no se pudo notificar al destinatario")

    logger.info(f"Mensaje {message.id} enviado por {actor.kind} {actor.id}")
    return OperationResult.ok("Mensaje enviado correctamente", MessageResponse.model_validate(message))

@operation(
    "No se pudo obtener la conversación",
    empty=lambda: {"counterpart": None, "messages": []},
)
def get_conversation(db: Session, actor: Actor, counterpart_id: str) -> OperationResult:
    """
    Mensajes de la conversación, del más antiguo al más reciente.

    No marca nada como leído; el cliente llama después a mark_as_read.
    """
    if not counterpart_id:
        raise ValidationError("Se requiere el id de la contraparte")

    counterpart = directory.resolve_counterpart(db, actor, counterpart_id)
    if counterpart is None:
        raise _not_found(actor)

    user_id, seller_id = _pair(actor, counterpart_id)
    stmt = (
        select(Message)
        .where(Message.user_id == user_id, Message.seller_id == seller_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    rows = db.execute(stmt).scalars().all()

    return OperationResult.ok(
        "Conversación obtenida",
        ConversationDetail(
            counterpart=counterpart,
            messages=[MessageResponse.model_validate(row) for row in rows],
        ),
    )

@operation("No se pudieron marcar los mensajes como leídos")
def mark_as_read(db: Session, actor: Actor, counterpart_id: str) -> OperationResult:
    """
    Marca como leídos los mensajes que la contraparte envió al actor.

    Es una única actualización condicional: llamadas repetidas o
    concurrentes no vuelven a tocar filas ya leídas, y los mensajes
    escritos por el propio actor nunca se modifican.
    """
    if not counterpart_id:
        raise ValidationError("Se requiere el id de la contraparte")

    user_id, seller_id = _pair(actor, counterpart_id)
    with transaction_scope(db):
        result = db.execute(
            update(Message)
            .where(
                Message.user_id == user_id,
                Message.seller_id == seller_id,
                Message.sender_type == actor.counterpart_kind,
                Message.is_read.is_(False),
            )
            .values(is_read=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )

    return OperationResult.ok("Mensajes marcados como leídos", ReadStateUpdate(updated=result.rowcount))

def build_conversation_summaries(db: Session, actor: Actor):
    """
    Una fila por contraparte: último mensaje y número de mensajes no leídos.

    El contador es el total real de mensajes de la contraparte sin leer,
    igual para compradores y para tiendas.
    """
    own_col, counterpart_col = conversation_columns(actor)
    counterpart_kind = actor.counterpart_kind

    unread_expr = func.sum(
        case(
            (and_(Message.sender_type == counterpart_kind, Message.is_read.is_(False)), 1),
            else_=0,
        )
    )
    latest = (
        select(
            counterpart_col.label("counterpart_id"),
            func.max(Message.created_at).label("last_time"),
            unread_expr.label("unread"),
        )
        .where(own_col == actor.id)
        .group_by(counterpart_col)
        .order_by(func.max(Message.created_at).desc())
        .limit(settings.CONVERSATION_LIST_LIMIT)
        .subquery()
    )
    stmt = (
        select(Message, latest.c.unread)
        .join(
            latest,
            and_(
                counterpart_col == latest.c.counterpart_id,
                Message.created_at == latest.c.last_time,
            ),
        )
        .where(own_col == actor.id)
        .order_by(Message.created_at.desc(), Message.id.desc())
    )
    rows = db.execute(stmt).all()

    # Dos mensajes con la misma marca de tiempo darían filas duplicadas
    latest_by_counterpart = {}
    for message, unread in rows:
        key = message.seller_id if actor.kind == "user" else message.user_id
        if key not in latest_by_counterpart:
            latest_by_counterpart[key] = (message, int(unread or 0))

    infos = directory.resolve_many(db, counterpart_kind, latest_by_counterpart.keys())

    summaries = []
    for counterpart_id, (message, unread) in latest_by_counterpart.items():
        counterpart = infos.get(counterpart_id) or directory.unknown_counterpart(counterpart_id, counterpart_kind)
        summaries.append(
            ConversationSummary(
                counterpart=counterpart,
                last_message=message.body,
                last_message_type=message.sender_type,
                last_message_time=message.created_at,
                unread_count=unread,
            )
        )
    return summaries

@operation("No se pudieron obtener las conversaciones", empty=list)
def list_conversations(db: Session, actor: Actor) -> OperationResult:
    return OperationResult.ok("Conversaciones obtenidas", build_conversation_summaries(db, actor))

def count_unread_messages(db: Session, actor: Actor) -> int:
    own_col, _ = conversation_columns(actor)
    stmt = select(func.count(Message.id)).where(
        own_col == actor.id,
        Message.sender_type == actor.counterpart_kind,
        Message.is_read.is_(False),
    )
    return db.execute(stmt).scalar_one()

@operation("No se pudo obtener el contador de mensajes", empty=lambda: UnreadCount(count=0))
def unread_message_count(db: Session, actor: Actor) -> OperationResult:
    """Mensajes sin leer dirigidos al actor en todas sus conversaciones."""
    return OperationResult.ok("Contador obtenido", UnreadCount(count=count_unread_messages(db, actor)))
