from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Any

from app.api import deps
from app.schemas.actor import Actor
from app.schemas.message import MessageCreate
from app.schemas.result import OperationResult
from app.services import messaging

router = APIRouter()

@router.post("/", response_model=OperationResult, status_code=status.HTTP_201_CREATED)
def create_message(
    *,
    db: Session = Depends(deps.get_db),
    message_in: MessageCreate,
    current_actor: Actor = Depends(deps.get_current_actor),
) -> Any:
    """
    Enviar un mensaje a la otra parte (tienda o comprador).
    """
    result = messaging.send_message(db, current_actor, message_in.counterpart_id, message_in.body)
    return deps.raise_for_result(result)

@router.get("/conversations", response_model=OperationResult)
def list_conversations(
    *,
    db: Session = Depends(deps.get_db),
    current_actor: Actor = Depends(deps.get_current_actor),
) -> Any:
    """
    Bandeja de entrada: una fila por contraparte, la más reciente primero.
    """
    return messaging.list_conversations(db, current_actor)

@router.get("/unread-count", response_model=OperationResult)
def get_unread_count(
    *,
    db: Session = Depends(deps.get_db),
    current_actor: Actor = Depends(deps.get_current_actor),
) -> Any:
    """
    Total de mensajes sin leer dirigidos al usuario actual.
    """
    return messaging.unread_message_count(db, current_actor)

@router.get("/{counterpart_id}", response_model=OperationResult)
def get_conversation(
    *,
    db: Session = Depends(deps.get_db),
    counterpart_id: str,
    current_actor: Actor = Depends(deps.get_current_actor),
) -> Any:
    """
    Mensajes de la conversación con la contraparte, del más antiguo al más reciente.
    """
    return messaging.get_conversation(db, current_actor, counterpart_id)

@router.patch("/{counterpart_id}/read", response_model=OperationResult)
def mark_conversation_as_read(
    *,
    db: Session = Depends(deps.get_db),
    counterpart_id: str,
    current_actor: Actor = Depends(deps.get_current_actor),
) -> Any:
    """
    Marcar como leídos los mensajes recibidos de la contraparte.
    """
    result = messaging.mark_as_read(db, current_actor, counterpart_id)
    return deps.raise_for_result(result)
