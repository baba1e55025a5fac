from typing import Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.seller import Seller
from app.models.user import User
from app.schemas.actor import Actor
from app.schemas.message import CounterpartInfo

def _model_for(kind: str):
    return Seller if kind == "seller" else User

def get_actor_record(db: Session, actor_id: str, kind: str, active_only: bool = True):
    """Fila del directorio para el actor, o None. Por defecto solo actores activos."""
    model = _model_for(kind)
    stmt = select(model).where(model.id == actor_id)
    if active_only:
        stmt = stmt.where(model.is_active.is_(True))
    return db.execute(stmt).scalar_one_or_none()

def to_counterpart_info(record, kind: str) -> CounterpartInfo:
    return CounterpartInfo(
        id=record.id,
        kind=kind,
        display_name=record.display_name,
        email=record.email,
        image=record.image,
        shop_owner_name=getattr(record, "shop_owner_name", None),
    )

def resolve_counterpart(db: Session, actor: Actor, counterpart_id: str) -> Optional[CounterpartInfo]:
    """
    Resuelve la otra parte de una conversación: una tienda para compradores y viceversa.

    Incluye actores desactivados: sus conversaciones siguen siendo legibles.
    """
    kind = actor.counterpart_kind
    record = get_actor_record(db, counterpart_id, kind, active_only=False)
    if record is None:
        return None
    return to_counterpart_info(record, kind)

def resolve_many(db: Session, kind: str, ids: Iterable[str]) -> Dict[str, CounterpartInfo]:
    """Resuelve varios actores de un mismo tipo en una sola consulta."""
    ids = list(set(ids))
    if not ids:
        return {}
    model = _model_for(kind)
    rows = db.execute(select(model).where(model.id.in_(ids))).scalars().all()
    return {row.id: to_counterpart_info(row, kind) for row in rows}

def unknown_counterpart(counterpart_id: str, kind: str) -> CounterpartInfo:
    # Actor borrado del directorio; la conversación sigue visible
    return CounterpartInfo(
        id=counterpart_id,
        kind=kind,
        display_name="Usuario" if kind == "user" else "La tienda",
    )
