import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import MessagingError, StoreError, Unauthenticated
from app.schemas.result import OperationResult

logger = logging.getLogger(__name__)

@contextmanager
def transaction_scope(db: Session):
    """Proporciona un contexto transaccional: commit al salir, rollback ante errores de la base."""
    try:
        yield
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

def operation(failure_message: str, empty: Optional[Callable[[], Any]] = None):
    """
    Frontera de las operaciones de mensajería.

    La función decorada recibe `(db, actor, ...)` y devuelve un
    OperationResult. Los errores de dominio se convierten en un resultado
    fallido con su mensaje; los errores de la base se registran y se
    devuelven con un mensaje genérico. Una excepción de la base nunca
    llega a la capa HTTP.

    `empty` marca las operaciones de lectura: si se indica, los fallos
    devuelven `data=empty()` para que las vistas de bandeja no se bloqueen.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(db: Session, actor, *args, **kwargs) -> OperationResult:
            data = empty() if empty is not None else None
            try:
                if actor is None:
                    raise Unauthenticated()
                return func(db, actor, *args, **kwargs)
            except MessagingError as e:
                return OperationResult.fail(e.message, e.code, data)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error de base de datos en {func.__name__}: {str(e)}")
                return OperationResult.fail(failure_message, StoreError.code, data)
        return wrapper
    return decorator
