#backend/app/api/deps.py
from typing import Generator, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import text
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.security import ACTOR_KINDS, decode_jwt_token
from app.schemas.actor import Actor
from app.schemas.result import OperationResult
import logging

logger = logging.getLogger(__name__)

# El token lo emite el servicio de identidad de la aplicación principal
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)

def get_db() -> Generator[Session, None, None]:
    """
    Dependency para obtener una sesión de base de datos sincrónica.
    """
    # Importamos aquí para leer el estado actual del módulo
    from app.db import session as db_session

    if not db_session._is_initialized:
        logger.warning("Conexión a base de datos no inicializada en get_db, inicializando...")
        if not db_session.init_db_connection(max_retries=1):
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="No se pudo conectar a la base de datos",
            )

    db = db_session.SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Error en sesión de base de datos: {e}")
        db.close()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Error de conexión a la base de datos",
        )

    try:
        yield db
    finally:
        db.close()

def get_optional_actor(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[Actor]:
    """
    Resuelve el actor del token, o None si no hay un token válido.
    """
    if not token:
        return None

    payload = decode_jwt_token(token)
    if not payload:
        return None

    actor_id = payload.get("sub")
    kind = payload.get("kind")
    if not actor_id or kind not in ACTOR_KINDS:
        return None

    return Actor(id=actor_id, kind=kind)

def get_current_actor(actor: Optional[Actor] = Depends(get_optional_actor)) -> Actor:
    """
    Dependency para obtener el comprador o tienda autenticado.
    """
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Debes iniciar sesión para continuar",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return actor

# Códigos de error del resultado -> estado HTTP para operaciones de escritura
RESULT_STATUS_CODES = {
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "store_error": status.HTTP_503_SERVICE_UNAVAILABLE,
}

def raise_for_result(result: OperationResult) -> OperationResult:
    """
    Convierte un resultado fallido de escritura en HTTPException.
    """
    if not result.success:
        raise HTTPException(
            status_code=RESULT_STATUS_CODES.get(result.code, status.HTTP_400_BAD_REQUEST),
            detail=result.message,
        )
    return result
