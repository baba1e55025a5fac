from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import jwt
from app.core.config import settings

# Algoritmo para JWT
ALGORITHM = "HS256"

# Tipos de actor reconocidos en el claim "kind"
ACTOR_KINDS = ("user", "seller")

def create_access_token(actor_id: str, kind: str, expires_minutes: Optional[int] = None) -> str:
    """
    Crear un token JWT para un comprador o una tienda.

    El servicio de identidad es quien emite los tokens en producción;
    esta función existe para pruebas y herramientas internas.
    """
    if kind not in ACTOR_KINDS:
        raise ValueError(f"Tipo de actor inválido: {kind}")

    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode = {"sub": actor_id, "kind": kind, "exp": expire}

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)

def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decodificar y verificar un token JWT.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except jwt.JWTError:
        return None
