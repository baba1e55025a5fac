from datetime import datetime, timezone

ELLIPSIS = "…"

def utcnow() -> datetime:
    """Fecha y hora actual en UTC (aware)."""
    return datetime.now(timezone.utc)

def truncate_preview(text: str, limit: int = 100) -> str:
    """
    Recorta un texto para usarlo como vista previa de notificación.

    Si el texto supera `limit` caracteres se guardan los primeros `limit`
    seguidos de un único carácter de elipsis, por lo que el resultado
    nunca supera `limit + 1` caracteres.
    """
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS

def normalize_datetime_comparison(dt1, dt2):
    """
    Normaliza dos objetos datetime para que ambos sean comparables.
    Si uno tiene zona horaria (aware) y el otro no (naive),
    convierte el naive a aware usando la zona horaria del otro.
    Si ambos son naive, los mantiene así.
    Si ambos son aware pero con diferentes zonas horarias, los convierte a UTC.

    SQLite devuelve fechas naive aunque la columna sea timezone=True,
    por eso las comparaciones de cursores de sincronización pasan por aquí.

    Args:
        dt1 (datetime): Primer objeto datetime
        dt2 (datetime): Segundo objeto datetime

    Returns:
        tuple: (dt1_normalized, dt2_normalized)
    """
    if (dt1.tzinfo is None and dt2.tzinfo is None) or \
       (dt1.tzinfo is not None and dt2.tzinfo is not None and dt1.tzinfo == dt2.tzinfo):
        return dt1, dt2

    if dt1.tzinfo is not None and dt2.tzinfo is None:
        dt2 = dt2.replace(tzinfo=dt1.tzinfo)
        return dt1, dt2

    if dt2.tzinfo is not None and dt1.tzinfo is None:
        dt1 = dt1.replace(tzinfo=dt2.tzinfo)
        return dt1, dt2

    dt1 = dt1.astimezone(timezone.utc)
    dt2 = dt2.astimezone(timezone.utc)
    return dt1, dt2
