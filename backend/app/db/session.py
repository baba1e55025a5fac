##backend/app/db/session.py
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.core.config import settings
import logging
import threading
import time

logger = logging.getLogger(__name__)

# Inicialización de engine con None
engine = None
SessionLocal = None

# Control de inicialización
_is_initialized = False
_initialization_lock = threading.Lock()

def build_engine(url):
    """Crea el engine adecuado para la URL (PostgreSQL con pool, SQLite para desarrollo)."""
    url_str = str(url)
    if url_str.startswith("sqlite"):
        kwargs = {
            "echo": settings.DEBUG,
            "connect_args": {"check_same_thread": False},
        }
        # SQLite en memoria debe compartir una única conexión
        if url_str in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url_str, **kwargs)

    return create_engine(
        url_str,
        pool_size=10,
        max_overflow=20,
        pool_timeout=60,
        pool_recycle=1800,  # Reciclar conexiones cada 30 minutos
        pool_pre_ping=True,  # Verificar conexiones
        echo=settings.DEBUG,
    )

def init_db_connection(max_retries=5, initial_delay=1):
    """Inicializa la conexión a la base de datos con reintentos."""
    global engine, SessionLocal, _is_initialized

    if _is_initialized:
        return True

    # Usar lock para evitar inicializaciones concurrentes
    with _initialization_lock:
        if _is_initialized:
            return True

        retry_count = 0
        last_exception = None

        while retry_count < max_retries:
            try:
                engine = build_engine(settings.DATABASE_URL)

                # Probar la conexión
                with engine.begin() as conn:
                    conn.execute(text("SELECT 1"))

                logger.info(f"Conexión a la base de datos establecida (intento {retry_count + 1})")

                SessionLocal = sessionmaker(
                    autocommit=False,
                    autoflush=False,
                    expire_on_commit=False,
                    bind=engine,
                )

                _is_initialized = True
                return True

            except Exception as e:
                retry_count += 1
                last_exception = e
                wait_time = initial_delay * (2 ** (retry_count - 1))  # Exponential backoff

                logger.warning(f"Intento {retry_count}/{max_retries} fallido para conectar a la base de datos: {e}")
                if retry_count < max_retries:
                    logger.warning(f"Reintentando en {wait_time} segundos...")
                    time.sleep(wait_time)

        logger.error(f"No se pudo conectar a la base de datos después de {max_retries} intentos: {last_exception}")
        return False

def create_tables():
    """Crea las tablas que no existan todavía."""
    # Registrar todos los modelos en el metadata
    from app.db.base_class import Base
    from app.models import message, notification, seller, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Tablas de base de datos creadas/verificadas")

def dispose_db_connection():
    """Cierra el pool de conexiones."""
    global engine, SessionLocal, _is_initialized

    if engine is not None:
        engine.dispose()
    engine = None
    SessionLocal = None
    _is_initialized = False
