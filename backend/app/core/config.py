import secrets
from typing import Any, Dict, List, Optional, Union
from pydantic import AnyHttpUrl, validator
from pydantic_settings import BaseSettings
import logging

logger = logging.getLogger(__name__)

class EnvironmentSettings(BaseSettings):
    """Configuración básica de entorno"""
    # Entorno de ejecución
    ENVIRONMENT: str = "development"

    @validator("ENVIRONMENT")
    def validate_environment(cls, v):
        allowed = ["development", "testing", "staging", "production"]
        if v.lower() not in allowed:
            raise ValueError(f"Entorno debe ser uno de: {', '.join(allowed)}")
        return v.lower()

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

# Cargar el entorno primero
env = EnvironmentSettings().ENVIRONMENT

# Mapeo de archivos de entorno
env_files = {
    "development": [".env.development", ".env"],
    "testing": [".env.testing", ".env"],
    "staging": [".env.staging", ".env"],
    "production": [".env.production", ".env"],
}

class Settings(BaseSettings):
    # API
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Mercadito Mensajería"
    DEBUG: bool = False

    # Entorno
    ENVIRONMENT: str = env

    # JWT (emitido por el servicio de identidad, aquí solo se verifica)
    SECRET_KEY: Optional[str] = None
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 días

    @validator("SECRET_KEY", pre=True, always=True)
    def validate_secret_key(cls, v, values):
        if not v or len(v) < 32:
            if env == "production":
                raise ValueError("SECRET_KEY debe tener al menos 32 caracteres en producción")
            # En desarrollo, generar una clave automáticamente
            logger.warning("SECRET_KEY no configurada o insegura, generando automáticamente")
            return secrets.token_urlsafe(32)
        return v

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Base de datos
    POSTGRES_SERVER: str = "db"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: str = "marketplace"
    DATABASE_URL: Optional[str] = None

    # Validación de contraseña de base de datos
    @validator("POSTGRES_PASSWORD", pre=True)
    def validate_db_password(cls, v, values):
        if env == "production" and (not v or len(v) < 12):
            raise ValueError("POSTGRES_PASSWORD debe tener al menos 12 caracteres en producción")
        return v

    @validator("DATABASE_URL", pre=True, always=True)
    def assemble_db_connection(cls, v: Optional[str], values: Dict[str, Any]) -> Any:
        if isinstance(v, str) and v:
            return v

        if not values.get("POSTGRES_PASSWORD"):
            if env == "production":
                raise ValueError("Se requiere DATABASE_URL o POSTGRES_PASSWORD en producción")
            # En desarrollo, usar SQLite como fallback
            logger.warning("PostgreSQL no configurado, usando SQLite")
            return "sqlite:///./marketplace.db"

        return (
            f"postgresql://{values.get('POSTGRES_USER')}:{values.get('POSTGRES_PASSWORD')}"
            f"@{values.get('POSTGRES_SERVER')}/{values.get('POSTGRES_DB') or ''}"
        )

    # Mensajería y notificaciones
    POLL_INTERVAL_SECONDS: int = 15
    NOTIFICATION_PAGE_SIZE: int = 50
    CONVERSATION_LIST_LIMIT: int = 50
    NOTIFICATION_PREVIEW_LENGTH: int = 100

    @validator("POLL_INTERVAL_SECONDS")
    def validate_poll_interval(cls, v):
        # Por debajo de 5s el polling satura la base de datos; por encima de 60s deja de parecer tiempo real
        if v < 5 or v > 60:
            raise ValueError("POLL_INTERVAL_SECONDS debe estar entre 5 y 60")
        return v

    @validator("NOTIFICATION_PAGE_SIZE", "CONVERSATION_LIST_LIMIT", "NOTIFICATION_PREVIEW_LENGTH")
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("El valor debe ser mayor que cero")
        return v

    # Configuraciones específicas por entorno
    def get_settings_by_environment(self) -> Dict[str, Any]:
        settings_map = {
            "development": {
                "DEBUG": True,
            },
            "testing": {
                "DEBUG": True,
            },
            "staging": {
                "DEBUG": False,
            },
            "production": {
                "DEBUG": False,
            },
        }

        return settings_map.get(self.ENVIRONMENT, {})

    # Aplicar configuraciones específicas del entorno
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        env_settings = self.get_settings_by_environment()
        for key, value in env_settings.items():
            if hasattr(self, key):
                setattr(self, key, value)

    class Config:
        case_sensitive = True
        env_file = env_files.get(env, [".env"])
        extra = "ignore"

# Crear instancia de configuración
settings = Settings()

# Registrar información de inicio
logger.info(f"Iniciando aplicación en entorno: {settings.ENVIRONMENT}")
logger.info(f"Depuración: {'activada' if settings.DEBUG else 'desactivada'}")
if settings.DATABASE_URL:
    db_url_safe = str(settings.DATABASE_URL)
    if settings.POSTGRES_PASSWORD:
        db_url_safe = db_url_safe.replace(str(settings.POSTGRES_PASSWORD), '****')
    logger.info(f"Base de datos: {db_url_safe}")
else:
    logger.info("Base de datos: No configurada")
