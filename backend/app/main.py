from fastapi import FastAPI
from fastapi.openapi.docs import get_swagger_ui_html
import logging
from contextlib import asynccontextmanager

from app.api.api import api_router
from app.core.config import settings
from app.middleware.security import setup_security_middleware

# Configurar logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    from app.db import session as db_session

    logger.info(f"Iniciando la aplicación en entorno: {settings.ENVIRONMENT}")

    if not db_session.init_db_connection(max_retries=5, initial_delay=2):
        logger.error("No se pudo inicializar la conexión a la base de datos antes del lifespan")
    else:
        try:
            db_session.create_tables()
        except Exception as e:
            logger.error(f"Error al crear las tablas: {e}")

    yield

    logger.info("Deteniendo la aplicación...")
    db_session.dispose_db_connection()
    logger.info("Conexiones a base de datos cerradas")

# Crear la aplicación FastAPI
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API de mensajería y notificaciones entre compradores y tiendas",
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json" if not settings.ENVIRONMENT == "production" else None,
    docs_url=None,  # Desactivamos endpoint de docs por defecto
    redoc_url=None,  # Desactivamos endpoint de redoc por defecto
    lifespan=lifespan,
)

# Configurar middlewares de seguridad
setup_security_middleware(app)

# Incluir routers
app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok", "environment": settings.ENVIRONMENT}

@app.get("/docs", include_in_schema=False)
async def custom_swagger_ui_html():
    """
    Endpoint personalizado para la documentación Swagger usando CDN.
    """
    return get_swagger_ui_html(
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        title=f"{settings.PROJECT_NAME} - API Documentation",
        swagger_js_url="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5.12.0/swagger-ui-bundle.js",
        swagger_css_url="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5.12.0/swagger-ui.css",
        swagger_ui_parameters={"persistAuthorization": True}
    )
