from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
import time
import logging
import json
from typing import Any, Callable, List, Optional
from app.core.config import settings

logger = logging.getLogger(__name__)

class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Middleware para mejorar la seguridad de la aplicación:
    - Añade encabezados de seguridad
    - Convierte errores no manejados en un 500 genérico
    - Informa el tiempo de procesamiento
    """

    def __init__(
        self,
        app: FastAPI,
        exclude_paths: Optional[List[str]] = None,
    ):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/docs", "/redoc", "/openapi.json"]

    def is_path_excluded(self, path: str) -> bool:
        """Verifica si la ruta está excluida de la CSP estricta"""
        return any(path.startswith(excluded) for excluded in self.exclude_paths)

    def add_security_headers(self, response: Response, path: str) -> None:
        """Añade cabeceras de seguridad a la respuesta"""
        if self.is_path_excluded(path):
            # La documentación necesita cargar recursos del CDN
            if "Content-Security-Policy" in response.headers:
                del response.headers["Content-Security-Policy"]
            response.headers["X-Frame-Options"] = "SAMEORIGIN"
        else:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "img-src 'self' data:; "
                "connect-src 'self'"
            )
            response.headers["X-Frame-Options"] = "DENY"

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), camera=(), microphone=()"

        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        start_time = time.time()
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Error no manejado en {path}: {str(e)}")
            response = Response(
                content=json.dumps({
                    "detail": "Error interno del servidor"
                }),
                status_code=500,
                media_type="application/json"
            )

        self.add_security_headers(response, path)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        return response

def setup_security_middleware(app: FastAPI) -> None:
    """Configura los middlewares de seguridad para la aplicación"""
    # CORS
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[
                "X-Poll-Interval",
                "X-Process-Time",
            ],
        )

    app.add_middleware(
        SecurityMiddleware,
        exclude_paths=[
            "/docs",
            "/redoc",
            "/openapi.json",
        ],
    )
