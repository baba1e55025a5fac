#backend/app/api/api.py
from fastapi import APIRouter
from app.api.v1.endpoints import messages, notifications, sync

api_router = APIRouter()

# Incluir routers para diferentes recursos
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(sync.router, prefix="/sync", tags=["sync"])
