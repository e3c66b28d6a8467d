from fastapi import APIRouter

from wikidelete.routers.delete import router as delete_router
from wikidelete.routers.health import router as health_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router)
api_router.include_router(delete_router)
