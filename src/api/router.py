from fastapi import APIRouter

from src.api.cron import router as cron_router
from src.api.documents import router as documents_router
from src.api.push import router as push_router

api_router = APIRouter()
api_router.include_router(cron_router)
api_router.include_router(documents_router)
api_router.include_router(push_router)
