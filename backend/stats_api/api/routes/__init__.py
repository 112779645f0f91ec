"""API route registrations."""
from fastapi import APIRouter

from stats_api.api.routes import stats, translate


api_router = APIRouter()
api_router.include_router(stats.router)
api_router.include_router(translate.router)

__all__ = ["api_router"]
