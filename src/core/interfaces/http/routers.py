"""API router configuration."""

from fastapi import APIRouter

from src.modules.aggregation.interfaces.router import router as aggregation_router
from src.modules.sources.interfaces.router import router as sources_router
from src.modules.users.interfaces.router import router as users_router

api_router = APIRouter()

# Sync & aggregated views
api_router.include_router(users_router)

# Source catalog
api_router.include_router(sources_router)

# Aggregated feed
api_router.include_router(aggregation_router)
