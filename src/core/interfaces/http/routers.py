"""API router configuration."""

from fastapi import APIRouter

from src.modules.events.interfaces.router import router as events_router

api_router = APIRouter()

# Event link health
api_router.include_router(events_router)
