"""API route aggregation.

All routers registered here get mounted in main.py under /api/v1.
Health and auth are open; task routes resolve the caller themselves via
get_current_user because every task operation needs the caller's id.
"""

from fastapi import APIRouter

from taskvault.api.auth import router as auth_router
from taskvault.api.health import router as health_router
from taskvault.api.tasks import router as tasks_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(tasks_router, tags=["tasks"])
