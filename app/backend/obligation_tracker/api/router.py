"""Top-level API router."""

from fastapi import APIRouter

from obligation_tracker.api.routes.catalog import router as catalog_router
from obligation_tracker.api.routes.change_log import router as change_log_router
from obligation_tracker.api.routes.exports import router as exports_router
from obligation_tracker.api.routes.health import router as health_router
from obligation_tracker.api.routes.reports import router as reports_router
from obligation_tracker.api.routes.tasks import router as tasks_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(catalog_router)
api_router.include_router(tasks_router)
api_router.include_router(reports_router)
api_router.include_router(exports_router)
api_router.include_router(change_log_router)
