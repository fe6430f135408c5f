"""Master API router mounted at /api/v1."""

from fastapi import APIRouter

from sprinter.api.routes import health, projects, reports, sprints, work_items

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(projects.router)
api_router.include_router(sprints.router)
api_router.include_router(work_items.router)
api_router.include_router(reports.router)
