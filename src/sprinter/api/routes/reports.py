"""Progress report API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.dependencies import get_current_user_id, get_db
from sprinter.services import reports

router = APIRouter(tags=["Reports"])


@router.get("/projects/{project_id}/reports/completion")
async def project_completion(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    counts = await reports.project_status_counts(db, actor_id, project_id)
    return {
        "project_id": project_id,
        "status_counts": {str(status): count for status, count in counts.items()},
        "completion_pct": reports.completion_percent(counts),
    }


@router.get("/sprints/{sprint_id}/reports/points")
async def sprint_points(
    sprint_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    points = await reports.sprint_points_by_status(db, actor_id, sprint_id)
    return {
        "sprint_id": sprint_id,
        "points_by_status": {str(status): value for status, value in points.items()},
    }
