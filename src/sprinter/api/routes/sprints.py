"""Sprint lifecycle API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.dependencies import get_current_user_id, get_db
from sprinter.models.sprint import SprintComplete, SprintCreate, SprintResponse, SprintUpdate
from sprinter.models.work_item import WorkItemResponse
from sprinter.services import sprints
from sprinter.services.work_items import list_sprint_items

router = APIRouter(tags=["Sprints"])


def _sprint(row) -> dict:
    return SprintResponse.model_validate(row).model_dump(mode="json")


@router.post("/projects/{project_id}/sprints", status_code=201)
async def create_sprint(
    project_id: str,
    body: SprintCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await sprints.create_sprint(
        db,
        actor_id,
        project_id,
        body.name,
        goal=body.goal,
        start_date=body.start_date,
        end_date=body.end_date,
    )
    await db.commit()
    return _sprint(row)


@router.get("/projects/{project_id}/sprints")
async def list_sprints(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> list[dict]:
    return [_sprint(r) for r in await sprints.list_sprints(db, actor_id, project_id)]


@router.get("/projects/{project_id}/sprints/active")
async def get_active_sprint(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict | None:
    row = await sprints.get_active_sprint(db, actor_id, project_id)
    return _sprint(row) if row else None


@router.patch("/sprints/{sprint_id}")
async def update_sprint(
    sprint_id: str,
    body: SprintUpdate,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await sprints.update_sprint(db, actor_id, sprint_id, **body.model_dump(exclude_unset=True))
    await db.commit()
    return _sprint(row)


@router.post("/sprints/{sprint_id}/start")
async def start_sprint(
    sprint_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await sprints.start_sprint(db, actor_id, sprint_id)
    await db.commit()
    return _sprint(row)


@router.post("/sprints/{sprint_id}/complete")
async def complete_sprint(
    sprint_id: str,
    body: SprintComplete | None = None,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    target = body.target_sprint_id if body else None
    row = await sprints.complete_sprint(db, actor_id, sprint_id, target)
    await db.commit()
    return _sprint(row)


@router.post("/sprints/{sprint_id}/cancel")
async def cancel_sprint(
    sprint_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await sprints.cancel_sprint(db, actor_id, sprint_id)
    await db.commit()
    return _sprint(row)


@router.get("/sprints/{sprint_id}/items")
async def sprint_items(
    sprint_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> list[dict]:
    rows = await list_sprint_items(db, actor_id, sprint_id)
    return [WorkItemResponse.model_validate(r).model_dump(mode="json") for r in rows]


@router.put("/sprints/{sprint_id}/items/{work_item_id}")
async def add_item_to_sprint(
    sprint_id: str,
    work_item_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await sprints.add_work_item_to_sprint(db, actor_id, sprint_id, work_item_id)
    await db.commit()
    return WorkItemResponse.model_validate(row).model_dump(mode="json")


@router.delete("/work-items/{work_item_id}/sprint")
async def remove_item_from_sprint(
    work_item_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await sprints.remove_work_item_from_sprint(db, actor_id, work_item_id)
    await db.commit()
    return WorkItemResponse.model_validate(row).model_dump(mode="json")
