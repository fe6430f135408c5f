"""Work item, comment and dependency API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.dependencies import get_current_user_id, get_db
from sprinter.models.work_item import (
    CommentBody,
    CommentResponse,
    DependencyCreate,
    DependencyResponse,
    HoursLog,
    ProgressChange,
    StatusChange,
    WorkItemCreate,
    WorkItemResponse,
    WorkItemUpdate,
)
from sprinter.services import work_items

router = APIRouter(tags=["Work Items"])


def _item(row) -> dict:
    return WorkItemResponse.model_validate(row).model_dump(mode="json")


@router.post("/projects/{project_id}/work-items", status_code=201)
async def create_work_item(
    project_id: str,
    body: WorkItemCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    fields = body.model_dump(exclude={"type", "title"})
    row = await work_items.create_work_item(db, actor_id, project_id, body.type, body.title, **fields)
    await db.commit()
    return _item(row)


@router.get("/projects/{project_id}/backlog")
async def list_backlog(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> list[dict]:
    return [_item(r) for r in await work_items.list_backlog(db, actor_id, project_id)]


@router.get("/work-items/by-key/{key}")
async def get_work_item_by_key(
    key: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    return _item(await work_items.get_work_item_by_key(db, actor_id, key))


@router.get("/work-items/{work_item_id}")
async def get_work_item(
    work_item_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    return _item(await work_items.get_work_item(db, actor_id, work_item_id))


@router.patch("/work-items/{work_item_id}")
async def update_work_item(
    work_item_id: str,
    body: WorkItemUpdate,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await work_items.update_work_item(db, actor_id, work_item_id, **body.model_dump(exclude_unset=True))
    await db.commit()
    return _item(row)


@router.put("/work-items/{work_item_id}/status")
async def change_status(
    work_item_id: str,
    body: StatusChange,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await work_items.change_status(db, actor_id, work_item_id, body.status)
    await db.commit()
    return _item(row)


@router.put("/work-items/{work_item_id}/progress")
async def change_progress(
    work_item_id: str,
    body: ProgressChange,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await work_items.change_progress(db, actor_id, work_item_id, body.progress_pct)
    await db.commit()
    return _item(row)


@router.post("/work-items/{work_item_id}/hours")
async def log_hours(
    work_item_id: str,
    body: HoursLog,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await work_items.log_hours(db, actor_id, work_item_id, body.hours)
    await db.commit()
    return _item(row)


@router.delete("/work-items/{work_item_id}", status_code=204)
async def delete_work_item(
    work_item_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> None:
    await work_items.delete_work_item(db, actor_id, work_item_id)
    await db.commit()


# ── Comments ───────────────────────────────────────────────────────────────────

@router.get("/work-items/{work_item_id}/comments")
async def list_comments(
    work_item_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> list[dict]:
    rows = await work_items.list_comments(db, actor_id, work_item_id)
    return [CommentResponse.model_validate(r).model_dump(mode="json") for r in rows]


@router.post("/work-items/{work_item_id}/comments", status_code=201)
async def add_comment(
    work_item_id: str,
    body: CommentBody,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await work_items.add_comment(db, actor_id, work_item_id, body.content)
    await db.commit()
    return CommentResponse.model_validate(row).model_dump(mode="json")


@router.put("/comments/{comment_id}")
async def update_comment(
    comment_id: str,
    body: CommentBody,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await work_items.update_comment(db, actor_id, comment_id, body.content)
    await db.commit()
    return CommentResponse.model_validate(row).model_dump(mode="json")


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> None:
    await work_items.delete_comment(db, actor_id, comment_id)
    await db.commit()


# ── Dependencies ───────────────────────────────────────────────────────────────

@router.get("/work-items/{work_item_id}/dependencies")
async def list_dependencies(
    work_item_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> list[dict]:
    rows = await work_items.list_dependencies(db, actor_id, work_item_id)
    return [DependencyResponse.model_validate(r).model_dump(mode="json") for r in rows]


@router.post("/work-items/{work_item_id}/dependencies", status_code=201)
async def add_dependency(
    work_item_id: str,
    body: DependencyCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await work_items.add_dependency(
        db,
        actor_id,
        body.predecessor_id,
        work_item_id,
        dependency_type=body.dependency_type,
        lag_days=body.lag_days,
    )
    await db.commit()
    return DependencyResponse.model_validate(row).model_dump(mode="json")


@router.delete("/dependencies/{dependency_id}", status_code=204)
async def remove_dependency(
    dependency_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> None:
    await work_items.remove_dependency(db, actor_id, dependency_id)
    await db.commit()
