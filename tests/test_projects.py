"""Tests for project creation, keys, hierarchy and the item-number allocator."""

import pytest

from sprinter.errors.exceptions import AccessDeniedError, NotFoundError, ValidationError
from sprinter.models.enums import ProjectRole, ProjectStatus, SystemRole
from sprinter.services import members, projects
from sprinter.services.access import effective_role


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("key, expected", [("AB12", "AB12"), ("web", "WEB"), (" qa1 ", "QA1"), ("ABCDEFGHIJ", "ABCDEFGHIJ")])
def test_valid_project_keys(key, expected):
    assert projects.normalize_project_key(key) == expected


@pytest.mark.parametrize("key", ["ab-c", "Z", "1ABC", "", "ABCDEFGHIJK", "A B"])
def test_invalid_project_keys(key):
    with pytest.raises(ValidationError):
        projects.normalize_project_key(key)


@pytest.mark.parametrize(
    "name, expected",
    [("Web Shop Redesign", "WSR"), ("Backend", "BACK"), ("", "PRJ"), ("a b c d e", "ABCD")],
)
def test_suggest_project_key(name, expected):
    assert projects.suggest_project_key(name) == expected


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_creator_becomes_manager(db_session, make_user):
    alice = await make_user("alice")
    project = await projects.create_project(db_session, alice, "shop", "Web Shop")
    await db_session.commit()

    assert project.project_key == "SHOP"
    assert project.owner_id == alice
    assert project.status == ProjectStatus.ACTIVE
    assert project.is_root
    assert await effective_role(db_session, project.project_id, alice) == ProjectRole.MANAGER


@pytest.mark.asyncio
async def test_duplicate_key_rejected_case_insensitively(db_session, make_user):
    alice = await make_user("alice")
    await projects.create_project(db_session, alice, "SHOP", "Web Shop")
    with pytest.raises(ValidationError, match="already in use"):
        await projects.create_project(db_session, alice, "shop", "Another Shop")


@pytest.mark.asyncio
async def test_end_date_before_start_rejected(db_session, make_user):
    from datetime import date

    alice = await make_user("alice")
    with pytest.raises(ValidationError):
        await projects.create_project(
            db_session, alice, "DATES", "Dates", start_date=date(2024, 5, 2), end_date=date(2024, 5, 1)
        )


@pytest.mark.asyncio
async def test_subproject_requires_manage_access(db_session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    root = await projects.create_project(db_session, alice, "ROOT", "Root")
    await members.add_member(db_session, alice, root.project_id, bob, ProjectRole.TEAM_MEMBER)

    with pytest.raises(AccessDeniedError):
        await projects.create_subproject(db_session, bob, root.project_id, "SUB", "Sub")

    sub = await projects.create_subproject(db_session, alice, root.project_id, "SUB", "Sub")
    assert sub.parent_id == root.project_id
    assert not sub.is_root


@pytest.mark.asyncio
async def test_subproject_of_missing_parent(db_session, make_user):
    alice = await make_user("alice")
    with pytest.raises(NotFoundError):
        await projects.create_subproject(db_session, alice, "proj_missing", "SUB", "Sub")


@pytest.mark.asyncio
async def test_deactivated_user_cannot_create_project(db_session, make_user):
    from sprinter.services.users import deactivate_user

    admin = await make_user("admin", SystemRole.ADMIN)
    bob = await make_user("bob")
    await deactivate_user(db_session, admin, bob)
    with pytest.raises(AccessDeniedError):
        await projects.create_project(db_session, bob, "BOB", "Bob's")


@pytest.mark.asyncio
async def test_list_projects_for_user(db_session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    admin = await make_user("admin", SystemRole.ADMIN)
    root = await projects.create_project(db_session, alice, "ALPHA", "Alpha")
    await projects.create_subproject(db_session, alice, root.project_id, "ALPHA2", "Alpha child")
    await projects.create_project(db_session, bob, "BETA", "Beta")
    archived = await projects.create_project(db_session, bob, "GAMMA", "Gamma")
    await projects.archive_project(db_session, bob, archived.project_id)

    assert [p.project_key for p in await projects.list_projects_for_user(db_session, alice)] == ["ALPHA"]
    assert [p.project_key for p in await projects.list_projects_for_user(db_session, bob)] == ["BETA"]
    assert [p.project_key for p in await projects.list_projects_for_user(db_session, admin)] == ["ALPHA", "BETA"]

    children = await projects.list_subprojects(db_session, alice, root.project_id)
    assert [c.project_key for c in children] == ["ALPHA2"]


@pytest.mark.asyncio
async def test_update_project_requires_manager(db_session, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    project = await projects.create_project(db_session, alice, "UPD", "Before")
    await members.add_member(db_session, alice, project.project_id, bob, ProjectRole.TEAM_MEMBER)

    with pytest.raises(AccessDeniedError):
        await projects.update_project(db_session, bob, project.project_id, name="Hijacked")

    updated = await projects.update_project(
        db_session, alice, project.project_id, name="After", status=ProjectStatus.ON_HOLD
    )
    assert updated.name == "After"
    assert updated.status == ProjectStatus.ON_HOLD


@pytest.mark.asyncio
async def test_get_project_by_key(db_session, make_user):
    alice = await make_user("alice")
    project = await projects.create_project(db_session, alice, "FIND", "Find me")
    found = await projects.get_project_by_key(db_session, alice, "find")
    assert found.project_id == project.project_id
    with pytest.raises(NotFoundError):
        await projects.get_project_by_key(db_session, alice, "NOPE")


# ---------------------------------------------------------------------------
# Allocator
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_item_numbers_are_sequential_per_project(db_session, make_user):
    alice = await make_user("alice")
    one = await projects.create_project(db_session, alice, "ONE", "One")
    two = await projects.create_project(db_session, alice, "TWO", "Two")

    assert [await projects.next_item_number(db_session, one.project_id) for _ in range(3)] == [1, 2, 3]
    assert await projects.next_item_number(db_session, two.project_id) == 1


@pytest.mark.asyncio
async def test_item_number_for_unknown_project(db_session):
    with pytest.raises(NotFoundError):
        await projects.next_item_number(db_session, "proj_missing")
