"""Test common Pydantic models, request schemas and error responses."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from sprinter.errors.exceptions import NotFoundError
from sprinter.models.common import ErrorDetail, ErrorResponse
from sprinter.models.enums import ProjectRole, WorkItemStatus
from sprinter.models.project import MemberAdd, ProjectCreate
from sprinter.models.sprint import SprintComplete
from sprinter.models.work_item import StatusChange, WorkItemCreate


def test_error_response_serializes():
    error_resp = ErrorResponse(
        error=ErrorDetail(
            code="VALIDATION_ERROR",
            message="Project must retain at least one manager",
            details={"project_id": "proj_1", "user_id": "usr_1"},
            trace_id="trc_err_001",
            timestamp=datetime(2026, 2, 21, 10, 30, 0, tzinfo=timezone.utc),
        ),
    )

    dumped = error_resp.model_dump(mode="json", exclude_none=True)
    assert dumped["error"]["code"] == "VALIDATION_ERROR"
    assert dumped["error"]["details"] == {"project_id": "proj_1", "user_id": "usr_1"}
    assert dumped["error"]["trace_id"] == "trc_err_001"


def test_error_response_rejects_unknown_fields():
    """ErrorResponse should reject unknown fields (extra='forbid')."""
    with pytest.raises(ValidationError):
        ErrorResponse(
            error=ErrorDetail(
                code="TEST",
                message="test",
                trace_id="trc_test_001",
                timestamp=datetime.now(timezone.utc),
            ),
            unknown_field="should fail",
        )


def test_not_found_error_message():
    exc = NotFoundError("Sprint", "spr_123")
    assert exc.status_code == 404
    assert exc.message == "Sprint 'spr_123' not found"


def test_member_add_defaults_to_team_member():
    assert MemberAdd(user_id="usr_1").role == ProjectRole.TEAM_MEMBER


def test_request_models_reject_unknown_fields():
    with pytest.raises(ValidationError):
        ProjectCreate(key="WEB", name="Web", owner_id="usr_1")


def test_work_item_create_rejects_negative_points():
    with pytest.raises(ValidationError):
        WorkItemCreate(type="TASK", title="Task", story_points=-1)


def test_status_change_parses_enum():
    assert StatusChange(status="IN_REVIEW").status == WorkItemStatus.IN_REVIEW
    with pytest.raises(ValidationError):
        StatusChange(status="BLOCKED")


def test_sprint_complete_target_is_optional():
    assert SprintComplete().target_sprint_id is None
