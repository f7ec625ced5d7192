"""Unit tests for action discovery and dispatch."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.errors import NotFoundError, ValidationError
from src.kernel.models.entry import EntryStatus
from src.kernel.permissions.capabilities import THREE_ROLE_POLICY, TWO_ROLE_POLICY
from src.orchestration.actions import ActionSurface, WorkflowAction, parse_action


def test_parse_action():
    assert parse_action(" Publish ") is WorkflowAction.PUBLISH
    with pytest.raises(ValidationError):
        parse_action("archive")


class TestAvailableActions:

    async def test_unassigned_creator_can_only_submit_draft(self, db_session: AsyncSession, make_entry):
        entry = await make_entry(created_by="alice")
        surface = ActionSurface(db_session, THREE_ROLE_POLICY)

        assert await surface.available_actions(entry, "alice") == {WorkflowAction.SUBMIT}

    async def test_unassigned_stranger_gets_nothing(self, db_session: AsyncSession, make_entry):
        entry = await make_entry(created_by="alice")
        surface = ActionSurface(db_session, THREE_ROLE_POLICY)

        assert await surface.available_actions(entry, "carol") == set()

    async def test_pending_entry_by_role(self, db_session: AsyncSession, staff, make_entry):
        entry = await make_entry(created_by="alice", status="pending_review")
        surface = ActionSurface(db_session, THREE_ROLE_POLICY)

        assert await surface.available_actions(entry, "alice") == set()
        assert await surface.available_actions(entry, "head@uni.edu") == {
            WorkflowAction.APPROVE,
            WorkflowAction.REJECT,
        }

    async def test_published_entry(self, db_session: AsyncSession, staff, make_entry):
        entry = await make_entry(created_by="alice", status="published")
        surface = ActionSurface(db_session, THREE_ROLE_POLICY)

        assert await surface.available_actions(entry, "director@uni.edu") == {WorkflowAction.REVERT}
        assert await surface.available_actions(entry, "head@uni.edu") == set()

    async def test_rejected_entry_reverts_for_creator_only(self, db_session: AsyncSession, staff, make_entry):
        entry = await make_entry(created_by="alice", status="rejected")
        surface = ActionSurface(db_session, THREE_ROLE_POLICY)

        assert await surface.available_actions(entry, "alice") == {WorkflowAction.REVERT}
        assert await surface.available_actions(entry, "admin@uni.edu") == set()

    async def test_two_role_reviewer_on_approved(self, db_session: AsyncSession, assign_roles, make_entry):
        await assign_roles(**{"rev@uni.edu": "reviewer"})
        entry = await make_entry(status="approved")

        actions = await ActionSurface(db_session, TWO_ROLE_POLICY).available_actions(entry, "rev@uni.edu")

        assert actions == {WorkflowAction.PUBLISH}


class TestPerform:

    async def test_perform_delegates_to_engine(self, db_session: AsyncSession, staff, make_entry):
        entry = await make_entry(created_by="alice", status="pending_review")
        surface = ActionSurface(db_session, THREE_ROLE_POLICY)

        updated = await surface.perform(entry.id, "reject", "head@uni.edu", reason="missing DOI")

        assert updated.workflow_status is EntryStatus.REJECTED
        assert updated.rejection_reason == "missing DOI"

    async def test_perform_unknown_entry(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await ActionSurface(db_session, THREE_ROLE_POLICY).perform("missing", WorkflowAction.SUBMIT, "alice")
