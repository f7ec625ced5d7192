"""
Action surface - the contract UI and API layers use to drive the workflow.

Actions are named targets; which ones a user may take is read off the
transition table rather than re-implemented here.
"""

from enum import Enum
from typing import Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.errors import ValidationError
from src.kernel.models.entry import Entry, EntryStatus
from src.kernel.permissions.capabilities import CapabilityPolicy
from src.orchestration.state_machine import WorkflowEngine


class WorkflowAction(str, Enum):
    """User-facing workflow actions."""

    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    PUBLISH = "publish"
    # published -> draft (administrative) or rejected -> draft (resubmission)
    REVERT = "revert"


ACTION_TARGETS = {
    WorkflowAction.SUBMIT: EntryStatus.PENDING_REVIEW,
    WorkflowAction.APPROVE: EntryStatus.APPROVED,
    WorkflowAction.REJECT: EntryStatus.REJECTED,
    WorkflowAction.PUBLISH: EntryStatus.PUBLISHED,
    WorkflowAction.REVERT: EntryStatus.DRAFT,
}


def parse_action(raw: str) -> WorkflowAction:
    try:
        return WorkflowAction(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(a.value for a in WorkflowAction)
        raise ValidationError(f"Unknown action '{raw}'. Expected one of: {allowed}", field="action") from None


class ActionSurface:
    """Discover and perform workflow actions for an explicit actor."""

    def __init__(self, session: AsyncSession, policy: Optional[CapabilityPolicy] = None):
        self.engine = WorkflowEngine(session, policy)
        self.store = self.engine.store

    async def available_actions(self, entry: Entry, actor: Optional[str]) -> Set[WorkflowAction]:
        """Actions actor may take on entry in its current status."""
        ctx = await self.engine.actor_context(entry, actor)
        return {
            action
            for action, target in ACTION_TARGETS.items()
            if self.engine.is_permitted(ctx, target)
        }

    async def perform(
        self,
        entry_id: str,
        action: WorkflowAction,
        actor: Optional[str],
        reason: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Entry:
        """Load the entry and apply action on behalf of actor."""
        action = parse_action(action)
        entry = await self.store.get(entry_id)
        return await self.engine.attempt_transition(
            entry,
            ACTION_TARGETS[action],
            actor,
            reason=reason,
            action=action.value,
            ip_address=ip_address,
        )
