"""
State machine for the entry moderation workflow.

The transition table below is the only definition of which status changes
are legal and who may trigger them. Rows are keyed by (from, to) and carry
an actor predicate phrased in capabilities, so the three-role and two-role
pipelines are just different capability policies over the same table.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.errors import ForbiddenError, InvalidTransitionError, ValidationError
from src.kernel.events.event_store import EventStore
from src.kernel.events.event_types import EntryStatusChangedEvent
from src.kernel.identity.role_directory import RoleDirectory, normalize_identity
from src.kernel.models.base import utcnow
from src.kernel.models.entry import Entry, EntryStatus
from src.kernel.models.event_log import EventType
from src.kernel.models.role_assignment import UserRole
from src.kernel.permissions.capabilities import Capability, CapabilityPolicy, get_policy
from src.kernel.records.record_store import RecordStore, TransitionPatch
from src.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ActorContext:
    """Who is acting on which entry, with their resolved role."""

    entry: Entry
    actor: str
    role: UserRole
    policy: CapabilityPolicy

    @property
    def is_creator(self) -> bool:
        return normalize_identity(self.entry.created_by) == self.actor

    def can(self, capability: Capability) -> bool:
        return self.policy.has_capability(self.role, capability)


Predicate = Callable[[ActorContext], bool]
SideEffects = Callable[[str, datetime, Optional[str]], Dict[str, Any]]


@dataclass(frozen=True)
class TransitionRule:
    """One row of the transition table."""

    from_status: EntryStatus
    to_status: EntryStatus
    requirement: str
    allowed: Predicate
    side_effects: SideEffects
    requires_reason: bool = False


def _creator_or_moderator(ctx: ActorContext) -> bool:
    return ctx.is_creator or ctx.can(Capability.REVIEW) or ctx.can(Capability.PUBLISH)


def _reviewer(ctx: ActorContext) -> bool:
    return ctx.can(Capability.REVIEW)


def _publisher(ctx: ActorContext) -> bool:
    return ctx.can(Capability.PUBLISH)


def _creator(ctx: ActorContext) -> bool:
    return ctx.is_creator


def _no_fields(actor: str, now: datetime, reason: Optional[str]) -> Dict[str, Any]:
    return {}


def _review_fields(actor: str, now: datetime, reason: Optional[str]) -> Dict[str, Any]:
    return {"reviewed_by": actor, "reviewed_at": now}


def _rejection_fields(actor: str, now: datetime, reason: Optional[str]) -> Dict[str, Any]:
    return {"reviewed_by": actor, "reviewed_at": now, "rejection_reason": reason}


def _publication_fields(actor: str, now: datetime, reason: Optional[str]) -> Dict[str, Any]:
    return {"published_by": actor, "published_at": now}


def _clear_rejection(actor: str, now: datetime, reason: Optional[str]) -> Dict[str, Any]:
    return {"rejection_reason": None}


_RULES = [
    TransitionRule(
        EntryStatus.DRAFT, EntryStatus.PENDING_REVIEW,
        "creator, or can_review, or can_publish",
        _creator_or_moderator, _no_fields,
    ),
    TransitionRule(
        EntryStatus.PENDING_REVIEW, EntryStatus.APPROVED,
        "can_review",
        _reviewer, _review_fields,
    ),
    TransitionRule(
        EntryStatus.PENDING_REVIEW, EntryStatus.REJECTED,
        "can_review",
        _reviewer, _rejection_fields,
        requires_reason=True,
    ),
    TransitionRule(
        EntryStatus.APPROVED, EntryStatus.PUBLISHED,
        "can_publish",
        _publisher, _publication_fields,
    ),
    # Administrative revert; published_by/published_at are kept as history
    TransitionRule(
        EntryStatus.PUBLISHED, EntryStatus.DRAFT,
        "can_publish",
        _publisher, _no_fields,
    ),
    # Resubmission path back to the author
    TransitionRule(
        EntryStatus.REJECTED, EntryStatus.DRAFT,
        "creator",
        _creator, _clear_rejection,
    ),
]

_TRANSITIONS: Dict[Tuple[EntryStatus, EntryStatus], TransitionRule] = {
    (rule.from_status, rule.to_status): rule for rule in _RULES
}


def get_rule(from_status: EntryStatus, to_status: EntryStatus) -> Optional[TransitionRule]:
    return _TRANSITIONS.get((from_status, to_status))


def valid_transitions(from_status: EntryStatus) -> List[EntryStatus]:
    """Return target states reachable from from_state by anyone."""
    return [t for (f, t) in _TRANSITIONS if f == from_status]


def _coerce_target(from_status: EntryStatus, target: Union[EntryStatus, str]) -> EntryStatus:
    if isinstance(target, EntryStatus):
        return target
    try:
        return EntryStatus(str(target).strip().lower())
    except ValueError:
        raise InvalidTransitionError(from_status.value, str(target)) from None


class WorkflowEngine:
    """
    Performs entry status transitions.

    attempt_transition resolves the actor's role, looks up the table row,
    checks the actor predicate and required input, then writes the new status
    and audit fields with a single conditional update.
    """

    def __init__(
        self,
        session: AsyncSession,
        policy: Optional[CapabilityPolicy] = None,
    ):
        self.session = session
        self.policy = policy or get_policy()
        self.roles = RoleDirectory(session, self.policy)
        self.store = RecordStore(session)
        self.event_store = EventStore(session)

    async def actor_context(self, entry: Entry, actor: Optional[str]) -> ActorContext:
        """Resolve actor's role. Raises UnauthorizedError for a blank identity."""
        role = await self.roles.resolve_role(actor)
        return ActorContext(
            entry=entry,
            actor=normalize_identity(actor),
            role=role,
            policy=self.policy,
        )

    @staticmethod
    def is_permitted(ctx: ActorContext, to_status: EntryStatus) -> bool:
        """True if the table has this edge and ctx satisfies its predicate."""
        rule = get_rule(ctx.entry.workflow_status, to_status)
        return rule is not None and rule.allowed(ctx)

    async def attempt_transition(
        self,
        entry: Entry,
        target_status: Union[EntryStatus, str],
        actor: Optional[str],
        reason: Optional[str] = None,
        action: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Entry:
        """
        Move entry to target_status on behalf of actor.

        Raises:
            UnauthorizedError: actor identity missing
            InvalidTransitionError: no such edge from the entry's status
            ForbiddenError: actor does not satisfy the edge's requirement
            ValidationError: a required reason is missing or blank
            ConflictError: another writer changed the status first
        """
        ctx = await self.actor_context(entry, actor)
        from_status = entry.workflow_status
        to_status = _coerce_target(from_status, target_status)

        rule = get_rule(from_status, to_status)
        if rule is None:
            logger.info(
                "Rejected invalid transition",
                extra={"entry_id": entry.id, "from_status": from_status.value, "to_status": to_status.value},
            )
            raise InvalidTransitionError(from_status.value, to_status.value)

        if not rule.allowed(ctx):
            logger.warning(
                "Transition denied",
                extra={
                    "entry_id": entry.id,
                    "from_status": from_status.value,
                    "to_status": to_status.value,
                    "actor": ctx.actor,
                    "role": ctx.role.value,
                },
            )
            raise ForbiddenError(
                f"Role '{ctx.role.value}' may not move entry from "
                f"{from_status.value} to {to_status.value} (requires {rule.requirement})"
            )

        clean_reason = reason.strip() if reason else None
        if rule.requires_reason and not clean_reason:
            raise ValidationError("A reason is required for this transition", field="reason")

        now = utcnow()
        patch = TransitionPatch(
            rule=rule,
            updated_at=now,
            fields=rule.side_effects(ctx.actor, now, clean_reason),
        )
        updated = await self.store.conditional_update(entry.id, entry.status, patch)

        await self.event_store.log_from_model(
            event_type=EventType.ENTRY_STATUS_CHANGED,
            entity_type="entry",
            entity_id=updated.id,
            actor=ctx.actor,
            payload_model=EntryStatusChangedEvent(
                kind=updated.kind,
                from_status=from_status.value,
                to_status=to_status.value,
                action=action,
                actor_role=ctx.role.value,
                reason=clean_reason if rule.requires_reason else None,
            ),
            ip_address=ip_address,
        )
        logger.info(
            "Entry transitioned",
            extra={
                "entry_id": updated.id,
                "from_status": from_status.value,
                "to_status": to_status.value,
                "actor": ctx.actor,
                "role": ctx.role.value,
            },
        )
        return updated
