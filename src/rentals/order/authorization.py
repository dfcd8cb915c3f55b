"""Stage authorization resolver — the single source of truth for who may act.

Rules are evaluated in order and the first failing rule wins:

    1. cancelled orders accept no stage mutation
       (then, only when RENTALS_REQUIRE_APPROVAL is set, unapproved orders)
    2. the preceding stage must already be completed
    3. role-to-stage mapping
         Admin        every stage, but only on orders they placed themselves
         Logistics    the warehouse-facing stages (first and last)
         Coordinator  the field-facing stages (the three in the middle)
         User         none
    4. otherwise denied, naming the department that owns the stage

A denial only forbids mutation. Callers may still show the stage read-only.
"""

import os
from dataclasses import dataclass
from enum import Enum

from rentals.order.errors import AuthorizationDenied, InvalidSequencing
from rentals.order.stages import (
    Department,
    StageKey,
    StageStatus,
    predecessor_of,
    stage_definition,
)
from rentals.order.status import OrderStatus


class Role(Enum):
    ADMIN = "Admin"
    LOGISTICS = "Logistics"
    COORDINATOR = "Coordinator"
    USER = "User"


STAFF_ROLES = {Role.ADMIN, Role.LOGISTICS, Role.COORDINATOR}

_DEPARTMENT_ROLE = {
    Department.LOGISTICS: Role.LOGISTICS,
    Department.COORDINATOR: Role.COORDINATOR,
}


@dataclass(frozen=True)
class Actor:
    """The caller as reported by the identity/role source."""

    identity: str
    role: Role

    @classmethod
    def of(cls, identity: str, role: str | Role) -> "Actor":
        return cls(identity=identity, role=role if isinstance(role, Role) else Role(role))

    def owns(self, order) -> bool:
        return self.identity == order.user_identity


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of a stage access check."""

    permitted: bool
    reason: str | None = None
    code: str | None = None

    def raise_if_denied(self) -> None:
        if self.permitted:
            return
        if self.code == "sequencing":
            raise InvalidSequencing(self.reason)
        raise AuthorizationDenied(self.reason)


PERMITTED = AuthorizationResult(permitted=True)


def approval_required() -> bool:
    """Whether stage work must wait for ApproveOrder (off unless configured)."""
    return os.environ.get("RENTALS_REQUIRE_APPROVAL", "false").lower() in ("1", "true", "yes")


def resolve_stage_access(
    order,
    stage_key: StageKey,
    actor: Actor,
    require_approval: bool | None = None,
) -> AuthorizationResult:
    """Decide whether ``actor`` may mutate ``stage_key`` of ``order`` right now."""
    if require_approval is None:
        require_approval = approval_required()

    status = OrderStatus(order.status)

    if status == OrderStatus.CANCELLED:
        return AuthorizationResult(False, "order cancelled", "cancelled")

    if require_approval and not order.approved:
        return AuthorizationResult(False, "order awaiting approval", "approval")

    predecessor = predecessor_of(stage_key)
    if predecessor is not None and order.stage_status(predecessor) != StageStatus.COMPLETED:
        return AuthorizationResult(False, "predecessor stage incomplete", "sequencing")

    owner = stage_definition(stage_key).owner

    if actor.role == Role.ADMIN and actor.owns(order):
        return PERMITTED
    if actor.role == _DEPARTMENT_ROLE[owner]:
        return PERMITTED

    return AuthorizationResult(False, f"owned by {owner.value}", "role")


def require_stage_access(order, stage_key: StageKey, actor: Actor) -> None:
    resolve_stage_access(order, stage_key, actor).raise_if_denied()


def require_admin(actor: Actor, action: str) -> None:
    if actor.role != Role.ADMIN:
        raise AuthorizationDenied(f"{action} requires Admin")
