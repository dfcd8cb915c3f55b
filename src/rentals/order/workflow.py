"""Stage workflow — save-draft and complete-stage commands and handler.

Both commands are authorized by the stage resolver before the aggregate is
touched. A failure at any point leaves the stored order unchanged.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from rentals.domain import rentals
from rentals.order.authorization import Actor, Role, require_stage_access
from rentals.order.order import Order
from rentals.order.stages import parse_stage_key

logger = structlog.get_logger(__name__)


@rentals.command(part_of="Order")
class SaveStageDraft:
    """Store in-progress evidence on a stage without closing it."""

    order_id = Identifier(required=True)
    stage_key = String(required=True, max_length=30)
    actor_identity = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20, choices=Role)
    evidence = Text()  # JSON object, see Order.save_stage_draft


@rentals.command(part_of="Order")
class CompleteStage:
    """Close a stage with its evidence, or correct a closed stage's evidence."""

    order_id = Identifier(required=True)
    stage_key = String(required=True, max_length=30)
    actor_identity = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20, choices=Role)
    evidence = Text()


def _load_evidence(raw) -> dict:
    if not raw:
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValidationError({"evidence": [f"Evidence is not valid JSON: {exc.msg}"]}) from exc
    if not isinstance(raw, dict):
        raise ValidationError({"evidence": ["Evidence must be a JSON object"]})
    return raw


@rentals.command_handler(part_of=Order)
class StageWorkflowHandler:
    @handle(SaveStageDraft)
    def save_stage_draft(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)
        stage_key = parse_stage_key(command.stage_key)
        actor = Actor.of(command.actor_identity, command.actor_role)

        require_stage_access(order, stage_key, actor)
        order.save_stage_draft(stage_key, _load_evidence(command.evidence), actor.identity)
        repo.add(order)

    @handle(CompleteStage)
    def complete_stage(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)
        stage_key = parse_stage_key(command.stage_key)
        actor = Actor.of(command.actor_identity, command.actor_role)

        require_stage_access(order, stage_key, actor)
        completed_now = order.complete_stage(stage_key, _load_evidence(command.evidence), actor.identity)
        repo.add(order)

        logger.info(
            "Stage completed" if completed_now else "Stage evidence corrected",
            order_id=str(order.id),
            stage_key=stage_key.value,
            order_status=order.status,
        )
        return order.status
