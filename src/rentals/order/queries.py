"""Read-side queries over orders.

None of these take the per-order lock; they read whatever is committed.
"""

from protean.utils.globals import current_domain

from rentals.order.authorization import STAFF_ROLES, Actor, resolve_stage_access
from rentals.order.order import Order
from rentals.order.serialization import stage_to_record
from rentals.order.stages import parse_stage_key, stage_definition


def get_order(order_id: str) -> Order:
    return current_domain.repository_for(Order).get_order(order_id)


def list_visible_orders(actor: Actor) -> list[Order]:
    """Staff see every order; customers see only the orders they placed."""
    repo = current_domain.repository_for(Order)
    if actor.role in STAFF_ROLES:
        return repo.list_all()
    return repo.list_for_user(actor.identity)


def stage_view(order_id: str, stage_key: str, actor: Actor) -> dict:
    """A stage's record plus whether ``actor`` may edit it right now.

    Denied actors still get the full record so they can follow progress.
    """
    order = get_order(order_id)
    key = parse_stage_key(stage_key)
    decision = resolve_stage_access(order, key, actor)
    definition = stage_definition(key)
    return {
        "orderId": str(order.id),
        "stageKey": key.value,
        "label": definition.label,
        "position": definition.position,
        "requiresReceiver": definition.requires_receiver,
        "editable": decision.permitted,
        "reason": decision.reason,
        "stage": stage_to_record(order.stage(key)),
    }
