"""Order deletion — administrative removal of an order record.

Outside the workflow proper. Refused while someone else still has an open
draft on one of the order's stages, unless forced.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from rentals.domain import rentals
from rentals.order.authorization import Actor, Role, require_admin
from rentals.order.errors import OrderBusy
from rentals.order.order import Order
from rentals.projections.order_progress import OrderProgressView

logger = structlog.get_logger(__name__)


@rentals.command(part_of="Order")
class DeleteOrder:
    order_id = Identifier(required=True)
    actor_identity = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20, choices=Role)
    force = Boolean(default=False)


@rentals.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        actor = Actor.of(command.actor_identity, command.actor_role)
        require_admin(actor, "Deleting an order")

        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)

        other_editors = sorted(order.draft_editors() - {actor.identity})
        if other_editors and not command.force:
            raise OrderBusy(str(order.id), other_editors[0])

        repo._dao.delete(order)

        view_repo = current_domain.repository_for(OrderProgressView)
        try:
            view_repo._dao.delete(view_repo.get(str(order.id)))
        except ObjectNotFoundError:
            pass

        logger.info(
            "Order deleted",
            order_id=str(order.id),
            deleted_by=actor.identity,
            forced=bool(command.force),
        )
