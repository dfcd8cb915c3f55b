"""Order cancellation — command and handler.

Admins may cancel any order, customers only their own. Cancelling does not
put the order's stock back.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from rentals.domain import rentals
from rentals.order.authorization import Actor, Role
from rentals.order.errors import AuthorizationDenied
from rentals.order.order import Order

logger = structlog.get_logger(__name__)


@rentals.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    actor_identity = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20, choices=Role)


@rentals.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        actor = Actor.of(command.actor_identity, command.actor_role)
        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)

        if actor.role != Role.ADMIN and not actor.owns(order):
            raise AuthorizationDenied("only an Admin or the ordering user may cancel")

        order.cancel(reason=command.reason, cancelled_by=actor.identity)
        repo.add(order)
        logger.info("Order cancelled", order_id=str(order.id), cancelled_by=actor.identity)
