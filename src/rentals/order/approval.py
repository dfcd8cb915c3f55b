"""Order approval — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from rentals.domain import rentals
from rentals.order.authorization import Actor, Role, require_admin
from rentals.order.order import Order


@rentals.command(part_of="Order")
class ApproveOrder:
    order_id = Identifier(required=True)
    actor_identity = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20, choices=Role)


@rentals.command_handler(part_of=Order)
class ApproveOrderHandler:
    @handle(ApproveOrder)
    def approve_order(self, command):
        actor = Actor.of(command.actor_identity, command.actor_role)
        require_admin(actor, "Approving an order")

        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)
        order.approve(approved_by=actor.identity)
        repo.add(order)
