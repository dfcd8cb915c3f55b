"""Order rescheduling — move the dispatch and return dates of an open order."""

from protean import handle
from protean.fields import Date, Identifier, String
from protean.utils.globals import current_domain

from rentals.domain import rentals
from rentals.order.authorization import Actor, Role, require_admin
from rentals.order.order import Order


@rentals.command(part_of="Order")
class RescheduleOrder:
    order_id = Identifier(required=True)
    start_date = Date(required=True)
    end_date = Date(required=True)
    actor_identity = String(required=True, max_length=255)
    actor_role = String(required=True, max_length=20, choices=Role)


@rentals.command_handler(part_of=Order)
class RescheduleOrderHandler:
    @handle(RescheduleOrder)
    def reschedule_order(self, command):
        actor = Actor.of(command.actor_identity, command.actor_role)
        require_admin(actor, "Rescheduling an order")

        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)
        order.reschedule(command.start_date, command.end_date)
        repo.add(order)
