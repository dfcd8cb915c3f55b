"""Order number sequence — hands out human-readable ids (ORD-0001, ORD-0002, ...).

The counter is persisted as its own small aggregate so that numbers are
never reused, even after an order is deleted.
"""

from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from rentals.domain import rentals

ORDER_SEQUENCE = "orders"


@rentals.aggregate
class OrderSequence:
    name = String(identifier=True, max_length=50)
    last_value = Integer(default=0)

    def next_order_id(self) -> str:
        self.last_value = (self.last_value or 0) + 1
        return format_order_id(self.last_value)


def format_order_id(number: int) -> str:
    return f"ORD-{number:04d}"


def next_order_id() -> str:
    """Advance the persisted sequence and return the new order id.

    Must be called inside the unit of work that stores the order, while
    holding the sequence lock.
    """
    repo = current_domain.repository_for(OrderSequence)
    try:
        sequence = repo.get(ORDER_SEQUENCE)
    except ObjectNotFoundError:
        sequence = OrderSequence(name=ORDER_SEQUENCE, last_value=0)

    order_id = sequence.next_order_id()
    repo.add(sequence)
    return order_id
