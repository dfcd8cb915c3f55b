"""Repository for the Order aggregate.

The base repository provides get/add. The listing queries below are all the
workflow engine needs from storage.
"""

from protean.exceptions import ObjectNotFoundError

from rentals.domain import rentals
from rentals.order.errors import OrderNotFound
from rentals.order.order import Order


@rentals.repository(part_of=Order)
class OrderRepository:
    def get_order(self, order_id: str) -> Order:
        """Load an order, translating a miss into OrderNotFound."""
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            raise OrderNotFound(order_id) from None

    def list_all(self) -> list[Order]:
        """All orders, newest first."""
        return _newest_first(self._dao.query.all().items)

    def list_for_user(self, user_identity: str) -> list[Order]:
        """Orders placed by ``user_identity``, newest first."""
        return _newest_first(self._dao.query.filter(user_identity=user_identity).all().items)


def _newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: (o.created_at, str(o.id)), reverse=True)
