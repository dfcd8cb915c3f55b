"""Order creation — command and handler.

Placing an order takes stock for every line item, all or nothing, and seeds
an empty five-stage workflow.
"""

import json
import os
from collections import defaultdict

import structlog
from protean import handle
from protean.fields import Date, String, Text
from protean.utils.globals import current_domain

from rentals.domain import rentals
from rentals.order.order import Order
from rentals.order.sequence import next_order_id
from rentals.stock import get_stock_store

logger = structlog.get_logger(__name__)

DEFAULT_ORIGIN = "Bogotá, Colombia"


def default_origin() -> str:
    return os.environ.get("RENTALS_DEFAULT_ORIGIN", DEFAULT_ORIGIN)


@rentals.command(part_of="Order")
class CreateOrder:
    """Place a rental order for the acting user."""

    user_identity = String(required=True, max_length=255)
    items = Text(required=True)  # JSON list of {product_id, product_name, quantity}
    start_date = Date(required=True)
    end_date = Date(required=True)
    destination_location = String(required=True, max_length=255)
    origin_location = String(max_length=255)


def _stock_lines(items_data: list[dict]) -> list[tuple[str, int]]:
    """Collapse line items into one (product_id, quantity) pair per product."""
    totals: dict[str, int] = defaultdict(int)
    for item in items_data:
        totals[str(item["product_id"])] += int(item["quantity"])
    return list(totals.items())


@rentals.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items

        order_id = next_order_id()
        order = Order.create(
            order_id=order_id,
            user_identity=command.user_identity,
            items_data=items_data,
            start_date=command.start_date,
            end_date=command.end_date,
            destination_location=command.destination_location,
            origin_location=command.origin_location or default_origin(),
        )

        # Raises InsufficientStock with nothing taken; the unit of work then
        # discards the order and the sequence bump.
        get_stock_store().decrement_all(_stock_lines(items_data))

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order created",
            order_id=order_id,
            user_identity=command.user_identity,
            item_count=len(items_data),
        )
        return order_id
