"""Order status derivation.

The aggregate status of an order is never set by a stage call; it is
recomputed from the stage statuses after every stage write.
"""

from collections.abc import Mapping
from enum import Enum

from rentals.order.stages import DELIVERY_STAGE, LAST_STAGE, StageKey, StageStatus


class OrderStatus(Enum):
    PENDING = "Pending"
    IN_PROCESS = "InProcess"
    DELIVERED = "Delivered"
    FINALIZED = "Finalized"
    CANCELLED = "Cancelled"


TERMINAL_STATUSES = {OrderStatus.FINALIZED, OrderStatus.CANCELLED}


def derive_status(
    current: OrderStatus,
    approved: bool,
    stage_statuses: Mapping[StageKey, StageStatus],
) -> OrderStatus:
    """Compute the order status from its stages.

    Cancellation is sticky. Otherwise the furthest milestone wins: the
    warehouse return finalizes the order, client delivery marks it delivered.
    An unapproved order with no closed stage is still pending.
    """
    if current == OrderStatus.CANCELLED:
        return OrderStatus.CANCELLED

    def completed(key: StageKey) -> bool:
        return stage_statuses.get(key) == StageStatus.COMPLETED

    if completed(LAST_STAGE):
        return OrderStatus.FINALIZED
    if completed(DELIVERY_STAGE):
        return OrderStatus.DELIVERED
    if not approved and not any(status == StageStatus.COMPLETED for status in stage_statuses.values()):
        return OrderStatus.PENDING
    return OrderStatus.IN_PROCESS
