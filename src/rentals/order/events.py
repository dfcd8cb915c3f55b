"""Rental order domain events — immutable facts about order and stage changes.

All events are past tense and versioned. StageCompleted is the only event
the notification sink listens to.
"""

from protean.fields import Date, DateTime, Identifier, Integer, String, Text

from rentals.domain import rentals


@rentals.event(part_of="Order")
class OrderCreated:
    """A rental order was placed and its stock was taken."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_identity = String(required=True)
    items = Text(required=True)  # JSON list of {product_id, product_name, quantity}
    item_count = Integer(required=True)
    start_date = Date(required=True)
    end_date = Date(required=True)
    origin_location = String()
    destination_location = String(required=True)
    created_at = DateTime(required=True)


@rentals.event(part_of="Order")
class OrderApproved:
    __version__ = 1

    order_id = Identifier(required=True)
    approved_by = String(required=True)
    approved_at = DateTime(required=True)


@rentals.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled. Stock is not restored."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(required=True)
    cancelled_by = String(required=True)
    previous_status = String(required=True)
    cancelled_at = DateTime(required=True)


@rentals.event(part_of="Order")
class OrderRescheduled:
    __version__ = 1

    order_id = Identifier(required=True)
    start_date = Date(required=True)
    end_date = Date(required=True)
    rescheduled_at = DateTime(required=True)


@rentals.event(part_of="Order")
class StageDraftSaved:
    """In-progress evidence was saved on a stage without closing it."""

    __version__ = 1

    order_id = Identifier(required=True)
    stage_key = String(required=True)
    saved_by = String(required=True)
    saved_at = DateTime(required=True)


@rentals.event(part_of="Order")
class StageCompleted:
    """A stage moved from Pending to Completed."""

    __version__ = 1

    order_id = Identifier(required=True)
    stage_key = String(required=True)
    stage_label = String(required=True)
    destination_identity = String(required=True)
    order_status = String(required=True)
    completed_by = String(required=True)
    completed_at = DateTime(required=True)


@rentals.event(part_of="Order")
class StageEvidenceCorrected:
    """Evidence on an already completed stage was overwritten."""

    __version__ = 1

    order_id = Identifier(required=True)
    stage_key = String(required=True)
    corrected_by = String(required=True)
    corrected_at = DateTime(required=True)
