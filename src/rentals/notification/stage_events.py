"""Outbound notification trigger — forwards stage completions to the sink.

Runs after the unit of work that completed the stage has committed. A sink
failure is logged and swallowed: the completion already happened and must
not be rolled back or retried from here.
"""

import structlog
from protean.utils.mixins import handle

from rentals.domain import rentals
from rentals.notification import get_notification_sink
from rentals.notification.port import StageCompletedNotice
from rentals.order.events import StageCompleted
from rentals.order.order import Order

logger = structlog.get_logger(__name__)


@rentals.event_handler(part_of=Order)
class StageCompletionNotifier:
    """Hands each StageCompleted event to the notification sink exactly once."""

    @handle(StageCompleted)
    def on_stage_completed(self, event: StageCompleted) -> None:
        notice = StageCompletedNotice(
            order_id=str(event.order_id),
            stage_key=event.stage_key,
            stage_label=event.stage_label,
            destination_identity=event.destination_identity,
            completed_at=event.completed_at,
        )
        try:
            get_notification_sink().deliver(notice)
        except Exception as e:
            logger.error(
                "Notification sink failed",
                order_id=notice.order_id,
                stage_key=notice.stage_key,
                error=str(e),
            )
            return

        logger.info(
            "Stage completion handed to notification sink",
            order_id=notice.order_id,
            stage_key=notice.stage_key,
        )
