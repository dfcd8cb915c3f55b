"""Log-only notification sink — writes each notice to the structured log.

Used in development when no real messaging backend is wired in.
"""

import structlog

from rentals.notification.port import NotificationSinkPort, StageCompletedNotice

logger = structlog.get_logger(__name__)


class LogNotificationSink(NotificationSinkPort):
    def deliver(self, notice: StageCompletedNotice) -> None:
        logger.info(
            "Stage completion notice",
            order_id=notice.order_id,
            stage_key=notice.stage_key,
            stage_label=notice.stage_label,
            to=notice.destination_identity,
        )
