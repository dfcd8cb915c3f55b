"""Fake notification sink — records notices in memory for test assertions."""

from rentals.notification.port import NotificationSinkPort, StageCompletedNotice


class FakeNotificationSink(NotificationSinkPort):
    def __init__(self):
        self.delivered: list[StageCompletedNotice] = []
        self.should_succeed = True
        self.failure_reason = "Notification sink unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification sink unavailable"):
        """Configure the fake sink behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def deliver(self, notice: StageCompletedNotice) -> None:
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)
        self.delivered.append(notice)

    def for_order(self, order_id: str) -> list[StageCompletedNotice]:
        return [n for n in self.delivered if n.order_id == order_id]

    def reset(self):
        """Clear delivered notices (useful between tests)."""
        self.delivered.clear()
        self.should_succeed = True
        self.failure_reason = "Notification sink unavailable"
