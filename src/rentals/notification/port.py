"""Notification sink port — where stage-completion events leave the domain.

The sink composes and delivers the actual message to the client. The
workflow engine never sees whether delivery succeeded and never retries on
the sink's behalf.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StageCompletedNotice:
    """What the sink receives for one Pending → Completed edge."""

    order_id: str
    stage_key: str
    stage_label: str
    destination_identity: str
    completed_at: datetime | None = None


class NotificationSinkPort(ABC):
    """Abstract interface for notification sink adapters."""

    @abstractmethod
    def deliver(self, notice: StageCompletedNotice) -> None:
        """Hand the notice over for delivery. May raise on sink failure."""
        ...
