"""Notification sink registry — pluggable delivery of stage-completion notices.

Uses the log sink by default. Set NOTIFICATION_SINK=fake to record notices
in memory instead (tests do this).
"""

import os

_sink_instance = None


def get_notification_sink():
    """Return the configured notification sink (singleton)."""
    global _sink_instance
    if _sink_instance is None:
        adapter = os.environ.get("NOTIFICATION_SINK", "log")
        if adapter == "log":
            from rentals.notification.log_sink import LogNotificationSink

            _sink_instance = LogNotificationSink()
        elif adapter == "fake":
            from rentals.notification.fake_sink import FakeNotificationSink

            _sink_instance = FakeNotificationSink()
        else:
            raise ValueError(f"Unknown notification sink: {adapter}")
    return _sink_instance


def reset_notification_sink():
    """Reset the sink singleton (useful for testing)."""
    global _sink_instance
    _sink_instance = None
