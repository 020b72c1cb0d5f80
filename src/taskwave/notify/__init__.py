"""Task lifecycle notifications."""

from .base import EventKind, Notifier, SafeNotifier, TaskEvent
from .sinks import (
    CompositeNotifier,
    ConsoleNotifier,
    LoggingNotifier,
    RecordingNotifier,
    WebhookNotifier,
)

__all__ = [
    "CompositeNotifier",
    "ConsoleNotifier",
    "EventKind",
    "LoggingNotifier",
    "Notifier",
    "RecordingNotifier",
    "SafeNotifier",
    "TaskEvent",
    "WebhookNotifier",
]
