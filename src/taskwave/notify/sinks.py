"""Concrete notifiers."""

from __future__ import annotations

import json
import logging
import threading
import urllib.error
import urllib.request
from typing import Any, Dict, Iterable, List, Optional

from rich.console import Console

from .base import EventKind, Notifier, TaskEvent

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):
    """Writes every event to a logger."""

    def __init__(self, logger_name: str = "taskwave.events", level: int = logging.INFO) -> None:
        self.logger = logging.getLogger(logger_name)
        self.level = level

    def handle(self, event: TaskEvent) -> None:
        self.logger.log(self.level, "[%s] %s", event.task_id, event.summary().replace("\n", " | "))


class ConsoleNotifier(Notifier):
    """Prints live task transitions with rich."""

    STYLES = {
        EventKind.STARTED: "cyan",
        EventKind.COMPLETED: "green",
        EventKind.FAILED: "red",
    }

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def handle(self, event: TaskEvent) -> None:
        style = self.STYLES[event.kind]
        line = f"[{style}]{event.kind.value:>9}[/] [bold]{event.task_id}[/] {event.name}"
        if event.error:
            line += f" [dim]({event.error})[/]"
        self.console.print(line)


class WebhookNotifier(Notifier):
    """Posts each event as a chat text message to an incoming-webhook URL."""

    def __init__(
        self,
        url: str,
        *,
        chat_id: str | None = None,
        headers: Dict[str, str] | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.url = url
        self.chat_id = chat_id
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self.timeout = timeout

    def build_payload(self, event: TaskEvent) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "msg_type": "text",
            "content": {"text": event.summary()},
            "event": event.model_dump(mode="json"),
        }
        if self.chat_id:
            payload["receive_id"] = self.chat_id
        return payload

    def handle(self, event: TaskEvent) -> None:
        request = urllib.request.Request(
            url=self.url,
            data=json.dumps(self.build_payload(event)).encode("utf-8"),
            headers=self.headers,
            method="POST",
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                response.read()
        except urllib.error.URLError as exc:
            raise RuntimeError(f"WebhookNotifier failed to reach {self.url}: {exc}") from exc


class CompositeNotifier(Notifier):
    """Fans events out to several notifiers; one failing sink does not starve the rest."""

    def __init__(self, notifiers: Iterable[Notifier]) -> None:
        self.notifiers: List[Notifier] = list(notifiers)

    def _fan_out(self, hook: str, event: TaskEvent) -> None:
        for notifier in self.notifiers:
            try:
                getattr(notifier, hook)(event)
            except Exception:
                logger.warning("Notifier %r failed on %s", notifier, hook, exc_info=True)

    def task_started(self, event: TaskEvent) -> None:
        self._fan_out("task_started", event)

    def task_completed(self, event: TaskEvent) -> None:
        self._fan_out("task_completed", event)

    def task_failed(self, event: TaskEvent) -> None:
        self._fan_out("task_failed", event)


class RecordingNotifier(Notifier):
    """Keeps every event in memory."""

    def __init__(self) -> None:
        self._events: List[TaskEvent] = []
        self._lock = threading.Lock()

    def handle(self, event: TaskEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[TaskEvent]:
        with self._lock:
            return list(self._events)

    def kinds_for(self, task_id: str) -> List[EventKind]:
        return [event.kind for event in self.events if event.task_id == task_id]

    def last(self, task_id: str) -> Optional[TaskEvent]:
        matching = [event for event in self.events if event.task_id == task_id]
        return matching[-1] if matching else None
