import io
import json
import logging
import urllib.error

import pytest
from rich.console import Console

from taskwave.notify import sinks
from taskwave.notify.base import EventKind, Notifier, SafeNotifier, TaskEvent
from taskwave.notify.sinks import (
    CompositeNotifier,
    ConsoleNotifier,
    LoggingNotifier,
    RecordingNotifier,
    WebhookNotifier,
)
from taskwave.tasks.base import TaskStep


def _finished(task_id="build", *, error=None, result=None):
    task = TaskStep(id=task_id, name="Build", description="Compile everything", agent_type="CodeGenAgent")
    task.start()
    if error:
        task.fail(error)
    else:
        task.complete(result)
    return task


def test_event_from_task_carries_outcome():
    completed = TaskEvent.from_task(EventKind.COMPLETED, _finished(result={"ok": True}))
    assert completed.result == {"ok": True}
    assert completed.error is None
    assert completed.summary() == "✅ Completed: Build"

    failed = TaskEvent.from_task(EventKind.FAILED, _finished(error="disk full"))
    assert failed.error == "disk full"
    assert failed.result is None
    assert failed.summary() == "❌ Failed: Build\nError: disk full"

    started = TaskEvent.from_task(EventKind.STARTED, TaskStep(id="t", name="T", description="do it"))
    assert started.summary() == "🚀 Started: T\ndo it"


def test_safe_notifier_delivers_in_order():
    recorder = RecordingNotifier()
    safe = SafeNotifier(recorder)
    task = _finished(result=1)

    safe.emit(EventKind.STARTED, task)
    safe.emit(EventKind.COMPLETED, task)
    safe.close()

    assert recorder.kinds_for("build") == [EventKind.STARTED, EventKind.COMPLETED]


def test_safe_notifier_swallows_and_logs(caplog):
    class Exploding(Notifier):
        def task_failed(self, event):
            raise RuntimeError("webhook unreachable")

    safe = SafeNotifier(Exploding())
    with caplog.at_level(logging.WARNING, logger="taskwave"):
        safe.emit(EventKind.FAILED, _finished(error="x"))
        safe.close()

    messages = [record.getMessage() for record in caplog.records]
    assert any("failed on failed event for task build" in message for message in messages)


def test_safe_notifier_without_notifier_is_noop():
    safe = SafeNotifier(None)
    safe.emit(EventKind.STARTED, TaskStep(id="a"))
    safe.close()


def test_safe_notifier_tolerates_partial_notifiers():
    class OnlyCompletions:
        def __init__(self):
            self.seen = []

        def task_completed(self, event):
            self.seen.append(event.task_id)

    sink = OnlyCompletions()
    safe = SafeNotifier(sink)
    task = _finished(result=None)
    safe.emit(EventKind.STARTED, task)
    safe.emit(EventKind.COMPLETED, task)
    safe.close()

    assert sink.seen == ["build"]


def test_composite_isolates_sinks(caplog):
    class Broken(Notifier):
        def handle(self, event):
            raise ValueError("nope")

    recorder = RecordingNotifier()
    composite = CompositeNotifier([Broken(), recorder])
    event = TaskEvent.from_task(EventKind.COMPLETED, _finished(result=5))

    with caplog.at_level(logging.WARNING, logger="taskwave"):
        composite.task_completed(event)

    assert recorder.events == [event]
    assert caplog.records


def test_logging_notifier_writes_summary(caplog):
    notifier = LoggingNotifier()
    with caplog.at_level(logging.INFO, logger="taskwave.events"):
        notifier.task_failed(TaskEvent.from_task(EventKind.FAILED, _finished(error="oops")))
    assert "[build] ❌ Failed: Build | Error: oops" in caplog.text


def test_console_notifier_prints_status():
    buffer = io.StringIO()
    notifier = ConsoleNotifier(Console(file=buffer, width=120, color_system=None))
    notifier.task_completed(TaskEvent.from_task(EventKind.COMPLETED, _finished(result=1)))
    assert "completed build Build" in buffer.getvalue()


class _FakeResponse:
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def read(self):
        return b"{}"


def test_webhook_posts_chat_message(monkeypatch):
    captured = {}

    def fake_urlopen(request, timeout):
        captured["url"] = request.full_url
        captured["body"] = json.loads(request.data.decode("utf-8"))
        captured["timeout"] = timeout
        return _FakeResponse()

    monkeypatch.setattr(sinks.urllib.request, "urlopen", fake_urlopen)
    notifier = WebhookNotifier("https://chat.example/hook", chat_id="oc_123", timeout=3)

    notifier.task_failed(TaskEvent.from_task(EventKind.FAILED, _finished(error="disk full")))

    body = captured["body"]
    assert captured["url"] == "https://chat.example/hook"
    assert captured["timeout"] == 3
    assert body["msg_type"] == "text"
    assert body["receive_id"] == "oc_123"
    assert body["content"]["text"] == "❌ Failed: Build\nError: disk full"
    assert body["event"]["kind"] == "failed"
    assert body["event"]["task_id"] == "build"


def test_webhook_wraps_network_errors(monkeypatch):
    def unreachable(request, timeout):
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr(sinks.urllib.request, "urlopen", unreachable)
    notifier = WebhookNotifier("https://chat.example/hook")

    with pytest.raises(RuntimeError, match="failed to reach"):
        notifier.task_started(TaskEvent.from_task(EventKind.STARTED, TaskStep(id="a")))
