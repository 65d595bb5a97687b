from __future__ import annotations

import pytest

from session_core import CustomEventSender, EventSender, LogSender


class RecordingLogger:
    """Just enough of SessionLoggerApp for the senders: a session and three calls."""

    def __init__(self, session) -> None:
        self.session = session
        self.calls: list[tuple] = []

    def record_event(self, name):
        self.calls.append(("event", name))

    def record_custom_event(self, name, value, overwrite=False):
        self.calls.append(("custom", name, value, overwrite))

    def record_log(self, entry_type, message):
        self.calls.append(("log", entry_type, message))


@pytest.fixture
def host(make_setup, make_aggregator) -> RecordingLogger:
    return RecordingLogger(make_aggregator(make_setup()))


def test_event_sender_sends_selected_action(host) -> None:
    sender = EventSender(host, selected_index=3)
    assert sender.selected_event_name == "TaskComplete"

    sender.send()
    assert host.calls == [("event", "TaskComplete")]


def test_event_sender_lists_declared_names(host) -> None:
    assert EventSender(host).event_names[0] == "Scene_00_Loaded"


@pytest.mark.parametrize("index", [-1, 5, 99])
def test_event_sender_rejects_out_of_range_index(host, index, caplog) -> None:
    sender = EventSender(host, selected_index=index)
    assert sender.selected_event_name is None

    sender.send()
    assert host.calls == []
    assert "invalid event index" in caplog.text


def test_event_sender_with_no_declared_actions(make_setup, make_aggregator, caplog) -> None:
    host = RecordingLogger(make_aggregator(make_setup(action_names=())))
    EventSender(host).send()

    assert host.calls == []
    assert "no events configured" in caplog.text


def test_senders_without_logger_do_nothing(caplog) -> None:
    EventSender(None).send()
    CustomEventSender(None).send()
    LogSender(None).send()

    assert EventSender(None).event_names == ()
    assert caplog.text.count("no session logger") == 3


def test_fire_on_enable(host) -> None:
    EventSender(host, selected_index=0, fire_on_enable=True).enable()
    CustomEventSender(host, "difficulty", "hard", fire_on_enable=True).enable()
    LogSender(host, "Info", "menu opened", fire_on_enable=True).enable()
    LogSender(host, "Info", "not fired").enable()

    assert host.calls == [
        ("event", "Scene_00_Loaded"),
        ("custom", "difficulty", "hard", False),
        ("log", "Info", "menu opened"),
    ]


def test_custom_event_sender_forwards_overwrite(host) -> None:
    CustomEventSender(host, "character", "mage", overwrite=True).send()
    assert host.calls == [("custom", "character", "mage", True)]


def test_custom_event_sender_defaults(host) -> None:
    CustomEventSender(host).send()
    assert host.calls == [("custom", "CustomEvent", "Value", False)]


def test_custom_event_sender_rejects_empty_name(host, caplog) -> None:
    CustomEventSender(host, event_name="").send()
    assert host.calls == []
    assert "event name cannot be empty" in caplog.text


def test_log_sender_explicit_arguments_override_configured(host) -> None:
    sender = LogSender(host, "Info", "configured")
    sender.send()
    sender.send("Quest", "dragon slain")
    sender.send(message="only message")

    assert host.calls == [
        ("log", "Info", "configured"),
        ("log", "Quest", "dragon slain"),
        ("log", "Info", "only message"),
    ]


@pytest.mark.parametrize(("entry_type", "message"), [("", "text"), ("Info", "")])
def test_log_sender_rejects_empty_fields(host, entry_type, message) -> None:
    LogSender(host).send(entry_type, message)
    assert host.calls == []
