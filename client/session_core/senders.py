"""
Small sender objects a host attaches to its own scene objects / widgets.

Each one is configured once, validates its input, and forwards to the
logger handle it was given. With no logger, or bad input, it logs an error
and does nothing. ``enable()`` fires the send when ``fire_on_enable`` is set.
"""

from .config import log


class _Sender:

    def __init__(self, logger, fire_on_enable=False):
        self.logger = logger
        self.fire_on_enable = fire_on_enable

    def enable(self):
        if self.fire_on_enable:
            self.send()

    def send(self):
        raise NotImplementedError

    def _ready(self):
        if self.logger is None:
            log.error("%s: no session logger. Create the SessionLoggerApp first.", type(self).__name__)
            return False
        return True


class EventSender(_Sender):
    """Sends one of the declared action names, chosen by index."""

    def __init__(self, logger, selected_index=0, fire_on_enable=False):
        super().__init__(logger, fire_on_enable)
        self.selected_index = selected_index

    @property
    def event_names(self):
        if self.logger is None or self.logger.session.setup is None:
            return ()
        return self.logger.session.setup.action_names

    @property
    def selected_event_name(self):
        names = self.event_names
        if 0 <= self.selected_index < len(names):
            return names[self.selected_index]
        return None

    def send(self):
        if not self._ready():
            return
        names = self.event_names
        if not names:
            log.error("EventSender: no events configured in actionNames.")
            return
        name = self.selected_event_name
        if name is None:
            log.error("EventSender: invalid event index %d", self.selected_index)
            return
        self.logger.record_event(name)
        log.debug("EventSender: sent event '%s'", name)


class CustomEventSender(_Sender):

    def __init__(self, logger, event_name="CustomEvent", event_value="Value",
                 overwrite=False, fire_on_enable=False):
        super().__init__(logger, fire_on_enable)
        self.event_name = event_name
        self.event_value = event_value
        self.overwrite = overwrite

    def send(self):
        if not self._ready():
            return
        if not self.event_name:
            log.error("CustomEventSender: event name cannot be empty.")
            return
        self.logger.record_custom_event(self.event_name, self.event_value, self.overwrite)
        log.debug(
            "CustomEventSender: sent '%s' = '%s' (overwrite: %s)",
            self.event_name, self.event_value, self.overwrite,
        )


class LogSender(_Sender):

    def __init__(self, logger, entry_type="Info", message="Log message", fire_on_enable=False):
        super().__init__(logger, fire_on_enable)
        self.entry_type = entry_type
        self.message = message

    def send(self, entry_type=None, message=None):
        """Send the configured entry, or an explicit (type, message) pair."""
        if not self._ready():
            return
        entry_type = self.entry_type if entry_type is None else entry_type
        message = self.message if message is None else message
        if not entry_type:
            log.error("LogSender: type cannot be empty.")
            return
        if not message:
            log.error("LogSender: message cannot be empty.")
            return
        self.logger.record_log(entry_type, message)
