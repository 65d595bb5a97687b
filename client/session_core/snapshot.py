"""
SessionSnapshot — the immutable JSON projection of a session.

Field names in to_dict() are the collector's wire contract; do not rename.
"""

import json
from dataclasses import dataclass
from typing import Optional, Tuple

from .state import FpsData, LogEntry


@dataclass(frozen=True)
class ActionCount:
    action_name: str
    count: int

    def to_dict(self):
        return {"actionName": self.action_name, "count": self.count}


@dataclass(frozen=True)
class CustomEvent:
    event_name: str
    event_value: str

    def to_dict(self):
        return {"eventName": self.event_name, "eventValue": self.event_value}


@dataclass(frozen=True)
class SessionSnapshot:
    app_name: str
    version: str
    bundle_version_code: str
    session_start: str
    session_duration_seconds: float
    avg_high_fps: Optional[FpsData]
    avg_low_fps: Optional[FpsData]
    logs: Tuple[LogEntry, ...]
    actions_received: Tuple[ActionCount, ...]
    completed_percentage: float
    custom_events: Tuple[CustomEvent, ...]

    def to_dict(self):
        return {
            "appName": self.app_name,
            "version": self.version,
            "bundleVersionCode": self.bundle_version_code,
            "sessionStart": self.session_start,
            "sessionDurationSeconds": self.session_duration_seconds,
            "avgHighFps": self.avg_high_fps.to_dict() if self.avg_high_fps else None,
            "avgLowFps": self.avg_low_fps.to_dict() if self.avg_low_fps else None,
            "logs": [entry.to_dict() for entry in self.logs],
            "ActionsReceived": [action.to_dict() for action in self.actions_received],
            "Completed_Percentage": self.completed_percentage,
            "customEvents": [event.to_dict() for event in self.custom_events],
        }

    def to_json(self):
        return json.dumps(self.to_dict(), indent=4)

    @classmethod
    def from_json(cls, text):
        """Parse a snapshot previously written by to_json()."""
        data = json.loads(text)
        return cls(
            app_name=data["appName"],
            version=data["version"],
            bundle_version_code=data["bundleVersionCode"],
            session_start=data["sessionStart"],
            session_duration_seconds=data["sessionDurationSeconds"],
            avg_high_fps=FpsData.from_dict(data.get("avgHighFps")),
            avg_low_fps=FpsData.from_dict(data.get("avgLowFps")),
            logs=tuple(LogEntry(**entry) for entry in data["logs"]),
            actions_received=tuple(
                ActionCount(a["actionName"], a["count"]) for a in data["ActionsReceived"]
            ),
            completed_percentage=data["Completed_Percentage"],
            custom_events=tuple(
                CustomEvent(e["eventName"], e["eventValue"]) for e in data["customEvents"]
            ),
        )


def build_snapshot(aggregator):
    """Freeze the aggregator's current state into a SessionSnapshot."""
    state = aggregator.state
    names = aggregator.action_names

    actions = tuple(ActionCount(name, state.action_counts.get(name, 0)) for name in names)
    completed = sum(1 for action in actions if action.count > 0)
    percentage = completed / len(names) if names else 0.0

    return SessionSnapshot(
        app_name=state.app_name,
        version=state.app_version,
        bundle_version_code=state.bundle_version_code,
        session_start=state.session_start,
        session_duration_seconds=aggregator.duration_seconds(),
        avg_high_fps=state.high_fps,
        avg_low_fps=state.low_fps,
        logs=tuple(state.logs),
        actions_received=actions,
        completed_percentage=percentage,
        custom_events=tuple(CustomEvent(k, v) for k, v in state.custom_events.items()),
    )


def serialize(aggregator):
    """Returns (json_text, actions_received, completed_percentage)."""
    snapshot = build_snapshot(aggregator)
    return snapshot.to_json(), snapshot.actions_received, snapshot.completed_percentage
