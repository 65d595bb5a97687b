"""
SessionState — single source of truth for one session's telemetry.

All mutations happen on the main loop thread (see loop.py). No locks needed.
The record types here are also the shapes written into the JSON snapshot.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_dict(self):
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True)
class Quaternion:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def to_dict(self):
        return {"x": self.x, "y": self.y, "z": self.z, "w": self.w}


@dataclass(frozen=True)
class Viewpoint:
    """Camera pose reported by the host alongside an FPS sample."""
    position: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion)


@dataclass(frozen=True)
class FpsData:
    avg: float
    position: Vector3
    rotation: Quaternion
    scene: str

    def to_dict(self):
        return {
            "avg": self.avg,
            "position": self.position.to_dict(),
            "rotation": self.rotation.to_dict(),
            "scene": self.scene,
        }

    @classmethod
    def from_dict(cls, data):
        if data is None:
            return None
        return cls(
            avg=data["avg"],
            position=Vector3(**data["position"]),
            rotation=Quaternion(**data["rotation"]),
            scene=data["scene"],
        )


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    type: str
    message: str

    def to_dict(self):
        return {"timestamp": self.timestamp, "type": self.type, "message": self.message}


@dataclass
class SessionState:
    # ── Session identity ──────────────────────────────────────
    app_name: str = ""
    app_version: str = ""
    bundle_version_code: str = ""
    session_start: str = ""          # UTC ISO-8601
    start_monotonic: float = 0.0
    file_token: str = ""             # session start, minute resolution

    # ── Aggregates ────────────────────────────────────────────
    action_counts: Dict[str, int] = field(default_factory=dict)
    custom_events: Dict[str, str] = field(default_factory=dict)
    logs: List[LogEntry] = field(default_factory=list)
    seen_diagnostics: Set[Tuple[str, str]] = field(default_factory=set)

    # ── FPS extremes ──────────────────────────────────────────
    highest_avg_fps: float = 0.0
    lowest_avg_fps: float = math.inf
    high_fps: Optional[FpsData] = None
    low_fps: Optional[FpsData] = None
    fps_buffer: List[float] = field(default_factory=list)

    def reset(self):
        """Clear every aggregate (identity fields are set by the caller)."""
        self.action_counts.clear()
        self.custom_events.clear()
        self.logs.clear()
        self.seen_diagnostics.clear()
        self.highest_avg_fps = 0.0
        self.lowest_avg_fps = math.inf
        self.high_fps = None
        self.low_fps = None
        self.fps_buffer.clear()
