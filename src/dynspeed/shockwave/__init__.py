"""Shockwave generation exports."""

from .config import ShockwaveConfig
from .errors import InvalidConfigurationError, InvalidOriginError
from .events import ChangeConnectionSpeedEvent, events_to_frame
from .generator import DynamicSpeedGenerator, ZeroEventGenerator, zero_events
from .traversal import ShockwaveResult, ShockwaveState, ShockwaveStep, ShockwaveTraversal

__all__ = [
    "ChangeConnectionSpeedEvent",
    "DynamicSpeedGenerator",
    "InvalidConfigurationError",
    "InvalidOriginError",
    "ShockwaveConfig",
    "ShockwaveResult",
    "ShockwaveState",
    "ShockwaveStep",
    "ShockwaveTraversal",
    "ZeroEventGenerator",
    "events_to_frame",
    "zero_events",
]
