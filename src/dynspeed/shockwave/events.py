"""Timestamped connection speed changes produced by shockwaves."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable

import pandas as pd

from dynspeed.network.domain_types import Connection

EVENT_COLUMNS = ["timestamp", "source", "target", "factor"]


@dataclass(frozen=True)
class ChangeConnectionSpeedEvent:
    """From ``timestamp`` (ms) on, ``connection`` runs at ``factor`` times its nominal speed."""

    timestamp: int
    connection: Connection
    factor: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "source": self.connection.source,
            "target": self.connection.target,
            "factor": self.factor,
        }


def events_to_frame(events: Iterable[ChangeConnectionSpeedEvent]) -> pd.DataFrame:
    """Tabulate events in application order (by timestamp)."""
    rows = [event.to_dict() for event in events]
    if not rows:
        return pd.DataFrame(columns=EVENT_COLUMNS)
    df = pd.DataFrame(rows, columns=EVENT_COLUMNS)
    return df.sort_values("timestamp", kind="stable").reset_index(drop=True)


__all__ = ["ChangeConnectionSpeedEvent", "EVENT_COLUMNS", "events_to_frame"]
