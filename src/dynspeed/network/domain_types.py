"""Core dataclasses shared across the network package."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable


@dataclass(frozen=True)
class Connection:
    """Directed road segment between two network points."""

    source: Hashable
    target: Hashable
    length: float

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.source}->{self.target}"
