"""Response curves used as shockwave behaviour and front-speed functions."""

from __future__ import annotations

from dataclasses import dataclass

# 10 km/h expressed in metres per millisecond.
TEN_KM_H = 0.002777777777777778


@dataclass(frozen=True)
class LinearBehaviour:
    """Speed factor rising linearly from ``start_factor`` at the origin to 1.

    The factor reaches exactly 1 at ``ramp_distance`` and stays there, which the
    shockwave engine reads as "no congestion left, stop expanding".
    """

    start_factor: float = 0.2
    ramp_distance: float = 5000.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.start_factor <= 1.0:
            raise ValueError("start_factor must lie in [0, 1]")
        if self.ramp_distance <= 0:
            raise ValueError("ramp_distance must be positive")

    def __call__(self, distance: float) -> float:
        slope = (1.0 - self.start_factor) / self.ramp_distance
        return max(0.0, min(slope * distance + self.start_factor, 1.0))


@dataclass(frozen=True)
class ConstantSpeed:
    """Front speed that ignores the elapsed time."""

    speed: float = TEN_KM_H

    def __post_init__(self) -> None:
        if self.speed < 0:
            raise ValueError("Front speed cannot be negative")

    def __call__(self, elapsed: int) -> float:
        return self.speed


__all__ = ["ConstantSpeed", "LinearBehaviour", "TEN_KM_H"]
