"""Seed-driven stochastic suppliers.

A supplier turns a 64-bit seed into a value. Every draw builds its own
``numpy.random.Generator`` from that seed, so a supplier holds no random state
and the same seed always yields the same value.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, Tuple, TypeVar

import numpy as np
from numpy.random import Generator, default_rng

T = TypeVar("T")

MAX_SEED = int(np.iinfo(np.int64).max)


def next_seed(rng: Generator) -> int:
    """Draw a non-negative 64-bit seed to feed a supplier."""
    return int(rng.integers(0, MAX_SEED, dtype=np.int64))


class StochasticSupplier(ABC, Generic[T]):
    """Base class for ``draw(seed) -> value`` suppliers."""

    @abstractmethod
    def draw(self, seed: int) -> T:
        """Return the value for ``seed``."""

    def _rng(self, seed: int) -> Generator:
        return default_rng(int(seed) & MAX_SEED)


@dataclass(frozen=True)
class ConstantSupplier(StochasticSupplier[T]):
    value: T

    def draw(self, seed: int) -> T:
        return self.value


@dataclass(frozen=True)
class UniformIntSupplier(StochasticSupplier[int]):
    """Integers drawn uniformly from ``[low, high]`` (both inclusive)."""

    low: int
    high: int

    def __post_init__(self) -> None:
        if self.high < self.low:
            raise ValueError(f"uniform_int requires low <= high, got [{self.low}, {self.high}]")

    def draw(self, seed: int) -> int:
        return int(self._rng(seed).integers(self.low, self.high, endpoint=True))


@dataclass(frozen=True)
class UniformSupplier(StochasticSupplier[float]):
    """Reals drawn uniformly from ``[low, high)``."""

    low: float
    high: float

    def __post_init__(self) -> None:
        if self.high < self.low:
            raise ValueError(f"uniform requires low <= high, got [{self.low}, {self.high})")

    def draw(self, seed: int) -> float:
        return float(self._rng(seed).uniform(self.low, self.high))


@dataclass(frozen=True)
class NormalSupplier(StochasticSupplier[float]):
    """Gaussian draws clipped to optional bounds, rounded when ``integer`` is set."""

    mean: float
    std: float
    lower: Optional[float] = None
    upper: Optional[float] = None
    integer: bool = False

    def __post_init__(self) -> None:
        if self.std < 0:
            raise ValueError("normal requires a non-negative std")
        if self.lower is not None and self.upper is not None and self.upper < self.lower:
            raise ValueError("normal requires lower <= upper")

    def draw(self, seed: int):
        value = float(self._rng(seed).normal(self.mean, self.std))
        if self.lower is not None:
            value = max(value, self.lower)
        if self.upper is not None:
            value = min(value, self.upper)
        if self.integer:
            return int(round(value))
        return value


@dataclass(frozen=True)
class ChoiceSupplier(StochasticSupplier[T]):
    """Uniform pick from a fixed, non-empty sequence of values."""

    values: Tuple[T, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("choice requires at least one value")

    def draw(self, seed: int) -> T:
        index = int(self._rng(seed).integers(len(self.values)))
        return self.values[index]


@dataclass(frozen=True)
class CallableSupplier(StochasticSupplier[T]):
    """Adapter for ``fn(rng) -> value`` callables."""

    fn: Callable[[Generator], T]

    def draw(self, seed: int) -> T:
        return self.fn(self._rng(seed))


def constant(value: T) -> ConstantSupplier[T]:
    return ConstantSupplier(value)


def uniform_int(low: int, high: int) -> UniformIntSupplier:
    return UniformIntSupplier(int(low), int(high))


def uniform(low: float, high: float) -> UniformSupplier:
    return UniformSupplier(float(low), float(high))


def normal(
    mean: float,
    std: float,
    lower: Optional[float] = None,
    upper: Optional[float] = None,
    integer: bool = False,
) -> NormalSupplier:
    return NormalSupplier(float(mean), float(std), lower, upper, integer)


def choice(values: Sequence[T]) -> ChoiceSupplier[T]:
    return ChoiceSupplier(tuple(values))


def from_callable(fn: Callable[[Generator], T]) -> CallableSupplier[T]:
    return CallableSupplier(fn)


def is_supplier(value: object) -> bool:
    return callable(getattr(value, "draw", None))


def as_supplier(value: object) -> StochasticSupplier:
    """Return ``value`` if it already supplies, otherwise a constant wrapping it."""
    if is_supplier(value):
        return value  # type: ignore[return-value]
    return constant(value)


__all__ = [
    "CallableSupplier",
    "ChoiceSupplier",
    "ConstantSupplier",
    "MAX_SEED",
    "NormalSupplier",
    "StochasticSupplier",
    "UniformIntSupplier",
    "UniformSupplier",
    "as_supplier",
    "choice",
    "constant",
    "from_callable",
    "is_supplier",
    "next_seed",
    "normal",
    "uniform",
    "uniform_int",
]
