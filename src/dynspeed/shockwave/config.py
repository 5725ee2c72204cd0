"""Pluggable stochastic parameters for shockwave generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional

import yaml

from dynspeed.network.domain_types import Connection
from dynspeed.network.road_graph import RoadGraph
from dynspeed.stochastic.curves import TEN_KM_H, ConstantSpeed, LinearBehaviour
from dynspeed.stochastic.suppliers import (
    StochasticSupplier,
    as_supplier,
    choice,
    constant,
    from_callable,
    normal,
    uniform,
    uniform_int,
)

logger = logging.getLogger(__name__)

DEFAULT_NUM_OF_SHOCKWAVES = 1
ONE_AND_A_HALF_HOUR = 5_400_000
THREE_HOURS = 10_800_000

BehaviourCurve = Callable[[float], float]
SpeedCurve = Callable[[int], float]

_KNOWN_KEYS = {
    "shockwave_count",
    "start_connections",
    "creation_time",
    "behaviour",
    "expanding_speed",
    "receding_speed",
    "event_duration",
    "recede_wait_duration",
}


@dataclass
class ShockwaveConfig:
    """Suppliers drawn by the generator for every shockwave and traversal step.

    Values that are not suppliers (an int, a curve object, a plain function) are
    wrapped as constants. Drawn values are validated when they are used, not here.
    """

    shockwave_count: StochasticSupplier[int] = field(
        default_factory=lambda: constant(DEFAULT_NUM_OF_SHOCKWAVES)
    )
    start_connections: Optional[StochasticSupplier[Connection]] = None
    creation_time: StochasticSupplier[int] = field(default_factory=lambda: constant(0))
    behaviour: StochasticSupplier[BehaviourCurve] = field(
        default_factory=lambda: constant(LinearBehaviour())
    )
    expanding_speed: StochasticSupplier[SpeedCurve] = field(
        default_factory=lambda: constant(ConstantSpeed(TEN_KM_H))
    )
    receding_speed: StochasticSupplier[SpeedCurve] = field(
        default_factory=lambda: constant(ConstantSpeed(TEN_KM_H))
    )
    event_duration: StochasticSupplier[int] = field(default_factory=lambda: constant(THREE_HOURS))
    recede_wait_duration: StochasticSupplier[int] = field(
        default_factory=lambda: constant(ONE_AND_A_HALF_HOUR)
    )

    def __post_init__(self) -> None:
        self.shockwave_count = as_supplier(self.shockwave_count)
        if self.start_connections is not None:
            self.start_connections = as_supplier(self.start_connections)
        self.creation_time = as_supplier(self.creation_time)
        self.behaviour = as_supplier(self.behaviour)
        self.expanding_speed = as_supplier(self.expanding_speed)
        self.receding_speed = as_supplier(self.receding_speed)
        self.event_duration = as_supplier(self.event_duration)
        self.recede_wait_duration = as_supplier(self.recede_wait_duration)

    @property
    def random_start_connections(self) -> bool:
        return self.start_connections is None

    # --------------------------------------------------------------------- I/O --
    @classmethod
    def from_yaml(cls, path: str | Path, graph: Optional[RoadGraph] = None) -> "ShockwaveConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Shockwave YAML not found at {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        return cls.from_mapping(data, graph=graph)

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, object], graph: Optional[RoadGraph] = None
    ) -> "ShockwaveConfig":
        """Build a configuration from plain numbers and distribution blocks.

        Integer parameters accept a number or one of ``{uniform_int: [lo, hi]}``,
        ``{uniform: [lo, hi]}``, ``{normal: {mean, std, lower, upper}}``. Speeds
        accept a number or ``{uniform: [lo, hi]}``; the behaviour accepts
        ``{linear: {start_factor, ramp_distance}}``. Start connections are
        ``[source, target]`` pairs looked up in ``graph``.
        """
        if not isinstance(data, Mapping):
            raise TypeError("Shockwave configuration must be a mapping at the top level")
        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            raise ValueError(f"Unknown shockwave configuration keys: {sorted(unknown)}")

        kwargs = {}
        for key in ("shockwave_count", "creation_time", "event_duration", "recede_wait_duration"):
            if key in data:
                kwargs[key] = _parse_integer_supplier(data[key], key)
        for key in ("expanding_speed", "receding_speed"):
            if key in data:
                kwargs[key] = _parse_speed_supplier(data[key], key)
        if "behaviour" in data:
            kwargs["behaviour"] = _parse_behaviour_supplier(data["behaviour"])
        if data.get("start_connections") is not None:
            kwargs["start_connections"] = _parse_start_connections(data["start_connections"], graph)
        logger.debug("Parsed shockwave configuration keys: %s", sorted(kwargs))
        return cls(**kwargs)


def _single_entry(block: Mapping[str, object], label: str):
    if len(block) != 1:
        raise ValueError(f"'{label}' distribution block must contain exactly one entry")
    return next(iter(block.items()))


def _bounds(value: object, label: str):
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"'{label}' bounds must be a [low, high] pair")
    return value[0], value[1]


def _parse_integer_supplier(value: object, label: str) -> StochasticSupplier[int]:
    if isinstance(value, bool):
        raise TypeError(f"'{label}' must be a number or a distribution block")
    if isinstance(value, (int, float)):
        return constant(int(value))
    if not isinstance(value, Mapping):
        raise TypeError(f"'{label}' must be a number or a distribution block")
    kind, params = _single_entry(value, label)
    if kind == "constant":
        return constant(int(params))
    if kind == "uniform_int":
        low, high = _bounds(params, label)
        return uniform_int(low, high)
    if kind == "uniform":
        low, high = _bounds(params, label)
        continuous = uniform(low, high)
        return from_callable(lambda rng: int(rng.uniform(continuous.low, continuous.high)))
    if kind == "normal":
        if not isinstance(params, Mapping):
            raise TypeError(f"'{label}' normal parameters must be a mapping")
        if "mean" not in params or "std" not in params:
            raise ValueError(f"'{label}' normal block requires 'mean' and 'std'")
        return normal(
            float(params["mean"]),
            float(params["std"]),
            lower=params.get("lower"),
            upper=params.get("upper"),
            integer=True,
        )
    raise ValueError(f"Unsupported distribution '{kind}' for '{label}'")


def _parse_speed_supplier(value: object, label: str) -> StochasticSupplier[SpeedCurve]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return constant(ConstantSpeed(float(value)))
    if not isinstance(value, Mapping):
        raise TypeError(f"'{label}' must be a number or a distribution block")
    kind, params = _single_entry(value, label)
    if kind == "constant":
        return constant(ConstantSpeed(float(params)))
    if kind == "uniform":
        low, high = _bounds(params, label)
        bounds = uniform(low, high)
        if bounds.low < 0 or bounds.high < 0:
            raise ValueError(f"'{label}' speeds cannot be negative")
        return from_callable(lambda rng: ConstantSpeed(float(rng.uniform(bounds.low, bounds.high))))
    raise ValueError(f"Unsupported distribution '{kind}' for '{label}'")


def _parse_behaviour_supplier(value: object) -> StochasticSupplier[BehaviourCurve]:
    if not isinstance(value, Mapping):
        raise TypeError("'behaviour' must be a mapping such as {linear: {...}}")
    kind, params = _single_entry(value, "behaviour")
    if kind != "linear":
        raise ValueError(f"Unsupported behaviour curve '{kind}'")
    params = params or {}
    if not isinstance(params, Mapping):
        raise TypeError("'behaviour.linear' parameters must be a mapping")
    return constant(
        LinearBehaviour(
            start_factor=float(params.get("start_factor", 0.2)),
            ramp_distance=float(params.get("ramp_distance", 5000.0)),
        )
    )


def _parse_start_connections(
    value: object, graph: Optional[RoadGraph]
) -> StochasticSupplier[Connection]:
    if graph is None:
        raise ValueError("'start_connections' can only be resolved against a road graph")
    if not isinstance(value, list) or not value:
        raise TypeError("'start_connections' must be a non-empty list of [source, target] pairs")
    connections = []
    for pair in value:
        source, target = _bounds(pair, "start_connections")
        try:
            connections.append(graph.connection(source, target))
        except KeyError as exc:
            raise ValueError(f"Start connection {source!r}->{target!r} is not in the graph") from exc
    return choice(connections)


__all__ = [
    "DEFAULT_NUM_OF_SHOCKWAVES",
    "ONE_AND_A_HALF_HOUR",
    "ShockwaveConfig",
    "THREE_HOURS",
]
