"""Breadth-first propagation of a single shockwave over a road graph.

A shockwave starts on one connection and spreads upstream: from a connection
``u -> v`` it continues onto every connection ``w -> u`` except the one coming
back from ``v``. Two fronts travel over each connection:

- the expanding front, which emits a slowdown event with the behaviour factor
  sampled at the connection midpoint;
- the receding front, which starts ``recede_wait_duration`` later and emits the
  matching restoration event (``1 / factor``).

Both events are scheduled halfway through the time the front needs to cross the
connection. Expansion past a connection stops when any of these hold:

- the factor is exactly 1 (no congestion left);
- the expanding front has stalled (speed 0);
- the event duration would be exhausted;
- the receding front has caught up with the expanding front;
- the connection was already expanded by this shockwave.

All mutable bookkeeping lives in a :class:`ShockwaveState` created per run, so
one :class:`ShockwaveTraversal` can be shared between shockwaves and callers.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set

import networkx as nx
from numpy.random import Generator

from dynspeed.network.domain_types import Connection
from dynspeed.network.road_graph import RoadGraph
from dynspeed.stochastic.suppliers import StochasticSupplier, next_seed

from .config import ShockwaveConfig
from .errors import InvalidConfigurationError, InvalidOriginError
from .events import ChangeConnectionSpeedEvent

logger = logging.getLogger(__name__)

STOP_NO_EFFECT = "no_effect"
STOP_STALLED = "expansion_stalled"
STOP_DURATION = "duration_exhausted"
STOP_CAUGHT_UP = "recession_caught_up"
STOP_CYCLE = "cycle"


@dataclass(frozen=True)
class ShockwaveStep:
    """Pending work item: evaluate ``connection`` reached from ``predecessor``."""

    connection: Connection
    predecessor: Connection
    relative_expanding: int
    absolute_expanding: int
    relative_receding: int
    absolute_receding: int
    distance: float


@dataclass
class ShockwaveState:
    """Scratch state owned by exactly one shockwave run."""

    visited: Dict[Connection, List[ChangeConnectionSpeedEvent]] = field(default_factory=dict)
    leaves: Set[Connection] = field(default_factory=set)
    affected_subgraph: nx.DiGraph = field(default_factory=nx.DiGraph)
    terminations: Counter = field(default_factory=Counter)
    steps: int = 0


@dataclass
class ShockwaveResult:
    """Events and diagnostics of one complete shockwave."""

    origin: Connection
    start_time: int
    recede_start_time: int
    events: List[ChangeConnectionSpeedEvent]
    state: ShockwaveState

    @property
    def visited(self) -> Dict[Connection, List[ChangeConnectionSpeedEvent]]:
        return self.state.visited

    @property
    def leaves(self) -> Set[Connection]:
        return self.state.leaves

    @property
    def affected_subgraph(self) -> nx.DiGraph:
        return self.state.affected_subgraph


class ShockwaveTraversal:
    """Runs shockwaves to exhaustion on a fixed graph and configuration."""

    def __init__(self, graph: RoadGraph, config: ShockwaveConfig):
        self.graph = graph
        self.config = config

    def run(self, origin: Connection, start_time: int, rng: Generator) -> ShockwaveResult:
        """Propagate one shockwave from ``origin`` starting at ``start_time`` (ms)."""
        if not self.graph.contains(origin):
            raise InvalidOriginError(f"Shockwave origin {origin} is not a connection of the graph")
        start_time = int(start_time)
        recede_wait = _draw_duration(self.config.recede_wait_duration, rng, "recede_wait_duration")
        recede_start = start_time + recede_wait

        state = ShockwaveState()
        frontier: Deque[ShockwaveStep] = deque()
        frontier.append(
            ShockwaveStep(
                connection=origin,
                predecessor=origin,
                relative_expanding=0,
                absolute_expanding=start_time,
                relative_receding=0,
                absolute_receding=recede_start,
                distance=0.0,
            )
        )
        events: List[ChangeConnectionSpeedEvent] = []
        while frontier:
            step = frontier.popleft()
            state.steps += 1
            events.extend(self._evaluate(step, state, frontier, rng))

        logger.debug(
            "Shockwave from %s at %d: %d steps, %d events, %d leaves, stops=%s",
            origin,
            start_time,
            state.steps,
            len(events),
            len(state.leaves),
            dict(state.terminations),
        )
        logger.debug("Shockwave from %s leaves: %s", origin, sorted(map(str, state.leaves)))
        return ShockwaveResult(
            origin=origin,
            start_time=start_time,
            recede_start_time=recede_start,
            events=events,
            state=state,
        )

    # ----------------------------------------------------------------- internal --
    def _evaluate(
        self,
        step: ShockwaveStep,
        state: ShockwaveState,
        frontier: Deque[ShockwaveStep],
        rng: Generator,
    ) -> List[ChangeConnectionSpeedEvent]:
        conn = step.connection
        length = conn.length

        behaviour = self.config.behaviour.draw(next_seed(rng))
        factor = float(behaviour(step.distance + length / 2))
        if not 0.0 < factor <= 1.0:
            raise InvalidConfigurationError(
                f"Behaviour factor must lie in (0, 1], found {factor} on {conn}"
            )
        forward_speed = _draw_speed(
            self.config.expanding_speed, rng, step.relative_expanding, "expanding_speed"
        )
        receding_speed = _draw_speed(
            self.config.receding_speed, rng, step.relative_receding, "receding_speed"
        )
        event_duration = _draw_duration(self.config.event_duration, rng, "event_duration")

        next_rel_ex = _advance(step.relative_expanding, length, forward_speed)
        next_abs_ex = _advance(step.absolute_expanding, length, forward_speed)
        next_rel_re = _advance(step.relative_receding, length, receding_speed)
        next_abs_re = _advance(step.absolute_receding, length, receding_speed)
        ex_jump = _half(next_abs_ex - step.absolute_expanding)
        re_jump = _half(next_abs_re - step.absolute_receding)

        reason = _stop_reason(
            factor=factor,
            forward_speed=forward_speed,
            next_relative_expanding=next_rel_ex,
            event_duration=event_duration,
            expanding_midpoint=step.absolute_expanding + ex_jump,
            receding_midpoint=step.absolute_receding + re_jump,
            already_visited=conn in state.visited,
        )
        if reason is not None:
            # The predecessor was the last connection this branch affected.
            state.leaves.add(step.predecessor)
            state.terminations[reason] += 1
            return []

        slowdown = ChangeConnectionSpeedEvent(step.absolute_expanding + ex_jump, conn, factor)
        emitted = [slowdown]
        if receding_speed != 0:
            emitted.append(
                ChangeConnectionSpeedEvent(step.absolute_receding + re_jump, conn, 1.0 / factor)
            )
        state.visited[conn] = list(emitted)
        state.affected_subgraph.add_edge(conn.source, conn.target, length=length)

        upstream_points = self.graph.incoming_points(conn.source)
        if not upstream_points or (
            len(upstream_points) == 1 and upstream_points[0] == conn.target
        ):
            state.leaves.add(conn)
            return emitted
        for point in upstream_points:
            if point == conn.target:
                continue
            frontier.append(
                ShockwaveStep(
                    connection=self.graph.connection(point, conn.source),
                    predecessor=conn,
                    relative_expanding=next_rel_ex,
                    absolute_expanding=next_abs_ex,
                    relative_receding=next_rel_re,
                    absolute_receding=next_abs_re,
                    distance=step.distance + length,
                )
            )
        return emitted


def _stop_reason(
    *,
    factor: float,
    forward_speed: float,
    next_relative_expanding: int,
    event_duration: int,
    expanding_midpoint: int,
    receding_midpoint: int,
    already_visited: bool,
) -> Optional[str]:
    if factor == 1:
        return STOP_NO_EFFECT
    if forward_speed == 0:
        return STOP_STALLED
    if next_relative_expanding >= event_duration:
        return STOP_DURATION
    if expanding_midpoint >= receding_midpoint:
        return STOP_CAUGHT_UP
    if already_visited:
        return STOP_CYCLE
    return None


def _advance(timestamp: int, length: float, speed: float) -> int:
    """Time after crossing ``length`` at ``speed``; a stalled front stays put."""
    if speed == 0:
        return timestamp
    return int(timestamp + length / speed)


def _half(delta: int) -> int:
    """Halve an integer, truncating toward zero."""
    return delta // 2 if delta >= 0 else -((-delta) // 2)


def _draw_speed(
    supplier: StochasticSupplier, rng: Generator, elapsed: int, label: str
) -> float:
    speed = float(supplier.draw(next_seed(rng))(elapsed))
    if speed < 0:
        raise InvalidConfigurationError(f"{label} must not be negative, found {speed}")
    return speed


def _draw_duration(supplier: StochasticSupplier, rng: Generator, label: str) -> int:
    duration = int(supplier.draw(next_seed(rng)))
    if duration < 0:
        raise InvalidConfigurationError(f"{label} must not be negative, found {duration}")
    return duration


__all__ = [
    "STOP_CAUGHT_UP",
    "STOP_CYCLE",
    "STOP_DURATION",
    "STOP_NO_EFFECT",
    "STOP_STALLED",
    "ShockwaveResult",
    "ShockwaveState",
    "ShockwaveStep",
    "ShockwaveTraversal",
]
