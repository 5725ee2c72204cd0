"""Scenario-level generation of shockwave speed-change events."""

from __future__ import annotations

import logging
from typing import Iterator, List

from numpy.random import SeedSequence, default_rng

from dynspeed.network.domain_types import Connection
from dynspeed.network.road_graph import RoadGraph
from dynspeed.stochastic.suppliers import MAX_SEED, next_seed

from .config import ShockwaveConfig
from .errors import InvalidConfigurationError, InvalidOriginError
from .events import ChangeConnectionSpeedEvent
from .traversal import ShockwaveResult, ShockwaveTraversal

logger = logging.getLogger(__name__)


class ZeroEventGenerator:
    """Generator that never produces events; the no-op default for scenarios."""

    def generate(self, seed: int, scenario_length: int) -> List[ChangeConnectionSpeedEvent]:
        return []


ZERO_EVENT_GENERATOR = ZeroEventGenerator()


def zero_events() -> List[ZeroEventGenerator]:
    """Return a single-element list holding the no-op generator."""
    return [ZERO_EVENT_GENERATOR]


class DynamicSpeedGenerator:
    """Composes independent shockwaves into one list of speed-change events.

    The seed is authoritative: a ``SeedSequence`` built from it draws the number
    of shockwaves and spawns one child stream per shockwave. Each shockwave's
    draws therefore depend only on the seed and its index, and shockwaves could
    be evaluated in any order or in parallel with identical results.
    """

    def __init__(self, graph: RoadGraph, config: ShockwaveConfig | None = None):
        self.graph = graph
        self.config = config or ShockwaveConfig()
        self.traversal = ShockwaveTraversal(graph, self.config)

    def generate(self, seed: int, scenario_length: int) -> List[ChangeConnectionSpeedEvent]:
        """Return all shockwaves' events, concatenated in generation order."""
        events: List[ChangeConnectionSpeedEvent] = []
        num_shockwaves = 0
        for result in self.iter_shockwaves(seed, scenario_length):
            events.extend(result.events)
            num_shockwaves += 1
        logger.info(
            "Generated %d speed events from %d shockwaves (seed=%s)",
            len(events),
            num_shockwaves,
            seed,
        )
        return events

    def simulate(self, seed: int, scenario_length: int) -> List[ShockwaveResult]:
        """Like :meth:`generate` but keep per-shockwave diagnostics."""
        return list(self.iter_shockwaves(seed, scenario_length))

    def iter_shockwaves(self, seed: int, scenario_length: int) -> Iterator[ShockwaveResult]:
        if scenario_length < 0:
            raise InvalidConfigurationError(
                f"scenario_length must not be negative, found {scenario_length}"
            )
        root = SeedSequence(int(seed) & MAX_SEED)
        root_rng = default_rng(root)
        num_shockwaves = int(self.config.shockwave_count.draw(next_seed(root_rng)))
        if num_shockwaves <= 0:
            raise InvalidConfigurationError(
                f"The shockwave_count supplier must generate values > 0, found {num_shockwaves}."
            )

        for index, child in enumerate(root.spawn(num_shockwaves)):
            rng = default_rng(child)
            origin = self._draw_origin(rng)
            start_time = int(self.config.creation_time.draw(next_seed(rng)))
            logger.debug(
                "Shockwave %d/%d starts on %s at %d", index + 1, num_shockwaves, origin, start_time
            )
            result = self.traversal.run(origin, start_time, rng)
            late = sum(1 for event in result.events if event.timestamp > scenario_length)
            if late:
                logger.warning(
                    "Shockwave %d schedules %d of %d events after the scenario end (%d ms)",
                    index + 1,
                    late,
                    len(result.events),
                    scenario_length,
                )
            yield result

    def _draw_origin(self, rng) -> Connection:
        if self.config.start_connections is None:
            return self.graph.random_connection(rng)
        origin = self.config.start_connections.draw(next_seed(rng))
        if not isinstance(origin, Connection):
            raise InvalidOriginError(f"start_connections supplied {origin!r}, not a Connection")
        return origin


__all__ = [
    "DynamicSpeedGenerator",
    "ZERO_EVENT_GENERATOR",
    "ZeroEventGenerator",
    "zero_events",
]
