from __future__ import annotations

import logging

import networkx as nx
import pytest

from dynspeed.network.domain_types import Connection
from dynspeed.network.road_graph import RoadGraph
from dynspeed.shockwave.config import ShockwaveConfig
from dynspeed.shockwave.errors import InvalidConfigurationError, InvalidOriginError
from dynspeed.shockwave.generator import DynamicSpeedGenerator, ZeroEventGenerator, zero_events
from dynspeed.stochastic.curves import ConstantSpeed
from dynspeed.stochastic.suppliers import choice, constant, uniform_int

DAY_MS = 24 * 60 * 60 * 1000


def _grid(size: int = 4, length: float = 250.0) -> RoadGraph:
    grid = nx.grid_2d_graph(size, size).to_directed()
    nx.set_edge_attributes(grid, length, "length")
    return RoadGraph(grid)


def _path() -> RoadGraph:
    return RoadGraph.from_edges([("A", "B", 1000), ("B", "C", 1000), ("C", "D", 1000)])


def test_zero_events_generator_returns_nothing():
    generators = zero_events()
    assert len(generators) == 1
    assert isinstance(generators[0], ZeroEventGenerator)
    assert generators[0].generate(123, DAY_MS) == []


@pytest.mark.parametrize("count", [0, -2])
def test_non_positive_shockwave_count_is_a_configuration_error(count):
    generator = DynamicSpeedGenerator(_path(), ShockwaveConfig(shockwave_count=count))
    with pytest.raises(InvalidConfigurationError, match="> 0"):
        generator.generate(1, DAY_MS)
    with pytest.raises(ValueError):
        generator.generate(1, DAY_MS)


def test_negative_scenario_length_is_rejected():
    generator = DynamicSpeedGenerator(_path())
    with pytest.raises(InvalidConfigurationError):
        generator.generate(1, -1)


def test_default_generator_produces_one_shockwave():
    results = DynamicSpeedGenerator(_grid()).simulate(5, DAY_MS)
    assert len(results) == 1
    assert results[0].events


def test_same_seed_reproduces_events():
    config = ShockwaveConfig(shockwave_count=5, creation_time=uniform_int(0, 3_600_000))
    generator = DynamicSpeedGenerator(_grid(), config)

    first = generator.generate(2024, DAY_MS)
    second = generator.generate(2024, DAY_MS)
    other = generator.generate(2025, DAY_MS)

    assert first == second
    assert first != other


def test_seed_is_independent_of_generator_instance():
    config = ShockwaveConfig(shockwave_count=3)
    one = DynamicSpeedGenerator(_grid(), config).generate(9, DAY_MS)
    two = DynamicSpeedGenerator(_grid(), config).generate(9, DAY_MS)
    assert one == two


def test_drawn_shockwave_count_controls_number_of_runs():
    generator = DynamicSpeedGenerator(_grid(), ShockwaveConfig(shockwave_count=uniform_int(2, 4)))
    for seed in range(5):
        assert 2 <= len(generator.simulate(seed, DAY_MS)) <= 4


def test_each_shockwave_gets_fresh_traversal_state():
    graph = _path()
    origin = graph.connection("C", "D")
    config = ShockwaveConfig(shockwave_count=3, start_connections=constant(origin))
    generator = DynamicSpeedGenerator(graph, config)

    results = generator.simulate(0, DAY_MS)
    events = generator.generate(0, DAY_MS)

    assert len(results) == 3
    assert all(result.events == results[0].events for result in results)
    assert len(results[0].events) == 6
    assert len(events) == 18
    assert len({id(result.state) for result in results}) == 3


def test_start_connections_supplier_is_used():
    graph = _path()
    allowed = [graph.connection("A", "B"), graph.connection("B", "C")]
    config = ShockwaveConfig(shockwave_count=10, start_connections=choice(allowed))

    results = DynamicSpeedGenerator(graph, config).simulate(3, DAY_MS)

    assert {result.origin for result in results} <= set(allowed)


def test_creation_time_shifts_events():
    graph = _path()
    config = ShockwaveConfig(
        start_connections=constant(graph.connection("A", "B")),
        creation_time=1_000,
        expanding_speed=ConstantSpeed(0.5),
    )

    events = DynamicSpeedGenerator(graph, config).generate(0, DAY_MS)

    # 1000 m at 0.5 m/ms takes 2000 ms; the event sits halfway.
    assert events[0].timestamp == 1_000 + 1_000


def test_foreign_origin_is_rejected():
    graph = _path()
    config = ShockwaveConfig(start_connections=constant(Connection("X", "Y", 10.0)))
    with pytest.raises(InvalidOriginError):
        DynamicSpeedGenerator(graph, config).generate(0, DAY_MS)

    config = ShockwaveConfig(start_connections=constant(("A", "B")))
    with pytest.raises(InvalidOriginError):
        DynamicSpeedGenerator(graph, config).generate(0, DAY_MS)


def test_behaviour_of_one_yields_no_events_for_any_seed():
    config = ShockwaveConfig(behaviour=lambda distance: 1.0)
    generator = DynamicSpeedGenerator(_grid(), config)
    for seed in range(10):
        assert generator.generate(seed, DAY_MS) == []


def test_events_after_scenario_end_are_kept_and_logged(caplog):
    graph = _path()
    config = ShockwaveConfig(start_connections=constant(graph.connection("C", "D")))
    with caplog.at_level(logging.WARNING, logger="dynspeed.shockwave.generator"):
        events = DynamicSpeedGenerator(graph, config).generate(0, 1_000)
    assert len(events) == 6
    assert "after the scenario end" in caplog.text
