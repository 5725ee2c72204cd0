from __future__ import annotations

import pytest
from numpy.random import default_rng

from dynspeed.stochastic.curves import TEN_KM_H, ConstantSpeed, LinearBehaviour
from dynspeed.stochastic.suppliers import (
    MAX_SEED,
    StochasticSupplier,
    as_supplier,
    choice,
    constant,
    from_callable,
    is_supplier,
    next_seed,
    normal,
    uniform,
    uniform_int,
)


def test_constant_ignores_seed():
    supplier = constant(42)
    assert supplier.draw(0) == 42
    assert supplier.draw(123456789) == 42


def test_same_seed_same_value():
    for supplier in (uniform_int(0, 1000), uniform(0.0, 1.0), normal(5.0, 2.0)):
        assert supplier.draw(99) == supplier.draw(99)


def test_uniform_int_bounds_are_inclusive():
    supplier = uniform_int(3, 5)
    drawn = {supplier.draw(seed) for seed in range(200)}
    assert drawn == {3, 4, 5}
    with pytest.raises(ValueError):
        uniform_int(5, 3)


def test_uniform_stays_in_range():
    supplier = uniform(10.0, 20.0)
    values = [supplier.draw(seed) for seed in range(100)]
    assert all(10.0 <= value < 20.0 for value in values)


def test_normal_is_clipped_and_rounded():
    supplier = normal(0.0, 100.0, lower=-1.0, upper=1.0, integer=True)
    values = {supplier.draw(seed) for seed in range(100)}
    assert values <= {-1, 0, 1}
    assert all(isinstance(value, int) for value in values)
    with pytest.raises(ValueError):
        normal(0.0, -1.0)


def test_choice_draws_from_values():
    supplier = choice(["a", "b"])
    assert {supplier.draw(seed) for seed in range(50)} == {"a", "b"}
    with pytest.raises(ValueError):
        choice([])


def test_from_callable_receives_seeded_generator():
    supplier = from_callable(lambda rng: float(rng.random()))
    assert supplier.draw(5) == supplier.draw(5)
    assert supplier.draw(5) != supplier.draw(6)


def test_negative_seeds_are_accepted():
    assert uniform_int(0, 10).draw(-7) == uniform_int(0, 10).draw(-7)


def test_as_supplier_wraps_plain_values():
    curve = LinearBehaviour()
    wrapped = as_supplier(curve)
    assert is_supplier(wrapped)
    assert wrapped.draw(1) is curve
    existing = uniform_int(0, 1)
    assert as_supplier(existing) is existing


def test_next_seed_is_non_negative():
    rng = default_rng(3)
    seeds = [next_seed(rng) for _ in range(100)]
    assert all(0 <= seed < MAX_SEED for seed in seeds)


def test_linear_behaviour_ramps_to_one():
    curve = LinearBehaviour()
    assert curve(0.0) == pytest.approx(0.2)
    assert curve(500.0) == pytest.approx(0.28)
    assert curve(2500.0) == pytest.approx(0.6)
    assert curve(5000.0) == pytest.approx(1.0)
    assert curve(5500.0) == 1.0
    assert curve(7500.0) == 1.0
    with pytest.raises(ValueError):
        LinearBehaviour(start_factor=1.5)
    with pytest.raises(ValueError):
        LinearBehaviour(ramp_distance=0.0)


def test_constant_speed():
    assert ConstantSpeed()(123) == TEN_KM_H
    assert ConstantSpeed(0.0)(0) == 0.0
    with pytest.raises(ValueError):
        ConstantSpeed(-1.0)


def test_base_supplier_cannot_be_instantiated():
    with pytest.raises(TypeError):
        StochasticSupplier()

    class Fixed(StochasticSupplier[int]):
        def draw(self, seed: int) -> int:
            return 7

    assert Fixed().draw(1) == 7
    assert is_supplier(Fixed())
