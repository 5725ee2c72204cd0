"""Stochastic supplier and response-curve exports."""

from .curves import TEN_KM_H, ConstantSpeed, LinearBehaviour
from .suppliers import (
    StochasticSupplier,
    as_supplier,
    choice,
    constant,
    from_callable,
    next_seed,
    normal,
    uniform,
    uniform_int,
)

__all__ = [
    "ConstantSpeed",
    "LinearBehaviour",
    "StochasticSupplier",
    "TEN_KM_H",
    "as_supplier",
    "choice",
    "constant",
    "from_callable",
    "next_seed",
    "normal",
    "uniform",
    "uniform_int",
]
