"""Exceptions raised while generating shockwave events."""

from __future__ import annotations


class InvalidConfigurationError(ValueError):
    """A supplier produced a value the shockwave generator cannot use."""


class InvalidOriginError(ValueError):
    """A shockwave origin is not a connection of the road graph."""


__all__ = ["InvalidConfigurationError", "InvalidOriginError"]
