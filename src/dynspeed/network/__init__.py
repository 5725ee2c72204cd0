"""Road-network exports."""

from .domain_types import Connection
from .road_graph import RoadGraph

__all__ = [
    "Connection",
    "RoadGraph",
]
