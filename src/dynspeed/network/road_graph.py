"""Read-only adapter over a ``networkx.DiGraph`` describing a road network."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, Hashable, Iterable, List, Sequence, Tuple

import networkx as nx
import pandas as pd
from numpy.random import Generator

from .domain_types import Connection

logger = logging.getLogger(__name__)


class RoadGraph:
    """Directed, length-weighted road network queried by the shockwave engine."""

    def __init__(self, graph: nx.DiGraph, length_attr: str = "length"):
        if graph.is_multigraph():
            raise TypeError("RoadGraph expects a simple nx.DiGraph, not a multigraph")
        if not graph.is_directed():
            raise TypeError("RoadGraph expects a directed graph")
        self._graph = graph
        self.length_attr = length_attr
        self._connections: Dict[Tuple[Hashable, Hashable], Connection] = {}
        for source, target, data in graph.edges(data=True):
            length = self._resolve_length(source, target, data)
            self._connections[(source, target)] = Connection(source, target, length)
        self._connection_list: List[Connection] = list(self._connections.values())
        logger.debug(
            "Indexed road graph with %d points and %d connections",
            graph.number_of_nodes(),
            len(self._connection_list),
        )

    # ------------------------------------------------------------------ builders
    @classmethod
    def from_edges(cls, edges: Iterable[Sequence[object]]) -> "RoadGraph":
        """Build from ``(source, target)`` or ``(source, target, length)`` tuples."""
        graph = nx.DiGraph()
        for edge in edges:
            if len(edge) == 3:
                source, target, length = edge
                graph.add_edge(source, target, length=float(length))
            elif len(edge) == 2:
                source, target = edge
                graph.add_edge(source, target)
            else:
                raise ValueError(f"Edge entries must have 2 or 3 items, got {edge!r}")
        return cls(graph)

    @classmethod
    def from_networkx(cls, graph: nx.DiGraph, length_attr: str = "length") -> "RoadGraph":
        return cls(graph, length_attr=length_attr)

    @classmethod
    def from_csv(cls, path: str | Path) -> "RoadGraph":
        """Load an edge list CSV with ``source``, ``target`` and optional ``length`` columns."""
        csv_path = Path(path)
        if not csv_path.exists():
            raise FileNotFoundError(f"Road graph CSV not found at {csv_path}")
        df = pd.read_csv(csv_path)
        missing = {"source", "target"} - set(df.columns)
        if missing:
            raise ValueError(f"Road graph CSV is missing columns: {sorted(missing)}")
        graph = nx.DiGraph()
        has_length = "length" in df.columns
        for row in df.itertuples(index=False):
            attrs = {}
            if has_length and not pd.isna(row.length):
                attrs["length"] = float(row.length)
            graph.add_edge(row.source, row.target, **attrs)
        return cls(graph)

    # ---------------------------------------------------------------- properties
    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    @property
    def connections(self) -> List[Connection]:
        return list(self._connection_list)

    @property
    def num_connections(self) -> int:
        return len(self._connection_list)

    @property
    def points(self) -> List[Hashable]:
        return list(self._graph.nodes)

    # ------------------------------------------------------------------ queries
    def has_connection(self, source: Hashable, target: Hashable) -> bool:
        return (source, target) in self._connections

    def contains(self, connection: Connection) -> bool:
        """Return True when ``connection`` is exactly one of this graph's connections."""
        return self._connections.get((connection.source, connection.target)) == connection

    def connection(self, source: Hashable, target: Hashable) -> Connection:
        try:
            return self._connections[(source, target)]
        except KeyError as exc:
            raise KeyError(f"No connection {source!r}->{target!r} in road graph") from exc

    def incoming_points(self, point: Hashable) -> List[Hashable]:
        """Return the source points of every connection ending at ``point``."""
        if point not in self._graph:
            return []
        return list(self._graph.predecessors(point))

    def random_connection(self, rng: Generator) -> Connection:
        """Pick a connection uniformly at random."""
        if not self._connection_list:
            raise ValueError("Cannot draw a random connection from an empty road graph")
        index = int(rng.integers(len(self._connection_list)))
        return self._connection_list[index]

    # ----------------------------------------------------------------- internal
    def _resolve_length(self, source: Hashable, target: Hashable, data: Dict[str, object]) -> float:
        value = data.get(self.length_attr)
        if value is not None:
            length = float(value)
        else:
            source_pos = self._graph.nodes[source].get("pos")
            target_pos = self._graph.nodes[target].get("pos")
            if source_pos is None or target_pos is None:
                raise ValueError(
                    f"Connection {source!r}->{target!r} has no '{self.length_attr}' "
                    "attribute and its endpoints carry no 'pos'"
                )
            length = math.dist(source_pos, target_pos)
        if length < 0:
            raise ValueError(f"Connection {source!r}->{target!r} has negative length {length}")
        return length


__all__ = ["RoadGraph"]
