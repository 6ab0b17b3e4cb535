from __future__ import annotations

from dataclasses import dataclass

# Column order of the edge CSV.
COLUMNS: tuple[str, ...] = (
    "edge_id",
    "source_node",
    "target_node",
    "edge_cost",
    "edge_reverse_cost",
    "edge_mode",
    "edge_distance_km",
)


@dataclass
class RawRow:
    """One parsed line of the edge CSV.

    Either all seven fields are coerced, or `error` is set and `error_column`
    names the first column that failed. Fields after the failing column keep
    their zero value.
    """

    line: int = 0
    edge_id: int = 0
    source_node: int = 0
    target_node: int = 0
    edge_cost: float = 0.0
    edge_reverse_cost: float = 0.0
    edge_mode: str = ""
    edge_distance_km: float = 0.0
    error: str | None = None
    error_column: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Edge:
    target_placeholder_id: str
    target_node_id: int
    edge_id: int
    reverse: bool
    cost: float
    distance: float
    mode: str


@dataclass(frozen=True)
class EdgeRecord:
    """A source node and one outgoing edge from it."""

    source_placeholder_id: str
    source_node_id: int
    edge: Edge
