from __future__ import annotations

from typing import Any, Iterable

import networkx as nx

from road_importer.records import EdgeRecord


def record_graph(records: Iterable[EdgeRecord]) -> nx.MultiDiGraph:
    """Build a directed multigraph view of a record set.

    Nodes are the integer node ids; each record becomes one edge keyed by
    ``(edge_id, reverse)`` so the two projections of a row stay distinct.

    :param records: Projected edge records.
    :type records: Iterable[EdgeRecord]
    :return: A directed multigraph with cost/distance/mode/reverse edge attributes.
    :rtype: nx.MultiDiGraph
    """
    G = nx.MultiDiGraph()
    for r in records:
        e = r.edge
        G.add_edge(
            r.source_node_id,
            e.target_node_id,
            key=(e.edge_id, e.reverse),
            cost=e.cost,
            distance=e.distance,
            mode=e.mode,
            reverse=e.reverse,
        )
    return G


def record_set_stats(G: nx.MultiDiGraph) -> dict[str, Any]:
    """Summarize a record graph built by :func:`record_graph`.

    :param G: Record graph.
    :type G: nx.MultiDiGraph
    :return: Node count, edge count, how many edges are reverse projections,
        and the number of edges per mode.
    :rtype: dict[str, Any]
    """
    reverse_edges = 0
    modes: dict[str, int] = {}
    for *_, d in G.edges(keys=True, data=True):
        if d.get("reverse"):
            reverse_edges += 1
        mode = d.get("mode", "")
        modes[mode] = modes.get(mode, 0) + 1

    return {
        "nodes": G.number_of_nodes(),
        "edges": G.number_of_edges(),
        "reverse_edges": reverse_edges,
        "modes": dict(sorted(modes.items())),
    }
