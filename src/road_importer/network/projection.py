from __future__ import annotations

from typing import Iterable

from road_importer.records import Edge, EdgeRecord, RawRow


def derive_placeholder(node_id: int) -> str:
    """Blank-node key for a node id, e.g. ``_:42``.

    Must stay a pure function of `node_id`: the graph store coalesces records
    that reference the same placeholder within one mutation.
    """
    return f"_:{node_id}"


def _edge_record(source: int, target: int, row: RawRow, cost: float, reverse: bool) -> EdgeRecord:
    return EdgeRecord(
        source_placeholder_id=derive_placeholder(source),
        source_node_id=source,
        edge=Edge(
            target_placeholder_id=derive_placeholder(target),
            target_node_id=target,
            edge_id=row.edge_id,
            reverse=reverse,
            cost=cost,
            distance=row.edge_distance_km,
            mode=row.edge_mode,
        ),
    )


def project_row(row: RawRow) -> list[EdgeRecord]:
    """Project one accepted row onto its edge records.

    Always emits the forward edge (source -> target, ``edge_cost``). When
    ``edge_reverse_cost`` is strictly positive, also emits the reverse edge
    (target -> source, ``edge_reverse_cost``) right after it.

    :param row: A row without a parse-error marker.
    :type row: RawRow
    :return: One or two records, forward first.
    :rtype: list[EdgeRecord]
    """
    records = [_edge_record(row.source_node, row.target_node, row, row.edge_cost, reverse=False)]
    if row.edge_reverse_cost > 0:
        records.append(_edge_record(row.target_node, row.source_node, row, row.edge_reverse_cost, reverse=True))
    return records


def project_rows(rows: Iterable[RawRow]) -> list[EdgeRecord]:
    """Materialize the record set for all rows, preserving input order."""
    records: list[EdgeRecord] = []
    for row in rows:
        records.extend(project_row(row))
    return records
