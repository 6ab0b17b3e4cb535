from __future__ import annotations

from typing import Iterable, Iterator

from loguru import logger

from road_importer.records import RawRow


def plausibility_warnings(row: RawRow) -> list[str]:
    """Return the non-fatal plausibility warnings for a parsed row."""
    warnings = []
    if row.edge_distance_km <= 0:
        warnings.append("No distance")
    if row.edge_cost <= 0:
        warnings.append("No cost")
    if row.edge_reverse_cost <= 0:
        warnings.append("No reverse Edge")
    return warnings


def validate_rows(rows: Iterable[RawRow]) -> Iterator[RawRow]:
    """Drop rows that failed to parse; warn about implausible values on the rest.

    Accepted rows pass through unchanged, warnings never suppress them.
    """
    for row in rows:
        if not row.ok:
            continue
        for warning in plausibility_warnings(row):
            logger.warning("{} (line {}, edge {})", warning, row.line, row.edge_id)
        yield row
