from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional

from loguru import logger

from road_importer.config import Settings
from road_importer.io.csv_ingest import open_input, parse_rows
from road_importer.io.serialize import serialize_records, write_artifact
from road_importer.network.projection import project_rows
from road_importer.network.summary import record_graph, record_set_stats
from road_importer.network.validate import validate_rows
from road_importer.records import EdgeRecord, RawRow
from road_importer.sink.dgraph import SCHEMA, DgraphSink, GraphSink


@dataclass
class ImportResult:
    rows_read: int = 0
    rows_rejected: int = 0
    records: list[EdgeRecord] = field(default_factory=list)
    payload: bytes = b""
    artifact_path: Optional[Path] = None

    @property
    def rows_accepted(self) -> int:
        return self.rows_read - self.rows_rejected


def _counted(rows: Iterable[RawRow], result: ImportResult) -> Iterator[RawRow]:
    for row in rows:
        result.rows_read += 1
        if not row.ok:
            result.rows_rejected += 1
        yield row


def run_import(settings: Settings, sink: Optional[GraphSink] = None) -> ImportResult:
    """Run one import: CSV -> rows -> edge records -> Dgraph and/or JSON artifact.

    Steps run strictly in sequence. Rows that fail to parse are logged and dropped;
    every other failure raises and aborts the run.

    :param settings: Run configuration.
    :type settings: Settings
    :param sink: Graph sink to use when ``settings.sink_enabled``; defaults to a
        :class:`DgraphSink` on ``settings.dgraph_url``, closed after the write.
    :type sink: GraphSink, optional
    :raises InputAccessError: If the input file cannot be opened.
    :raises SerializationError: If the record set cannot be encoded.
    :raises SchemaApplyError: If the sink rejects the schema.
    :raises SinkWriteError: If the sink rejects the mutation.
    :raises ArtifactWriteError: If the local artifact cannot be written.
    :return: Counts, the record set and the serialized payload.
    :rtype: ImportResult
    """
    result = ImportResult()

    logger.info(f"Reading edges from {settings.csv_path}")
    with open_input(settings.csv_path) as f:
        rows = parse_rows(f, skip_header=settings.skip_header, allow_short_rows=settings.allow_short_rows)
        result.records = project_rows(validate_rows(_counted(rows, result)))

    logger.info(
        f"Rows read: {result.rows_read} | accepted: {result.rows_accepted} "
        f"| rejected: {result.rows_rejected} | records: {len(result.records)}"
    )
    stats = record_set_stats(record_graph(result.records))
    logger.info(
        f"Graph: {stats['nodes']} nodes, {stats['edges']} edges "
        f"({stats['reverse_edges']} reverse) | modes: {stats['modes']}"
    )

    result.payload = serialize_records(result.records)

    if settings.sink_enabled:
        with ExitStack() as stack:
            if sink is None:
                sink = stack.enter_context(DgraphSink(settings.dgraph_url, timeout=settings.request_timeout_s))
            sink.alter(SCHEMA)
            sink.mutate(result.payload, commit_now=True)
        logger.info(f"Committed {len(result.records)} records to graph sink")

    if settings.artifact_enabled:
        result.artifact_path = write_artifact(result.payload, settings.output_path)
        logger.info(f"Saved: {result.artifact_path}")

    return result
