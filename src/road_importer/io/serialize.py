from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Iterable

from road_importer.errors import ArtifactWriteError, SerializationError
from road_importer.records import EdgeRecord

# Outgoing-edge predicate; facets on it are encoded as "<predicate>|<facet>".
EDGE_PREDICATE = "connect_to"

ARTIFACT_MODE = 0o644


def _put(obj: dict[str, Any], key: str, value: Any) -> None:
    # empty strings and zeros are left out of the mutation
    if value == "" or value == 0:
        return
    obj[key] = value


def record_to_dict(record: EdgeRecord) -> dict[str, Any]:
    """Convert an edge record to its JSON mutation object.

    Zero and empty values are omitted, except the ``reverse`` facet which is
    always present.

    :param record: The record to convert.
    :type record: EdgeRecord
    :return: A JSON-ready dict with ``uid``, ``node_id`` and ``connect_to`` keys.
    :rtype: dict[str, Any]
    """
    e = record.edge
    target: dict[str, Any] = {}
    _put(target, "uid", e.target_placeholder_id)
    _put(target, "node_id", e.target_node_id)
    _put(target, f"{EDGE_PREDICATE}|edge_id", e.edge_id)
    target[f"{EDGE_PREDICATE}|reverse"] = bool(e.reverse)
    _put(target, f"{EDGE_PREDICATE}|cost", e.cost)
    _put(target, f"{EDGE_PREDICATE}|distance", e.distance)
    _put(target, f"{EDGE_PREDICATE}|mode", e.mode)

    obj: dict[str, Any] = {}
    _put(obj, "uid", record.source_placeholder_id)
    _put(obj, "node_id", record.source_node_id)
    obj[EDGE_PREDICATE] = target
    return obj


def serialize_records(records: Iterable[EdgeRecord]) -> bytes:
    """Serialize a record set to compact UTF-8 JSON.

    Key order is fixed and non-ASCII text is written unescaped, so the same
    records always produce the same bytes.

    :param records: Records in output order.
    :type records: Iterable[EdgeRecord]
    :raises SerializationError: If a value cannot be encoded (e.g. NaN cost).
    :return: The JSON array as bytes.
    :rtype: bytes
    """
    try:
        text = json.dumps(
            [record_to_dict(r) for r in records],
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize record set: {e}") from e
    return text.encode("utf-8")


def write_artifact(payload: bytes, path: str | Path) -> Path:
    """Write the serialized record set to a local file.

    New files are created with mode 0644 (before umask); existing files are
    truncated.

    :param payload: Serialized JSON.
    :type payload: bytes
    :param path: Destination file path.
    :type path: str | Path
    :raises ArtifactWriteError: If the directory or file cannot be written.
    :return: The path written.
    :rtype: Path
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, ARTIFACT_MODE)
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
    except OSError as e:
        raise ArtifactWriteError(f"Cannot write artifact: {path}") from e
    return path
