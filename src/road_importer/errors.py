"""Fatal errors surfaced to the process boundary.

Row-level problems are not exceptions: they are logged and the row is dropped.
"""

from __future__ import annotations


class ImporterError(Exception):
    """Base class for errors that abort an import run."""


class InputAccessError(ImporterError):
    """The input file could not be opened."""


class SchemaApplyError(ImporterError):
    """The graph sink rejected the schema declaration."""


class SinkWriteError(ImporterError):
    """The graph sink rejected the mutation."""


class SerializationError(ImporterError):
    """The record set could not be encoded as JSON."""


class ArtifactWriteError(ImporterError):
    """The local JSON artifact could not be written."""
