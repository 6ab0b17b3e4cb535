"""Dgraph sink: schema declaration and the HTTP client that applies mutations."""

from __future__ import annotations

from typing import Any, Optional, Protocol

import httpx
from loguru import logger

from road_importer.errors import ImporterError, SchemaApplyError, SinkWriteError

SCHEMA = """
node_id: int @index(int) .
edge_id: int @index(int) .
mode: string @index(exact) .
cost: float @index(float) .
distance: float @index(float) .
reverse: bool .
"""


class GraphSink(Protocol):
    def alter(self, schema: str) -> None: ...

    def mutate(self, payload: bytes, commit_now: bool = True) -> None: ...


class DgraphSink:
    """Synchronous client for the Dgraph alpha HTTP API.

    Use as a context manager so the underlying connection is always closed::

        with DgraphSink("http://127.0.0.1:8080") as sink:
            sink.alter(SCHEMA)
            sink.mutate(payload)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def __enter__(self) -> "DgraphSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self._client.close()

    def _post(self, endpoint: str, error_cls: type[ImporterError], **kwargs) -> dict[str, Any]:
        try:
            response = self._client.post(endpoint, **kwargs)
        except httpx.HTTPError as e:
            raise error_cls(f"Dgraph request failed: {endpoint}: {e}") from e

        if response.status_code >= 400:
            raise error_cls(f"Dgraph returned HTTP {response.status_code} for {endpoint}: {response.text}")

        try:
            body = response.json()
        except ValueError as e:
            raise error_cls(f"Dgraph returned a non-JSON response for {endpoint}") from e

        # Dgraph reports most failures as 200 with an "errors" list
        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            messages = "; ".join(str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors)
            raise error_cls(f"Dgraph rejected {endpoint}: {messages}")
        return body

    def alter(self, schema: str) -> None:
        """Apply a schema declaration.

        :raises SchemaApplyError: If the request fails or Dgraph rejects the schema.
        """
        logger.info("Applying schema to {}", self.base_url)
        self._post("/alter", SchemaApplyError, content=schema.encode("utf-8"))

    def mutate(self, payload: bytes, commit_now: bool = True) -> None:
        """Apply `payload` (a JSON array of objects) as one set-mutation.

        :raises SinkWriteError: If the request fails or Dgraph rejects the mutation.
        """
        params = {"commitNow": "true"} if commit_now else {}
        body = b'{"set":' + payload + b"}"
        logger.info("Sending mutation ({} bytes) to {}", len(body), self.base_url)
        self._post(
            "/mutate",
            SinkWriteError,
            params=params,
            content=body,
            headers={"Content-Type": "application/json"},
        )
