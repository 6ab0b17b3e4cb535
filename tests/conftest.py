import io

import pytest
from loguru import logger

from road_importer.config import Settings


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def csv_bytes():
    def _make(*lines: str) -> io.BytesIO:
        return io.BytesIO(("\n".join(lines) + "\n").encode("utf-8"))

    return _make


@pytest.fixture
def make_settings(tmp_path):
    def _make(*lines: str, **overrides) -> Settings:
        csv_path = tmp_path / "edges.csv"
        csv_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        kwargs = {"csv_path": csv_path, "output_path": tmp_path / "out" / "output.json"}
        kwargs.update(overrides)
        return Settings(**kwargs)

    return _make
