from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration.

    Configure via environment variables or a local .env (not committed).
    """

    model_config = SettingsConfigDict(env_prefix="ROAD_", env_file=".env", extra="ignore")

    # Input / output
    csv_path: Path = Field(default_factory=lambda: Path("./files/edge_antwerpen_subgraph_car.csv"))
    output_path: Path = Field(default_factory=lambda: Path("output.json"))

    # Dgraph HTTP endpoint (alpha, default port 8080)
    dgraph_url: str = "http://127.0.0.1:8080"
    request_timeout_s: float = 30.0

    # Where the record set goes
    sink_enabled: bool = False
    artifact_enabled: bool = True

    # Row parsing
    skip_header: bool = False
    allow_short_rows: bool = False  # zero-fill missing trailing columns instead of rejecting

    @model_validator(mode="after")
    def _check_outputs(self) -> "Settings":
        if not (self.sink_enabled or self.artifact_enabled):
            raise ValueError("at least one of sink_enabled / artifact_enabled must be set")
        return self
