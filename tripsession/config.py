"""Settings via pydantic-settings with TRIPSESSION_ env prefix.

The two deployments the store was built for are plain settings profiles:
a short structured session (window=10, structured_ingestion on) and a long
string-only session with history replay (window=50, history_replay on).
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TRIPSESSION_", env_file=".env")

    # Session
    window: int = Field(10, ge=1)  # default turn capacity for new sessions
    display_separator: str = "\n"

    # Which ingestion entry points the HTTP surface exposes
    structured_ingestion: bool = True  # ask/reply with {"parts": [...]}
    history_replay: bool = True  # POST /sessions/{id}/turns

    # Registry
    max_sessions: int = Field(100, ge=1)

    # Runtime
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"

    @model_validator(mode="after")
    def _validate_log_level(self) -> "Settings":
        if self.log_level.lower() not in {"critical", "error", "warning", "info", "debug", "trace"}:
            raise ValueError(f"Unknown log_level: {self.log_level}")
        return self
