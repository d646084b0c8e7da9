"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from plotania.errors import ConfigError


def _check_range(name: str, value: float, low: float, high: float | None = None) -> None:
    if value < low or (high is not None and value > high):
        bound = f"[{low}, {high}]" if high is not None else f">= {low}"
        raise ConfigError(f"{name} must be {bound}, got {value}")


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-sonnet-4-5-20250929"
    timeout: int = 60
    max_tokens: int = 2048
    transform_temperature: float = 0.8
    feedback_temperature: float = 0.8

    def __post_init__(self) -> None:
        _check_range("timeout", self.timeout, 1)
        _check_range("max_tokens", self.max_tokens, 1)
        _check_range("transform_temperature", self.transform_temperature, 0.0, 1.0)
        _check_range("feedback_temperature", self.feedback_temperature, 0.0, 1.0)


@dataclass(frozen=True)
class ServiceConfig:
    backend: str = "llm"  # "llm" | "http"
    base_url: str = "http://localhost:4001"
    timeout: int = 60

    def __post_init__(self) -> None:
        if self.backend not in ("llm", "http"):
            raise ConfigError(f"backend must be 'llm' or 'http', got {self.backend!r}")
        _check_range("timeout", self.timeout, 1)


@dataclass(frozen=True)
class EventsConfig:
    enabled: bool = True
    db_path: str = "~/.plotania/events.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class EditorConfig:
    error_detail_limit: int = 500
    message_clip: int = 140
    document_id: str = "doc-1"

    def __post_init__(self) -> None:
        _check_range("error_detail_limit", self.error_detail_limit, 1)
        _check_range("message_clip", self.message_clip, 2)


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    events: EventsConfig = field(default_factory=EventsConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidate = Path.cwd() / "config.yaml"
        if candidate.exists():
            path = candidate

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        service=ServiceConfig(**raw.get("service", {})),
        events=EventsConfig(**raw.get("events", {})),
        editor=EditorConfig(**raw.get("editor", {})),
    )
