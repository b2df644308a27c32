from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, List, Mapping, MutableMapping

import yaml

from .errors import ConfigError


@dataclass(slots=True)
class ReaderConfig:
    """Configuration options for scanning dumps split by split."""

    split_size: int = 64 * 1024 * 1024
    read_chunk_size: int = 64 * 1024
    workers: int = 4
    output_dir: str = "outputs"
    log_dir: str | None = None
    log_every: int = 100_000
    render_text: bool = False
    skip_metadata_only: bool = False
    namespaces: List[str] | None = field(default=None)

    def __post_init__(self) -> None:
        for name in ("split_size", "read_chunk_size", "workers", "log_every"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}.")
        if self.namespaces is not None:
            self.namespaces = [str(ns) for ns in self.namespaces]

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))

    def accepts_namespace(self, namespace: str | None) -> bool:
        """True when no namespace filter is set or ``namespace`` is listed."""
        return self.namespaces is None or namespace in self.namespaces


def config_from_dict(data: Mapping[str, Any] | None) -> ReaderConfig:
    """Build a ReaderConfig from a dictionary-like input, ignoring unknown keys."""
    if data is None:
        return ReaderConfig()
    allowed = {config_field.name for config_field in fields(ReaderConfig)}
    kwargs = {key: data[key] for key in data if key in allowed}
    return ReaderConfig(**kwargs)


def config_from_yaml(path: str | Path) -> ReaderConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ConfigError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> ReaderConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return ReaderConfig()
    return config_from_yaml(path)
