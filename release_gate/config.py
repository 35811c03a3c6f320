"""Gate configuration loaded from an optional YAML file.

Example release_gate.yaml:

    manifest_name: Cargo.toml
    exclude_dirs: [target, .git, examples]
    log_level: INFO
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from release_gate.models import ConfigError

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class GateConfig:
    manifest_name: str = "Cargo.toml"
    exclude_dirs: tuple[str, ...] = ("target", ".git")
    log_level: str = "INFO"

    def to_dict(self) -> dict[str, Any]:
        return {"manifest_name": self.manifest_name,
                "exclude_dirs": list(self.exclude_dirs),
                "log_level": self.log_level}


def load_config(path: Path | None = None) -> GateConfig:
    """Load a GateConfig from YAML. No path means defaults."""
    if path is None:
        return GateConfig()

    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top-level document must be a mapping")

    unknown = sorted(set(data) - {"manifest_name", "exclude_dirs", "log_level"})
    if unknown:
        raise ConfigError(f"{path}: unknown key(s): {', '.join(unknown)}")

    defaults = GateConfig()

    manifest_name = data.get("manifest_name", defaults.manifest_name)
    if not isinstance(manifest_name, str) or not manifest_name.strip():
        raise ConfigError(f"{path}: manifest_name must be a non-empty string")

    exclude_dirs = data.get("exclude_dirs", list(defaults.exclude_dirs))
    if not isinstance(exclude_dirs, list) or not all(isinstance(d, str) for d in exclude_dirs):
        raise ConfigError(f"{path}: exclude_dirs must be a list of strings")

    log_level = data.get("log_level", defaults.log_level)
    if not isinstance(log_level, str) or log_level.upper() not in VALID_LOG_LEVELS:
        raise ConfigError(
            f"{path}: log_level must be one of {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    config = GateConfig(
        manifest_name=manifest_name.strip(),
        exclude_dirs=tuple(exclude_dirs),
        log_level=log_level.upper(),
    )
    logger.debug("Loaded config from %s: %s", path, config.to_dict())
    return config
