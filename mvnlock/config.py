"""Configuration loading for mvnlock (.mvnlock.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".mvnlock.yml"
DEFAULT_STORE_COMMAND = ("nix-store", "--add-fixed", "sha1")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class StoreConfig:
    """Content-addressed store settings."""

    enabled: bool = True
    command: List[str] = field(default_factory=lambda: list(DEFAULT_STORE_COMMAND))


@dataclass
class MvnLockConfig:
    """Represents the settings defined in .mvnlock.yml."""

    root: Path
    project_root: Path
    build_directory: str = "target"
    local_repository_id: str = "local"
    store: StoreConfig = field(default_factory=StoreConfig)
    verify_digests: bool = False
    indent: Optional[int] = 2


def load_config(config_path: Path) -> MvnLockConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return MvnLockConfig(root=root, project_root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    project_root_str = _as_str(data.get("project_root"))
    project_root = (root / project_root_str).resolve() if project_root_str else root

    config = MvnLockConfig(root=root, project_root=project_root)

    build_directory = _as_str(data.get("build_directory"))
    if build_directory:
        config.build_directory = build_directory.strip("/")

    local_id = _as_str(data.get("local_repository_id"))
    if local_id:
        config.local_repository_id = local_id

    store_data = _as_dict(data.get("store"))
    if store_data:
        enabled = _as_bool(store_data.get("enabled"))
        if enabled is not None:
            config.store.enabled = enabled
        command = _as_str_list(store_data.get("command"))
        if command:
            config.store.command = command

    verify = _as_bool(data.get("verify_digests"))
    if verify is not None:
        config.verify_digests = verify

    if "indent" in data:
        indent = data.get("indent")
        if indent is None:
            config.indent = None
        elif isinstance(indent, int) and not isinstance(indent, bool) and indent >= 0:
            config.indent = indent
        else:
            raise ConfigError("indent must be a non-negative integer or null")

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path.name} is not UTF-8: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["ConfigError", "MvnLockConfig", "StoreConfig", "load_config"]
