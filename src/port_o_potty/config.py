"""Runtime configuration loader for Port-o-Potty."""
from __future__ import annotations

import argparse
import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .models import DEFAULT_RANGES, PortRange, normalize_range

LOGGER = logging.getLogger(__name__)

CONFIG_FILENAME = "port-o-potty.config.yaml"


def config_file_path(config_path: Path | str | None = None) -> Path:
    """Return the resolved configuration file path."""

    if config_path is None:
        return Path.cwd() / CONFIG_FILENAME
    if isinstance(config_path, Path):
        return config_path
    return Path(config_path)


DEFAULT_SETTINGS: dict[str, Any] = {
    "version": 1,
    "polling": {
        "interval_seconds": 15,
        "resync_delay_ms": 600,
    },
    "ranges": {
        "storage_file": "port-o-potty.ranges.yaml",
        "defaults": [item.to_dict() for item in DEFAULT_RANGES],
    },
    "ui": {
        "confirm_kill": True,
    },
}


class ConfigurationError(RuntimeError):
    """Raised when the YAML configuration cannot be loaded."""


@dataclass(frozen=True)
class PollingSettings:
    interval_seconds: int
    resync_delay_ms: int


@dataclass(frozen=True)
class RangeSettings:
    storage_file: Path
    default_ranges: tuple[PortRange, ...]


@dataclass(frozen=True)
class UiSettings:
    confirm_kill: bool


@dataclass(frozen=True)
class AppSettings:
    polling: PollingSettings
    ranges: RangeSettings
    ui: UiSettings
    raw: dict[str, Any]


_SETTINGS_CACHE: AppSettings | None = None


def get_settings() -> AppSettings:
    """Return cached settings, loading from disk when necessary."""

    global _SETTINGS_CACHE
    if _SETTINGS_CACHE is None:
        _SETTINGS_CACHE = load_settings()
    return _SETTINGS_CACHE


def reset_settings_cache() -> None:
    """Reset the cached settings (useful for tests)."""

    global _SETTINGS_CACHE
    _SETTINGS_CACHE = None


def load_settings(config_path: Path | str | None = None) -> AppSettings:
    """Load settings from YAML, creating or merging defaults as needed."""

    path = config_file_path(config_path)
    try:
        data = _read_or_create_config(path)
    except yaml.YAMLError as exc:  # pragma: no cover - PyYAML formatting
        raise ConfigurationError(f"Failed to parse configuration file: {path}\n{exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {path}")
    merged = _merge_with_defaults(copy.deepcopy(DEFAULT_SETTINGS), data)
    if merged != data:
        _write_yaml(path, merged)
    try:
        return _build_settings(merged, base_dir=path.parent)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value in configuration file: {path}\n{exc}") from exc


def write_default_config(destination: Path | str) -> Path:
    """Write the default configuration template to ``destination``."""

    target = Path(destination)
    _write_yaml(target, copy.deepcopy(DEFAULT_SETTINGS))
    return target


def merge_with_defaults(user_values: dict[str, Any] | None) -> dict[str, Any]:
    """Merge ``user_values`` with the default template without touching disk."""

    if user_values is None:
        user_values = {}
    return _merge_with_defaults(copy.deepcopy(DEFAULT_SETTINGS), user_values)


def _read_or_create_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        _write_yaml(path, copy.deepcopy(DEFAULT_SETTINGS))
        return copy.deepcopy(DEFAULT_SETTINGS)
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    return loaded


def _write_yaml(path: Path, data: dict[str, Any]) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=False)
    except OSError as exc:  # pragma: no cover - depends on system perms
        LOGGER.warning("Failed to write configuration %s: %s", path, exc)
        return False
    return True


def _merge_with_defaults(defaults: dict[str, Any], user_values: dict[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for key in user_values:
        merged[key] = user_values[key]
    for key, value in defaults.items():
        if key not in user_values or user_values[key] is None:
            merged[key] = copy.deepcopy(value)
            continue
        if isinstance(value, dict) and isinstance(user_values.get(key), dict):
            merged[key] = _merge_with_defaults(value, user_values[key])
        else:
            merged[key] = user_values[key]
    return merged


def _build_settings(data: dict[str, Any], base_dir: Path) -> AppSettings:
    polling = _build_polling_settings(data.get("polling", {}))
    ranges = _build_range_settings(data.get("ranges", {}), base_dir)
    ui = UiSettings(confirm_kill=bool(data.get("ui", {}).get("confirm_kill", True)))
    return AppSettings(polling=polling, ranges=ranges, ui=ui, raw=data)


def _build_polling_settings(data: dict[str, Any]) -> PollingSettings:
    defaults = DEFAULT_SETTINGS["polling"]
    interval = int(data.get("interval_seconds", defaults["interval_seconds"]))
    if interval <= 0:
        interval = defaults["interval_seconds"]
    resync_delay = int(data.get("resync_delay_ms", defaults["resync_delay_ms"]))
    if resync_delay < 0:
        resync_delay = defaults["resync_delay_ms"]
    return PollingSettings(interval_seconds=interval, resync_delay_ms=resync_delay)


def _build_range_settings(data: dict[str, Any], base_dir: Path) -> RangeSettings:
    defaults = DEFAULT_SETTINGS["ranges"]
    storage = Path(str(data.get("storage_file") or defaults["storage_file"])).expanduser()
    if not storage.is_absolute():
        storage = base_dir / storage
    default_ranges = tuple(
        normalize_range(float(entry["start"]), float(entry["end"]))
        for entry in data.get("defaults") or []
        if isinstance(entry, dict) and "start" in entry and "end" in entry
    )
    if not default_ranges:
        default_ranges = DEFAULT_RANGES
    return RangeSettings(storage_file=storage, default_ranges=default_ranges)


def main() -> None:  # pragma: no cover - CLI helper
    parser = argparse.ArgumentParser(description="Port-o-Potty configuration utilities")
    parser.add_argument(
        "--write-default",
        dest="write_default",
        type=Path,
        help="Write the default configuration YAML to the provided path",
    )
    args = parser.parse_args()
    if args.write_default:
        target = write_default_config(args.write_default)
        print(f"Wrote default configuration to {target}")
        return
    settings = load_settings()
    config_path = Path.cwd() / CONFIG_FILENAME
    version = settings.raw.get("version", "n/a")
    print(f"Loaded configuration from {config_path}\nVersion: {version}")


if __name__ == "__main__":  # pragma: no cover - CLI
    main()
