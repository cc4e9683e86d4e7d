"""Configuration loading for zmonitor.

Loads settings from TOML config files with sensible defaults.
Search order: explicit --config path → ~/.config/zmonitor/config.toml → defaults only.
"""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path
from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "interval": 2.0,
    "shutdown_delay": 0.5,
    "view": "jobs",
    "source": "random",
    "max_jobs": 20,
    "log": {
        "command": "journalctl --no-pager --quiet -n {lines}",
        "lines": 200,
        "timeout": 5.0,
    },
    "colors": {
        "border": "green",
        "header": "green",
        "text": "white",
        "active": "brightYellow",
        "message": "brightYellow",
    },
}

VIEWS = ("jobs", "log")
SOURCES = ("random", "processes")

_DEFAULT_PATH = Path.home() / ".config" / "zmonitor" / "config.toml"


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base. Nested dicts are merged at the first level only."""
    merged = dict(base)
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def _validate(config: dict[str, Any], origin: Path) -> dict[str, Any]:
    """Replace unknown choices and non-numeric values with their defaults."""
    checks: list[tuple[str, tuple[str, ...]]] = [("view", VIEWS), ("source", SOURCES)]
    for key, choices in checks:
        if config.get(key) not in choices:
            allowed = ", ".join(choices)
            print(
                f"zmonitor: warning: {origin}: {key} = {config.get(key)!r} is not one of "
                f"{allowed}; using {DEFAULT_CONFIG[key]!r}",
                file=sys.stderr,
            )
            config[key] = DEFAULT_CONFIG[key]
    for key in ("interval", "shutdown_delay", "max_jobs"):
        value = config.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            print(
                f"zmonitor: warning: {origin}: {key} = {value!r} is not a "
                f"non-negative number; using {DEFAULT_CONFIG[key]!r}",
                file=sys.stderr,
            )
            config[key] = DEFAULT_CONFIG[key]
    return config


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration, merging user TOML over defaults.

    Args:
        path: Explicit config file path (from --config). If None, tries the
              default location ~/.config/zmonitor/config.toml.

    Returns:
        Merged configuration dict.

    Raises:
        SystemExit: If an explicit path doesn't exist or can't be parsed.
    """
    if path is not None:
        if not path.is_file():
            print(f"zmonitor: config file not found: {path}", file=sys.stderr)
            raise SystemExit(1)
        try:
            user_config = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            print(f"zmonitor: invalid TOML in {path}: {e}", file=sys.stderr)
            raise SystemExit(1) from e
        return _validate(_deep_merge(DEFAULT_CONFIG, user_config), path)

    if _DEFAULT_PATH.is_file():
        try:
            user_config = tomllib.loads(_DEFAULT_PATH.read_text(encoding="utf-8"))
            return _validate(_deep_merge(DEFAULT_CONFIG, user_config), _DEFAULT_PATH)
        except tomllib.TOMLDecodeError:
            print(
                f"zmonitor: warning: ignoring invalid TOML in {_DEFAULT_PATH}",
                file=sys.stderr,
            )

    return dict(DEFAULT_CONFIG)


def dump_default_config() -> str:
    """Return the default configuration as a TOML string."""
    lines = [
        "# zmonitor configuration",
        "# Place this file at ~/.config/zmonitor/config.toml",
        "",
        f"interval = {DEFAULT_CONFIG['interval']}",
        f"shutdown_delay = {DEFAULT_CONFIG['shutdown_delay']}",
        f'view = "{DEFAULT_CONFIG["view"]}"',
        f'source = "{DEFAULT_CONFIG["source"]}"',
        f"max_jobs = {DEFAULT_CONFIG['max_jobs']}",
        "",
        "[log]",
        f'command = "{DEFAULT_CONFIG["log"]["command"]}"',
        f"lines = {DEFAULT_CONFIG['log']['lines']}",
        f"timeout = {DEFAULT_CONFIG['log']['timeout']}",
        "",
        "[colors]",
    ]
    for key, name in DEFAULT_CONFIG["colors"].items():
        lines.append(f'{key} = "{name}"')

    return "\n".join(lines) + "\n"
