"""Runtime configuration for the console (deployment variant and live window)."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import yaml

from ..core.sample_buffer import MAX_PTS

CONFIG_ENV_VAR = "SCISSORS_CONSOLE_CONFIG"
MAX_CHANNELS = 3
DEFAULT_LABELS = ("F1", "F2", "P")


@dataclass(slots=True)
class ConsoleConfig:
    """
    Settings fixed for a deployment of the console.

    ``channel_count`` selects the rig variant (force only, two load cells, or
    two load cells plus encoder position); it is not negotiated with the host.
    """

    channel_count: int = 1
    max_points: int = MAX_PTS
    channel_labels: tuple[str, ...] = DEFAULT_LABELS
    default_folder: Optional[str] = None
    demo_rate_hz: float = 10.0

    def sanitized(self) -> ConsoleConfig:
        """Return a copy with limits applied."""
        labels = self.channel_labels
        if isinstance(labels, str):
            labels = (labels,)
        folder = self.default_folder
        return ConsoleConfig(
            channel_count=max(1, min(MAX_CHANNELS, int(self.channel_count))),
            max_points=max(1, int(self.max_points)),
            channel_labels=tuple(str(label) for label in (labels or ())),
            default_folder=str(folder) if folder else None,
            demo_rate_hz=max(0.1, float(self.demo_rate_hz)),
        )

    def labels(self) -> tuple[str, ...]:
        """Exactly ``channel_count`` legend labels, ``CH<n>`` for missing ones."""
        given = list(self.channel_labels)[: self.channel_count]
        for idx in range(len(given), self.channel_count):
            given.append(f"CH{idx + 1}")
        return tuple(given)


def _recognized_fields() -> set[str]:
    return {f.name for f in fields(ConsoleConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten a top-level ``console:`` block into the root mapping."""
    if "console" in data and isinstance(data["console"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "console":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> ConsoleConfig:
    """Build :class:`ConsoleConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return ConsoleConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    if isinstance(payload.get("channel_labels"), list):
        payload["channel_labels"] = tuple(payload["channel_labels"])
    return ConsoleConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> ConsoleConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`ConsoleConfig`.
    """
    if path is None:
        return ConsoleConfig()
    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        return ConsoleConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


def default_config_path() -> Optional[Path]:
    """Config file named by ``SCISSORS_CONSOLE_CONFIG``, if set."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return None


__all__ = [
    "CONFIG_ENV_VAR",
    "ConsoleConfig",
    "config_from_mapping",
    "default_config_path",
    "load_config",
]
