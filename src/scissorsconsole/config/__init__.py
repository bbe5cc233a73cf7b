"""Configuration objects and helpers for the console.

``ConsoleConfig`` captures the deployment variant (channel count, labels) and
live-window size. It is loaded from an optional YAML file, by default the one
named in ``SCISSORS_CONSOLE_CONFIG``.
"""

from .runtime import ConsoleConfig, config_from_mapping, default_config_path, load_config

__all__ = ["ConsoleConfig", "config_from_mapping", "default_config_path", "load_config"]
