"""Configuration loading and logging setup."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from citemarks.style.options import StyleOptions, StyleRegistry

logger = logging.getLogger(__name__)

APP_NAME = "citemarks"
DEFAULT_STYLE = "numeric"

TRUE_VALUES = {"1", "true", "yes", "on"}


class Config:
    """Configuration management for the citation engine."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ValueError(f"Error reading config file: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / APP_NAME / "config.yaml")

        # Project config
        paths.append(Path(f".{APP_NAME}.yaml"))
        paths.append(Path(f"{APP_NAME}.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def get_config_paths() -> list[Path]:
    """Get configuration paths in precedence order."""
    return Config.get_config_paths()


def load_config() -> dict[str, Any]:
    """Load configuration from files and environment variables.

    Later files override earlier ones; environment variables override
    all files. Unreadable files are skipped with a warning.
    """
    config: dict[str, Any] = {}

    for path in get_config_paths():
        if path.exists():
            try:
                config = Config.merge_configs(config, Config.from_file(path))
            except ValueError as e:
                logger.warning("Skipping config file %s: %s", path, e)

    env_overrides: dict[str, Any] = {}
    if style := os.environ.get("CITEMARKS_STYLE"):
        env_overrides["style"] = style
    if style_dir := os.environ.get("CITEMARKS_STYLE_DIR"):
        env_overrides["style_dir"] = style_dir
    if (always := os.environ.get("CITEMARKS_ALWAYS_CITED_ON_PAGES")) is not None:
        env_overrides["options"] = {
            "always_add_cited_on_pages": always.strip().lower() in TRUE_VALUES
        }

    return Config.merge_configs(config, env_overrides)


def load_style_options(
    config: dict[str, Any] | None = None,
    registry: StyleRegistry | None = None,
) -> StyleOptions:
    """Resolve the configured style into options.

    Recognized keys: ``style`` (registered style name), ``style_dir``
    (directory of YAML style files to register first) and ``options``
    (mapping of option overrides).
    """
    if config is None:
        config = load_config()
    registry = registry or StyleRegistry()

    if style_dir := config.get("style_dir"):
        registry.load_directory(Path(style_dir).expanduser())

    options = registry.get(config.get("style", DEFAULT_STYLE))
    overrides = config.get("options") or {}
    if overrides:
        options = options.merge(overrides)
    return options


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging for applications embedding the engine."""
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
