"""Locate and merge the layered TOML configuration.

Configuration lives in a ``config/`` directory: ``default.toml`` is always
read, ``{MONGOSTORE_ENV}.toml`` is laid over it when present.
"""

import os
import tomllib
from functools import reduce
from pathlib import Path
from typing import Any

CONFIG_DIR_VAR = "MONGOSTORE_CONFIG_DIR"
ENVIRONMENT_VAR = "MONGOSTORE_ENV"
DEFAULT_ENVIRONMENT = "development"
BASE_FILE = "default.toml"

# Parent directories searched for config/ when CONFIG_DIR_VAR is unset
_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Directory holding the TOML files.

    ``MONGOSTORE_CONFIG_DIR`` wins; otherwise the nearest ``config/`` found
    walking up from the working directory.

    Raises:
        FileNotFoundError: If MONGOSTORE_CONFIG_DIR names a missing directory
    """
    override = os.environ.get(CONFIG_DIR_VAR)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"{CONFIG_DIR_VAR} does not exist: {override}")
        return path

    cwd = Path.cwd()
    for directory in [cwd, *cwd.parents][:_SEARCH_DEPTH]:
        if (directory / "config").is_dir():
            return directory / "config"
    return Path("config")


def get_environment() -> str:
    return os.environ.get(ENVIRONMENT_VAR) or DEFAULT_ENVIRONMENT


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {file_path}") from None


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Lay ``override`` over ``base``; tables merge, everything else replaces.

    Returns a new dict, neither input is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def config_layers(config_dir: Path, environment: str) -> list[Path]:
    """TOML files making up the configuration, lowest priority first.

    Raises:
        FileNotFoundError: If default.toml is missing
    """
    base = config_dir / BASE_FILE
    if not base.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {base}. "
            f"Create config/{BASE_FILE} or set {CONFIG_DIR_VAR}."
        )

    layers = [base]
    overlay = config_dir / f"{environment}.toml"
    if overlay.is_file():
        layers.append(overlay)
    return layers


def load_config(
    config_dir: Path | None = None,
    environment: str | None = None,
) -> dict[str, Any]:
    """Read every configuration layer and merge them into one dict.

    Args:
        config_dir: Directory to read (default: ``get_config_dir()``)
        environment: Overlay to apply (default: ``get_environment()``)
    """
    layers = config_layers(config_dir or get_config_dir(), environment or get_environment())
    return reduce(deep_merge, (load_toml(path) for path in layers), {})
