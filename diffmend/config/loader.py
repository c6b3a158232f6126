"""Configuration loading with fail-fast behavior and layered merging.

Layers, later ones overriding earlier ones:
1. Global user config (~/.diffmend/config.json)
2. Ancestor directories (up to `ancestor_depth` levels above cwd)
3. Project local config (cwd/.diffmend/config.json)

With no config files at all, the Pydantic defaults are used. A layer file
that exists but is unreadable, is not valid JSON or is not a JSON object
raises ConfigError; missing layer files are skipped.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from diffmend.config.schema import Config
from diffmend.core.constants import CONFIG_FILE_NAME, DIFFMEND_DIR_NAME, get_diffmend_dir
from diffmend.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_ANCESTOR_DEPTH = 2


def _read_layer(path: Path, required: bool = False) -> dict[str, Any] | None:
    """Read one config file as a JSON object.

    Returns None for a missing optional layer and {} for an empty file.

    Raises:
        ConfigError: If a required file is missing, or the file cannot be
            read or does not hold a JSON object.
    """
    resolved = path.resolve()
    if not resolved.is_file():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        logger.debug("No config layer at %s", resolved)
        return None

    logger.debug("Reading config layer %s", resolved)
    try:
        content = resolved.read_text(encoding="utf-8-sig").strip()
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not content:
        return {}

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file {path} must hold a JSON object, got {type(data).__name__}"
        )
    return data


def _merge_layer(merged: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Overlay one layer: sections merge key by key, everything else is replaced."""
    result = dict(merged)
    for key, value in layer.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _merge_layer(current, value)
        else:
            result[key] = value
    return result


def _ancestor_config_files(cwd: Path, depth: int, skip: Path) -> list[Path]:
    """Config files in the `depth` directories above cwd, furthest first.

    The global config directory (skip) is left out so a project below the
    home directory does not read it twice.
    """
    found: list[Path] = []
    skip_resolved = skip.resolve()
    current = cwd.resolve().parent
    for _ in range(depth):
        if current == current.parent:
            break
        config_dir = current / DIFFMEND_DIR_NAME
        if config_dir.is_dir() and config_dir.resolve() != skip_resolved:
            found.append(config_dir / CONFIG_FILE_NAME)
        current = current.parent
    found.reverse()
    return found


def load_config(path: Path | None = None, cwd: Path | None = None) -> Config:
    """Load configuration from file with layered merging.

    Args:
        path: Explicit config file path. If provided, skips layered loading.
        cwd: Working directory for ancestor/local lookup. Defaults to Path.cwd().

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If any config file contains invalid JSON or merged config
            fails validation.
    """
    if path is not None:
        return _load_from_path(path)

    effective_cwd = cwd or Path.cwd()
    merged: dict[str, Any] = {}
    loaded_from: list[Path] = []

    # Layer 1: Global user config
    global_dir = get_diffmend_dir()
    global_config = global_dir / CONFIG_FILE_NAME
    global_data = _read_layer(global_config)
    if global_data:
        merged = _merge_layer(merged, global_data)
        loaded_from.append(global_config)
        logger.debug("Using global config: %s", global_config)

    # Layer 2: Ancestor directories; the local file may change the depth
    local_config = effective_cwd / DIFFMEND_DIR_NAME / CONFIG_FILE_NAME
    local_data = _read_layer(local_config)
    local_depth = local_data.get("ancestor_depth") if local_data else None
    ancestor_depth = (
        local_depth
        if local_depth is not None
        else merged.get("ancestor_depth", DEFAULT_ANCESTOR_DEPTH)
    )
    if not isinstance(ancestor_depth, int) or ancestor_depth < 0:
        raise ConfigError(f"Invalid ancestor_depth: {ancestor_depth!r}")

    for ancestor_config in _ancestor_config_files(effective_cwd, ancestor_depth, global_dir):
        ancestor_data = _read_layer(ancestor_config)
        if ancestor_data:
            merged = _merge_layer(merged, ancestor_data)
            loaded_from.append(ancestor_config)

    # Layer 3: Project local config
    if local_data and local_config.resolve() != global_config.resolve():
        merged = _merge_layer(merged, local_data)
        loaded_from.append(local_config)

    if loaded_from:
        logger.info("Config loaded from: %s", [str(p) for p in loaded_from])
    else:
        logger.debug("No config files found, using Pydantic defaults")

    if not merged:
        return Config()

    try:
        return Config.model_validate(merged)
    except ValidationError as e:
        sources = ", ".join(str(p) for p in loaded_from)
        raise ConfigError(f"Config validation failed (merged from {sources}): {e}") from e


def _load_from_path(path: Path) -> Config:
    """Load and validate config from a specific path.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON, or fails validation.
    """
    data = _read_layer(path, required=True) or {}
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {path}: {e}") from e
