#!/usr/bin/env python3
"""
TERRAFORMAT CONFIG
------------------
Which formatting rules are applied. Every setting is on by default and
can be switched off individually from a YAML file:

    enforce_block_order: true
    enforce_attribute_order: false
    enforce_top_level_spacing: true
    ensure_eof_newline: true
    validate_syntax: true

validate_syntax gates input through the python-hcl2 grammar. That grammar
is narrower than HCL in places (non-ASCII identifiers, for one), so files
it rejects can still be formatted with the check turned off.
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from terraformat.core.errors import ConfigError

logger = logging.getLogger("terraformat.config")

CONFIG_FILENAMES = (".terraformat.yaml", ".terraformat.yml")


@dataclass(frozen=True)
class FormatConfig:
    enforce_block_order: bool = True
    enforce_attribute_order: bool = True
    enforce_top_level_spacing: bool = True
    ensure_eof_newline: bool = True
    validate_syntax: bool = True

    @classmethod
    def default(cls) -> "FormatConfig":
        return cls()


def config_from_mapping(data: dict, source: str = "<config>") -> FormatConfig:
    """Builds a config from a mapping, rejecting unknown keys and non-booleans."""
    known = {f.name for f in fields(FormatConfig)}
    overrides = {}
    for key, value in data.items():
        if key not in known:
            raise ConfigError(f"{source}: unknown setting '{key}'")
        if not isinstance(value, bool):
            raise ConfigError(f"{source}: setting '{key}' must be true or false")
        overrides[key] = value
    return replace(FormatConfig.default(), **overrides)


def load_config(path: Path) -> FormatConfig:
    """Reads a YAML config file; an empty file yields the defaults."""
    yaml = YAML(typ="safe")
    try:
        data = yaml.load(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in config {path}: {e}") from e

    if data is None:
        return FormatConfig.default()
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: config must be a mapping of setting names to booleans")

    config = config_from_mapping(data, source=str(path))
    logger.debug("loaded config from %s: %s", path, config)
    return config


def discover_config(start_dir: Path) -> Optional[Path]:
    for name in CONFIG_FILENAMES:
        candidate = Path(start_dir) / name
        if candidate.is_file():
            return candidate
    return None


def resolve_config(explicit: Optional[str], start_dir: Path) -> FormatConfig:
    """An explicit path wins, then a discovered file, then the defaults."""
    if explicit:
        return load_config(Path(explicit))
    found = discover_config(start_dir)
    if found is not None:
        return load_config(found)
    return FormatConfig.default()
