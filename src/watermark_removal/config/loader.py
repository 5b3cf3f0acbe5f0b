"""
Configuration loader for the watermark removal pipeline.

Reads JSON, YAML or TOML files, substitutes environment variables, maps the
flat switches of the original tool and validates the result.
"""

import json
import os
import re
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Union

import yaml
from pydantic import ValidationError

# Handle tomli import for Python < 3.11
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .models import Config, LogLevel
from ..exceptions import ConfigurationError

PathLike = Union[str, Path]

# Top-level switches of the original flat config format
LEGACY_LOGGING_KEYS = ("debug", "info", "human")

ENV_PREFIX = "WM_"
_ENV_PATTERN = re.compile(r'\$\{([^}:]+)(?::([^}]*))?\}')


def _parse_json(path: Path) -> Any:
    with path.open('r', encoding='utf-8') as f:
        return json.load(f)


def _parse_yaml(path: Path) -> Any:
    with path.open('r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def _parse_toml(path: Path) -> Any:
    with path.open('rb') as f:
        return tomllib.load(f)


_PARSERS: Dict[str, Callable[[Path], Any]] = {
    '.json': _parse_json,
    '.yaml': _parse_yaml,
    '.yml': _parse_yaml,
    '.toml': _parse_toml,
}

_PARSE_ERRORS = (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError)


def load_config(config_path: PathLike) -> Config:
    """
    Load configuration from a JSON, YAML or TOML file.

    Relative template paths are resolved against the directory of the
    configuration file.

    Args:
        config_path: Path to configuration file

    Returns:
        Validated configuration object

    Raises:
        ConfigurationError: If configuration cannot be loaded or is invalid
        InvalidConfigurationError: If a mask names an unknown gravity
    """
    path = Path(config_path)

    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")

    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        supported = ", ".join(sorted(_PARSERS))
        raise ConfigurationError(
            f"Unsupported configuration format '{path.suffix}', expected one of: {supported}"
        )

    try:
        config_data = parser(path)
    except _PARSE_ERRORS as e:
        raise ConfigurationError(f"Invalid configuration syntax in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Error reading configuration {path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {path}")

    config = load_config_from_dict(_substitute_env_vars(config_data))
    config.resolve_mask_paths(path.parent)
    return config


def load_config_from_dict(config_data: Dict[str, Any]) -> Config:
    """
    Load configuration from dictionary.

    Accepts the original flat switches ``debug``, ``info`` and ``human``
    and maps them onto the ``logging`` section.

    Raises:
        ConfigurationError: If configuration is invalid
        InvalidConfigurationError: If a mask names an unknown gravity
    """
    config_data = _apply_legacy_keys(dict(config_data))

    try:
        return Config(**config_data)
    except ValidationError as e:
        problems = [
            f"{' -> '.join(str(x) for x in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise ConfigurationError(
            "Configuration validation failed:\n" + "\n".join(problems)
        ) from e


def save_config(config: Config, output_path: PathLike) -> None:
    """
    Save configuration as JSON or YAML, chosen by the file extension.

    Raises:
        ConfigurationError: If the format is unsupported or the file cannot be written
    """
    path = Path(output_path)
    suffix = path.suffix.lower()
    data = config.model_dump(mode="json")

    if suffix not in ('.json', '.yaml', '.yml'):
        raise ConfigurationError(f"Unsupported format: {suffix or path.name}")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8') as f:
            if suffix == '.json':
                json.dump(data, f, indent=2, ensure_ascii=False)
            else:
                yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True,
                               sort_keys=False)
    except OSError as e:
        raise ConfigurationError(f"Error saving configuration to {path}: {e}") from e


def get_default_config() -> Config:
    """Return the default configuration, which has no masks."""
    return Config()


def validate_config_file(config_path: PathLike) -> bool:
    """
    Validate configuration file.

    Returns:
        True if configuration is valid

    Raises:
        ConfigurationError: If configuration is invalid
    """
    load_config(config_path)
    return True


def _apply_legacy_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Translate the flat debug/info/human switches into a logging section."""
    legacy = {key: data.pop(key) for key in LEGACY_LOGGING_KEYS if key in data}
    if not legacy:
        return data

    logging_section = dict(data.get('logging') or {})

    if 'level' not in logging_section:
        if legacy.get('debug'):
            logging_section['level'] = LogLevel.DEBUG.value
        elif legacy.get('info'):
            logging_section['level'] = LogLevel.INFO.value
        else:
            logging_section['level'] = LogLevel.ERROR.value

    if 'human' in legacy and 'use_rich' not in logging_section:
        logging_section['use_rich'] = bool(legacy['human'])

    data['logging'] = logging_section
    return data


def _substitute_env_vars(data: Any) -> Any:
    """
    Recursively substitute ``${VAR}`` and ``${VAR:default}`` in strings.

    ``WM_VAR`` takes precedence over ``VAR``. Unset variables without a
    default are left as written.
    """
    if isinstance(data, dict):
        return {key: _substitute_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_substitute_env_vars(item) for item in data]
    if isinstance(data, str):
        return _ENV_PATTERN.sub(_env_value, data)
    return data


def _env_value(match: "re.Match[str]") -> str:
    name, default = match.group(1), match.group(2)
    for candidate in (f"{ENV_PREFIX}{name}", name):
        if candidate in os.environ:
            return os.environ[candidate]
    return default if default is not None else match.group(0)
