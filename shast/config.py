"""
Resolver configuration.

Settings are read from a JSON file: an explicit path, else ./shinline.json,
else ~/.shinline/config.json. Without any file the defaults apply.
"""
import json
import os

from pydantic import BaseModel, ValidationError

from shast.errors import ConfigError

CONFIG_FILE = "shinline.json"
CONFIG_PATHS = [CONFIG_FILE, os.path.join("~", ".shinline", "config.json")]


class ResolverConfig(BaseModel):
    """How import arguments map to files and function names."""
    extension: str = ".sh"  # Appended when the literal path does not exist
    separator: str = "::"  # Between module name and function name


def find_config_file(paths=None):
    """Return the first existing configuration file, or None."""
    for p in paths or CONFIG_PATHS:
        p = os.path.expanduser(p)
        if os.path.exists(p):
            return p
    return None


def load_config(path=None):
    """
    Load the resolver configuration.

    Args:
        path: Explicit configuration file; must exist when given

    Returns:
        ResolverConfig

    Raises:
        ConfigError: If the file cannot be read or holds invalid settings
    """
    if path is None:
        path = find_config_file()
        if path is None:
            return ResolverConfig()

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read configuration: {e}", filename=path)
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"Invalid JSON: {e.msg}",
            line_number=e.lineno,
            column=e.colno,
            filename=path,
        )

    try:
        return ResolverConfig.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        raise ConfigError(
            f"Invalid configuration: {e.error_count()} error(s)",
            context=f"{'.'.join(str(p) for p in first['loc'])}: {first['msg']}",
            suggestion="Known settings are 'extension' and 'separator'",
            filename=path,
        )


def write_default_config(path=CONFIG_FILE):
    """Write the default settings to path and return them."""
    config = ResolverConfig()
    with open(path, "w") as f:
        json.dump(config.model_dump(), f, indent=2)
    return config
