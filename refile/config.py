"""
Module: config
Purpose: Resolve the bucket configuration from the built-in default, the
config file and command-line overrides.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .exceptions import ConfigError
from .models.buckets import BucketConfig, BucketDef, default_config
from .utils import canonical_path, log_info

CONFIG_ENV = "REFILE_CONFIG"
XDG_CONFIG_ENV = "XDG_CONFIG_HOME"
CATCH_ALL_TOKENS = {"null", "none", "inf", "infinity"}


@dataclass
class RuleConfig:
    """A per-directory override from the ``[[rules]]`` array."""

    path: str
    buckets: Optional[List[BucketDef]] = None
    base_folder: Optional[str] = None


@dataclass
class ConfigFile:
    """Parsed contents of config.toml."""

    path: str
    default_base_folder: Optional[str] = None
    default_buckets: Optional[List[BucketDef]] = None
    rules: List[RuleConfig] = field(default_factory=list)


def config_file_path(explicit: str | None = None) -> str:
    """
    Location of the config file.

    Preference order: explicit path > $REFILE_CONFIG > $XDG_CONFIG_HOME/refile/config.toml
    > ~/.config/refile/config.toml.
    """
    if explicit:
        return os.path.abspath(os.path.expanduser(explicit))
    env_value = os.environ.get(CONFIG_ENV)
    if env_value:
        return os.path.abspath(os.path.expanduser(env_value))
    base = os.environ.get(XDG_CONFIG_ENV) or os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(base, "refile", "config.toml")


def load_config_file(path: str | None = None, *, required: bool = False) -> ConfigFile | None:
    """
    Load and parse the config file.

    Args:
        path: Explicit config path; see config_file_path for the fallbacks.
        required: Raise instead of returning None when the file is missing.

    Returns:
        ConfigFile, or None when no file exists.

    Raises:
        ConfigError: If the file cannot be read or does not match the schema.
    """
    resolved = config_file_path(path)
    if not os.path.exists(resolved):
        if required:
            raise ConfigError(f"Config file not found: {resolved}")
        return None
    try:
        with open(resolved, "rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {resolved}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config file {resolved}: {exc}") from exc
    log_info(f"Loaded config file {resolved}")
    return parse_config_data(data, source=resolved)


def parse_config_data(data: Dict[str, Any], *, source: str = "<config>") -> ConfigFile:
    """Turn a decoded TOML document into a ConfigFile."""
    parsed = ConfigFile(path=source)

    default = data.get("default")
    if default is not None:
        if not isinstance(default, dict):
            raise ConfigError(f"{source}: [default] must be a table")
        parsed.default_base_folder = _optional_str(default, "base_folder", f"{source} [default]")
        if "buckets" in default:
            parsed.default_buckets = parse_buckets_value(default["buckets"], f"{source} [default]")

    rules = data.get("rules", [])
    if not isinstance(rules, list):
        raise ConfigError(f"{source}: rules must be an array of tables ([[rules]])")
    for index, rule in enumerate(rules, start=1):
        where = f"{source} rule #{index}"
        if not isinstance(rule, dict):
            raise ConfigError(f"{where}: must be a table")
        rule_path = rule.get("path")
        if not isinstance(rule_path, str) or not rule_path:
            raise ConfigError(f"{where}: 'path' is required")
        buckets = parse_buckets_value(rule["buckets"], where) if "buckets" in rule else None
        parsed.rules.append(
            RuleConfig(
                path=rule_path,
                buckets=buckets,
                base_folder=_optional_str(rule, "base_folder", where),
            )
        )
    return parsed


def parse_buckets_value(value: Any, where: str) -> List[BucketDef]:
    """
    Accept either an array of ``{name, max_age_days}`` tables or a
    ``name = days`` table; a missing age or "null" marks a catch-all.
    """
    buckets: List[BucketDef] = []
    if isinstance(value, dict):
        for name, age in value.items():
            buckets.append(BucketDef(name=str(name), max_age_days=_parse_age(age, where)))
    elif isinstance(value, list):
        for entry in value:
            if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
                raise ConfigError(f"{where}: each bucket needs a string 'name'")
            buckets.append(
                BucketDef(name=entry["name"], max_age_days=_parse_age(entry.get("max_age_days"), where))
            )
    else:
        raise ConfigError(f"{where}: buckets must be a table or an array of tables")
    if not buckets:
        raise ConfigError(f"{where}: buckets cannot be empty")
    return buckets


def _parse_age(value: Any, where: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, str):
        if value.strip().lower() in CATCH_ALL_TOKENS:
            return None
        raise ConfigError(f"{where}: invalid age value '{value}'")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}: invalid age value {value!r}")
    if value < 0:
        raise ConfigError(f"{where}: age cannot be negative ({value})")
    return value


def _optional_str(table: Dict[str, Any], key: str, where: str) -> str | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{where}: '{key}' must be a string")
    return value


def parse_buckets_spec(spec: str) -> List[BucketDef]:
    """
    Parse a command-line bucket list such as ``today=1,week=7,old=null``.

    Raises:
        ConfigError: On a malformed entry or an empty list.
    """
    buckets: List[BucketDef] = []
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "=" not in part:
            raise ConfigError(f"Invalid bucket spec, missing '=' in: '{part}'")
        name, age_text = (piece.strip() for piece in part.split("=", 1))
        if age_text.lower() in CATCH_ALL_TOKENS:
            age = None
        else:
            try:
                age = int(age_text)
            except ValueError as exc:
                raise ConfigError(f"Invalid age value '{age_text}' in bucket spec") from exc
            if age < 0:
                raise ConfigError(f"Invalid age value '{age_text}' in bucket spec")
        buckets.append(BucketDef(name=name, max_age_days=age))
    if not buckets:
        raise ConfigError("Bucket spec cannot be empty")
    return buckets


def expand_tilde(path: str, home: str | None = None) -> str:
    """Expand a leading ``~/`` using ``home`` (defaults to the user's home)."""
    if path == "~" or path.startswith("~/"):
        base = home or os.path.expanduser("~")
        return os.path.join(base, path[2:]) if path != "~" else base
    return path


def find_matching_rule(source_dir: str, rules: List[RuleConfig]) -> RuleConfig | None:
    """
    First rule whose path resolves to the same directory as ``source_dir``.
    """
    canonical_source = canonical_path(source_dir)
    if canonical_source is None:
        return None
    for rule in rules:
        if canonical_path(expand_tilde(rule.path)) == canonical_source:
            return rule
    return None


def resolve_bucket_config(
    source_dir: str,
    config_file: ConfigFile | None = None,
    base_folder_override: str | None = None,
    buckets_override: str | None = None,
) -> BucketConfig:
    """
    Build the validated configuration for one run.

    Precedence (highest to lowest): CLI overrides, matching directory rule,
    the file's [default] section, the built-in default.

    Raises:
        ConfigError: If any layer is malformed or the result is invalid.
    """
    config = default_config()
    base_folder = config.base_folder
    buckets = list(config.buckets)

    if config_file is not None:
        if config_file.default_base_folder is not None:
            base_folder = config_file.default_base_folder
        if config_file.default_buckets is not None:
            buckets = list(config_file.default_buckets)
        rule = find_matching_rule(source_dir, config_file.rules)
        if rule is not None:
            log_info(f"Using config rule for {rule.path}")
            if rule.base_folder is not None:
                base_folder = rule.base_folder
            if rule.buckets is not None:
                buckets = list(rule.buckets)

    if base_folder_override is not None:
        base_folder = base_folder_override
    if buckets_override is not None:
        buckets = parse_buckets_spec(buckets_override)

    return BucketConfig(base_folder=base_folder, buckets=tuple(buckets)).validate()
