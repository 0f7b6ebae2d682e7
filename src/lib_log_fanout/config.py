"""Configuration surface: logger/sink settings, environment overrides, dotenv.

Purpose
-------
Describe a logger as plain immutable data, read it from dictionaries or
TOML/JSON files, and let deployment environments override selected values
through ``LOG_*`` variables (optionally sourced from a ``.env`` file).

Contents
--------
* :class:`SinkConfig` / :class:`LoggerConfig` - frozen configuration values.
* :func:`load_config` - file loader (``.toml`` or ``.json``).
* :func:`apply_env_overrides` - ``LOG_*`` precedence rules.
* :func:`enable_dotenv` / :func:`should_use_dotenv` - ``.env`` support.

System Role
-----------
Feeds :func:`lib_log_fanout.registry.create_logger` and the CLI. Nothing here
instantiates sinks; validation of sink-specific options happens in the
adapters.
"""

from __future__ import annotations

import json
import os
import tomllib
from contextlib import chdir
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any

from dotenv import find_dotenv, load_dotenv

from lib_log_fanout.domain.errors import ConfigurationError

DOTENV_ENV_VAR = "LOG_USE_DOTENV"
_TRUTHY = {"1", "true", "yes", "on"}

_SYSLOG_ENV_OVERRIDES = {
    "LOG_SYSLOG_HOST": "host",
    "LOG_SYSLOG_PORT": "port",
    "LOG_SYSLOG_FACILITY": "facility",
    "LOG_SYSLOG_HOSTNAME": "hostname",
}


@dataclass(frozen=True, slots=True)
class SinkConfig:
    """One entry of the ``loggers`` list.

    Attributes
    ----------
    type:
        Registry key (``"console"``, ``"syslog"``).
    options:
        Remaining type-specific fields, read-only.
    """

    type: str
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SinkConfig":
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"logger entries must be tables/objects, got {type(data).__name__}")
        sink_type = data.get("type")
        if not isinstance(sink_type, str) or not sink_type:
            raise ConfigurationError("every logger entry must specify a type")
        options = {key: value for key, value in data.items() if key != "type"}
        return cls(type=sink_type, options=options)


@dataclass(frozen=True, slots=True)
class LoggerConfig:
    """Construction-time description of a :class:`~lib_log_fanout.logger.Logger`."""

    name: str
    props: Mapping[str, Any] = field(default_factory=dict)
    sinks: tuple[SinkConfig, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "props", MappingProxyType(dict(self.props)))
        object.__setattr__(self, "sinks", tuple(self.sinks))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LoggerConfig":
        """Parse ``{"name": ..., "props": {...}, "loggers": [...]}``.

        ``sinks`` is accepted as an alias of ``loggers``.

        Examples
        --------
        >>> cfg = LoggerConfig.from_mapping({"name": "svc", "loggers": [{"type": "syslog", "port": 5514}]})
        >>> cfg.sinks[0].type, dict(cfg.sinks[0].options)
        ('syslog', {'port': 5514})
        """
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError("must specify a name for the logger")
        props = data.get("props") or {}
        if not isinstance(props, Mapping):
            raise ConfigurationError("props must be a mapping")
        entries = data.get("loggers", data.get("sinks")) or []
        if isinstance(entries, (str, bytes)) or not isinstance(entries, (list, tuple)):
            raise ConfigurationError("loggers must be a list of logger entries")
        return cls(name=name, props=props, sinks=tuple(SinkConfig.from_mapping(entry) for entry in entries))


def apply_env_overrides(data: Mapping[str, Any], environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Return a copy of raw configuration ``data`` with ``LOG_*`` overrides.

    ``LOG_NAME`` replaces the logger name; ``LOG_SYSLOG_*`` variables replace
    the matching field of every syslog entry. Environment values win over file
    values.

    Examples
    --------
    >>> raw = {"name": "cfg", "loggers": [{"type": "syslog", "port": 514}, {"type": "console"}]}
    >>> merged = apply_env_overrides(raw, {"LOG_NAME": "env", "LOG_SYSLOG_PORT": "5514"})
    >>> merged["name"], merged["loggers"][0]["port"], merged["loggers"][1]
    ('env', '5514', {'type': 'console'})
    """
    env = os.environ if environ is None else environ
    merged = dict(data)
    name = env.get("LOG_NAME")
    if name:
        merged["name"] = name

    overrides = {option: env[variable] for variable, option in _SYSLOG_ENV_OVERRIDES.items() if env.get(variable)}
    key = "loggers" if "loggers" in merged or "sinks" not in merged else "sinks"
    entries = merged.get(key)
    if overrides and isinstance(entries, (list, tuple)):
        merged[key] = [
            {**entry, **overrides} if isinstance(entry, Mapping) and entry.get("type") == "syslog" else entry
            for entry in entries
        ]
    return merged


def load_config(path: str | Path, *, environ: Mapping[str, str] | None = None) -> LoggerConfig:
    """Read a TOML or JSON configuration file and apply environment overrides.

    Raises
    ------
    ConfigurationError
        When the file cannot be read or parsed, or its content is invalid.
    """
    target = Path(path)
    try:
        raw_text = target.read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"cannot read configuration file {target}: {exc}") from exc

    try:
        if target.suffix.lower() == ".json":
            data = json.loads(raw_text.decode("utf-8"))
        else:
            data = tomllib.loads(raw_text.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"cannot parse configuration file {target}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"configuration file {target} must contain a table/object")
    return LoggerConfig.from_mapping(apply_env_overrides(data, environ))


def with_name(config: LoggerConfig, name: str) -> LoggerConfig:
    """Return ``config`` with its name replaced."""

    return replace(config, name=name)


def enable_dotenv(search_from: str | Path | None = None) -> Path | None:
    """Load the nearest ``.env`` file without overriding existing variables.

    The search walks upward from ``search_from`` (default: the current working
    directory). Returns the resolved path of the loaded file, or ``None`` when
    no file was found.
    """
    if search_from is None:
        found = find_dotenv(usecwd=True)
    else:
        with chdir(Path(search_from)):
            found = find_dotenv(usecwd=True)
    if not found:
        return None
    path = Path(found).resolve()
    load_dotenv(path, override=False)
    return path


def should_use_dotenv(*, explicit: bool | None, env_value: str | None) -> bool:
    """Decide whether ``.env`` loading is enabled; an explicit flag wins.

    Examples
    --------
    >>> should_use_dotenv(explicit=None, env_value="yes")
    True
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    """
    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    return env_value.strip().lower() in _TRUTHY


__all__ = [
    "DOTENV_ENV_VAR",
    "LoggerConfig",
    "SinkConfig",
    "apply_env_overrides",
    "enable_dotenv",
    "load_config",
    "should_use_dotenv",
    "with_name",
]
