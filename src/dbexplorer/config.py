from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError

DEFAULT_CONFIG_PATH = "config.yml"
CONFIG_ENV_VAR = "DBEXPLORER_CONFIG"


@dataclass
class DatabaseConfig:
    url: str


@dataclass
class PoolConfig:
    max_open: int = 10
    max_idle: int = 2
    idle_timeout_seconds: int = 2
    checkout_timeout_seconds: int = 30


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8082


@dataclass
class ObservabilityConfig:
    log_level: str = "info"


@dataclass
class ExplorerConfig:
    database: DatabaseConfig
    pool: PoolConfig = field(default_factory=PoolConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)


def config_path(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    return Path(env.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))


def _resolve_env(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1]
            if key not in env:
                raise ConfigError(f"Environment variable {key} is required but not set")
            return env[key]
        return value
    if isinstance(value, list):
        return [_resolve_env(v, env) for v in value]
    if isinstance(value, dict):
        return {k: _resolve_env(v, env) for k, v in value.items()}
    return value


def _positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc
    if number <= 0:
        raise ConfigError(f"{field_name} must be greater than 0")
    return number


def load_config(path: str | Path, env: Mapping[str, str] | None = None) -> ExplorerConfig:
    env = os.environ if env is None else env
    config_file = Path(path)
    if not config_file.exists():
        raise ConfigError(f"Config file not found: {config_file}")
    raw = yaml.safe_load(config_file.read_text()) or {}
    if not isinstance(raw, dict):
        raise ConfigError("Config file must contain a mapping")
    resolved = _resolve_env(raw, env)

    try:
        database_raw = resolved["database"]
    except KeyError as exc:
        raise ConfigError(f"Missing config section: {exc.args[0]}") from exc
    pool_raw = resolved.get("pool") or {}
    server_raw = resolved.get("server") or {}
    observability_raw = resolved.get("observability") or {}

    url = (database_raw or {}).get("url")
    if not url:
        raise ConfigError("database.url is required")

    defaults = PoolConfig()
    pool = PoolConfig(
        max_open=_positive_int(pool_raw.get("max_open", defaults.max_open), "pool.max_open"),
        max_idle=_positive_int(pool_raw.get("max_idle", defaults.max_idle), "pool.max_idle"),
        idle_timeout_seconds=_positive_int(
            pool_raw.get("idle_timeout_seconds", defaults.idle_timeout_seconds), "pool.idle_timeout_seconds"
        ),
        checkout_timeout_seconds=_positive_int(
            pool_raw.get("checkout_timeout_seconds", defaults.checkout_timeout_seconds),
            "pool.checkout_timeout_seconds",
        ),
    )
    if pool.max_idle > pool.max_open:
        raise ConfigError("pool.max_idle cannot exceed pool.max_open")

    server = ServerConfig(
        host=str(server_raw.get("host", ServerConfig.host)),
        port=_positive_int(server_raw.get("port", ServerConfig.port), "server.port"),
    )

    observability = ObservabilityConfig(
        log_level=str(observability_raw.get("log_level", "info")),
    )

    return ExplorerConfig(
        database=DatabaseConfig(url=str(url)),
        pool=pool,
        server=server,
        observability=observability,
    )
