from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigError
from .paths import DEFAULT_ASSET_FILE, DEFAULT_ASSETS_DIR

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")

ENV_PREFIX = "ADMINKIT_"


def parse_bool(value: str, name: str = "value") -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise ConfigError(f"Invalid boolean for {name}: {value!r}")


def parse_log_level(value: str | int) -> int:
    if isinstance(value, int):
        return value
    text = value.strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level: {value!r}")
    return level


@dataclass(frozen=True)
class BootstrapConfig:
    assets_dir: Path = DEFAULT_ASSETS_DIR
    asset_file: str = DEFAULT_ASSET_FILE
    require_admin: bool = True
    install_missing: bool = True
    check_updates: bool = False
    interactive: bool = True
    log_file: Optional[Path] = None
    log_level: int = logging.INFO

    @property
    def asset_path(self) -> Path:
        return Path(self.assets_dir) / self.asset_file

    def with_overrides(self, **overrides) -> "BootstrapConfig":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "BootstrapConfig":
        """Build a config from ``ADMINKIT_*`` environment variables.

        Keyword overrides win over the environment; None values are ignored.
        """
        env = os.environ if environ is None else environ
        values: dict = {}

        if env.get("ADMINKIT_ASSETS_DIR"):
            values["assets_dir"] = Path(env["ADMINKIT_ASSETS_DIR"])
        if env.get("ADMINKIT_ASSET_FILE"):
            values["asset_file"] = env["ADMINKIT_ASSET_FILE"]
        for key, attr in (
            ("ADMINKIT_REQUIRE_ADMIN", "require_admin"),
            ("ADMINKIT_INSTALL_MISSING", "install_missing"),
            ("ADMINKIT_CHECK_UPDATES", "check_updates"),
        ):
            if env.get(key):
                values[attr] = parse_bool(env[key], key)
        if env.get("ADMINKIT_NONINTERACTIVE"):
            values["interactive"] = not parse_bool(env["ADMINKIT_NONINTERACTIVE"], "ADMINKIT_NONINTERACTIVE")
        if env.get("ADMINKIT_LOG_FILE"):
            values["log_file"] = Path(env["ADMINKIT_LOG_FILE"])
        if env.get("ADMINKIT_LOG_LEVEL"):
            values["log_level"] = parse_log_level(env["ADMINKIT_LOG_LEVEL"])

        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown config option(s): {', '.join(sorted(unknown))}")
        values.update({k: v for k, v in overrides.items() if v is not None})
        if "assets_dir" in values:
            values["assets_dir"] = Path(values["assets_dir"])
        if values.get("log_file") is not None:
            values["log_file"] = Path(values["log_file"])
        return cls(**values)
