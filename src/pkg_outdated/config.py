"""Where pkg-outdated finds its package index, compiler and platform.

Purpose
-------
Reads the ``[outdated]`` section from the bundled defaults layered with app,
host and user files, a ``.env`` file and environment variables, then turns it
into typed settings for the ``outdated`` command.

Contents
--------
* :func:`get_config` – layered configuration, cached per process
* :func:`get_default_config_path` – bundled ``defaultconfig.toml``
* :func:`get_outdated_settings` – index path, compiler and platform
* :func:`host_platform` – platform of the running interpreter

Vendor, app and slug come from :mod:`pkg_outdated.__init__conf__`.

System Role
-----------
Only the CLI reads configuration; the analyzer and ``outdated`` receive
plain values.
"""

from __future__ import annotations

import os
import platform as _platform
import sys
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from lib_layered_config import Config, read_config

from . import __init__conf__
from .models import CompilerId, Platform

# Environment variable prefix for native (short) env vars
_ENV_PREFIX = "PKG_OUTDATED_"

_OS_NAMES = {"darwin": "osx", "win32": "windows", "cygwin": "windows"}


def get_default_config_path() -> Path:
    """Return the path to the bundled default configuration file.

    Example:
        >>> get_default_config_path().name
        'defaultconfig.toml'
    """
    return Path(__file__).parent / "defaultconfig.toml"


@lru_cache(maxsize=1)
def get_config(*, start_dir: str | None = None) -> Config:
    """Load layered configuration with application defaults.

    Loads configuration from multiple sources in precedence order:
    defaults → app → host → user → dotenv → env

    Args:
        start_dir: Optional directory that seeds .env discovery. Defaults to
            current working directory when None.

    Returns:
        Immutable configuration object with provenance tracking.
    """
    return read_config(
        vendor=__init__conf__.LAYEREDCONF_VENDOR,
        app=__init__conf__.LAYEREDCONF_APP,
        slug=__init__conf__.LAYEREDCONF_SLUG,
        default_file=get_default_config_path(),
        start_dir=start_dir,
    )


def host_platform() -> Platform:
    """Return the platform this interpreter runs on, e.g. ``x86_64-linux``."""
    os_name = next(
        (name for prefix, name in _OS_NAMES.items() if sys.platform.startswith(prefix)),
        sys.platform.rstrip("0123456789"),
    )
    return Platform(_platform.machine().lower() or "unknown", os_name)


@dataclass(frozen=True, slots=True)
class OutdatedSettings:
    """Resolved settings of the outdated command.

    Attributes:
        index_path: Package index snapshot to load; None when not configured.
        compiler: Compiler identity for finalizing the package description.
        platform: Platform for finalizing the package description.
    """

    index_path: Path | None
    compiler: CompilerId
    platform: Platform


def get_outdated_settings() -> OutdatedSettings:
    """Get outdated settings from configuration with environment variable overrides.

    Settings are resolved in the following precedence order (highest wins):
    1. Native environment variables (PKG_OUTDATED_INDEX, PKG_OUTDATED_COMPILER,
       PKG_OUTDATED_PLATFORM)
    2. lib_layered_config environment variables (PKG_OUTDATED___OUTDATED__*)
    3. User, host and application config files
    4. Default config (bundled defaultconfig.toml)

    An empty ``platform`` means the host platform.

    Raises:
        VersionParseError: If the configured compiler or platform is malformed.
    """
    config = get_config()
    section = config.get("outdated", default={})

    index_path = os.environ.get(f"{_ENV_PREFIX}INDEX") or section.get("index_path", "")
    compiler = os.environ.get(f"{_ENV_PREFIX}COMPILER") or section.get("compiler", "ghc-9.4.8")
    platform_text = os.environ.get(f"{_ENV_PREFIX}PLATFORM") or section.get("platform", "")

    return OutdatedSettings(
        index_path=Path(index_path).expanduser() if index_path else None,
        compiler=CompilerId.from_string(compiler),
        platform=Platform.from_string(platform_text) if platform_text else host_platform(),
    )


__all__ = [
    "OutdatedSettings",
    "get_config",
    "get_default_config_path",
    "get_outdated_settings",
    "host_platform",
]
