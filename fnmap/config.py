"""Constants and project configuration for fnmap.

Project config is read from the first usable source, in order::

    .fnmaprc  (JSON)
    .fnmaprc.json
    .fnmaprc.toml
    package.json  ("fnmap" key)
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from .errors import ConfigError, format_error
from .parser import LANGUAGE_MAP

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024
MAX_DIR_DEPTH = 50
SUPPORTED_EXTENSIONS = frozenset(LANGUAGE_MAP)

DEFAULT_EXCLUDES = (
    "node_modules",
    ".git",
    "dist",
    "build",
    ".next",
    "coverage",
    "__pycache__",
    ".cache",
)

DEFAULT_INCLUDE = ["**/*.js", "**/*.ts", "**/*.jsx", "**/*.tsx", "**/*.mjs"]

DEFAULT_CONFIG: Dict[str, Any] = {
    "enable": True,
    "include": DEFAULT_INCLUDE,
    "exclude": [],
}

# Written by ``fnmap --init``
INIT_CONFIG: Dict[str, Any] = {
    "enable": True,
    "include": ["src/**/*.js", "src/**/*.ts", "src/**/*.jsx", "src/**/*.tsx"],
    "exclude": ["node_modules", "dist", "build", ".next", "coverage", "__pycache__", ".cache"],
}

CONFIG_FILES = (".fnmaprc", ".fnmaprc.json", ".fnmaprc.toml")
PACKAGE_JSON = "package.json"


def default_project_dir() -> Path:
    return Path(os.environ.get("FNMAP_PROJECT_DIR", ".")).expanduser()


@dataclass
class FnmapConfig:
    enable: bool = True
    include: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude: List[str] = field(default_factory=list)

    @property
    def excludes(self) -> List[str]:
        """Directory names skipped while scanning: the defaults plus ``exclude``."""
        return list(DEFAULT_EXCLUDES) + [e for e in self.exclude if e not in DEFAULT_EXCLUDES]

    def include_dirs(self) -> List[str]:
        return include_dirs(self.include)


@dataclass
class LoadedConfig:
    config: Optional[Dict[str, Any]] = None
    source: Optional[str] = None


def validate_config(raw: Any) -> Dict[str, Any]:
    """Check the shape of a user config, raising :class:`ConfigError` if wrong."""
    if not isinstance(raw, dict):
        raise ConfigError("Config must be an object")
    if "enable" in raw and not isinstance(raw["enable"], bool):
        raise ConfigError("Config.enable must be a boolean")
    for key in ("include", "exclude"):
        if key in raw and not isinstance(raw[key], list):
            raise ConfigError(f"Config.{key} must be an array")
    return raw


def _read_source(path: Path) -> Optional[Dict[str, Any]]:
    content = path.read_text(encoding="utf-8")
    if not content.strip():
        logger.warning("Config file is empty: %s. Using default config", path.name)
        return None
    if path.suffix == ".toml":
        return toml.loads(content)
    return json.loads(content)


def load_config(project_dir: Path) -> LoadedConfig:
    """Return the first valid config found in *project_dir*."""
    project_dir = Path(project_dir)
    for name in CONFIG_FILES:
        path = project_dir / name
        if not path.is_file():
            continue
        try:
            raw = _read_source(path)
            if raw is None:
                continue
            return LoadedConfig(validate_config(raw), name)
        except (json.JSONDecodeError, toml.TomlDecodeError) as exc:
            logger.warning(
                format_error(
                    f"Failed to parse config file: {name}",
                    file=str(path),
                    suggestion=f"Check the file syntax ({exc})",
                )
            )
        except ConfigError as exc:
            logger.warning("Invalid config in %s: %s", name, exc.message)
        except OSError as exc:
            logger.warning(
                format_error(f"Failed to read config file: {name}", file=str(path), suggestion=str(exc))
            )

    pkg = project_dir / PACKAGE_JSON
    if pkg.is_file():
        try:
            data = json.loads(pkg.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.debug("Ignoring unreadable package.json: %s", exc)
            return LoadedConfig()
        section = data.get("fnmap") if isinstance(data, dict) else None
        if section:
            try:
                return LoadedConfig(validate_config(section), f"{PACKAGE_JSON}#fnmap")
            except ConfigError as exc:
                logger.warning("Invalid fnmap config in package.json: %s", exc.message)
    return LoadedConfig()


def merge_config(user: Optional[Dict[str, Any]]) -> FnmapConfig:
    """Overlay a validated user config on the defaults."""
    if not user:
        return FnmapConfig()
    return FnmapConfig(
        enable=user.get("enable", DEFAULT_CONFIG["enable"]),
        include=list(user.get("include", DEFAULT_INCLUDE)),
        exclude=list(user.get("exclude", [])),
    )


_GLOB_TAILS = (
    re.compile(r"/\*\*/.*$"),
    re.compile(r"\*\*/.*$"),
    re.compile(r"/\*\..*$"),
    re.compile(r"\*\..*$"),
)


def include_dirs(patterns: List[str]) -> List[str]:
    """Reduce include globs to their leading directories (``src/**/*.ts`` -> ``src``).

    Patterns with no leading directory (``**/*.js``) map to the project root.
    """
    dirs: Dict[str, None] = {}
    for pattern in patterns:
        directory = pattern
        for tail in _GLOB_TAILS:
            directory = tail.sub("", directory)
        dirs[directory or "."] = None
    return list(dirs)
