"""Centralized path management for orcamentor.

This module provides a single source of truth for where the JSON store,
exported documents and configuration live.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_home() -> Path:
    """Determine the application home directory."""
    env_home = os.environ.get("ORCAMENTOR_HOME", "").strip()
    if env_home:
        return Path(env_home).expanduser()
    return Path("~/.orcamentor").expanduser()


@dataclass
class ProjectPaths:
    """Container for all application paths.

    All paths are computed relative to the home directory, ensuring the CLI
    and the local server agree on where state lives.
    """

    root: Path = field(default_factory=_get_home)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def settings(self) -> Path:
        """Settings TOML file."""
        return self.config / "settings.toml"

    # --- State paths ---
    @property
    def data(self) -> Path:
        """Key-value store directory, one JSON file per collection."""
        return self.root / "data"

    @property
    def exports(self) -> Path:
        """Generated PDF documents."""
        return self.root / "exports"

    def ensure_directories(self) -> None:
        """Create data and export directories if they don't exist."""
        self.data.mkdir(parents=True, exist_ok=True)
        self.exports.mkdir(parents=True, exist_ok=True)


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def set_home(root: Path) -> ProjectPaths:
    """Point the singleton at another home directory (used by --home and tests)."""
    global _paths
    _paths = ProjectPaths(root=root)
    return _paths
