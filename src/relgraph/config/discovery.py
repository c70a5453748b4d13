"""Locate the relgraph project: its ``relgraph.toml`` and the root directory.

The project root is the directory holding ``relgraph.toml``. Relative storage
paths (the SQLite file) and local plugins under ``.relgraph/plugins`` resolve
against it, so commands behave the same from any subdirectory. Without a
config file the current directory is the root.

``RELGRAPH_CONFIG`` pins one file and disables the walk-up.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from relgraph.config.models import RelGraphConfig

CONFIG_FILENAME = "relgraph.toml"
CONFIG_ENV_VAR = "RELGRAPH_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file in effect for *start* (default: cwd), or None.

    A ``RELGRAPH_CONFIG`` pointing at a missing file yields None rather than
    falling back to the walk-up.
    """
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        path = Path(pinned)
        return path if path.is_file() else None

    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_project_root(config_path: Path | None, start: Path | None = None) -> Path:
    """Directory that relative project paths resolve against."""
    if config_path is not None:
        return config_path.parent
    return start or Path.cwd()


def load_config(path: Path | None = None, cwd: Path | None = None) -> RelGraphConfig:
    """Read the project sections without env or CLI overrides.

    Only the ``[storage]`` and ``[graphql]`` sections are validated; missing
    keys take their defaults, so an absent file yields a default config.

    Raises:
        tomllib.TOMLDecodeError: The file is not valid TOML.
        pydantic.ValidationError: A section holds an unknown backend or a
            value of the wrong type.
    """
    path = path or find_config(cwd)
    if path is None:
        return RelGraphConfig()
    data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    return RelGraphConfig.model_validate(data)
