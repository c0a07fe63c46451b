"""Config file discovery and loading.

Walk-up finder locates typegraph.toml, the way git finds .git/.
The TYPEGRAPH_CONFIG env var and the --config CLI flag override it.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from typegraph.config.models import GraphConfig

CONFIG_FILENAME = "typegraph.toml"
CONFIG_ENV_VAR = "TYPEGRAPH_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for typegraph.toml.

    TYPEGRAPH_CONFIG wins when set; if it points nowhere, no config is
    used rather than falling back to discovery.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config(path: Path | None = None, cwd: Path | None = None) -> GraphConfig:
    """Load and validate config from a TOML file, or defaults if none."""
    if path is None:
        path = find_config(cwd)
    if path is None:
        return GraphConfig()

    data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    return GraphConfig.model_validate(data)
