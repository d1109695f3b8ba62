"""Loading of cluster configuration files."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import IoError
from .types import ClusterConfig


def load_config(path: str | os.PathLike[str]) -> ClusterConfig:
    """Load a cluster configuration from a JSON file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IoError(exc) from exc
    return ClusterConfig.from_json(text)