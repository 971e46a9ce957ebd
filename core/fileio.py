"""File helpers for the data root: tolerant reads and crash-safe writes.

Writes go to a locked temp file in the target directory and are swapped in
with os.replace, so readers see either the old file or the new one.
"""

from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml


def read_text(path: Path) -> str:
    """File contents, or "" when the file does not exist."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def read_yaml(path: Path) -> dict[str, Any]:
    """A YAML mapping; missing, empty or non-mapping documents give {}.

    Malformed YAML raises yaml.YAMLError for the caller to report.
    """
    data = yaml.safe_load(read_text(path) or "{}")
    return data if isinstance(data, dict) else {}


def write_text_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_EX)
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    write_text_atomic(path, yaml.safe_dump(data, allow_unicode=True, sort_keys=False))
