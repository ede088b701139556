"""Reading and writing the workspace's JSON and YAML files.

Readers treat a missing or blank file as "no data yet" and return the
caller's default. A file that exists but can't be parsed is an input error,
not an empty store: silently treating it as empty would let the next write
clobber the user's history.

Writers replace the target in one step so a crash mid-write leaves either
the old file or the new one, never a truncated mix.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from habitcore.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""
    except UnicodeDecodeError as e:
        raise InvalidArgumentError(f"{path.name} is not UTF-8 text: {e}") from e


def read_json(path: Path, default: Any = None) -> Any:
    """Parsed JSON document at *path*, or *default* when there is none.

    Completion stores may be a mapping or a list, so the top-level type is
    left to the caller.
    """
    text = read_text(path)
    if not text.strip():
        return default
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidArgumentError(f"{path.name} is not valid JSON: {e}") from e


def read_yaml(path: Path) -> dict[str, Any]:
    """Top-level YAML mapping at *path*; {} when missing or blank.

    Settings and profile files are always mappings, so any other top-level
    value is logged and ignored.
    """
    text = read_text(path)
    if not text.strip():
        return {}
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidArgumentError(f"{path.name} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping, got %s", path.name, type(data).__name__)
        return {}
    return data


def _replace_file(path: Path, content: str) -> None:
    """Write *content* beside *path* under an exclusive lock, then rename over it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".part", delete=False,
    )
    try:
        with tmp:
            fcntl.flock(tmp.fileno(), fcntl.LOCK_EX)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        Path(tmp.name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %s (%d bytes)", path, len(content.encode("utf-8")))


def write_json_atomic(path: Path, data: Any) -> None:
    _replace_file(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    _replace_file(path, yaml.safe_dump(data, allow_unicode=True, sort_keys=False))
