"""JSON snapshots of algorithm state.

A snapshot file is named ``<environment>__<algorithm>.json`` and holds::

    {
        "version": "rllab-snapshot-1.0",
        "environment": "<environment name>",
        "algorithm": "<algorithm name>",
        "state": {... Algorithm.state_dict() ...}
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from ..algorithms.base import Algorithm
from ..errors import SnapshotError
from ..logging import get_logger

logger = get_logger(__name__)

SNAPSHOT_VERSION = "rllab-snapshot-1.0"


def snapshot_path(directory: Union[str, Path], env_name: str, algorithm_name: str) -> Path:
    """Location of the snapshot for an environment/algorithm pair."""
    return Path(directory) / f"{env_name}__{algorithm_name}.json"


def snapshot_to_json(algorithm: Algorithm, env_name: str) -> Dict[str, Any]:
    """
    Build the snapshot document of an algorithm.

    Parameters
    ----------
    algorithm : Algorithm
        Algorithm whose state is captured.
    env_name : str
        Name of the environment the algorithm was trained on.

    Returns
    -------
    dict
        JSON-serializable snapshot document.
    """
    return {
        "version": SNAPSHOT_VERSION,
        "environment": env_name,
        "algorithm": algorithm.name,
        "state": algorithm.state_dict(),
    }


def json_to_snapshot(algorithm: Algorithm, obj: Dict[str, Any]) -> None:
    """
    Restore ``algorithm`` from a snapshot document.

    Raises
    ------
    SnapshotError
        If the document has the wrong version, targets another algorithm
        or is missing keys.
    """
    if not isinstance(obj, dict):
        raise SnapshotError(f"snapshot must be a JSON object, got {type(obj).__name__}")

    missing = [k for k in ("version", "algorithm", "state") if k not in obj]
    if missing:
        raise SnapshotError(f"snapshot is missing keys {missing}")
    if obj["version"] != SNAPSHOT_VERSION:
        raise SnapshotError(
            f"unsupported snapshot version {obj['version']!r}, expected {SNAPSHOT_VERSION!r}"
        )
    if obj["algorithm"] != algorithm.name:
        raise SnapshotError(
            f"snapshot holds algorithm {obj['algorithm']!r}, cannot load into {algorithm.name!r}"
        )

    algorithm.load_state_dict(obj["state"])


def save_snapshot(algorithm: Algorithm, directory: Union[str, Path], env_name: str) -> Path:
    """
    Write the snapshot of ``algorithm`` under ``directory``.

    Parameters
    ----------
    algorithm : Algorithm
        Algorithm to save.
    directory : str or Path
        Output directory, created if needed.
    env_name : str
        Environment name used in the file name.

    Returns
    -------
    Path
        Path of the written file.
    """
    path = snapshot_path(directory, env_name, algorithm.name)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(snapshot_to_json(algorithm, env_name), f, indent=2)
    logger.info("Saved %s snapshot to %s", algorithm.name, path)
    return path


def load_snapshot(algorithm: Algorithm, directory: Union[str, Path], env_name: str) -> bool:
    """
    Restore ``algorithm`` from its snapshot under ``directory`` if one exists.

    Returns
    -------
    bool
        False when there is no snapshot file, True once the state is loaded.

    Raises
    ------
    SnapshotError
        If the file is not UTF-8 JSON or not a valid snapshot.
    """
    path = snapshot_path(directory, env_name, algorithm.name)
    if not path.exists():
        return False

    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Invalid JSON in snapshot {path}: {e}") from e

    json_to_snapshot(algorithm, obj)
    logger.info("Loaded %s snapshot from %s", algorithm.name, path)
    return True


__all__ = [
    "SNAPSHOT_VERSION",
    "snapshot_path",
    "snapshot_to_json",
    "json_to_snapshot",
    "save_snapshot",
    "load_snapshot",
]
