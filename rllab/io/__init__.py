"""Persistence of algorithm state as JSON snapshots."""

from .snapshot import (
    SNAPSHOT_VERSION,
    json_to_snapshot,
    load_snapshot,
    save_snapshot,
    snapshot_path,
    snapshot_to_json,
)

__all__ = [
    "SNAPSHOT_VERSION",
    "snapshot_path",
    "snapshot_to_json",
    "json_to_snapshot",
    "save_snapshot",
    "load_snapshot",
]
