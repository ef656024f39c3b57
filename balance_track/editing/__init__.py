"""Snapshot editing package."""

from balance_track.editing.editor import SnapshotEditor, parse_amount

__all__ = ["SnapshotEditor", "parse_amount"]
