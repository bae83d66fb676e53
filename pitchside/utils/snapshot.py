# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Save and resume an in-memory store as a JSON document."""

from __future__ import annotations

import json
from pathlib import Path

from pitchside.engine.store import InMemoryEventStore
from pitchside.errors import StoreError

SNAPSHOT_VERSION = 1


def save_snapshot(store: InMemoryEventStore, path: str) -> Path:
    """Write every record of ``store`` to ``path``.

    The document is written to a temporary sibling first and then moved into
    place, so an interrupted save never truncates the previous snapshot.

    Parameters
    ----------
    store : InMemoryEventStore
        Store to export.
    path : str
        Destination file.

    Returns
    -------
    Path
        The written file.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = {"version": SNAPSHOT_VERSION, "store": store.to_dict()}
    tmp = target.with_suffix(target.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)
    tmp.replace(target)
    return target


def load_snapshot(path: str) -> InMemoryEventStore:
    """Rebuild a store from a snapshot written by :func:`save_snapshot`.

    Parameters
    ----------
    path : str
        Snapshot file.

    Returns
    -------
    InMemoryEventStore
        A populated store.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    StoreError
        Raised when the document is not a supported snapshot.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Snapshot not found: {path}")
    with p.open("r", encoding="utf-8") as fh:
        try:
            payload = json.load(fh)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Snapshot {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict) or payload.get("version") != SNAPSHOT_VERSION or "store" not in payload:
        raise StoreError(f"Unsupported snapshot format in {path}")
    return InMemoryEventStore.from_dict(payload["store"])
