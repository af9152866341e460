"""
Module: store.file_locking

Purpose:
    Cross-platform file locking for the local JSON store, so that two
    CLI processes (or the batch-save threads) never interleave writes.
    Uses portalocker for Mac, Windows, and Linux compatibility.

Key Functions:
    - locked_read_json: Read JSON under a shared lock
    - locked_read_modify_write_json: Read-modify-write JSON with lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - store.json_store: Local record store
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict

import portalocker

logger = logging.getLogger(__name__)

# portalocker locks are per process; threads also serialize on this
_THREAD_LOCK = threading.RLock()


def locked_read_json(
    path: Path,
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Read a JSON document with a shared lock.

    Args:
        path: Path to JSON file.
        default: Factory used when the file is missing or empty.

    Returns:
        Parsed document.
    """
    if not path.exists():
        return default()

    with _THREAD_LOCK, open(path, "r", encoding="utf-8") as f:
        portalocker.lock(f, portalocker.LOCK_SH)
        try:
            content = f.read()
        finally:
            portalocker.unlock(f)

    return json.loads(content) if content.strip() else default()


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[Dict[str, Any]], Dict[str, Any]],
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Read JSON, apply modifier, write back - all with exclusive lock.

    Args:
        path: Path to JSON file.
        modifier: Function that takes existing data, returns modified data.
        default: Factory for default data if file doesn't exist.

    Returns:
        The modified data that was written.

    Example:
        >>> def add_exam(doc):
        ...     doc.setdefault("Exams", {})["ssc"] = {"id": "ssc", ...}
        ...     return doc
        >>> locked_read_modify_write_json(store_path, add_exam)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with _THREAD_LOCK:
        # Use r+ mode for read-modify-write, create if needed
        if not path.exists():
            path.write_text(json.dumps(default(), indent=2), encoding="utf-8")

        with open(path, "r+", encoding="utf-8") as f:
            portalocker.lock(f, portalocker.LOCK_EX)
            try:
                f.seek(0)
                content = f.read()
                existing = json.loads(content) if content.strip() else default()

                modified = modifier(existing)

                f.seek(0)
                f.truncate()
                json.dump(modified, f, indent=2, ensure_ascii=False)
                return modified
            finally:
                portalocker.unlock(f)
