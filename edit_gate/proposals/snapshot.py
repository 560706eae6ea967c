"""
Proposal snapshot: saves and restores proposals still awaiting a
decision, and applied ones that can still be rolled back, so a
restarted process can pick them up.
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

SNAPSHOT_FILE = "pending.json"
_VERSION = 1


def save_pending(filepath: str, proposals: list[dict]) -> None:
    """Persist *proposals* (serialized) to *filepath* atomically."""
    state = {"version": _VERSION, "proposals": proposals}
    os.makedirs(os.path.dirname(os.path.abspath(filepath)), exist_ok=True)
    tmp = filepath + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(state, f, indent=2, ensure_ascii=False)
    os.replace(tmp, filepath)


def load_pending(filepath: str) -> list[dict] | None:
    """Load serialized proposals from *filepath*.

    Returns ``None`` if the file is missing or invalid.
    """
    if not os.path.isfile(filepath):
        return None
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            state = json.load(f)
        if not isinstance(state, dict) or state.get("version") != _VERSION:
            return None
        proposals = state.get("proposals")
        if not isinstance(proposals, list):
            return None
        return proposals
    except (json.JSONDecodeError, OSError, ValueError) as exc:
        logger.warning("[EditGate] Ignoring unreadable snapshot %s: %s", filepath, exc)
        return None
