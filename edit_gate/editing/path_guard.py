"""
Path guard: confines user-supplied paths to the workspace root.
"""

from __future__ import annotations

import os

from ..errors import PathTraversalError


def resolve(workspace_root: str, user_path: str) -> str:
    """Resolve *user_path* against *workspace_root* and return an absolute path.

    Raises ``PathTraversalError`` if the normalized path relative to the
    root climbs out of it or is itself absolute (e.g. a different drive
    on Windows). Performs no filesystem access.
    """
    root = os.path.abspath(workspace_root)
    full_path = os.path.abspath(os.path.join(root, user_path))

    try:
        relative = os.path.relpath(full_path, root)
    except ValueError:
        # Different drive letters on Windows
        raise PathTraversalError(user_path, root) from None

    normalized = os.path.normpath(relative)
    if (
        normalized == os.pardir
        or normalized.startswith(os.pardir + os.sep)
        or os.path.isabs(normalized)
    ):
        raise PathTraversalError(user_path, root)

    return full_path


def display_path(workspace_root: str, full_path: str) -> str:
    """Return *full_path* relative to the workspace, using forward slashes."""
    relative = os.path.relpath(full_path, os.path.abspath(workspace_root))
    return relative.replace(os.sep, "/")
