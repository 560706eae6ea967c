"""
Error taxonomy for edit proposals, surgical edits and chunked reads.
"""

from __future__ import annotations


class EditGateError(Exception):
    """Base class for every error raised by edit_gate."""


class PathTraversalError(EditGateError):
    """Raised when a path resolves outside the workspace root."""

    def __init__(self, user_path: str, workspace_root: str) -> None:
        self.user_path = user_path
        self.workspace_root = workspace_root
        super().__init__(
            f"Path traversal detected: '{user_path}' resolves outside "
            f"workspace {workspace_root}"
        )


class NoMatchError(EditGateError):
    """Raised when old_string does not occur in the target file."""

    def __init__(self, path: str, search_text: str) -> None:
        self.path = path
        self.search_text = search_text
        super().__init__(
            f"old_string not found in {path}.\n\n"
            f"Searched for:\n{search_text}\n\n"
            "Make sure the old_string matches exactly "
            "(including whitespace and line breaks)."
        )


class AmbiguousMatchError(EditGateError):
    """Raised when old_string occurs more than once without replace_all."""

    def __init__(self, path: str, occurrences: int) -> None:
        self.path = path
        self.occurrences = occurrences
        super().__init__(
            f"old_string appears {occurrences} times in {path}. Add more "
            "surrounding context to make it unique, or set replace_all "
            "to change every occurrence."
        )


class StaleOrMissingReadError(EditGateError):
    """Raised when a surgical edit targets a file not read recently."""

    required_action = "read the file first"

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(
            f"Edit blocked for {path}: {detail}. "
            f"Required action: {self.required_action}."
        )


class IoFailureError(EditGateError):
    """Raised when filesystem or command I/O fails."""


class BackupUnavailableError(EditGateError):
    """A restore was requested but no backup exists for the proposal."""


class ProposalNotFoundError(EditGateError):
    """Raised when a proposal id is unknown."""

    def __init__(self, proposal_id: str) -> None:
        self.proposal_id = proposal_id
        super().__init__(f"Edit {proposal_id} not found")


class InvalidTransitionError(EditGateError):
    """Raised when a decision does not apply to the proposal's status."""


class ProposalConflictError(EditGateError):
    """Raised when a path already has a pending proposal."""

    def __init__(self, path: str, pending_id: str) -> None:
        self.path = path
        self.pending_id = pending_id
        super().__init__(
            f"{path} already has a pending edit ({pending_id}); "
            "accept, reject or refactor it first"
        )


class MalformedMutationError(EditGateError):
    """Raised when a mutation request does not match any known shape."""


class UnknownStrategyError(EditGateError):
    """Raised for an unrecognised chunking strategy name."""


class ChunkIndexError(EditGateError, IndexError):
    """Raised when a requested chunk index is out of range."""
