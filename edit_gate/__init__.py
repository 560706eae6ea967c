"""
edit_gate, gated file edits: propose, preview, accept or roll back.

Public API for library usage::

    from edit_gate import EditLifecycleController

    gate = EditLifecycleController("/path/to/workspace")
    edit_id = gate.propose_full_write("notes.txt", "hello\n")
    gate.accept(edit_id)
"""

from .config import Config
from .errors import EditGateError
from .proposals import (
    AcceptResult, ChunkResult, EditLifecycleController, EditProposal,
    PendingDecision, ProposalKind, ProposalStatus, RejectResult,
)

__all__ = [
    "EditLifecycleController", "Config", "EditGateError", "EditProposal",
    "PendingDecision", "ProposalKind", "ProposalStatus", "AcceptResult",
    "RejectResult", "ChunkResult",
]
