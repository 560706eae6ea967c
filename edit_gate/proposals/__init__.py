"""Edit proposals: the propose / accept / reject / refactor lifecycle."""

from .controller import (
    EditBatch, EditLifecycleController, PendingDecision, RefactorProducer,
)
from .history import HistoryLog
from .models import (
    AcceptResult, ChunkResult, CommandExecution, EditMutation, EditProposal,
    FullWrite, ProposalDiff, ProposalKind, ProposalStatus, RejectResult,
    RepositoryOperation, SurgicalEdit, WriteMode, mutation_to_dict,
    parse_mutation,
)
from .store import ProposalStore

__all__ = [
    "EditLifecycleController", "PendingDecision", "EditBatch", "RefactorProducer",
    "EditProposal", "EditMutation", "FullWrite", "SurgicalEdit",
    "CommandExecution", "RepositoryOperation", "ProposalKind",
    "ProposalStatus", "WriteMode", "ProposalDiff", "AcceptResult",
    "RejectResult", "ChunkResult", "parse_mutation", "mutation_to_dict",
    "ProposalStore", "HistoryLog",
]
