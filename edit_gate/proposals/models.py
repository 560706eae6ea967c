"""
Edit proposal data model.

A mutation request is one of four frozen variants (``FullWrite``,
``SurgicalEdit``, ``CommandExecution``, ``RepositoryOperation``);
``parse_mutation`` validates untyped input into one of them at the
boundary. An ``EditProposal`` wraps a mutation with everything computed
at proposal time (resulting content, diff, backup) and its lifecycle
state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Union

from ..editing.backups import Backup
from ..errors import MalformedMutationError


class ProposalKind(str, Enum):
    FULL_WRITE = "full_write"
    SURGICAL_EDIT = "surgical_edit"
    COMMAND_EXECUTION = "command_execution"
    REPOSITORY_OPERATION = "repository_operation"


class ProposalStatus(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    REJECTED = "rejected"
    REFACTORED = "refactored"
    FAILED = "failed"


class WriteMode(str, Enum):
    OVERWRITE = "overwrite"
    APPEND = "append"


FILE_KINDS = (ProposalKind.FULL_WRITE, ProposalKind.SURGICAL_EDIT)


# ---------------------------------------------------------------------------
# Mutation variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FullWrite:
    kind: ClassVar[ProposalKind] = ProposalKind.FULL_WRITE
    path: str
    content: str
    mode: WriteMode = WriteMode.OVERWRITE


@dataclass(frozen=True)
class SurgicalEdit:
    kind: ClassVar[ProposalKind] = ProposalKind.SURGICAL_EDIT
    path: str
    old_string: str
    new_string: str
    replace_all: bool = False


@dataclass(frozen=True)
class CommandExecution:
    kind: ClassVar[ProposalKind] = ProposalKind.COMMAND_EXECUTION
    command: str
    cwd: Optional[str] = None


@dataclass(frozen=True)
class RepositoryOperation:
    kind: ClassVar[ProposalKind] = ProposalKind.REPOSITORY_OPERATION
    operation: str
    args: tuple[str, ...] = ()

    @property
    def command(self) -> str:
        return " ".join(["git", self.operation, *self.args])


EditMutation = Union[FullWrite, SurgicalEdit, CommandExecution, RepositoryOperation]


def _require_str(data: dict, key: str, allow_empty: bool = False) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise MalformedMutationError(
            f"'{key}' must be a string, got {type(value).__name__}"
        )
    if not allow_empty and not value:
        raise MalformedMutationError(f"'{key}' must not be empty")
    return value


def parse_mutation(data: dict) -> EditMutation:
    """Validate a JSON-like mapping into a mutation variant.

    The mapping must carry a ``kind`` naming one of ``ProposalKind``;
    unknown kinds, missing fields and wrongly typed fields are rejected
    with ``MalformedMutationError``.
    """
    if not isinstance(data, dict):
        raise MalformedMutationError("mutation must be a mapping")

    try:
        kind = ProposalKind(data.get("kind"))
    except ValueError:
        raise MalformedMutationError(
            f"unknown mutation kind: {data.get('kind')!r}"
        ) from None

    if kind is ProposalKind.FULL_WRITE:
        try:
            mode = WriteMode(data.get("mode", WriteMode.OVERWRITE.value))
        except ValueError:
            raise MalformedMutationError(
                f"unknown write mode: {data.get('mode')!r}"
            ) from None
        return FullWrite(
            path=_require_str(data, "path"),
            content=_require_str(data, "content", allow_empty=True),
            mode=mode,
        )

    if kind is ProposalKind.SURGICAL_EDIT:
        replace_all = data.get("replace_all", False)
        if not isinstance(replace_all, bool):
            raise MalformedMutationError("'replace_all' must be a boolean")
        return SurgicalEdit(
            path=_require_str(data, "path"),
            old_string=_require_str(data, "old_string"),
            new_string=_require_str(data, "new_string", allow_empty=True),
            replace_all=replace_all,
        )

    if kind is ProposalKind.COMMAND_EXECUTION:
        cwd = data.get("cwd")
        if cwd is not None and not isinstance(cwd, str):
            raise MalformedMutationError("'cwd' must be a string")
        return CommandExecution(command=_require_str(data, "command"), cwd=cwd)

    args = data.get("args", [])
    if not isinstance(args, (list, tuple)) or not all(isinstance(a, str) for a in args):
        raise MalformedMutationError("'args' must be a list of strings")
    return RepositoryOperation(
        operation=_require_str(data, "operation"), args=tuple(args)
    )


def mutation_to_dict(mutation: EditMutation) -> dict:
    data: dict = {"kind": mutation.kind.value}
    if isinstance(mutation, FullWrite):
        data.update(path=mutation.path, content=mutation.content,
                    mode=mutation.mode.value)
    elif isinstance(mutation, SurgicalEdit):
        data.update(path=mutation.path, old_string=mutation.old_string,
                    new_string=mutation.new_string,
                    replace_all=mutation.replace_all)
    elif isinstance(mutation, CommandExecution):
        data.update(command=mutation.command, cwd=mutation.cwd)
    else:
        data.update(operation=mutation.operation, args=list(mutation.args))
    return data


# ---------------------------------------------------------------------------
# Proposal
# ---------------------------------------------------------------------------

@dataclass
class ProposalDiff:
    """Diff rendered at proposal time, with statistics."""
    text: str = ""
    additions: int = 0
    deletions: int = 0
    stats: dict = field(default_factory=dict)
    surgical: Optional[dict] = None

    @property
    def total(self) -> int:
        return self.additions + self.deletions

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "additions": self.additions,
            "deletions": self.deletions,
            "total": self.total,
            "stats": self.stats,
            "surgical": self.surgical,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProposalDiff":
        return cls(
            text=data.get("text", ""),
            additions=data.get("additions", 0),
            deletions=data.get("deletions", 0),
            stats=data.get("stats") or {},
            surgical=data.get("surgical"),
        )


@dataclass
class EditProposal:
    id: str
    mutation: EditMutation
    target: str
    created_at: str
    status: ProposalStatus = ProposalStatus.PENDING
    new_content: Optional[str] = None
    backup: Optional[Backup] = None
    backup_path: Optional[str] = None
    diff: Optional[ProposalDiff] = None
    batch_id: Optional[str] = None
    supersedes: Optional[str] = None
    superseded_by: Optional[str] = None
    description: str = ""
    expected_outcome: str = ""
    resolved_at: Optional[str] = None
    rejection_reason: Optional[str] = None
    refactor_reason: Optional[str] = None
    error: Optional[str] = None
    result: Optional[dict] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def kind(self) -> ProposalKind:
        return self.mutation.kind

    @property
    def is_pending(self) -> bool:
        return self.status is ProposalStatus.PENDING

    @property
    def is_file_edit(self) -> bool:
        return self.kind in FILE_KINDS

    def to_dict(self, include_backup_content: bool = False) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "target": self.target,
            "mutation": mutation_to_dict(self.mutation),
            "status": self.status.value,
            "new_content": self.new_content,
            "backup": (
                self.backup.to_dict(include_content=include_backup_content)
                if self.backup else None
            ),
            "backup_path": self.backup_path,
            "diff": self.diff.to_dict() if self.diff else None,
            "batch_id": self.batch_id,
            "supersedes": self.supersedes,
            "superseded_by": self.superseded_by,
            "description": self.description,
            "expected_outcome": self.expected_outcome,
            "created_at": self.created_at,
            "resolved_at": self.resolved_at,
            "rejection_reason": self.rejection_reason,
            "refactor_reason": self.refactor_reason,
            "error": self.error,
            "result": self.result,
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EditProposal":
        backup_data = data.get("backup")
        diff_data = data.get("diff")
        return cls(
            id=data["id"],
            mutation=parse_mutation(data["mutation"]),
            target=data["target"],
            created_at=data["created_at"],
            status=ProposalStatus(data.get("status", ProposalStatus.PENDING.value)),
            new_content=data.get("new_content"),
            backup=Backup.from_dict(backup_data) if backup_data else None,
            backup_path=data.get("backup_path"),
            diff=ProposalDiff.from_dict(diff_data) if diff_data else None,
            batch_id=data.get("batch_id"),
            supersedes=data.get("supersedes"),
            superseded_by=data.get("superseded_by"),
            description=data.get("description", ""),
            expected_outcome=data.get("expected_outcome", ""),
            resolved_at=data.get("resolved_at"),
            rejection_reason=data.get("rejection_reason"),
            refactor_reason=data.get("refactor_reason"),
            error=data.get("error"),
            result=data.get("result"),
            warnings=list(data.get("warnings") or []),
        )


@dataclass
class AcceptResult:
    """Outcome of accepting a proposal."""
    success: bool
    proposal_id: str
    status: ProposalStatus
    metadata: dict = field(default_factory=dict)
    error: str = ""


@dataclass
class RejectResult:
    """Outcome of rejecting a proposal."""
    success: bool
    proposal_id: str
    restored: bool = False
    backup_unavailable: bool = False
    warning: str = ""


@dataclass
class ChunkResult:
    chunk: str
    index: int
    total_chunks: int
    strategy: str = ""
