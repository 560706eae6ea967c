"""
Edit lifecycle controller: propose, then accept / reject / refactor.

Every mutation is captured as an ``EditProposal`` before anything
touches the workspace. The proposal's payload (resulting content, diff,
backup) is computed once, at proposal time; accepting applies exactly
that payload. A decision resolves the proposal's future exactly once,
so a caller can block on ``PendingDecision.wait()`` until a human (or
auto-apply) decides.

State machine::

    Pending -> Applied | Rejected | Refactored | Failed
    Applied -> Rejected          (rollback from backup)

One controller owns all state for one workspace; there are no
module-level registries.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from ..chunking import ChunkingMetrics, chunk
from ..config import Config
from ..editing.backups import BackupStore
from ..editing.diff import (
    calculate_differential_stats, diff_contents, split_lines,
)
from ..editing.fileio import read_text, safe_write
from ..editing.path_guard import display_path, resolve
from ..editing.read_tracker import FileReadRecord, FileReadTracker
from ..editing.surgical import apply_surgical_edit
from ..errors import (
    BackupUnavailableError, ChunkIndexError, InvalidTransitionError,
    IoFailureError, ProposalConflictError, StaleOrMissingReadError,
)
from ..executor import Executor
from .history import HISTORY_FILE, HistoryLog
from .models import (
    AcceptResult, ChunkResult, CommandExecution, EditMutation, EditProposal,
    FullWrite, ProposalDiff, ProposalStatus, RejectResult,
    RepositoryOperation, SurgicalEdit, WriteMode, parse_mutation,
)
from .snapshot import SNAPSHOT_FILE
from .store import ProposalStore

logger = logging.getLogger(__name__)

# Produces a replacement mutation for a proposal being refactored, or
# None to decline.
RefactorProducer = Callable[[EditProposal, str], Optional[EditMutation]]


@dataclass
class PendingDecision:
    """Handle returned by ``submit``; the future yields the final status."""
    proposal_id: str
    future: "Future[ProposalStatus]"

    def wait(self, timeout: float | None = None) -> ProposalStatus:
        return self.future.result(timeout=timeout)


@dataclass
class EditBatch:
    id: str
    description: str
    started_at: str
    proposal_ids: list[str] = field(default_factory=list)


class EditLifecycleController:
    """Owns the proposals, read records and backups of one workspace."""

    def __init__(
        self,
        workspace_root: str,
        config: Config | None = None,
        data_dir: str | None = None,
        clock: Callable[[], float] = time.time,
        executor: Executor | None = None,
        refactor_producer: RefactorProducer | None = None,
        restore_pending: bool = True,
    ) -> None:
        self._config = config or Config()
        self.workspace_root = os.path.abspath(workspace_root)
        self.data_dir = data_dir or self._config.data_dir_for(self.workspace_root)
        self._clock = clock

        self.read_ttl = self._config.READ_TTL_SECONDS
        self.auto_apply = self._config.AUTO_APPLY
        self.diff_context = self._config.DIFF_CONTEXT_LINES
        self.diff_algorithm = self._config.DIFF_ALGORITHM
        self.chunk_strategy = self._config.CHUNK_STRATEGY
        self.chunk_size = self._config.CHUNK_SIZE

        self.read_tracker = FileReadTracker(clock)
        self.backups = BackupStore(
            os.path.join(self.data_dir, "backups"),
            retention_days=self._config.BACKUP_RETENTION_DAYS,
            clock=clock,
        )
        self.store = ProposalStore(
            history=HistoryLog(os.path.join(self.data_dir, HISTORY_FILE)),
            snapshot_path=os.path.join(self.data_dir, SNAPSHOT_FILE),
        )
        self.chunking_metrics = ChunkingMetrics()

        self._executor = executor or Executor(timeout=self._config.COMMAND_TIMEOUT)
        self._refactor_producer = refactor_producer
        self._decisions: dict[str, Future] = {}
        self._batch: EditBatch | None = None
        self._counter = 0
        self._lock = threading.RLock()
        self._in_flight: set[str] = set()

        if restore_pending:
            for proposal in self.store.restore_snapshot():
                if proposal.is_pending:
                    self._decisions[proposal.id] = Future()
                self._counter = max(self._counter, _id_sequence(proposal.id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _now_iso(self) -> str:
        return datetime.fromtimestamp(self._clock(), timezone.utc).isoformat()

    def _next_id(self, prefix: str = "edit") -> str:
        self._counter += 1
        return f"{prefix}_{int(self._clock() * 1000)}_{self._counter}"

    def _resolve(self, user_path: str) -> tuple[str, str]:
        """Return (absolute path, workspace-relative display path)."""
        full = resolve(self.workspace_root, user_path)
        return full, display_path(self.workspace_root, full)

    def _settle(self, proposal: EditProposal) -> None:
        future = self._decisions.get(proposal.id)
        if future is not None and not future.done():
            future.set_result(proposal.status)

    def _check_conflict(self, target: str, ignore: str | None) -> None:
        pending = self.store.pending_for_target(target)
        if pending is not None and pending.id != ignore:
            raise ProposalConflictError(target, pending.id)

    def _diff(self, old_content: str, new_content: str, target: str) -> ProposalDiff:
        result = diff_contents(
            old_content, new_content, path=target,
            context=self.diff_context, algorithm=self.diff_algorithm,
        )
        stats = calculate_differential_stats(
            split_lines(old_content), split_lines(new_content)
        )
        return ProposalDiff(
            text=result.text,
            additions=result.additions,
            deletions=result.deletions,
            stats=stats.to_dict(),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def record_read(self, path: str, content: str) -> FileReadRecord:
        """Record that *path* was just read with *content*."""
        full, _ = self._resolve(path)
        return self.read_tracker.record(full, content)

    def read_chunk(
        self,
        path: str,
        strategy: str | None = None,
        target_size: int | None = None,
        index: int = 0,
    ) -> ChunkResult:
        """Return chunk *index* of *path* split with *strategy*.

        Deterministic for identical file content and arguments. The read
        is recorded, which satisfies the pre-read check for surgical edits.
        """
        strategy = strategy or self.chunk_strategy
        target_size = target_size or self.chunk_size
        full, target = self._resolve(path)
        try:
            content = read_text(full)
        except OSError as exc:
            raise IoFailureError(f"Cannot read file {target}: {exc}") from exc
        self.read_tracker.record(full, content)

        started = time.perf_counter()
        chunks = chunk(content, target_size, strategy, path=full)
        elapsed = time.perf_counter() - started
        self.chunking_metrics.record(
            strategy, len(chunks), elapsed, len(content.encode("utf-8"))
        )
        logger.debug("[Chunking] %s: %d chunk(s) via %s in %.4fs",
                     target, len(chunks), strategy, elapsed)

        if not 0 <= index < len(chunks):
            raise ChunkIndexError(
                f"Chunk index {index} out of range for {target} "
                f"({len(chunks)} chunk(s))"
            )
        return ChunkResult(
            chunk=chunks[index], index=index,
            total_chunks=len(chunks), strategy=strategy,
        )

    def chunking_analytics(self) -> dict:
        return self.chunking_metrics.analytics()

    # ------------------------------------------------------------------
    # Batches and modes
    # ------------------------------------------------------------------

    def start_batch(self, description: str) -> str:
        with self._lock:
            batch_id = self._next_id("batch")
            self._batch = EditBatch(
                id=batch_id, description=description, started_at=self._now_iso()
            )
            logger.info("[EditGate] Edit batch started: %s (%s)", batch_id, description)
            return batch_id

    def end_batch(self) -> EditBatch | None:
        with self._lock:
            batch, self._batch = self._batch, None
            return batch

    def set_auto_apply(self, enabled: bool) -> None:
        self.auto_apply = enabled
        logger.info("[EditGate] Auto-apply %s", "enabled" if enabled else "disabled")

    # ------------------------------------------------------------------
    # Proposing
    # ------------------------------------------------------------------

    def propose_full_write(self, path: str, content: str,
                           mode: str | WriteMode = WriteMode.OVERWRITE) -> str:
        return self.propose(FullWrite(path=path, content=content, mode=WriteMode(mode)))

    def propose_surgical_edit(self, path: str, old_string: str, new_string: str,
                              replace_all: bool = False) -> str:
        return self.propose(SurgicalEdit(
            path=path, old_string=old_string,
            new_string=new_string, replace_all=replace_all,
        ))

    def propose_command(self, command: str, cwd: str | None = None) -> str:
        return self.propose(CommandExecution(command=command, cwd=cwd))

    def propose_repository_operation(self, operation: str, args=()) -> str:
        return self.propose(RepositoryOperation(operation=operation, args=tuple(args)))

    def propose(self, mutation: Union[EditMutation, dict]) -> str:
        return self.submit(mutation).proposal_id

    def submit(self, mutation: Union[EditMutation, dict]) -> PendingDecision:
        """Capture *mutation* as a Pending proposal.

        Raises the precondition errors of the mutation kind
        (``PathTraversalError``, ``StaleOrMissingReadError``,
        ``NoMatchError``, ``AmbiguousMatchError``, ``ProposalConflictError``,
        ``MalformedMutationError``) without recording anything.
        """
        if isinstance(mutation, dict):
            mutation = parse_mutation(mutation)

        with self._lock:
            proposal = self._build_proposal(mutation)
            if self._batch is not None:
                proposal.batch_id = self._batch.id
                self._batch.proposal_ids.append(proposal.id)
            future: Future = Future()
            self._decisions[proposal.id] = future
            self.store.add(proposal)
            logger.info("[EditGate] Proposed %s %s: %s",
                        proposal.id, proposal.kind.value, proposal.target)

        if self.auto_apply:
            self.accept(proposal.id)
        return PendingDecision(proposal.id, future)

    def _build_proposal(self, mutation: EditMutation,
                        ignore_conflict: str | None = None) -> EditProposal:
        if isinstance(mutation, FullWrite):
            return self._build_full_write(mutation, ignore_conflict)
        if isinstance(mutation, SurgicalEdit):
            return self._build_surgical_edit(mutation, ignore_conflict)
        if isinstance(mutation, CommandExecution):
            return self._build_command(mutation)
        return self._build_repository_operation(mutation)

    def _build_full_write(self, mutation: FullWrite,
                          ignore_conflict: str | None) -> EditProposal:
        full, target = self._resolve(mutation.path)
        self._check_conflict(target, ignore_conflict)

        exists = os.path.isfile(full)
        old_content = ""
        if exists:
            try:
                old_content = read_text(full)
            except OSError as exc:
                raise IoFailureError(f"Cannot read file {target}: {exc}") from exc

        append = mutation.mode is WriteMode.APPEND
        new_content = old_content + mutation.content if append else mutation.content
        backup = None
        if exists and not append:
            backup = self.backups.snapshot(target, old_content)

        return EditProposal(
            id=self._next_id(),
            mutation=mutation,
            target=target,
            created_at=self._now_iso(),
            new_content=mutation.content,
            backup=backup,
            diff=self._diff(old_content, new_content, target),
            description=f"Create/modify file: {target}",
            expected_outcome=(
                f"File will be {'extended' if append else 'created/replaced'} "
                f"with {len(mutation.content)} characters"
            ),
        )

    def _build_surgical_edit(self, mutation: SurgicalEdit,
                             ignore_conflict: str | None) -> EditProposal:
        full, target = self._resolve(mutation.path)

        record = self.read_tracker.lookup(full)
        if record is None:
            raise StaleOrMissingReadError(target, "file has not been read")
        age = self.read_tracker.age(full)
        if age > self.read_ttl:
            raise StaleOrMissingReadError(
                target,
                f"last read {age:.0f}s ago; reads expire after {self.read_ttl:g}s",
            )

        self._check_conflict(target, ignore_conflict)

        try:
            content = read_text(full)
        except OSError as exc:
            raise IoFailureError(f"Cannot read file {target}: {exc}") from exc
        if content != record.content:
            raise StaleOrMissingReadError(target, "file changed since it was last read")

        result = apply_surgical_edit(
            content, mutation.old_string, mutation.new_string,
            replace_all=mutation.replace_all, path=target,
        )
        diff = self._diff(content, result.new_content, target)
        diff.surgical = result.summary.to_dict()

        return EditProposal(
            id=self._next_id(),
            mutation=mutation,
            target=target,
            created_at=self._now_iso(),
            new_content=result.new_content,
            backup=self.backups.snapshot(target, content),
            diff=diff,
            description=f"Surgical edit: {os.path.basename(target)}",
            expected_outcome=(
                f"Replace all {result.occurrences} occurrences"
                if mutation.replace_all else "Replace 1 specific occurrence"
            ),
        )

    def _build_command(self, mutation: CommandExecution) -> EditProposal:
        if mutation.cwd:
            self._resolve(mutation.cwd)
        return EditProposal(
            id=self._next_id(),
            mutation=mutation,
            target=mutation.command,
            created_at=self._now_iso(),
            description=f"Execute command: {mutation.command}",
            expected_outcome=f"Command will run in {mutation.cwd or 'workspace root'}",
        )

    def _build_repository_operation(self, mutation: RepositoryOperation) -> EditProposal:
        return EditProposal(
            id=self._next_id(),
            mutation=mutation,
            target=mutation.command,
            created_at=self._now_iso(),
            description=f"Git {mutation.operation}: {' '.join(mutation.args)}".rstrip(),
            expected_outcome=(
                f"Git repository will be modified via {mutation.operation}"
            ),
        )

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def accept(self, proposal_id: str) -> AcceptResult:
        """Apply a Pending proposal exactly as previewed.

        I/O failure moves the proposal to Failed and is reported in the
        result, never retried. Commands and repository operations run
        outside the controller lock; the proposal is reserved meanwhile,
        so a second accept, reject or refactor of it is refused.
        """
        with self._lock:
            proposal = self.store.require(proposal_id)
            self._require_decidable(proposal, "accepted")
            if proposal.is_file_edit:
                metadata, error = self._run(proposal)
                return self._finish_accept(proposal, metadata, error)
            self._in_flight.add(proposal_id)

        try:
            metadata, error = self._run(proposal)
        except BaseException:
            with self._lock:
                self._in_flight.discard(proposal_id)
            raise
        with self._lock:
            self._in_flight.discard(proposal_id)
            return self._finish_accept(proposal, metadata, error)

    def _require_decidable(self, proposal: EditProposal, verb: str) -> None:
        if proposal.id in self._in_flight:
            raise InvalidTransitionError(
                f"Edit {proposal.id} is being applied and cannot be {verb}"
            )
        if not proposal.is_pending:
            raise InvalidTransitionError(
                f"Edit {proposal.id} is {proposal.status.value}; "
                f"only pending edits can be {verb}"
            )

    def _run(self, proposal: EditProposal) -> tuple[dict, str]:
        try:
            metadata = self._execute(proposal)
        except (OSError, IoFailureError) as exc:
            return {"success": False}, str(exc)
        error = "" if metadata.get("success", True) else (
            metadata.get("error") or "Operation failed"
        )
        return metadata, error

    def _finish_accept(self, proposal: EditProposal, metadata: dict,
                       error: str) -> AcceptResult:
        proposal.result = metadata
        proposal.resolved_at = self._now_iso()
        if error:
            proposal.status = ProposalStatus.FAILED
            proposal.error = error
            logger.error("[EditGate] Edit %s failed: %s", proposal.id, error)
        else:
            proposal.status = ProposalStatus.APPLIED
            logger.info("[EditGate] Applied %s: %s", proposal.id, proposal.target)

        self.store.record_resolution(proposal)
        self._settle(proposal)
        return AcceptResult(
            success=not error,
            proposal_id=proposal.id,
            status=proposal.status,
            metadata=metadata,
            error=error,
        )

    def _execute(self, proposal: EditProposal) -> dict:
        mutation = proposal.mutation
        if isinstance(mutation, FullWrite):
            return self._execute_write(proposal, mutation)
        if isinstance(mutation, SurgicalEdit):
            return self._execute_surgical(proposal, mutation)
        if isinstance(mutation, CommandExecution):
            cwd = self._resolve(mutation.cwd)[0] if mutation.cwd else self.workspace_root
            return self._executor.run_command(mutation.command, cwd).to_dict()
        return self._executor.run_git(
            mutation.operation, mutation.args, self.workspace_root
        ).to_dict()

    def _refresh_backup(self, proposal: EditProposal, full: str) -> None:
        """Make the backup match the live file immediately before overwrite."""
        if not os.path.isfile(full):
            if proposal.backup is not None:
                proposal.warnings.append(
                    f"{proposal.target} was removed after the proposal; no backup taken"
                )
            proposal.backup = None
            return

        live = read_text(full)
        if proposal.backup is None or proposal.backup.content != live:
            if proposal.backup is not None:
                message = f"{proposal.target} changed after the proposal; backup refreshed"
                proposal.warnings.append(message)
                logger.warning("[EditGate] %s", message)
            proposal.backup = self.backups.snapshot(proposal.target, live)
        proposal.backup_path = self.backups.save(proposal.backup)

    def _execute_write(self, proposal: EditProposal, mutation: FullWrite) -> dict:
        full, _ = self._resolve(mutation.path)
        if mutation.mode is WriteMode.APPEND:
            existing = read_text(full) if os.path.isfile(full) else ""
            written = existing + mutation.content
        else:
            self._refresh_backup(proposal, full)
            written = mutation.content
        safe_write(full, written)
        # Writes by the gate refresh the read record.
        self.read_tracker.record(full, written)
        return {
            "success": True,
            "path": proposal.target,
            "size": len(mutation.content),
            "mode": mutation.mode.value,
            "backup_path": proposal.backup_path,
        }

    def _execute_surgical(self, proposal: EditProposal, mutation: SurgicalEdit) -> dict:
        full, _ = self._resolve(mutation.path)
        self._refresh_backup(proposal, full)
        safe_write(full, proposal.new_content or "")
        self.read_tracker.record(full, proposal.new_content or "")
        surgical = (proposal.diff.surgical if proposal.diff else None) or {}
        return {
            "success": True,
            "path": proposal.target,
            "size": len(proposal.new_content or ""),
            "mode": "surgical",
            "lines_changed": surgical.get("lines_changed", 0),
            "characters_changed": surgical.get("characters_changed", 0),
            "backup_path": proposal.backup_path,
        }

    def reject(self, proposal_id: str, reason: str = "User rejected") -> RejectResult:
        """Discard a Pending proposal, or roll back an Applied one.

        Rolling back restores the backup before the proposal is marked
        Rejected. With no backup (new file, append, command) the applied
        change stays in place and the result reports ``backup_unavailable``.
        """
        with self._lock:
            proposal = self.store.require(proposal_id)
            if proposal_id in self._in_flight:
                raise InvalidTransitionError(
                    f"Edit {proposal_id} is being applied and cannot be rejected"
                )
            result = RejectResult(success=True, proposal_id=proposal_id)

            if proposal.status is ProposalStatus.APPLIED:
                if proposal.backup is not None and proposal.is_file_edit:
                    self._restore_backup(proposal)
                    result.restored = True
                else:
                    result.backup_unavailable = True
                    result.warning = str(BackupUnavailableError(
                        f"No backup exists for {proposal_id} ({proposal.target}); "
                        "the applied change was left in place"
                    ))
                    proposal.warnings.append(result.warning)
                    logger.warning("[EditGate] %s", result.warning)
            elif not proposal.is_pending:
                raise InvalidTransitionError(
                    f"Edit {proposal_id} is {proposal.status.value}; "
                    "only pending or applied edits can be rejected"
                )

            proposal.status = ProposalStatus.REJECTED
            proposal.rejection_reason = reason
            proposal.resolved_at = self._now_iso()
            self.store.record_resolution(proposal)
            self._settle(proposal)
            logger.info("[EditGate] Rejected %s: %s", proposal_id, reason)
            return result

    def _restore_backup(self, proposal: EditProposal) -> None:
        content = proposal.backup.content
        if proposal.backup_path and os.path.isfile(proposal.backup_path):
            try:
                content = self.backups.load(proposal.backup_path)
            except OSError as exc:
                logger.warning("[Backup] Could not read %s, using in-memory copy: %s",
                               proposal.backup_path, exc)

        full, _ = self._resolve(proposal.mutation.path)
        try:
            safe_write(full, content)
        except OSError as exc:
            raise IoFailureError(
                f"Failed to restore backup for {proposal.target}: {exc}"
            ) from exc
        self.read_tracker.record(full, content)
        logger.info("[Backup] Restored %s", proposal.target)

    def refactor(self, proposal_id: str, instructions: str) -> str | None:
        """Supersede a Pending proposal with a new one.

        The configured producer builds the replacement mutation from the
        original proposal and *instructions*; without a producer the same
        mutation is proposed again, recomputed against the current file.
        Returns the new proposal id, or None when the producer declines
        (the original then stays Pending).
        """
        with self._lock:
            original = self.store.require(proposal_id)
            self._require_decidable(original, "refactored")

            mutation = original.mutation
            if self._refactor_producer is not None:
                mutation = self._refactor_producer(original, instructions)
                if mutation is None:
                    logger.info("[EditGate] Refactor of %s declined by producer", proposal_id)
                    return None
                if isinstance(mutation, dict):
                    mutation = parse_mutation(mutation)

            replacement = self._build_proposal(mutation, ignore_conflict=original.id)
            replacement.supersedes = original.id
            replacement.refactor_reason = instructions
            replacement.batch_id = original.batch_id
            replacement.description += f" (refactored: {instructions})"

            original.status = ProposalStatus.REFACTORED
            original.superseded_by = replacement.id
            original.refactor_reason = instructions
            original.resolved_at = self._now_iso()

            self._decisions[replacement.id] = Future()
            self.store.add(replacement)
            self.store.record_resolution(original)
            self._settle(original)
            logger.info("[EditGate] Refactored %s -> %s", proposal_id, replacement.id)

        if self.auto_apply:
            self.accept(replacement.id)
        return replacement.id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_proposal(self, proposal_id: str) -> EditProposal | None:
        return self.store.get(proposal_id)

    def list_pending(self) -> list[EditProposal]:
        return self.store.list_pending()

    def decision(self, proposal_id: str) -> "Future[ProposalStatus]":
        proposal = self.store.require(proposal_id)
        with self._lock:
            future = self._decisions.get(proposal_id)
            if future is None:
                # Restored after its decision was made in another process.
                future = self._decisions[proposal_id] = Future()
                if not proposal.is_pending:
                    future.set_result(proposal.status)
            return future

    def wait_for_decision(self, proposal_id: str,
                          timeout: float | None = None) -> ProposalStatus:
        """Block until *proposal_id* leaves Pending; no timeout by default."""
        return self.decision(proposal_id).result(timeout=timeout)

    def get_edit_stats(self) -> dict:
        return self.store.counts()


def _id_sequence(proposal_id: str) -> int:
    try:
        return int(proposal_id.rsplit("_", 1)[1])
    except (IndexError, ValueError):
        return 0
