"""
Edit proposal store: every proposal of one controller, in creation
order, plus the durable history log and the snapshot of proposals that
are still pending or can still be rolled back.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from typing import Optional

from ..errors import MalformedMutationError, ProposalNotFoundError
from .history import HistoryLog
from .models import EditProposal, ProposalStatus
from .snapshot import load_pending, save_pending

logger = logging.getLogger(__name__)

# Most recent Applied proposals kept in the snapshot for rollback.
ROLLBACK_KEEP = 50


class ProposalStore:
    def __init__(
        self,
        history: Optional[HistoryLog] = None,
        snapshot_path: Optional[str] = None,
    ) -> None:
        self._proposals: dict[str, EditProposal] = {}
        self._history = history
        self._snapshot_path = snapshot_path
        self._lock = threading.RLock()

    @property
    def history(self) -> Optional[HistoryLog]:
        return self._history

    def add(self, proposal: EditProposal) -> None:
        with self._lock:
            self._proposals[proposal.id] = proposal
            self._save_snapshot()

    def get(self, proposal_id: str) -> Optional[EditProposal]:
        with self._lock:
            return self._proposals.get(proposal_id)

    def require(self, proposal_id: str) -> EditProposal:
        proposal = self.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(proposal_id)
        return proposal

    def all(self) -> list[EditProposal]:
        with self._lock:
            return list(self._proposals.values())

    def list_pending(self) -> list[EditProposal]:
        """Pending proposals in creation order."""
        with self._lock:
            return [p for p in self._proposals.values() if p.is_pending]

    def pending_for_target(self, target: str) -> Optional[EditProposal]:
        with self._lock:
            for proposal in self._proposals.values():
                if proposal.is_pending and proposal.is_file_edit and proposal.target == target:
                    return proposal
        return None

    def record_resolution(self, proposal: EditProposal) -> None:
        """Log a proposal that just left Pending (or was re-resolved)."""
        with self._lock:
            if self._history is not None:
                self._history.append(proposal.to_dict())
            self._save_snapshot()

    def counts(self) -> dict:
        with self._lock:
            statuses = Counter(p.status for p in self._proposals.values())
            return {
                "pending": statuses[ProposalStatus.PENDING],
                "applied": statuses[ProposalStatus.APPLIED],
                "rejected": statuses[ProposalStatus.REJECTED],
                "refactored": statuses[ProposalStatus.REFACTORED],
                "failed": statuses[ProposalStatus.FAILED],
                "total": len(self._proposals),
            }

    def restore_snapshot(self) -> list[EditProposal]:
        """Load the proposals saved by a previous process.

        Returns Pending proposals and Applied ones that can still be
        rolled back.
        """
        if not self._snapshot_path:
            return []
        records = load_pending(self._snapshot_path) or []
        restored: list[EditProposal] = []
        with self._lock:
            for record in records:
                try:
                    proposal = EditProposal.from_dict(record)
                except (KeyError, ValueError, TypeError, MalformedMutationError) as exc:
                    logger.warning("[EditGate] Skipping unreadable saved proposal: %s", exc)
                    continue
                if proposal.id in self._proposals:
                    continue
                if proposal.is_pending or _can_roll_back(proposal):
                    self._proposals[proposal.id] = proposal
                    restored.append(proposal)
        if restored:
            logger.info("[EditGate] Restored %d saved proposal(s)", len(restored))
        return restored

    def _save_snapshot(self) -> None:
        if not self._snapshot_path:
            return
        proposals = list(self._proposals.values())
        rollbackable = [p.id for p in proposals if _can_roll_back(p)]
        keep = set(rollbackable[-ROLLBACK_KEEP:])
        saved = [
            p.to_dict(include_backup_content=True)
            for p in proposals if p.is_pending or p.id in keep
        ]
        try:
            save_pending(self._snapshot_path, saved)
        except OSError as exc:
            logger.warning("[EditGate] Could not save pending snapshot: %s", exc)


def _can_roll_back(proposal: EditProposal) -> bool:
    return (proposal.status is ProposalStatus.APPLIED
            and proposal.is_file_edit and proposal.backup is not None)
