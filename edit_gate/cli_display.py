import logging
import os
import re
import shutil
from datetime import datetime

from .proposals.models import EditProposal, ProposalStatus

C_ORANGE = "\033[38;5;208m"
C_CYAN   = "\033[38;5;81m"
C_GREEN  = "\033[38;5;114m"
C_RED    = "\033[38;5;203m"
C_YELLOW = "\033[38;5;221m"
C_DIM    = "\033[38;5;243m"
C_BOLD   = "\033[1m"
C_RESET  = "\033[0m"

_ANSI_RE = re.compile(r"\033\[[0-9;]*m")

STATUS_ICONS = {
    ProposalStatus.PENDING:    ("○", C_YELLOW),
    ProposalStatus.APPLIED:    ("✔", C_GREEN),
    ProposalStatus.REJECTED:   ("✘", C_RED),
    ProposalStatus.REFACTORED: ("↻", C_CYAN),
    ProposalStatus.FAILED:     ("!", C_RED),
}


def setup_logger(log_dir: str = ".edits/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"editgate_{timestamp}.log")

    logger = logging.getLogger("edit_gate")
    logger.setLevel(logging.DEBUG)

    # File handler captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


def vis_len(text: str) -> int:
    """Visible length of text after stripping ANSI codes."""
    return len(_ANSI_RE.sub("", text))


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    """
    colored: list[str] = []
    for line in diff_text.splitlines():
        if line.startswith("+++") or line.startswith("---"):
            colored.append(f"{C_BOLD}{line}{C_RESET}")
        elif line.startswith("@@"):
            colored.append(f"{C_CYAN}{line}{C_RESET}")
        elif line.startswith("+"):
            colored.append(f"{C_GREEN}{line}{C_RESET}")
        elif line.startswith("-"):
            colored.append(f"{C_RED}{line}{C_RESET}")
        else:
            colored.append(line)
    return "\n".join(colored)


def format_status(status: ProposalStatus, color: bool = True) -> str:
    icon, code = STATUS_ICONS[status]
    text = f"{icon} {status.value}"
    return f"{code}{text}{C_RESET}" if color else text


def format_proposal_line(proposal: EditProposal, color: bool = True) -> str:
    """One-line summary used by ``pending`` listings."""
    width = shutil.get_terminal_size((80, 24)).columns
    changes = ""
    if proposal.diff is not None:
        changes = f" (+{proposal.diff.additions}/-{proposal.diff.deletions})"
    line = (
        f"{format_status(proposal.status, color)}  {proposal.id}  "
        f"{proposal.kind.value:<20} {proposal.target}{changes}"
    )
    overflow = vis_len(line) - width
    if overflow > 0 and len(proposal.target) > overflow + 3:
        line = line.replace(proposal.target, "..." + proposal.target[overflow + 3:], 1)
    return line


def format_proposal(proposal: EditProposal, color: bool = True) -> str:
    """Full multi-line rendering: header, impact, warnings and diff."""
    bold, dim, reset = (C_BOLD, C_DIM, C_RESET) if color else ("", "", "")
    out = [
        f"{bold}{proposal.id}{reset}  {format_status(proposal.status, color)}",
        f"  {proposal.description}",
    ]
    if proposal.expected_outcome:
        out.append(f"  {dim}{proposal.expected_outcome}{reset}")
    if proposal.supersedes:
        out.append(f"  {dim}supersedes {proposal.supersedes}: "
                   f"{proposal.refactor_reason}{reset}")
    if proposal.batch_id:
        out.append(f"  {dim}batch {proposal.batch_id}{reset}")

    stats = proposal.diff.stats if proposal.diff else {}
    impact = stats.get("impact")
    if impact:
        out.append(
            f"  Impact: {impact['level']} - {impact['description']} "
            f"({stats.get('similarity', 0)}% similar)"
        )
    if proposal.rejection_reason:
        out.append(f"  Rejected: {proposal.rejection_reason}")
    if proposal.error:
        out.append(f"  {C_RED if color else ''}Error: {proposal.error}{reset}")
    for warning in proposal.warnings:
        out.append(f"  {C_YELLOW if color else ''}Warning: {warning}{reset}")

    if proposal.diff is not None and proposal.diff.text:
        out.append("─" * 60)
        out.append(format_colored_diff(proposal.diff.text) if color
                   else proposal.diff.text)
    return "\n".join(out)
