"""
Diff generator: unified-style diffs and change statistics for edit
proposals.

The default ``greedy`` algorithm walks both line sequences once: it emits
matching lines as context, and at each divergence searches forward for
the nearest point where the sequences agree again, emitting the skipped
span as removals followed by additions. Inputs are usually near-identical
(incremental edits), where this reads as well as a minimal diff at a
fraction of the cost. ``difflib`` swaps in ``difflib.SequenceMatcher``
behind the same output format when a minimal diff is wanted.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field

EQUAL = " "
DELETE = "-"
INSERT = "+"

ALGORITHMS = ("greedy", "difflib")

# Upper bound on (removed + added) lines considered when searching for a
# re-synchronization point. Beyond it the remainder is treated as replaced.
DEFAULT_MAX_LOOKAHEAD = 400


def split_lines(content: str) -> list[str]:
    """Split file content into lines the way proposals count them."""
    return content.split("\n")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class DiffHunk:
    """One ``@@`` section of a unified diff (starts are 0-indexed)."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[str] = field(default_factory=list)

    @property
    def header(self) -> str:
        return (
            f"@@ -{_format_range(self.old_start, self.old_count)} "
            f"+{_format_range(self.new_start, self.new_count)} @@"
        )


@dataclass
class DiffResult:
    """Rendered diff text plus addition/deletion counts."""
    text: str
    additions: int
    deletions: int
    hunks: list[DiffHunk] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.additions + self.deletions

    @property
    def is_empty(self) -> bool:
        return not self.hunks

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "additions": self.additions,
            "deletions": self.deletions,
            "total": self.total,
        }


@dataclass
class ImpactAnalysis:
    level: str
    description: str

    def to_dict(self) -> dict:
        return {"level": self.level, "description": self.description}


@dataclass
class DiffStats:
    """Positional per-line classification of a change."""
    lines_added: int = 0
    lines_removed: int = 0
    lines_modified: int = 0
    lines_unchanged: int = 0
    total_changes: int = 0
    similarity: int = 0
    size_change: int = 0
    characters_old: int = 0
    characters_new: int = 0
    impact: ImpactAnalysis | None = None

    @property
    def characters_delta(self) -> int:
        return self.characters_new - self.characters_old

    def to_dict(self) -> dict:
        return {
            "lines_added": self.lines_added,
            "lines_removed": self.lines_removed,
            "lines_modified": self.lines_modified,
            "lines_unchanged": self.lines_unchanged,
            "total_changes": self.total_changes,
            "similarity": self.similarity,
            "size_change": self.size_change,
            "character_changes": {
                "old": self.characters_old,
                "new": self.characters_new,
                "delta": self.characters_delta,
            },
            "impact": self.impact.to_dict() if self.impact else None,
        }


# ---------------------------------------------------------------------------
# Unified diff
# ---------------------------------------------------------------------------

def generate_unified_diff(
    old_lines: list[str],
    new_lines: list[str],
    context: int = 3,
    from_file: str = "a",
    to_file: str = "b",
    algorithm: str = "greedy",
    max_lookahead: int = DEFAULT_MAX_LOOKAHEAD,
) -> DiffResult:
    """Diff two line sequences into hunk-structured text.

    Returns a ``DiffResult`` whose ``text`` is empty when the sequences
    are identical.
    """
    if algorithm == "greedy":
        ops = _greedy_ops(old_lines, new_lines, max_lookahead)
    elif algorithm == "difflib":
        ops = _difflib_ops(old_lines, new_lines)
    else:
        raise ValueError(f"Unknown diff algorithm: {algorithm!r}")

    hunks = _build_hunks(ops, max(context, 0))
    additions = sum(1 for tag, _ in ops if tag == INSERT)
    deletions = sum(1 for tag, _ in ops if tag == DELETE)

    if not hunks:
        return DiffResult(text="", additions=0, deletions=0, hunks=[])

    out = [f"--- {from_file}", f"+++ {to_file}"]
    for hunk in hunks:
        out.append(hunk.header)
        out.extend(hunk.lines)
    return DiffResult(
        text="\n".join(out),
        additions=additions,
        deletions=deletions,
        hunks=hunks,
    )


def diff_contents(
    old_content: str,
    new_content: str,
    path: str = "file",
    context: int = 3,
    algorithm: str = "greedy",
) -> DiffResult:
    """Convenience wrapper diffing two whole file contents."""
    return generate_unified_diff(
        split_lines(old_content),
        split_lines(new_content),
        context=context,
        from_file=f"a/{path}",
        to_file=f"b/{path}",
        algorithm=algorithm,
    )


def _greedy_ops(
    old: list[str],
    new: list[str],
    max_lookahead: int,
) -> list[tuple[str, str]]:
    ops: list[tuple[str, str]] = []
    i = j = 0
    while i < len(old) and j < len(new):
        if old[i] == new[j]:
            ops.append((EQUAL, old[i]))
            i += 1
            j += 1
            continue

        di, dj = _find_resync(old, new, i, j, max_lookahead)
        ops.extend((DELETE, line) for line in old[i:i + di])
        ops.extend((INSERT, line) for line in new[j:j + dj])
        i += di
        j += dj

    ops.extend((DELETE, line) for line in old[i:])
    ops.extend((INSERT, line) for line in new[j:])
    return ops


def _find_resync(
    old: list[str],
    new: list[str],
    i: int,
    j: int,
    max_lookahead: int,
) -> tuple[int, int]:
    """Return the nearest offsets (di, dj) where old and new agree again.

    Candidates are tried in order of total skipped lines, pure insertions
    before pure deletions at equal distance.
    """
    rem_old = len(old) - i
    rem_new = len(new) - j
    limit = min(max_lookahead, rem_old + rem_new)

    for distance in range(1, limit + 1):
        for di in range(0, distance + 1):
            dj = distance - di
            if di < rem_old and dj < rem_new and old[i + di] == new[j + dj]:
                return di, dj

    return rem_old, rem_new


def _difflib_ops(old: list[str], new: list[str]) -> list[tuple[str, str]]:
    ops: list[tuple[str, str]] = []
    matcher = difflib.SequenceMatcher(a=old, b=new, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            ops.extend((EQUAL, line) for line in old[i1:i2])
            continue
        if tag in ("replace", "delete"):
            ops.extend((DELETE, line) for line in old[i1:i2])
        if tag in ("replace", "insert"):
            ops.extend((INSERT, line) for line in new[j1:j2])
    return ops


def _build_hunks(ops: list[tuple[str, str]], context: int) -> list[DiffHunk]:
    changed = [k for k, (tag, _) in enumerate(ops) if tag != EQUAL]
    if not changed:
        return []

    # Group changes whose separating run of context lines is short enough
    # to be shown in full.
    groups: list[tuple[int, int]] = []
    first = prev = changed[0]
    for k in changed[1:]:
        if k - prev - 1 > 2 * context:
            groups.append((first, prev))
            first = k
        prev = k
    groups.append((first, prev))

    old_pos: list[int] = []
    new_pos: list[int] = []
    o = n = 0
    for tag, _ in ops:
        old_pos.append(o)
        new_pos.append(n)
        if tag != INSERT:
            o += 1
        if tag != DELETE:
            n += 1

    hunks: list[DiffHunk] = []
    for first, last in groups:
        lo = max(0, first - context)
        hi = min(len(ops), last + context + 1)
        segment = ops[lo:hi]
        hunks.append(DiffHunk(
            old_start=old_pos[lo],
            old_count=sum(1 for tag, _ in segment if tag != INSERT),
            new_start=new_pos[lo],
            new_count=sum(1 for tag, _ in segment if tag != DELETE),
            lines=[tag + line for tag, line in segment],
        ))
    return hunks


def _format_range(start: int, count: int) -> str:
    """Format a ``start,count`` range the way ``diff -u`` does."""
    beginning = start + 1
    if count == 1:
        return f"{beginning}"
    if not count:
        beginning -= 1
    return f"{beginning},{count}"


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

_IMPACT_TIERS = [
    (0.8, "major", "Substantial rewrite - review carefully"),
    (0.5, "significant", "Major modifications - thorough review needed"),
    (0.2, "moderate", "Notable changes - standard review"),
    (0.05, "minor", "Small adjustments - quick review"),
]


def calculate_differential_stats(
    old_lines: list[str],
    new_lines: list[str],
) -> DiffStats:
    """Classify each line position as added, removed, modified or unchanged.

    Comparison is positional (line *i* against line *i*), which is what
    the similarity percentage and impact tier are defined over.
    """
    stats = DiffStats(
        size_change=len(new_lines) - len(old_lines),
        characters_old=len("\n".join(old_lines)),
        characters_new=len("\n".join(new_lines)),
    )

    max_lines = max(len(old_lines), len(new_lines))
    for i in range(max_lines):
        if i >= len(old_lines):
            stats.lines_added += 1
        elif i >= len(new_lines):
            stats.lines_removed += 1
        elif old_lines[i] != new_lines[i]:
            stats.lines_modified += 1
        else:
            stats.lines_unchanged += 1

    stats.total_changes = (
        stats.lines_added + stats.lines_removed + stats.lines_modified
    )
    stats.similarity = (
        round(stats.lines_unchanged / max_lines * 100) if max_lines else 100
    )
    stats.impact = analyze_edit_impact(stats, len(old_lines), len(new_lines))
    return stats


def analyze_edit_impact(
    stats: DiffStats,
    old_count: int,
    new_count: int,
) -> ImpactAnalysis:
    """Map the ratio of changed lines to a qualitative review tier."""
    change_ratio = stats.total_changes / max(old_count, new_count, 1)

    level, description = "minimal", "Tiny changes - safe to apply"
    for threshold, tier, text in _IMPACT_TIERS:
        if change_ratio >= threshold:
            level, description = tier, text
            break

    if stats.lines_added > stats.lines_removed * 2:
        description += " (mostly additions)"
    elif stats.lines_removed > stats.lines_added * 2:
        description += " (mostly deletions)"
    elif stats.lines_modified > stats.lines_added + stats.lines_removed:
        description += " (mostly modifications)"

    return ImpactAnalysis(level=level, description=description)
