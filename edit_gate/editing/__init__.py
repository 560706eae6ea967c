"""File-level editing primitives: path guard, read tracking, surgical edits,
diffs and backups."""

from .path_guard import resolve, display_path
from .read_tracker import FileReadTracker, FileReadRecord
from .surgical import apply_surgical_edit, SurgicalResult, SurgicalSummary
from .diff import (
    generate_unified_diff, diff_contents, calculate_differential_stats,
    analyze_edit_impact, split_lines, DiffResult, DiffHunk, DiffStats,
    ImpactAnalysis,
)
from .backups import Backup, BackupStore
from .fileio import read_text, safe_write

__all__ = [
    "resolve", "display_path",
    "FileReadTracker", "FileReadRecord",
    "apply_surgical_edit", "SurgicalResult", "SurgicalSummary",
    "generate_unified_diff", "diff_contents", "calculate_differential_stats",
    "analyze_edit_impact", "split_lines", "DiffResult", "DiffHunk",
    "DiffStats", "ImpactAnalysis",
    "Backup", "BackupStore",
    "read_text", "safe_write",
]
