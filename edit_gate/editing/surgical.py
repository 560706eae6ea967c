"""
Surgical edit: exact, literal substring replacement with uniqueness
enforcement. Never fuzzy-matches.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import AmbiguousMatchError, NoMatchError


@dataclass(frozen=True)
class SurgicalSummary:
    """Lightweight size summary of one replacement."""
    old_lines: int
    new_lines: int
    lines_changed: int
    characters_changed: int

    def to_dict(self) -> dict:
        return {
            "old_lines": self.old_lines,
            "new_lines": self.new_lines,
            "lines_changed": self.lines_changed,
            "characters_changed": self.characters_changed,
        }


@dataclass(frozen=True)
class SurgicalResult:
    """Outcome of applying a surgical edit in memory."""
    new_content: str
    occurrences: int
    summary: SurgicalSummary


def count_occurrences(content: str, old_string: str) -> int:
    """Count non-overlapping literal occurrences of *old_string*."""
    if not old_string:
        return 0
    return content.count(old_string)


def summarize(old_string: str, new_string: str) -> SurgicalSummary:
    old_lines = len(old_string.split("\n"))
    new_lines = len(new_string.split("\n"))
    return SurgicalSummary(
        old_lines=old_lines,
        new_lines=new_lines,
        lines_changed=abs(new_lines - old_lines),
        characters_changed=abs(len(new_string) - len(old_string)),
    )


def apply_surgical_edit(
    content: str,
    old_string: str,
    new_string: str,
    replace_all: bool = False,
    path: str = "<content>",
) -> SurgicalResult:
    """Replace *old_string* with *new_string* in *content*.

    Parameters
    ----------
    content:
        Full current file content.
    old_string:
        Literal text to find. An empty string never matches.
    new_string:
        Replacement text.
    replace_all:
        Replace every occurrence instead of requiring exactly one.
    path:
        Used only in error messages.

    Raises
    ------
    NoMatchError
        *old_string* does not occur.
    AmbiguousMatchError
        *old_string* occurs more than once and *replace_all* is false.
    """
    occurrences = count_occurrences(content, old_string)
    if occurrences == 0:
        raise NoMatchError(path, old_string)
    if occurrences > 1 and not replace_all:
        raise AmbiguousMatchError(path, occurrences)

    if replace_all:
        new_content = content.replace(old_string, new_string)
    else:
        new_content = content.replace(old_string, new_string, 1)

    return SurgicalResult(
        new_content=new_content,
        occurrences=occurrences,
        summary=summarize(old_string, new_string),
    )
