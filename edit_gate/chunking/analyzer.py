"""
Content analyzer: estimates how code-like and how prose-like a text is,
and classifies it for the hybrid and adaptive strategies.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

_CODE_KEYWORD = re.compile(
    r"^(function|class|def|if|elif|else|for|while|return|try|except|"
    r"var|let|const|import|export|from|async|await|fn|func|pub|package|"
    r"#include|public|private|protected)\b"
)
_ASSIGNMENT = re.compile(r"^[\w.\[\]'\"]+\s*[-+*/%|&]?=\s*\S")
_CODE_PUNCTUATION = ("{", "}", ";")

_HEADING = re.compile(r"^#{1,6}\s")
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+\.)\s")
_SENTENCE = re.compile(r"^[A-Z][^.!?]*[.!?]$")
_LONG_LINE = 100

CODE_EXTENSIONS = frozenset({
    ".py", ".js", ".mjs", ".cjs", ".jsx", ".ts", ".tsx", ".java", ".c",
    ".h", ".cpp", ".hpp", ".cc", ".cs", ".php", ".rb", ".go", ".rs",
    ".kt", ".swift", ".scala", ".sh",
})
DOC_EXTENSIONS = frozenset({
    ".md", ".markdown", ".rst", ".txt", ".adoc", ".org",
})

CODE = "code"
DOCUMENTATION = "documentation"
MIXED = "mixed"


@dataclass(frozen=True)
class ContentAnalysis:
    code_ratio: float
    semantic_ratio: float
    total_lines: int
    avg_line_length: float

    def to_dict(self) -> dict:
        return {
            "code_ratio": self.code_ratio,
            "semantic_ratio": self.semantic_ratio,
            "total_lines": self.total_lines,
            "avg_line_length": self.avg_line_length,
        }


def is_code_line(stripped: str) -> bool:
    if _CODE_KEYWORD.match(stripped) or _ASSIGNMENT.match(stripped):
        return True
    return any(p in stripped for p in _CODE_PUNCTUATION)


def is_prose_line(stripped: str) -> bool:
    return bool(
        _HEADING.match(stripped)
        or _LIST_ITEM.match(stripped)
        or len(stripped) > _LONG_LINE
        or _SENTENCE.match(stripped)
    )


def analyze_content(content: str) -> ContentAnalysis:
    """Compute code and prose ratios of *content*.

    Both ratios are taken over every line, blank ones included, so
    loosely spaced text reads as less dense. A line may count towards
    both ratios.
    """
    lines = content.split("\n")
    stripped = [line.strip() for line in lines]

    code_lines = sum(1 for s in stripped if s and is_code_line(s))
    prose_lines = sum(1 for s in stripped if s and is_prose_line(s))

    return ContentAnalysis(
        code_ratio=code_lines / len(lines),
        semantic_ratio=prose_lines / len(lines),
        total_lines=len(lines),
        avg_line_length=len(content) / len(lines),
    )


def detect_file_type(content: str, path: str | None = None) -> str:
    """Classify content as ``code``, ``documentation`` or ``mixed``.

    A known file extension decides outright; otherwise the dominant of
    the two ratios wins when it covers at least half the lines.
    """
    if path:
        ext = os.path.splitext(path)[1].lower()
        if ext in CODE_EXTENSIONS:
            return CODE
        if ext in DOC_EXTENSIONS:
            return DOCUMENTATION

    analysis = analyze_content(content)
    if analysis.code_ratio >= 0.5 and analysis.code_ratio > analysis.semantic_ratio:
        return CODE
    if analysis.semantic_ratio >= 0.5 and analysis.semantic_ratio > analysis.code_ratio:
        return DOCUMENTATION
    return MIXED
