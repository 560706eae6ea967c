"""
Structural chunker: splits source code at top-level boundaries so a
chunk rarely cuts through a function or class body.

A line is *top level* when it is unindented and the brace depth before
it is zero, which covers both brace languages and indentation languages.
Chunks are packed up to ``chunk_size`` characters and only broken at
top-level lines; the end of an import block always ends a chunk. A body
longer than twice the budget is split at the budget-overflowing line.
Comments and decorators directly above a definition move with it.
"""

from __future__ import annotations

import re

_IMPORT_PATTERNS = [
    re.compile(r"^(import\s|from\s\S+\s+import\b)"),
    re.compile(r"^(const|let|var)\s+.*=\s*require\("),
    re.compile(r"^import\s+['\"]"),
    re.compile(r"^using\s+[\w.]+\s*;"),
    re.compile(r"^#include\s+"),
    re.compile(r"^use\s+[\w:{}, ]+;"),
    re.compile(r"^require(_relative)?\s"),
    re.compile(r"^package\s+\w+"),
]

_DEFINITION = re.compile(
    r"^(export\s+)?(default\s+)?(pub(\(\w+\))?\s+)?(async\s+)?"
    r"(function|def|class|fn|func|struct|impl|interface|trait|enum|type)\b"
)

_LEADER_PREFIXES = ("#", "//", "/*", "*", "@")

HARD_LIMIT_FACTOR = 2


def is_import_line(stripped: str) -> bool:
    return any(p.match(stripped) for p in _IMPORT_PATTERNS)


def is_definition_line(stripped: str) -> bool:
    return bool(_DEFINITION.match(stripped))


def _is_leader(stripped: str) -> bool:
    """Comment or decorator line that belongs to the next definition."""
    return stripped.startswith(_LEADER_PREFIXES) and not stripped.startswith("#include")


def structural_chunker(content: str, chunk_size: int) -> list[str]:
    limit = max(1, int(chunk_size))
    hard_limit = limit * HARD_LIMIT_FACTOR
    lines = content.splitlines(keepends=True)

    chunks: list[str] = []
    current: list[str] = []
    current_size = 0
    depth = 0
    in_imports = False

    for line in lines:
        stripped = line.strip()
        top_level = depth == 0 and bool(stripped) and not line[0].isspace()
        is_import = top_level and is_import_line(stripped)
        is_definition = top_level and is_definition_line(stripped)

        split = False
        if current:
            if (
                in_imports and top_level and not is_import
                and not _is_leader(stripped)
            ):
                split = True
            elif top_level and current_size + len(line) > limit:
                split = not _ends_with_decorator(current)
            elif current_size + len(line) > hard_limit:
                split = True

        if split:
            carried = _carry_leaders(current) if is_definition else []
            if carried:
                current = current[:len(current) - len(carried)]
            chunks.append("".join(current))
            current = carried
            current_size = sum(len(c) for c in carried)

        current.append(line)
        current_size += len(line)

        depth = max(0, depth + line.count("{") - line.count("}"))
        if is_import:
            in_imports = True
        elif top_level and not _is_leader(stripped):
            in_imports = False

    if current:
        chunks.append("".join(current))
    return chunks


def _ends_with_decorator(current: list[str]) -> bool:
    for line in reversed(current):
        stripped = line.strip()
        if not stripped:
            continue
        return stripped.startswith("@") and not line[0].isspace()
    return False


def _carry_leaders(current: list[str]) -> list[str]:
    """Trailing top-level comment/decorator lines of *current*.

    Never returns the whole of *current*, so the chunk being closed keeps
    at least one line.
    """
    count = 0
    for line in reversed(current[1:]):
        stripped = line.strip()
        if stripped and not line[0].isspace() and _is_leader(stripped):
            count += 1
            continue
        break
    return current[len(current) - count:] if count else []
