"""
Semantic chunker: splits prose and documentation at paragraph, heading
and code-fence boundaries.

The text is first cut into atomic blocks: paragraphs (with the blank
lines that follow them), headings, and fenced code blocks. Blocks are
then packed greedily into chunks of at most ``chunk_size`` characters.
A heading always starts a new chunk. A fenced block is never split, even
when it alone exceeds the budget; an oversized paragraph is split by
lines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_HEADING = re.compile(r"^#{1,6}\s")
_FENCE = re.compile(r"^\s*(`{3,}|~{3,})")


@dataclass
class _Block:
    text: str
    strong: bool = False   # starts a new chunk
    fence: bool = False    # atomic regardless of size


def semantic_chunker(content: str, chunk_size: int) -> list[str]:
    limit = max(1, int(chunk_size))
    chunks: list[str] = []
    current: list[str] = []
    current_size = 0

    def flush() -> None:
        nonlocal current, current_size
        if current:
            chunks.append("".join(current))
        current = []
        current_size = 0

    for block in _split_blocks(content):
        size = len(block.text)
        if current and (block.strong or current_size + size > limit):
            flush()

        if size > limit and not block.fence:
            for piece in _split_oversized(block.text, limit):
                if current and current_size + len(piece) > limit:
                    flush()
                current.append(piece)
                current_size += len(piece)
            continue

        current.append(block.text)
        current_size += size

    flush()
    return chunks


def find_fences(lines: list[str]) -> dict[int, int]:
    """Map the index of each opening fence line to its closing line.

    An opening fence with no matching close is not treated as a fence.
    """
    pairs: dict[int, int] = {}
    open_idx: int | None = None
    open_marker = ""
    for idx, line in enumerate(lines):
        m = _FENCE.match(line)
        if not m:
            continue
        marker = m.group(1)
        if open_idx is None:
            open_idx, open_marker = idx, marker
        elif (
            marker[0] == open_marker[0]
            and len(marker) >= len(open_marker)
            and not line.strip()[len(marker):].strip()
        ):
            pairs[open_idx] = idx
            open_idx = None
    return pairs


def _split_blocks(content: str) -> list[_Block]:
    lines = content.splitlines(keepends=True)
    fences = find_fences(lines)
    blocks: list[_Block] = []
    i = 0

    while i < len(lines):
        line = lines[i]

        if not line.strip():
            # Blank lines belong to the preceding block
            if blocks:
                blocks[-1].text += line
            else:
                blocks.append(_Block(text=line))
            i += 1
            continue

        if i in fences:
            end = fences[i]
            blocks.append(_Block(text="".join(lines[i:end + 1]), fence=True))
            i = end + 1
            continue

        if _HEADING.match(line):
            blocks.append(_Block(text=line, strong=True))
            i += 1
            continue

        start = i
        i += 1
        while (
            i < len(lines)
            and lines[i].strip()
            and i not in fences
            and not _HEADING.match(lines[i])
        ):
            i += 1
        blocks.append(_Block(text="".join(lines[start:i])))

    return blocks


def _split_oversized(text: str, limit: int) -> list[str]:
    """Break an oversized block into line pieces, hard-cutting long lines."""
    pieces: list[str] = []
    for line in text.splitlines(keepends=True):
        if len(line) <= limit:
            pieces.append(line)
            continue
        pieces.extend(line[i:i + limit] for i in range(0, len(line), limit))
    return pieces
