"""Content-aware chunking: split large text into bounded, self-contained
pieces. For every strategy, ``"".join(chunk(...)) == content``."""

from __future__ import annotations

from ..errors import UnknownStrategyError
from .adaptive import adaptive_chunker, hybrid_chunker
from .analyzer import ContentAnalysis, analyze_content, detect_file_type
from .baseline import chunk_by_bytes, chunk_by_lines, chunk_by_tokens
from .metrics import ChunkingMetrics
from .semantic import semantic_chunker
from .structural import structural_chunker

CONTENT_STRATEGIES = ("semantic", "structural", "hybrid", "adaptive")
BASELINE_METHODS = ("line", "byte", "token")
STRATEGIES = CONTENT_STRATEGIES + BASELINE_METHODS


def chunk(
    content: str,
    target_size: int,
    strategy: str = "hybrid",
    path: str | None = None,
) -> list[str]:
    """Split *content* with the named strategy.

    *target_size* is characters for the content-aware strategies, and
    lines, bytes or tokens for ``line``, ``byte`` and ``token``. *path*
    only informs the hybrid classifier. Always returns at least one chunk.
    """
    if strategy == "semantic":
        chunks = semantic_chunker(content, target_size)
    elif strategy == "structural":
        chunks = structural_chunker(content, target_size)
    elif strategy == "hybrid":
        chunks = hybrid_chunker(content, target_size, path)
    elif strategy == "adaptive":
        chunks = adaptive_chunker(content, target_size, path)
    elif strategy == "line":
        chunks = chunk_by_lines(content, target_size)
    elif strategy == "byte":
        chunks = chunk_by_bytes(content, target_size)
    elif strategy == "token":
        chunks = chunk_by_tokens(content, target_size)
    else:
        raise UnknownStrategyError(
            f"Unknown chunking strategy {strategy!r}; "
            f"expected one of {', '.join(STRATEGIES)}"
        )
    return chunks or [content]


__all__ = [
    "chunk", "STRATEGIES", "CONTENT_STRATEGIES", "BASELINE_METHODS",
    "semantic_chunker", "structural_chunker", "hybrid_chunker",
    "adaptive_chunker", "chunk_by_lines", "chunk_by_bytes", "chunk_by_tokens",
    "analyze_content", "detect_file_type", "ContentAnalysis",
    "ChunkingMetrics",
]
