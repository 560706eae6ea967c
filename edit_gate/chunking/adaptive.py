"""
Hybrid and adaptive strategies: pick between structural and semantic
chunking from what the content looks like.
"""

from __future__ import annotations

import logging

from .analyzer import CODE, DOCUMENTATION, analyze_content, detect_file_type
from .semantic import semantic_chunker
from .structural import structural_chunker

logger = logging.getLogger(__name__)

CODE_DOMINANT_RATIO = 0.7
PROSE_DOMINANT_RATIO = 0.6
CODE_BUDGET_FACTOR = 0.8
PROSE_BUDGET_FACTOR = 1.2


def hybrid_chunker(content: str, chunk_size: int, path: str | None = None) -> list[str]:
    """Structural for code, semantic for documentation, adaptive otherwise."""
    file_type = detect_file_type(content, path)
    logger.debug("[Chunking] hybrid: %s classified as %s", path or "<content>", file_type)
    if file_type == CODE:
        return structural_chunker(content, chunk_size)
    if file_type == DOCUMENTATION:
        return semantic_chunker(content, chunk_size)
    return adaptive_chunker(content, chunk_size)


def adaptive_chunker(content: str, chunk_size: int, path: str | None = None) -> list[str]:
    """Choose a strategy and budget from the content analysis.

    Code-dominant text gets structural chunking with a tighter budget,
    prose-dominant text semantic chunking with a looser one. Anything in
    between is chunked both ways and the result with fewer chunks wins;
    structural wins ties.
    """
    analysis = analyze_content(content)

    if analysis.code_ratio > CODE_DOMINANT_RATIO:
        return structural_chunker(content, max(1, int(chunk_size * CODE_BUDGET_FACTOR)))
    if analysis.semantic_ratio > PROSE_DOMINANT_RATIO:
        return semantic_chunker(content, max(1, int(chunk_size * PROSE_BUDGET_FACTOR)))

    structural = structural_chunker(content, chunk_size)
    semantic = semantic_chunker(content, chunk_size)
    return structural if len(structural) <= len(semantic) else semantic
