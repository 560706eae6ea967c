"""
Baseline chunkers: fixed-size windows over lines, UTF-8 bytes or
tiktoken tokens. No semantic awareness; used directly or as fallbacks.
"""

from __future__ import annotations

import codecs
import logging
import math

import tiktoken

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cl100k_base"


def chunk_by_lines(content: str, lines_per_chunk: int) -> list[str]:
    """Split into windows of *lines_per_chunk* lines (line endings kept)."""
    size = max(1, int(lines_per_chunk))
    lines = content.splitlines(keepends=True)
    return ["".join(lines[i:i + size]) for i in range(0, len(lines), size)]


def chunk_by_bytes(content: str, bytes_per_chunk: int) -> list[str]:
    """Split into pieces of at most *bytes_per_chunk* UTF-8 bytes.

    Never splits inside a multi-byte character; a single character wider
    than the budget becomes its own chunk.
    """
    limit = max(1, int(bytes_per_chunk))
    if content.isascii():
        return [content[i:i + limit] for i in range(0, len(content), limit)]

    chunks: list[str] = []
    start = 0
    size = 0
    for idx, ch in enumerate(content):
        width = len(ch.encode("utf-8"))
        if size and size + width > limit:
            chunks.append(content[start:idx])
            start = idx
            size = 0
        size += width
    if start < len(content):
        chunks.append(content[start:])
    return chunks


def chunk_by_tokens(
    content: str,
    tokens_per_chunk: int,
    encoding_name: str = DEFAULT_ENCODING,
) -> list[str]:
    """Split into windows of *tokens_per_chunk* tiktoken tokens.

    Token boundaries can fall inside a multi-byte character; the partial
    bytes are carried into the next chunk so every chunk is valid text.
    Falls back to line windows (about ten tokens per line) when the
    encoding cannot be loaded.
    """
    size = max(1, int(tokens_per_chunk))
    try:
        encoding = tiktoken.get_encoding(encoding_name)
        tokens = encoding.encode(content, disallowed_special=())
    except Exception as exc:
        logger.warning(
            "[Chunking] Token chunking failed, falling back to line-based: %s",
            exc,
        )
        return chunk_by_lines(content, math.ceil(size / 10))

    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    chunks: list[str] = []
    for i in range(0, len(tokens), size):
        text = decoder.decode(encoding.decode_bytes(tokens[i:i + size]))
        if text:
            chunks.append(text)
    tail = decoder.decode(b"", final=True)
    if tail:
        if chunks:
            chunks[-1] += tail
        else:
            chunks.append(tail)
    return chunks
