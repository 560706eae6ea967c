"""
Chunking metrics: per-controller counters for chunked reads.
"""

from __future__ import annotations

import threading
from collections import Counter

ADVANCED_METHODS = ("semantic", "structural", "hybrid", "adaptive")


def size_category(file_size: int) -> str:
    if file_size < 1024:
        return "small"
    if file_size < 10240:
        return "medium"
    if file_size < 102400:
        return "large"
    return "massive"


class ChunkingMetrics:
    """Usage counters, file-size distribution and average timing."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.total_chunks_processed = 0
        self.requests = 0
        self.average_chunk_time = 0.0
        self.method_usage: Counter[str] = Counter()
        self.file_size_distribution: Counter[str] = Counter()

    def record(self, method: str, chunk_count: int, seconds: float,
               file_size: int) -> None:
        with self._lock:
            self.requests += 1
            self.total_chunks_processed += chunk_count
            self.average_chunk_time += (
                (seconds - self.average_chunk_time) / self.requests
            )
            self.method_usage[method] += 1
            self.file_size_distribution[size_category(file_size)] += 1

    def efficiency(self) -> float:
        """Percentage of requests served by a content-aware strategy."""
        with self._lock:
            total = sum(self.method_usage.values())
            if not total:
                return 0.0
            advanced = sum(self.method_usage[m] for m in ADVANCED_METHODS)
            return advanced / total * 100

    def analytics(self) -> dict:
        efficiency = self.efficiency()
        with self._lock:
            return {
                "total_chunks_processed": self.total_chunks_processed,
                "requests": self.requests,
                "average_chunk_time": self.average_chunk_time,
                "chunking_method_usage": dict(self.method_usage),
                "file_size_distribution": dict(self.file_size_distribution),
                "efficiency": efficiency,
            }
