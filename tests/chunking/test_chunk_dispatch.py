"""Tests for the strategy dispatcher: coverage, determinism, errors."""

import pytest

from edit_gate.chunking import STRATEGIES, chunk
from edit_gate.errors import UnknownStrategyError


SAMPLES = {
    "python": "import os\n\n\ndef main():\n    print(os.getcwd())\n\n\nmain()\n" * 20,
    "markdown": "# Title\n\nSome text here.\n\n```sh\nls -la\n```\n\n" * 20,
    "unicode": "Grüße aus Köln. ✓ naïve café\n\n" * 40,
    "crlf": "line one\r\nline two\r\n\r\nline three\r\n" * 30,
    "no_trailing_newline": "a = 1\nb = 2",
}

CONTENT_STRATEGIES = [s for s in STRATEGIES if s != "token"]


class TestChunkDispatch:
    @pytest.mark.parametrize("strategy", CONTENT_STRATEGIES)
    @pytest.mark.parametrize("name", sorted(SAMPLES))
    def test_exact_coverage(self, strategy, name):
        content = SAMPLES[name]
        chunks = chunk(content, 64, strategy)
        assert "".join(chunks) == content
        assert all(chunks)

    @pytest.mark.parametrize("strategy", CONTENT_STRATEGIES)
    def test_deterministic(self, strategy):
        content = SAMPLES["markdown"] + SAMPLES["python"]
        assert chunk(content, 100, strategy) == chunk(content, 100, strategy)

    def test_empty_content_gives_one_chunk(self):
        assert chunk("", 100, "semantic") == [""]

    def test_unknown_strategy(self):
        with pytest.raises(UnknownStrategyError):
            chunk("text", 100, "paragraphs")

    def test_path_steers_hybrid(self):
        content = SAMPLES["markdown"]
        assert chunk(content, 80, "hybrid", path="x.md") == chunk(content, 80, "semantic")
