"""Tests for the semantic (prose / documentation) chunker."""

from edit_gate.chunking.semantic import find_fences, semantic_chunker


def _fence_lines(text: str) -> int:
    return sum(1 for line in text.splitlines() if line.lstrip().startswith("```"))


def _large_doc() -> str:
    parts = []
    n = 0
    while sum(len(p) for p in parts) < 100_000:
        parts.append(f"## Section {n}\n\n")
        parts.append(
            "This paragraph explains the section in some detail. " * 5 + "\n\n"
        )
        parts.append(
            "```python\n"
            + "".join(f"value_{n}_{k} = compute({k})\n" for k in range(20))
            + "```\n\n"
        )
        n += 1
    return "".join(parts)


class TestSemanticChunker:
    def test_fences_never_split_in_large_document(self):
        doc = _large_doc()
        assert len(doc) >= 100_000

        chunks = semantic_chunker(doc, 2000)

        assert "".join(chunks) == doc
        assert len(chunks) > 1
        for chunk in chunks:
            assert _fence_lines(chunk) % 2 == 0

    def test_oversized_fence_kept_whole(self):
        code = "```\n" + "x = 1\n" * 50 + "```\n"
        doc = "Intro text.\n\n" + code + "\nOutro text.\n"
        chunks = semantic_chunker(doc, 50)

        assert "".join(chunks) == doc
        assert any(code in chunk for chunk in chunks)

    def test_heading_starts_new_chunk(self):
        doc = "# A\n\npara\n\n# B\n\npara\n"
        assert semantic_chunker(doc, 2000) == ["# A\n\npara\n\n", "# B\n\npara\n"]

    def test_paragraphs_are_packed(self):
        doc = "one.\n\ntwo.\n\nthree.\n"
        assert semantic_chunker(doc, 2000) == [doc]

    def test_oversized_paragraph_split_by_lines(self):
        doc = ("x" * 19 + "\n") * 10
        chunks = semantic_chunker(doc, 50)

        assert "".join(chunks) == doc
        assert all(len(chunk) <= 50 for chunk in chunks)
        assert all(chunk.endswith("\n") for chunk in chunks)

    def test_very_long_line_is_hard_cut(self):
        doc = "a" * 120
        assert semantic_chunker(doc, 50) == ["a" * 50, "a" * 50, "a" * 20]

    def test_unclosed_fence_is_plain_text(self):
        doc = "Before.\n\n```\nno closing fence\n"
        chunks = semantic_chunker(doc, 10)
        assert "".join(chunks) == doc

    def test_empty_content(self):
        assert semantic_chunker("", 100) == []


class TestFindFences:
    def test_pairs_openers_with_closers(self):
        lines = ["text\n", "```py\n", "code\n", "```\n", "~~~\n", "x\n", "~~~\n"]
        assert find_fences(lines) == {1: 3, 4: 6}

    def test_closer_must_match_marker(self):
        lines = ["````\n", "```\n", "still code\n", "````\n"]
        assert find_fences(lines) == {0: 3}

    def test_unclosed(self):
        assert find_fences(["```\n", "code\n"]) == {}
