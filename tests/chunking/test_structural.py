"""Tests for the structural (source code) chunker."""

from edit_gate.chunking.structural import (
    is_definition_line, is_import_line, structural_chunker,
)


SAMPLE_PYTHON = """\
import os
import sys

CONSTANT = 1


def alpha():
    return 1


# helper comment
@decorator
def beta():
    return 2


class Gamma:
    def method(self):
        pass
"""


SAMPLE_JS = """\
function a() {
const x = 1;
const y = 2;
}
function b() {
return 3;
}
"""


class TestStructuralChunker:
    def test_import_block_ends_a_chunk(self):
        chunks = structural_chunker(SAMPLE_PYTHON, 10_000)
        assert len(chunks) == 2
        assert chunks[0] == "import os\nimport sys\n\n"
        assert chunks[1].startswith("CONSTANT = 1")

    def test_breaks_only_at_top_level(self):
        chunks = structural_chunker(SAMPLE_PYTHON, 40)
        assert "".join(chunks) == SAMPLE_PYTHON
        assert len(chunks) == 4
        for chunk in chunks:
            assert not chunk[0].isspace()

    def test_decorator_and_comment_stay_with_definition(self):
        chunks = structural_chunker(SAMPLE_PYTHON, 40)
        beta = next(c for c in chunks if "def beta" in c)
        assert "# helper comment\n@decorator\ndef beta():" in beta

    def test_leading_comment_carried_into_next_chunk(self):
        content = "a = 1\n" * 5 + "# note\n" + "def f():\n    return 1\n"
        chunks = structural_chunker(content, 40)
        assert chunks == ["a = 1\n" * 5, "# note\ndef f():\n    return 1\n"]

    def test_brace_depth_keeps_unindented_bodies_together(self):
        chunks = structural_chunker(SAMPLE_JS, 30)
        assert chunks == [
            "function a() {\nconst x = 1;\nconst y = 2;\n}\n",
            "function b() {\nreturn 3;\n}\n",
        ]

    def test_oversized_body_is_split_at_hard_limit(self):
        content = "def big():\n" + "".join(f"    x{i} = {i}\n" for i in range(60))
        chunks = structural_chunker(content, 50)

        assert "".join(chunks) == content
        assert len(chunks) > 1
        for chunk in chunks:
            assert len(chunk) <= 100 + max(len(l) for l in content.splitlines(True))

    def test_empty_content(self):
        assert structural_chunker("", 100) == []


class TestLineClassification:
    def test_imports(self):
        assert is_import_line("import os")
        assert is_import_line("from a.b import c")
        assert is_import_line("const fs = require('fs');")
        assert is_import_line("#include <stdio.h>")
        assert is_import_line("use std::io;")
        assert not is_import_line("imports = []")

    def test_definitions(self):
        assert is_definition_line("def f():")
        assert is_definition_line("async def g():")
        assert is_definition_line("export default class App {")
        assert is_definition_line("pub fn main() {")
        assert is_definition_line("func main() {")
        assert not is_definition_line("default_value = 1")
