"""Tests for workspace path confinement."""

import os

import pytest

from edit_gate.editing.path_guard import display_path, resolve
from edit_gate.errors import PathTraversalError


class TestResolve:
    def test_relative_path_inside_root(self, tmp_path):
        full = resolve(str(tmp_path), "src/app.py")
        assert full == os.path.join(str(tmp_path), "src", "app.py")

    def test_dot_segments_that_stay_inside(self, tmp_path):
        full = resolve(str(tmp_path), "src/../lib/./util.py")
        assert full == os.path.join(str(tmp_path), "lib", "util.py")

    def test_root_itself_is_allowed(self, tmp_path):
        assert resolve(str(tmp_path), ".") == str(tmp_path)

    def test_parent_escape_is_rejected(self, tmp_path):
        with pytest.raises(PathTraversalError) as exc_info:
            resolve(str(tmp_path), "../../etc/passwd")
        assert exc_info.value.user_path == "../../etc/passwd"
        assert "Path traversal" in str(exc_info.value)

    def test_bare_parent_is_rejected(self, tmp_path):
        with pytest.raises(PathTraversalError):
            resolve(str(tmp_path), "..")

    def test_escape_hidden_behind_subdirectory(self, tmp_path):
        with pytest.raises(PathTraversalError):
            resolve(str(tmp_path), "src/../../outside.txt")

    def test_absolute_path_outside_root(self, tmp_path):
        outside = os.path.abspath(os.path.join(str(tmp_path), "..", "other.txt"))
        with pytest.raises(PathTraversalError):
            resolve(str(tmp_path), outside)

    def test_absolute_path_inside_root(self, tmp_path):
        inside = os.path.join(str(tmp_path), "a.txt")
        assert resolve(str(tmp_path), inside) == inside

    def test_sibling_with_common_prefix_is_rejected(self, tmp_path):
        root = tmp_path / "work"
        root.mkdir()
        with pytest.raises(PathTraversalError):
            resolve(str(root), "../workshop/file.txt")

    def test_no_filesystem_access(self, tmp_path):
        # Nonexistent paths resolve fine
        full = resolve(str(tmp_path), "does/not/exist.txt")
        assert not os.path.exists(full)


class TestDisplayPath:
    def test_forward_slashes(self, tmp_path):
        full = os.path.join(str(tmp_path), "src", "pkg", "mod.py")
        assert display_path(str(tmp_path), full) == "src/pkg/mod.py"
