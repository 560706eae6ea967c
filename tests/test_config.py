import os

import pytest

from edit_gate.config import Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("EDITGATE_"):
            monkeypatch.delenv(key, raising=False)


def test_defaults():
    cfg = Config()
    assert cfg.DATA_DIR == ".edits"
    assert cfg.READ_TTL_SECONDS == 60.0
    assert cfg.AUTO_APPLY is False
    assert cfg.CHUNK_STRATEGY == "hybrid"
    assert cfg.CHUNK_SIZE == 2048
    assert cfg.DIFF_CONTEXT_LINES == 3
    assert cfg.DIFF_ALGORITHM == "greedy"


def test_yaml_overrides_defaults():
    cfg = Config({"chunk_size": 512, "auto_apply": True, "read_ttl_seconds": 5})
    assert cfg.CHUNK_SIZE == 512
    assert cfg.AUTO_APPLY is True
    assert cfg.READ_TTL_SECONDS == 5.0


def test_env_overrides_yaml(monkeypatch):
    monkeypatch.setenv("EDITGATE_CHUNK_SIZE", "1000")
    monkeypatch.setenv("EDITGATE_CHUNK_STRATEGY", "semantic")
    cfg = Config({"chunk_size": 512, "chunk_strategy": "structural"})
    assert cfg.CHUNK_SIZE == 1000
    assert cfg.CHUNK_STRATEGY == "semantic"


@pytest.mark.parametrize("value,expected", [
    ("1", True), ("true", True), ("YES", True), ("on", True),
    ("0", False), ("false", False), ("no", False),
])
def test_bool_env_parsing(monkeypatch, value, expected):
    monkeypatch.setenv("EDITGATE_AUTO_APPLY", value)
    assert Config({"auto_apply": not expected}).AUTO_APPLY is expected


def test_load_explicit_yaml(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("diff_algorithm: difflib\ndiff_context_lines: 1\n", encoding="utf-8")
    cfg = Config.load(str(path))
    assert cfg.DIFF_ALGORITHM == "difflib"
    assert cfg.DIFF_CONTEXT_LINES == 1


def test_load_missing_explicit_path_uses_defaults(tmp_path):
    cfg = Config.load(str(tmp_path / "nope.yaml"))
    assert cfg.CHUNK_SIZE == 2048


def test_load_malformed_yaml_uses_defaults(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("chunk_size: [unclosed\n", encoding="utf-8")
    assert Config.load(str(path)).CHUNK_SIZE == 2048


def test_load_non_mapping_yaml_uses_defaults(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    assert Config.load(str(path)).DATA_DIR == ".edits"


def test_load_finds_file_in_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    (tmp_path / ".editgate.yaml").write_text("chunk_size: 99\n", encoding="utf-8")
    assert Config.load().CHUNK_SIZE == 99


class TestDataDir:
    def test_relative_hangs_off_workspace(self, tmp_path):
        cfg = Config()
        assert cfg.data_dir_for(str(tmp_path)) == os.path.join(str(tmp_path), ".edits")

    def test_absolute_is_kept(self, tmp_path):
        target = str(tmp_path / "elsewhere")
        cfg = Config({"data_dir": target})
        assert cfg.data_dir_for("/some/workspace") == target
