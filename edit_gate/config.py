"""
Configuration: loads settings from .editgate.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "data_dir": ".edits",
    "read_ttl_seconds": 60.0,
    "auto_apply": False,
    "chunk_strategy": "hybrid",
    "chunk_size": 2048,
    "diff_context_lines": 3,
    "diff_algorithm": "greedy",
    "backup_retention_days": 30,
    "command_timeout": 120,
}

# Config file search locations
_CONFIG_FILENAMES = [".editgate.yaml", ".editgate.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    # Search CWD first, then home directory
    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Edit gate configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .editgate.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() in ("1", "true", "yes", "on")
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        self.DATA_DIR = _get("EDITGATE_DATA_DIR", "data_dir", _DEFAULTS["data_dir"])
        self.READ_TTL_SECONDS = _get("EDITGATE_READ_TTL", "read_ttl_seconds",
                                     _DEFAULTS["read_ttl_seconds"], cast=float)
        self.AUTO_APPLY = _get_bool("EDITGATE_AUTO_APPLY", "auto_apply",
                                    _DEFAULTS["auto_apply"])

        self.CHUNK_STRATEGY = _get("EDITGATE_CHUNK_STRATEGY", "chunk_strategy",
                                   _DEFAULTS["chunk_strategy"])
        self.CHUNK_SIZE = _get("EDITGATE_CHUNK_SIZE", "chunk_size",
                               _DEFAULTS["chunk_size"], cast=int)

        self.DIFF_CONTEXT_LINES = _get("EDITGATE_DIFF_CONTEXT", "diff_context_lines",
                                       _DEFAULTS["diff_context_lines"], cast=int)
        self.DIFF_ALGORITHM = _get("EDITGATE_DIFF_ALGORITHM", "diff_algorithm",
                                   _DEFAULTS["diff_algorithm"])

        self.BACKUP_RETENTION_DAYS = _get("EDITGATE_BACKUP_RETENTION_DAYS",
                                          "backup_retention_days",
                                          _DEFAULTS["backup_retention_days"],
                                          cast=int)
        self.COMMAND_TIMEOUT = _get("EDITGATE_COMMAND_TIMEOUT", "command_timeout",
                                    _DEFAULTS["command_timeout"], cast=int)

    def data_dir_for(self, workspace_root: str) -> str:
        """Absolute data directory; relative values hang off the workspace."""
        if os.path.isabs(self.DATA_DIR):
            return self.DATA_DIR
        return os.path.join(os.path.abspath(workspace_root), self.DATA_DIR)

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
