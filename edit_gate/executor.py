"""
Command executor: runs accepted command and repository-operation
proposals exactly as previewed.
"""

import locale
import logging
import os
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class CommandOutcome:
    success: bool
    command: str
    exit_code: int | None
    stdout: str = ""
    stderr: str = ""
    error: str = ""

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "command": self.command,
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "error": self.error,
        }


class Executor:
    def __init__(self, timeout: int = 120):
        self._timeout = timeout

    @staticmethod
    def _build_env(env: dict | None = None) -> dict:
        # Disable color codes and interactive prompts
        run_env = dict(env) if env else os.environ.copy()
        run_env.setdefault("NO_COLOR", "1")
        run_env.setdefault("FORCE_COLOR", "0")
        run_env.setdefault("CI", "true")
        run_env.setdefault("DEBIAN_FRONTEND", "noninteractive")
        run_env.setdefault("GIT_TERMINAL_PROMPT", "0")
        return run_env

    def run_command(self, cmd: str, cwd: str, env: dict | None = None) -> CommandOutcome:
        """Run a shell command in *cwd*. Never raises for command failure."""
        logger.info("[Executor] Running command in %s: %s", cwd, cmd)
        return self._run(cmd, cwd, env, shell=True)

    def run_git(self, operation: str, args: tuple[str, ...], cwd: str,
                env: dict | None = None) -> CommandOutcome:
        """Run ``git <operation> <args...>`` without a shell."""
        argv = ["git", operation, *args]
        logger.info("[Executor] Running git operation in %s: %s", cwd, " ".join(argv))
        return self._run(argv, cwd, env, shell=False)

    def _run(self, cmd, cwd: str, env: dict | None, shell: bool) -> CommandOutcome:
        display = cmd if isinstance(cmd, str) else " ".join(cmd)
        try:
            # Read raw bytes and decode manually; tools disagree on encodings.
            proc = subprocess.Popen(
                cmd, shell=shell, cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=self._build_env(env),
            )
        except OSError as e:
            logger.error("[Executor] Could not start command %s: %s", display, e)
            return CommandOutcome(False, display, None, error=str(e))

        try:
            stdout_bytes, stderr_bytes = proc.communicate(timeout=self._timeout)
        except subprocess.TimeoutExpired:
            logger.warning("[Executor] Command timed out after %ss: %s", self._timeout, display)
            proc.kill()
            stdout_bytes, stderr_bytes = proc.communicate()
            return CommandOutcome(
                False, display, proc.returncode,
                stdout=Executor._decode_output(stdout_bytes),
                stderr=Executor._decode_output(stderr_bytes),
                error=f"Command timed out after {self._timeout} seconds",
            )

        stdout = Executor._decode_output(stdout_bytes)
        stderr = Executor._decode_output(stderr_bytes)
        logger.info("[Executor] Exit code: %s, output=%d chars",
                    proc.returncode, len(stdout) + len(stderr))

        error = ""
        if proc.returncode != 0:
            error = (stderr.strip() or stdout.strip()
                     or f"Command `{display}` exited with code {proc.returncode} "
                        f"but produced no output")
        return CommandOutcome(
            success=proc.returncode == 0,
            command=display,
            exit_code=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            error=error,
        )

    @staticmethod
    def _decode_output(raw: bytes | None) -> str:
        """Decode subprocess output, trying UTF-8 first then system default."""
        if not raw:
            return ""
        try:
            return raw.decode("utf-8")
        except (UnicodeDecodeError, ValueError):
            pass
        try:
            return raw.decode(locale.getpreferredencoding(False), errors="replace")
        except (UnicodeDecodeError, ValueError, LookupError):
            return raw.decode("ascii", errors="replace")
