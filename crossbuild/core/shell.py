"""
Shell — run external commands and capture the outcome.

Every external invocation (git, the cross-compiler) goes through
``run_command`` and comes back as a ``CommandResult``.  ``run_command``
itself never raises; callers decide whether a failure is fatal by
calling ``CommandResult.check()``.
"""
import logging
import os
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """An external command exited with a non-zero status."""

    def __init__(self, result: "CommandResult"):
        self.result = result
        tail = result.stderr.strip().splitlines()[-5:]
        detail = "\n".join(tail) if tail else "(no stderr)"
        super().__init__(
            f"Command failed with exit code {result.exit_code}: "
            f"{result.render()}\n{detail}"
        )


@dataclass
class CommandResult:
    """Exit status and captured output of one external command."""
    args: List[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    env: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def render(self) -> str:
        """Shell-style rendering including env overrides."""
        return render_command(self.args, self.env)

    def check(self) -> "CommandResult":
        """Raise CommandError unless the command succeeded."""
        if not self.ok:
            raise CommandError(self)
        return self


def render_command(args: List[str], env: Optional[Dict[str, str]] = None) -> str:
    """Render argv (plus env overrides) as a copy-pasteable shell line."""
    parts = [f"{k}={shlex.quote(v)}" for k, v in (env or {}).items()]
    parts.extend(shlex.quote(a) for a in args)
    return " ".join(parts)


def run_command(
    args: List[str],
    cwd: Optional[Path] = None,
    env: Optional[Dict[str, str]] = None,
    timeout: Optional[int] = None,
) -> CommandResult:
    """
    Execute *args* and return a CommandResult.

    *env* holds overrides layered on top of the current environment.
    A missing executable or an expired timeout yields exit code -1 with
    the reason in stderr.
    """
    overrides = dict(env or {})
    full_env = {**os.environ, **overrides} if overrides else None

    logger.debug("exec: %s (cwd=%s)", render_command(args, overrides), cwd)

    t0 = time.monotonic()
    try:
        proc = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            env=full_env,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        exit_code, stdout, stderr = proc.returncode, proc.stdout, proc.stderr
    except subprocess.TimeoutExpired:
        exit_code, stdout, stderr = -1, "", f"Command timed out after {timeout}s"
    except OSError as e:
        exit_code, stdout, stderr = -1, "", str(e)
    duration = int((time.monotonic() - t0) * 1000)

    return CommandResult(
        args=list(args),
        exit_code=exit_code,
        stdout=stdout,
        stderr=stderr,
        duration_ms=duration,
        env=overrides,
    )
