"""
Invoker — build and run the cross-compiler command line.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from crossbuild.core.shell import CommandResult, render_command, run_command
from crossbuild.core.targets import normalize_targets
from crossbuild.policy.profile import BuildProfile

logger = logging.getLogger(__name__)


@dataclass
class BuildInvocation:
    """A fully resolved cross-compiler call."""
    args: List[str]
    env: Dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        return render_command(self.args, self.env)


def build_ldflags(version: str, variable: str = "main.Version") -> str:
    """Linker flags that strip DWARF and inject *version* into *variable*."""
    return f"-w -X {variable}={version}"


def build_invocation(profile: BuildProfile, version: str) -> BuildInvocation:
    """
    Assemble the cross-compiler call for *version*.

    Shape: ``<env> <tool> -v --targets=<list> -ldflags '<flags>' <source_dir>``
    """
    args = [
        profile.build_tool,
        "-v",
        f"--targets={normalize_targets(profile.targets)}",
        "-ldflags",
        build_ldflags(version, profile.version_variable),
        profile.source_dir,
    ]
    return BuildInvocation(args=args, env=dict(profile.build_env))


def invoke_build(
    invocation: BuildInvocation,
    work_dir: Path,
    timeout: int | None = None,
) -> CommandResult:
    """
    Run the cross-compiler in *work_dir*.

    Raises CommandError on a non-zero exit; the toolchain decides how a
    single failing target affects the run.
    """
    logger.info("Running %s", invocation.render())
    result = run_command(invocation.args, cwd=work_dir, env=invocation.env, timeout=timeout)
    if result.stdout:
        logger.debug(result.stdout)
    logger.info("Build finished: exit=%d in %dms", result.exit_code, result.duration_ms)
    return result.check()
