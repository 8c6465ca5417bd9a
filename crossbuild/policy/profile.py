"""
Profile — the pipeline configuration struct.

The profile carries every knob the pipeline reads: what to build, how to
invoke the cross-compiler and how artifacts are named.  Core logic takes
a profile and a working directory; it never reads the environment.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from crossbuild.config import DEFAULT_TARGETS, Settings


@dataclass(frozen=True)
class BuildProfile:
    """Immutable build-and-package configuration."""

    # ── Identity ─────────────────────────────────────────────────────
    project_name: str

    # ── Build ────────────────────────────────────────────────────────
    targets: str = DEFAULT_TARGETS
    build_tool: str = "xgo"
    build_env: Dict[str, str] = field(default_factory=lambda: {"GO386": "387"})
    version_variable: str = "main.Version"
    source_dir: str = "."
    command_timeout: Optional[int] = None

    # ── Naming ───────────────────────────────────────────────────────
    canonical_template: str = "{project}{suffix}"
    archive_template: str = "{artifact}-{version}.tar.gz"
    binary_suffixes: Dict[str, str] = field(
        default_factory=lambda: {"windows": ".exe"}
    )

    # ── Packaging ────────────────────────────────────────────────────
    keep_artifacts: bool = True
    write_checksums: bool = False

    @property
    def artifact_prefix(self) -> str:
        """Prefix every produced binary carries: ``<project>-``."""
        return f"{self.project_name}-"

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> BuildProfile:
        """Build a profile from environment / .env settings."""
        if settings is None:
            settings = Settings()
        return cls(
            project_name=settings.PROJECT_NAME,
            targets=settings.TARGETS,
            build_tool=settings.BUILD_TOOL,
            build_env=settings.build_env,
            version_variable=settings.VERSION_VARIABLE,
            command_timeout=settings.COMMAND_TIMEOUT,
            keep_artifacts=settings.KEEP_ARTIFACTS,
            write_checksums=settings.WRITE_CHECKSUMS,
        )
