"""
Schema — Pydantic models for the pipeline report.

One output per run: crossbuild_report.json, carrying the resolved version,
the build command and one entry per prefixed directory entry.

Runtime contract fields (present in every output):
  package_name, package_version, schema_version.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from crossbuild import PACKAGE_NAME, SCHEMA_VERSION, __version__
from crossbuild.policy.verdict import SkipReason


class PhaseStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class ArtifactStatus(str, Enum):
    PACKAGED = "PACKAGED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


class PipelineStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


# ── Build phase ──────────────────────────────────────────────────────────────

class BuildPhase(BaseModel):
    """The cross-compiler call; SKIPPED on a dry run."""
    command: str
    env: Dict[str, str] = Field(default_factory=dict)
    exit_code: Optional[int] = None
    duration_ms: int = 0
    status: PhaseStatus = PhaseStatus.SKIPPED


# ── Per-artifact entry ───────────────────────────────────────────────────────

class ArtifactEntry(BaseModel):
    """One prefixed directory entry and what happened to it."""
    source_name: str
    platform: Optional[str] = None
    canonical_name: Optional[str] = None
    archive_name: Optional[str] = None
    archive_sha256: Optional[str] = None
    archive_size_bytes: Optional[int] = None
    checksum_name: Optional[str] = None
    status: ArtifactStatus
    reasons: List[str] = Field(default_factory=list)
    error_message: Optional[str] = None


# ── Run report ───────────────────────────────────────────────────────────────

class PipelineReport(BaseModel):
    """Run-level summary — crossbuild_report.json."""

    package_name: str = PACKAGE_NAME
    package_version: str = __version__
    schema_version: str = SCHEMA_VERSION

    project_name: str
    version: str
    targets: str
    work_dir: str

    build: BuildPhase
    artifacts: List[ArtifactEntry] = Field(default_factory=list)
    status: PipelineStatus = PipelineStatus.SUCCESS

    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def packaged(self) -> List[ArtifactEntry]:
        return [a for a in self.artifacts if a.status == ArtifactStatus.PACKAGED]

    @property
    def unarchived(self) -> List[ArtifactEntry]:
        """Prefixed regular files left unarchived because no rule matched."""
        return [
            a for a in self.artifacts
            if a.status == ArtifactStatus.SKIPPED
            and SkipReason.UNKNOWN_PLATFORM.value in a.reasons
        ]

    def compute_status(self) -> PipelineStatus:
        """Derive run status from the build phase and artifact entries."""
        if self.build.status == PhaseStatus.FAILED:
            return PipelineStatus.FAILED
        failed = sum(1 for a in self.artifacts if a.status == ArtifactStatus.FAILED)
        if failed and not self.packaged:
            return PipelineStatus.FAILED
        if failed or self.unarchived:
            return PipelineStatus.PARTIAL
        return PipelineStatus.SUCCESS
