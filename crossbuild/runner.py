"""
Pipeline runner — top-level orchestration: tag → build → package → report.

Ties version lookup, the cross-compiler call and the packager together
into a single ``run_pipeline`` function, usable from the CLI or from
other tooling.

Usage:
    python -m crossbuild.runner --work-dir . --execute -o reports/
"""
import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from crossbuild.config import Settings
from crossbuild.core.invoker import build_invocation, invoke_build
from crossbuild.core.packager import package_artifacts
from crossbuild.core.plan import resolve_plan
from crossbuild.core.shell import CommandError
from crossbuild.core.targets import normalize_targets
from crossbuild.core.vcs import (
    DirtyWorkingTreeError,
    VersionUnavailableError,
    is_dirty,
    read_latest_tag,
)
from crossbuild.io.schema import BuildPhase, PhaseStatus, PipelineReport, PipelineStatus
from crossbuild.io.writer import write_report
from crossbuild.policy.profile import BuildProfile

logger = logging.getLogger(__name__)


def run_pipeline(
    profile: BuildProfile,
    work_dir: Path,
    version: Optional[str] = None,
    dry_run: bool = True,
    check_clean: bool = False,
    confirm: Optional[Callable[[str], bool]] = None,
    output_dir: Optional[Path] = None,
) -> PipelineReport:
    """
    Build and package every target in *profile*.

    Parameters
    ----------
    profile : BuildProfile
        Pipeline configuration.
    work_dir : Path
        Repository root; the cross-compiler runs here and binaries land here.
    version : str, optional
        Release version.  Defaults to the latest git tag.
    dry_run : bool
        Log the cross-compiler command without running it.
    check_clean : bool
        Refuse to build from a dirty working tree unless *confirm*
        returns True.
    confirm : callable, optional
        Asked with a prompt string when the tree is dirty.
    output_dir : Path, optional
        Directory to write crossbuild_report.json.

    Raises
    ------
    VersionUnavailableError, DirtyWorkingTreeError, CommandError
    """
    work_dir = Path(work_dir)

    # ── Step 1: version ──────────────────────────────────────────────
    if version is None:
        version = read_latest_tag(work_dir, timeout=profile.command_timeout)
    logger.info("Version: %s", version)

    # ── Step 2: working-tree check ───────────────────────────────────
    if check_clean and is_dirty(work_dir, timeout=profile.command_timeout):
        prompt = "Working tree has uncommitted changes. Build anyway? (y/n): "
        if confirm is None or not confirm(prompt):
            raise DirtyWorkingTreeError(f"Uncommitted changes in {work_dir}")

    # ── Step 3: resolve plan + build ─────────────────────────────────
    plan = resolve_plan(profile)
    invocation = build_invocation(profile, version)
    build = BuildPhase(command=invocation.render(), env=invocation.env)

    if dry_run:
        logger.info("Running %s", invocation.render())
        logger.info("Dry run: cross-compiler not invoked")
    else:
        result = invoke_build(invocation, work_dir, timeout=profile.command_timeout)
        build.exit_code = result.exit_code
        build.duration_ms = result.duration_ms
        build.status = PhaseStatus.SUCCESS

    # ── Step 4: package ──────────────────────────────────────────────
    entries = package_artifacts(
        work_dir,
        plan,
        version,
        keep_artifacts=profile.keep_artifacts,
        write_checksums=profile.write_checksums,
    )

    report = PipelineReport(
        project_name=profile.project_name,
        version=version,
        targets=normalize_targets(profile.targets),
        work_dir=str(work_dir),
        build=build,
        artifacts=entries,
    )
    report.status = report.compute_status()

    if output_dir:
        write_report(report, Path(output_dir))

    return report


def _ask(prompt: str) -> bool:
    return input(prompt).lower().strip() == "y"


# ── CLI ──────────────────────────────────────────────────────────────────────

def main(argv: Optional[list] = None) -> int:
    settings = Settings()

    parser = argparse.ArgumentParser(
        description="crossbuild — cross-compile with xgo and package each binary as a versioned tarball",
    )
    parser.add_argument(
        "-C", "--work-dir",
        type=Path,
        default=Path(settings.WORK_DIR),
        help="Repository root where binaries are produced (default: %(default)s)",
    )
    parser.add_argument("--project", default=settings.PROJECT_NAME, help="Binary name prefix")
    parser.add_argument("--targets", default=settings.TARGETS, help="Comma-separated platform/arch list")
    parser.add_argument("--version", dest="release_version", default=None, help="Release version (default: latest git tag)")
    parser.add_argument(
        "--execute",
        action="store_true",
        default=not settings.DRY_RUN,
        help="Actually run the cross-compiler (default is to only print the command)",
    )
    parser.add_argument(
        "--check-clean",
        action="store_true",
        default=settings.CHECK_CLEAN,
        help="Stop if the working tree has uncommitted changes",
    )
    parser.add_argument("-y", "--yes", action="store_true", help="Build from a dirty tree without asking")
    parser.add_argument(
        "--remove-artifacts",
        action="store_true",
        default=not settings.KEEP_ARTIFACTS,
        help="Delete per-platform binaries once archived",
    )
    parser.add_argument(
        "--checksums",
        action="store_true",
        default=settings.WRITE_CHECKSUMS,
        help="Write a .sha256 file next to every archive",
    )
    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=Path(settings.REPORT_DIR) if settings.REPORT_DIR else None,
        help="Directory to write crossbuild_report.json",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    try:
        profile = dataclasses.replace(
            BuildProfile.from_settings(settings),
            project_name=args.project,
            targets=args.targets,
            keep_artifacts=not args.remove_artifacts,
            write_checksums=args.checksums,
        )
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    if not args.work_dir.is_dir():
        logger.error("Working directory not found: %s", args.work_dir)
        return 1

    confirm = (lambda _prompt: True) if args.yes else _ask
    try:
        report = run_pipeline(
            profile,
            args.work_dir,
            version=args.release_version,
            dry_run=not args.execute,
            check_clean=args.check_clean,
            confirm=confirm,
            output_dir=args.output_dir,
        )
    except (VersionUnavailableError, DirtyWorkingTreeError, CommandError) as e:
        logger.error("%s", e)
        return 1

    print(f"Version: {report.version}")
    print(f"Build: {report.build.status.value}")
    for entry in report.packaged:
        print(f"  {entry.archive_name}")
    for entry in report.unarchived:
        print(f"  not archived: {entry.source_name}")
    print(f"Archives: {len(report.packaged)} (status={report.status.value})")
    if args.output_dir:
        print(f"Report written to: {args.output_dir}")

    return 0 if report.status == PipelineStatus.SUCCESS else 1


if __name__ == "__main__":
    sys.exit(main())
