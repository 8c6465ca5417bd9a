"""
Packager — wrap each freshly built binary into a versioned tarball.

For every ``<project>-*`` file in the working directory:
  1. copy it to the canonical binary name (``<project>`` / ``<project>.exe``)
  2. archive the canonical file as ``<original>-<version>.tar.gz``
  3. remove the canonical copy
Existing archives are skipped, so re-running over the same directory
only refreshes the tarballs.
"""
import hashlib
import logging
import shutil
import tarfile
from pathlib import Path
from typing import List

from crossbuild.core.plan import ArtifactRule, PackagingPlan
from crossbuild.io.schema import ArtifactEntry, ArtifactStatus
from crossbuild.policy.verdict import SkipReason, Verdict, judge_entry

logger = logging.getLogger(__name__)


def hash_file(path: Path) -> str:
    """SHA-256 of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def discover_artifacts(work_dir: Path, prefix: str) -> List[Path]:
    """All directory entries starting with *prefix*, sorted by name."""
    return sorted(p for p in work_dir.iterdir() if p.name.startswith(prefix))


def _is_same_file(source: Path, canonical: Path) -> bool:
    """True when the canonical name already points at *source*.

    Nothing is copied then, and the canonical file must never be removed.
    """
    return canonical.exists() and source.samefile(canonical)


def write_checksum(archive: Path) -> Path:
    """Write ``<archive>.sha256`` in sha256sum format."""
    checksum_path = archive.with_name(f"{archive.name}.sha256")
    checksum_path.write_text(f"{hash_file(archive)}  {archive.name}\n", encoding="utf-8")
    return checksum_path


def package_artifact(
    source: Path,
    rule: ArtifactRule,
    version: str,
    keep_artifacts: bool = True,
    write_checksums: bool = False,
) -> ArtifactEntry:
    """Package a single binary according to *rule*."""
    work_dir = source.parent
    canonical = work_dir / rule.canonical_name
    archive = work_dir / rule.archive_name(source.name, version)

    entry = ArtifactEntry(
        source_name=source.name,
        platform=rule.platform,
        canonical_name=rule.canonical_name,
        archive_name=archive.name,
        status=ArtifactStatus.FAILED,
    )

    logger.info("Packaging %s", source.name)
    # set before copying so a copy that fails midway is still cleaned up
    staged = not _is_same_file(source, canonical)
    try:
        if staged:
            shutil.copy2(source, canonical)
        with tarfile.open(archive, "w:gz") as tar:
            tar.add(canonical, arcname=rule.canonical_name)

        entry.archive_sha256 = hash_file(archive)
        entry.archive_size_bytes = archive.stat().st_size
        if write_checksums:
            entry.checksum_name = write_checksum(archive).name
        entry.status = ArtifactStatus.PACKAGED
    except (OSError, tarfile.TarError) as e:
        logger.error("Packaging %s failed: %s", source.name, e)
        entry.error_message = str(e)
    finally:
        if staged:
            canonical.unlink(missing_ok=True)

    if entry.status == ArtifactStatus.PACKAGED and not keep_artifacts:
        source.unlink(missing_ok=True)
        logger.debug("Removed %s", source.name)

    return entry


def package_artifacts(
    work_dir: Path,
    plan: PackagingPlan,
    version: str,
    keep_artifacts: bool = True,
    write_checksums: bool = False,
) -> List[ArtifactEntry]:
    """Judge and package every prefixed entry in *work_dir*."""
    entries: List[ArtifactEntry] = []

    for path in discover_artifacts(work_dir, plan.prefix):
        verdict, reasons = judge_entry(path, plan)
        if verdict == Verdict.SKIP:
            if SkipReason.UNKNOWN_PLATFORM.value in reasons:
                logger.warning(
                    "Not archiving %s: platform %r is not in the target list",
                    path.name, plan.platform_of(path.name),
                )
            else:
                logger.debug("Skipping %s: %s", path.name, ", ".join(reasons))
            entries.append(ArtifactEntry(
                source_name=path.name,
                platform=plan.platform_of(path.name),
                status=ArtifactStatus.SKIPPED,
                reasons=reasons,
            ))
            continue

        rule = plan.rule_for(path.name)
        entries.append(package_artifact(
            path,
            rule,
            version,
            keep_artifacts=keep_artifacts,
            write_checksums=write_checksums,
        ))

    packaged = sum(1 for e in entries if e.status == ArtifactStatus.PACKAGED)
    logger.info("Packaged %d of %d prefixed entries", packaged, len(entries))
    return entries
