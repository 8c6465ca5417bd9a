"""
Verdict — PACKAGE / SKIP decisions for directory entries, with reason enums.

Only entries carrying the project prefix are judged; everything else in
the working directory is ignored outright.
"""
from enum import Enum, unique
from pathlib import Path
from typing import List, Tuple

from crossbuild.core.plan import PackagingPlan

ARCHIVE_MARKER = ".tar.gz"


# ── Verdict enum ──────────────────────────────────────────────────────────────

@unique
class Verdict(str, Enum):
    PACKAGE = "PACKAGE"
    SKIP = "SKIP"


# ── Skip reasons ─────────────────────────────────────────────────────────────

@unique
class SkipReason(str, Enum):
    NOT_A_FILE = "NOT_A_FILE"
    ALREADY_ARCHIVED = "ALREADY_ARCHIVED"
    UNKNOWN_PLATFORM = "UNKNOWN_PLATFORM"


# ── Entry judge ──────────────────────────────────────────────────────────────

def judge_entry(path: Path, plan: PackagingPlan) -> Tuple[Verdict, List[str]]:
    """
    Decide whether a prefixed directory entry is a fresh artifact.

    Returns (Verdict, list_of_reason_strings).
    """
    reasons: List[str] = []

    if not path.is_file():
        reasons.append(SkipReason.NOT_A_FILE.value)

    if ARCHIVE_MARKER in path.name:
        reasons.append(SkipReason.ALREADY_ARCHIVED.value)

    if not reasons and plan.rule_for(path.name) is None:
        reasons.append(SkipReason.UNKNOWN_PLATFORM.value)

    if reasons:
        return Verdict.SKIP, reasons
    return Verdict.PACKAGE, []
