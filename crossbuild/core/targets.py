"""
Targets — turn a human-edited target list into the cross-compiler's form.

The list is written one ``platform/arch`` per line (or space separated),
comma delimited.  ``*`` as architecture means every architecture the
cross-compiler knows for that platform.  Names are not validated here;
a bad entry surfaces as a build failure.
"""
import re
from dataclasses import dataclass
from typing import List

WILDCARD = "*"

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Target:
    """One (platform, architecture) pair."""
    platform: str
    arch: str = ""

    @property
    def is_wildcard(self) -> bool:
        return self.arch == WILDCARD

    @property
    def identifier(self) -> str:
        """``platform/arch`` as passed to the cross-compiler."""
        if not self.arch:
            return self.platform
        return f"{self.platform}/{self.arch}"


def normalize_targets(raw: str) -> str:
    """Strip every whitespace character, keeping entries and their order."""
    return _WHITESPACE.sub("", raw)


def parse_targets(raw: str) -> List[Target]:
    """
    Split a target list into Target values.

    Empty entries (stray commas) are dropped; an entry without ``/``
    keeps an empty architecture.
    """
    targets: List[Target] = []
    for entry in normalize_targets(raw).split(","):
        if not entry:
            continue
        platform, _, arch = entry.partition("/")
        targets.append(Target(platform=platform, arch=arch))
    return targets


def platforms(targets: List[Target]) -> List[str]:
    """Distinct platforms in first-seen order."""
    seen: List[str] = []
    for t in targets:
        if t.platform not in seen:
            seen.append(t.platform)
    return seen
