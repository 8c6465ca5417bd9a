"""
Plan — the packaging rules, resolved once before any file is touched.

Each configured platform maps to one ArtifactRule: the canonical binary
name the archive will contain and the archive-name template.  Produced
binaries are named ``<project>-<platform>-...``; the platform token right
after the prefix selects the rule.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from crossbuild.core.targets import parse_targets, platforms
from crossbuild.policy.profile import BuildProfile


@dataclass(frozen=True)
class ArtifactRule:
    platform: str
    canonical_name: str
    archive_template: str

    def archive_name(self, artifact_name: str, version: str) -> str:
        return self.archive_template.format(artifact=artifact_name, version=version)


@dataclass(frozen=True)
class PackagingPlan:
    """Prefix plus platform → rule mapping for one pipeline run."""
    prefix: str
    rules: Dict[str, ArtifactRule]

    def platform_of(self, filename: str) -> Optional[str]:
        """Platform token of a produced binary, or None if the prefix is absent."""
        if not filename.startswith(self.prefix):
            return None
        rest = filename[len(self.prefix):]
        token = rest.split("-", 1)[0]
        return token or None

    def rule_for(self, filename: str) -> Optional[ArtifactRule]:
        platform = self.platform_of(filename)
        if platform is None:
            return None
        return self.rules.get(platform)


def base_platform(platform: str) -> str:
    """Drop an OS version pin: ``windows-6.0`` → ``windows``."""
    return platform.split("-", 1)[0]


def resolve_plan(profile: BuildProfile) -> PackagingPlan:
    """
    Resolve an ArtifactRule for every platform in the profile's target list.

    Rules are keyed by base OS, so versioned targets such as
    ``darwin-10.9/amd64`` match binaries named ``<project>-darwin-10.9-amd64``.
    """
    rules: Dict[str, ArtifactRule] = {}
    for target_platform in platforms(parse_targets(profile.targets)):
        platform = base_platform(target_platform)
        if not platform or platform in rules:
            continue
        suffix = profile.binary_suffixes.get(platform, "")
        rules[platform] = ArtifactRule(
            platform=platform,
            canonical_name=profile.canonical_template.format(
                project=profile.project_name, suffix=suffix
            ),
            archive_template=profile.archive_template,
        )
    return PackagingPlan(prefix=profile.artifact_prefix, rules=rules)
