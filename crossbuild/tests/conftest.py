"""
Shared pytest fixtures for crossbuild tests.

Provides working directories populated with fake cross-compiled binaries
and, where git is installed, a throwaway tagged repository.

Tests touching git are skipped when git is not in PATH.
"""
import shutil
import subprocess
from pathlib import Path

import pytest

from crossbuild.policy.profile import BuildProfile

TEST_VERSION = "v1.2.3"

# Content per produced binary; distinct so archive members can be checked.
ARTIFACTS = {
    "proj-windows-amd64": b"MZ fake windows binary",
    "proj-linux-amd64": b"\x7fELF fake linux binary",
}

TARGETS = """linux/amd64,
    windows/*"""


def _git(repo: Path, *args: str) -> None:
    subprocess.run(
        [
            "git",
            "-c", "user.name=crossbuild",
            "-c", "user.email=crossbuild@example.invalid",
            "-c", "commit.gpgsign=false",
            "-c", "tag.gpgsign=false",
            *args,
        ],
        cwd=str(repo),
        check=True,
        capture_output=True,
        timeout=30,
    )


@pytest.fixture
def profile() -> BuildProfile:
    """Profile for project 'proj' building linux/amd64 and windows/*."""
    return BuildProfile(project_name="proj", targets=TARGETS)


@pytest.fixture
def artifact_dir(tmp_path) -> Path:
    """Directory holding two fresh binaries and one stale archive."""
    d = tmp_path / "work"
    d.mkdir()
    for name, content in ARTIFACTS.items():
        (d / name).write_bytes(content)
    (d / "proj-linux-amd64.tar.gz").write_bytes(b"stale archive")
    (d / "README.md").write_text("not an artifact\n")
    return d


@pytest.fixture(scope="session")
def git_ok():
    """Skip tests if git is not available."""
    if shutil.which("git") is None:
        pytest.skip("git not available - install git to run these tests")


@pytest.fixture
def tagged_repo(tmp_path, git_ok) -> Path:
    """Git repository with one commit tagged TEST_VERSION."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    (repo / "main.go").write_text("package main\n\nvar Version string\n\nfunc main() {}\n")
    _git(repo, "add", "main.go")
    _git(repo, "commit", "-q", "-m", "initial")
    _git(repo, "tag", TEST_VERSION)
    return repo


@pytest.fixture
def dirty_repo(tagged_repo) -> Path:
    """tagged_repo with an uncommitted modification."""
    (tagged_repo / "main.go").write_text("package main\n\nfunc main() { println() }\n")
    return tagged_repo
