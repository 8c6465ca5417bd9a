"""
test_runner — end-to-end pipeline and CLI.

The cross-compiler is never run for real: dry runs only log the command,
and --execute runs use coreutils ``true`` as the build tool.
"""
import json
import shutil

import pytest

from crossbuild.core.shell import CommandError
from crossbuild.core.vcs import DirtyWorkingTreeError
from crossbuild.io.schema import ArtifactStatus, PhaseStatus, PipelineStatus
from crossbuild.io.writer import REPORT_FILENAME
from crossbuild.policy.profile import BuildProfile
from crossbuild.runner import main, run_pipeline
from crossbuild.tests.conftest import ARTIFACTS, TEST_VERSION


class TestRunPipeline:

    def test_dry_run_packages(self, artifact_dir, profile):
        report = run_pipeline(profile, artifact_dir, version=TEST_VERSION)

        assert report.status == PipelineStatus.SUCCESS
        assert report.build.status == PhaseStatus.SKIPPED
        assert report.build.exit_code is None
        assert report.targets == "linux/amd64,windows/*"
        assert sorted(e.archive_name for e in report.packaged) == [
            "proj-linux-amd64-v1.2.3.tar.gz",
            "proj-windows-amd64-v1.2.3.tar.gz",
        ]

    def test_report_written(self, artifact_dir, profile, tmp_path):
        out = tmp_path / "reports"
        run_pipeline(profile, artifact_dir, version=TEST_VERSION, output_dir=out)

        data = json.loads((out / REPORT_FILENAME).read_text())
        assert data["package_name"] == "crossbuild"
        assert data["version"] == TEST_VERSION
        assert data["status"] == "SUCCESS"
        assert "-ldflags '-w -X main.Version=v1.2.3'" in data["build"]["command"]
        assert len(data["artifacts"]) == 3

    def test_version_from_tag(self, tagged_repo, profile):
        for name, content in ARTIFACTS.items():
            (tagged_repo / name).write_bytes(content)
        report = run_pipeline(profile, tagged_repo)
        assert report.version == TEST_VERSION
        assert (tagged_repo / f"proj-linux-amd64-{TEST_VERSION}.tar.gz").exists()

    def test_dirty_tree_refused(self, dirty_repo, profile):
        with pytest.raises(DirtyWorkingTreeError):
            run_pipeline(profile, dirty_repo, check_clean=True, confirm=lambda _p: False)

    def test_dirty_tree_confirmed(self, dirty_repo, profile):
        prompts = []
        report = run_pipeline(
            profile,
            dirty_repo,
            check_clean=True,
            confirm=lambda p: prompts.append(p) or True,
        )
        assert report.status == PipelineStatus.SUCCESS
        assert len(prompts) == 1

    def test_execute_success(self, artifact_dir):
        if shutil.which("true") is None:
            pytest.skip("coreutils true not available")
        profile = BuildProfile(project_name="proj", targets="linux/amd64,windows/*", build_tool="true")
        report = run_pipeline(profile, artifact_dir, version=TEST_VERSION, dry_run=False)
        assert report.build.status == PhaseStatus.SUCCESS
        assert report.build.exit_code == 0

    def test_execute_failure_propagates(self, artifact_dir):
        profile = BuildProfile(
            project_name="proj",
            targets="linux/amd64",
            build_tool="crossbuild-no-such-tool",
        )
        with pytest.raises(CommandError):
            run_pipeline(profile, artifact_dir, version=TEST_VERSION, dry_run=False)
        # nothing packaged after a failed build
        assert not (artifact_dir / f"proj-linux-amd64-{TEST_VERSION}.tar.gz").exists()

    def test_unconfigured_platform_is_partial(self, artifact_dir, profile):
        (artifact_dir / "proj-darwin-10.6-amd64").write_bytes(b"mach-o")
        report = run_pipeline(profile, artifact_dir, version=TEST_VERSION)

        assert report.status == PipelineStatus.PARTIAL
        assert [e.source_name for e in report.unarchived] == ["proj-darwin-10.6-amd64"]
        assert len(report.packaged) == 2

    def test_only_unconfigured_platforms_is_partial(self, tmp_path, profile):
        (tmp_path / "proj-freebsd-386").write_bytes(b"elf")
        report = run_pipeline(profile, tmp_path, version=TEST_VERSION)
        assert report.status == PipelineStatus.PARTIAL
        assert report.packaged == []

    def test_stale_archives_alone_are_success(self, tmp_path, profile):
        (tmp_path / "proj-linux-amd64-v1.0.0.tar.gz").write_bytes(b"old")
        report = run_pipeline(profile, tmp_path, version=TEST_VERSION)
        assert report.status == PipelineStatus.SUCCESS

    def test_packaging_failure_marks_report(self, artifact_dir, profile, monkeypatch):
        import crossbuild.core.packager as packager

        real_copy = packager.shutil.copy2

        def flaky_copy(src, dst, *args, **kwargs):
            if "windows" in str(src):
                raise PermissionError("denied")
            return real_copy(src, dst, *args, **kwargs)

        monkeypatch.setattr(packager.shutil, "copy2", flaky_copy)
        report = run_pipeline(profile, artifact_dir, version=TEST_VERSION)

        assert report.status == PipelineStatus.PARTIAL
        failed = [e for e in report.artifacts if e.status == ArtifactStatus.FAILED]
        assert [e.source_name for e in failed] == ["proj-windows-amd64"]
        assert "denied" in failed[0].error_message


class TestCli:

    def test_main_dry_run(self, artifact_dir, tmp_path, capsys):
        out = tmp_path / "reports"
        code = main([
            "-C", str(artifact_dir),
            "--project", "proj",
            "--targets", "linux/amd64, windows/*",
            "--version", TEST_VERSION,
            "--checksums",
            "-o", str(out),
        ])
        assert code == 0
        assert (out / REPORT_FILENAME).exists()
        assert (artifact_dir / f"proj-windows-amd64-{TEST_VERSION}.tar.gz.sha256").exists()
        stdout = capsys.readouterr().out
        assert "Archives: 2 (status=SUCCESS)" in stdout

    def test_main_missing_work_dir(self, tmp_path):
        assert main(["-C", str(tmp_path / "nope"), "--version", "v1"]) == 1

    def test_main_dirty_tree_declined(self, dirty_repo, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda _prompt: "n")
        assert main(["-C", str(dirty_repo), "--project", "proj", "--check-clean"]) == 1

    def test_main_dirty_tree_yes(self, dirty_repo):
        assert main(["-C", str(dirty_repo), "--project", "proj", "--check-clean", "-y"]) == 0

    def test_main_unconfigured_platform_exits_nonzero(self, artifact_dir, capsys):
        (artifact_dir / "proj-darwin-10.6-amd64").write_bytes(b"mach-o")
        code = main([
            "-C", str(artifact_dir),
            "--project", "proj",
            "--targets", "linux/amd64,windows/*",
            "--version", TEST_VERSION,
        ])
        assert code == 1
        stdout = capsys.readouterr().out
        assert "not archived: proj-darwin-10.6-amd64" in stdout
        assert "status=PARTIAL" in stdout

    def test_main_bad_build_env(self, artifact_dir, monkeypatch):
        monkeypatch.setenv("BUILD_ENV", "GO386")
        assert main(["-C", str(artifact_dir), "--version", TEST_VERSION]) == 1

    def test_main_keeps_settings_not_on_command_line(self, artifact_dir, tmp_path, monkeypatch):
        monkeypatch.setenv("VERSION_VARIABLE", "main.BuildVersion")
        monkeypatch.setenv("BUILD_ENV", "CGO_ENABLED=0")
        out = tmp_path / "reports"
        code = main([
            "-C", str(artifact_dir),
            "--project", "proj",
            "--targets", "linux/amd64,windows/*",
            "--version", TEST_VERSION,
            "-o", str(out),
        ])
        assert code == 0
        data = json.loads((out / REPORT_FILENAME).read_text())
        assert "-X main.BuildVersion=v1.2.3" in data["build"]["command"]
        assert data["build"]["env"] == {"CGO_ENABLED": "0"}
