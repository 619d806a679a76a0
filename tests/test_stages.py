"""Tests for the individual pipeline stages."""

import logging

import pytest

from linrelease import stages
from linrelease.archive import read_file
from linrelease.core.exceptions import (
    ArchiveError,
    ConfigurationError,
    FileOperationError,
    ManifestError,
    TemplateError,
)
from linrelease.core.config import load_config
from linrelease.core.report import StageStatus

from conftest import RPM_ARCH, FakeRunner


@pytest.fixture
def ctx(project, config):
    return stages.initialize_workspace(project, config)


@pytest.fixture
def staged(ctx):
    """Context whose install image is complete, ready for packaging."""
    stages.stage_runtime(ctx)
    stages.archive_resources(ctx)
    stages.finalize_metadata(ctx)
    stages.rename_runtime(ctx)
    return ctx


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


def test_initialize_workspace_paths(ctx, project):
    project = project.resolve()
    assert ctx.pack_name.startswith("sample-1.2.3-linux-")
    assert ctx.tmp_dir == project / "tmp"
    assert ctx.pack_dir == project / "tmp" / ctx.pack_name
    assert ctx.ready_app_dir == ctx.pack_dir / "opt" / "sample"
    assert ctx.releases_dir == project / "releases"
    assert ctx.tmp_dir.is_dir() and list(ctx.tmp_dir.iterdir()) == []
    assert ctx.releases_dir.is_dir()


def test_initialize_workspace_empties_stale_tmp(project, config):
    stale = project / "tmp" / "old-run" / "leftover"
    stale.parent.mkdir(parents=True)
    stale.write_text("stale")
    ctx = stages.initialize_workspace(project, config)
    assert not stale.exists()
    assert ctx.tmp_dir.is_dir()


def test_initialize_workspace_keeps_existing_releases(project, config):
    old = project / "releases" / "sample-1.0.0.deb"
    old.parent.mkdir()
    old.write_text("previous release")
    stages.initialize_workspace(project, config)
    assert old.read_text() == "previous release"


def test_initialize_workspace_missing_manifest(project, config):
    (project / "app" / "package.json").unlink()
    with pytest.raises(ManifestError):
        stages.initialize_workspace(project, config)


def test_initialize_workspace_refuses_project_as_tmp(project):
    config = load_config(project, overrides={"tmp_dir": "."})
    with pytest.raises(ConfigurationError):
        stages.initialize_workspace(project, config)
    assert (project / "app" / "package.json").exists()


def test_initialize_workspace_refuses_releases_as_tmp(project):
    old = project / "releases" / "sample-1.0.0.deb"
    old.parent.mkdir()
    old.write_text("previous release")
    config = load_config(project, overrides={"tmp_dir": "releases"})
    with pytest.raises(ConfigurationError, match="releases_dir"):
        stages.initialize_workspace(project, config)
    assert old.read_text() == "previous release"


@pytest.mark.parametrize("overrides, key", [
    ({"releases_dir": "tmp/out"}, "releases_dir"),
    ({"tmp_dir": "releases/staging"}, "releases_dir"),
    ({"tmp_dir": "build"}, "build_dir"),
    ({"tmp_dir": "build/tmp"}, "build_dir"),
    ({"tmp_dir": "runtime"}, "runtime_dir"),
    ({"runtime_dir": "tmp/dist"}, "runtime_dir"),
])
def test_initialize_workspace_refuses_overlapping_tmp(project, overrides, key):
    settings = {"runtime_dir": "runtime/dist"}
    settings.update(overrides)
    config = load_config(project, overrides=settings)
    with pytest.raises(ConfigurationError, match=key):
        stages.initialize_workspace(project, config)
    assert (project / "build" / "js" / "app.js").is_file()
    assert (project / "runtime" / "dist" / "electron").is_dir()


def test_initialize_workspace_allows_sibling_dirs(project):
    config = load_config(project, overrides={
        "runtime_dir": "runtime/dist", "tmp_dir": "out/tmp", "releases_dir": "out/releases",
    })
    ctx = stages.initialize_workspace(project, config)
    assert ctx.tmp_dir.is_dir()
    assert ctx.releases_dir.is_dir()


# ---------------------------------------------------------------------------
# Runtime, archive, metadata, rename
# ---------------------------------------------------------------------------


def test_stage_runtime_copies_runtime(ctx):
    stages.stage_runtime(ctx)
    assert (ctx.ready_app_dir / "electron" / "electron").is_file()
    assert (ctx.ready_app_dir / "libnode.so").stat().st_size == 4096


def test_stage_runtime_missing_source(project):
    config = load_config(project, overrides={"runtime_dir": "no/such/runtime"})
    ctx = stages.initialize_workspace(project, config)
    with pytest.raises(FileOperationError):
        stages.stage_runtime(ctx)


def test_archive_resources_writes_asar(ctx, project):
    stages.archive_resources(ctx)
    archive_path = ctx.resources_dir / "app.asar"
    assert archive_path.is_file()
    assert read_file(archive_path, "js/app.js") == (project / "build" / "js" / "app.js").read_bytes()


def test_archive_resources_calls_archiver_with_build_dir(ctx, project):
    calls = []

    def archiver(src, dest):
        calls.append((src, dest))
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(b"sealed")

    stages.archive_resources(ctx, archiver=archiver)
    assert calls == [(project.resolve() / "build", ctx.resources_dir / "app.asar")]


def test_archive_resources_propagates_archiver_errors(ctx):
    def archiver(src, dest):
        raise RuntimeError("asar exploded")

    with pytest.raises(ArchiveError, match="asar exploded"):
        stages.archive_resources(ctx, archiver=archiver)


def test_archive_resources_detects_missing_output(ctx):
    with pytest.raises(ArchiveError, match="not created"):
        stages.archive_resources(ctx, archiver=lambda src, dest: None)


def test_archive_resources_missing_build_dir(ctx, project):
    import shutil

    shutil.rmtree(project / "build")
    with pytest.raises(ArchiveError):
        stages.archive_resources(ctx)


def test_finalize_metadata_renders_desktop_entry(ctx):
    stages.stage_runtime(ctx)
    stages.finalize_metadata(ctx)

    desktop = (ctx.pack_dir / "usr" / "share" / "applications" / "sample.desktop").read_text()
    assert "Name=Sample App\n" in desktop
    assert "Comment=d\n" in desktop
    assert "Exec=/opt/sample/sample\n" in desktop
    assert "X-App-Version=1.2.3\n" in desktop
    assert "X-Author=a\n" in desktop
    assert "X-Untouched={{unknown}}\n" in desktop
    for key in ("name", "productName", "description", "version", "author"):
        assert "{{%s}}" % key not in desktop

    assert (ctx.ready_app_dir / "icon.png").read_bytes().startswith(b"\x89PNG")
    assert (ctx.resources_dir / "dictionaries" / "en_US.dic").is_file()


def test_finalize_metadata_skips_missing_optional_resources(ctx, project, caplog):
    (project / "app" / "images" / "linux" / "icon.png").unlink()
    with caplog.at_level(logging.WARNING):
        stages.finalize_metadata(ctx)
    assert "Icon not found" in caplog.text
    assert not (ctx.ready_app_dir / "icon.png").exists()
    assert (ctx.resources_dir / "dictionaries" / "en_US.dic").is_file()
    assert (ctx.pack_dir / "usr" / "share" / "applications" / "sample.desktop").is_file()


def test_finalize_metadata_missing_desktop_template(ctx, project):
    (project / "resources" / "linux" / "app.desktop").unlink()
    with pytest.raises(TemplateError):
        stages.finalize_metadata(ctx)


def test_rename_runtime(ctx):
    stages.stage_runtime(ctx)
    stages.rename_runtime(ctx)
    assert not (ctx.ready_app_dir / "electron").exists()
    assert (ctx.ready_app_dir / "sample").is_dir()
    assert (ctx.ready_app_dir / "sample" / "electron").is_file()


def test_rename_runtime_without_runtime_fails(ctx):
    with pytest.raises(FileOperationError):
        stages.rename_runtime(ctx)


# ---------------------------------------------------------------------------
# Packaging
# ---------------------------------------------------------------------------


def test_build_deb(staged, fake_runner):
    outcome = stages.build_deb(staged, runner=fake_runner)

    assert outcome.status == StageStatus.OK
    deb_path = staged.releases_dir / f"{staged.pack_name}.deb"
    assert fake_runner.calls == [[
        "fakeroot", "dpkg-deb", "-Zxz", "--build", str(staged.pack_dir), str(deb_path),
    ]]
    assert staged.artifacts == [deb_path]

    control = (staged.pack_dir / "DEBIAN" / "control").read_text()
    size = stages.installed_size_kib(staged.ready_app_dir)
    assert f"Installed-Size: {size}\n" in control
    assert "Package: sample\n" in control
    assert "Version: 1.2.3\n" in control
    assert "Maintainer: a\n" in control
    assert "{{" not in control


def test_build_deb_paths_with_spaces_are_single_arguments(staged, fake_runner):
    stages.build_deb(staged, runner=fake_runner)
    args = fake_runner.calls[0]
    assert " " in str(staged.pack_dir)
    assert str(staged.pack_dir) in args


@pytest.mark.parametrize("result", [(2, "dpkg-deb: error: failed"), (0, "dpkg-deb: warning"), (1, "")])
def test_build_deb_failure_is_best_effort(staged, result):
    runner = FakeRunner({"dpkg-deb": result})
    outcome = stages.build_deb(staged, runner=runner)
    assert outcome.status == StageStatus.FAILED
    assert not outcome.fatal
    assert staged.artifacts == []


def test_build_deb_without_fakeroot(project, fake_runner):
    config = load_config(project, overrides={
        "runtime_dir": "runtime/dist", "use_fakeroot": False, "deb_compression": "gzip",
    })
    ctx = stages.initialize_workspace(project, config)
    stages.stage_runtime(ctx)
    stages.build_deb(ctx, runner=fake_runner)
    assert fake_runner.calls[0][:2] == ["dpkg-deb", "-Zgzip"]


def test_build_rpm(staged, fake_runner):
    outcome = stages.build_rpm(staged, runner=fake_runner)

    assert outcome.status == StageStatus.OK
    spec_path = staged.tmp_dir / "SPECS" / "app.spec"
    assert fake_runner.calls == [[
        "fakeroot", "rpmbuild", "--quiet",
        "-D", f"_topdir {staged.tmp_dir}",
        "-D", f"_builddir {staged.pack_dir}",
        "-bb", str(spec_path),
    ]]
    spec = spec_path.read_text()
    assert "Name: sample\n" in spec
    assert "Version: 1.2.3\n" in spec
    assert "Packager: a\n" in spec
    assert "{{" not in spec

    rpm = staged.releases_dir / "sample-1.2.3-1.x86_64.rpm"
    assert rpm.is_file()
    assert staged.artifacts == [rpm]


def test_build_rpm_overwrites_existing_release(staged, fake_runner):
    rpm = staged.releases_dir / "sample-1.2.3-1.x86_64.rpm"
    rpm.write_bytes(b"old")
    stages.build_rpm(staged, runner=fake_runner)
    assert rpm.read_bytes() != b"old"


def test_build_rpm_failure_copies_nothing(staged):
    runner = FakeRunner({"rpmbuild": (1, "error: Bad spec")})
    outcome = stages.build_rpm(staged, runner=runner)
    assert outcome.status == StageStatus.FAILED
    assert "exited with code 1" == outcome.detail
    assert list(staged.releases_dir.glob("*.rpm")) == []


def test_build_rpm_success_without_output_is_reported(project):
    config = load_config(project, overrides={"runtime_dir": "runtime/dist", "rpm_arch": "aarch64"})
    ctx = stages.initialize_workspace(project, config)
    outcome = stages.build_rpm(ctx, runner=FakeRunner())
    assert ctx.rpm_arch == "aarch64" != RPM_ARCH
    assert outcome.status == StageStatus.FAILED
    assert "no *.rpm" in outcome.detail


def test_clean_workspace(ctx):
    (ctx.pack_dir / "opt").mkdir(parents=True)
    stages.clean_workspace(ctx.tmp_dir)
    assert not ctx.tmp_dir.exists()
    stages.clean_workspace(ctx.tmp_dir)
