"""
Shared pytest fixtures for linrelease tests.

This module provides:
- ``project``: a minimal application project laid out the way the pipeline
  expects it (manifest, build tree, runtime, templates, icon, dictionaries)
- ``config``: settings for that project with a fixed rpm architecture
- ``fake_runner``: a stand-in for fakeroot/dpkg-deb/rpmbuild that records
  calls and produces the files the real tools would
"""

import json
from pathlib import Path
from typing import List

import pytest

from linrelease.core.config import load_config
from linrelease.core.process import CommandResult

MANIFEST = {
    "name": "sample",
    "productName": "Sample App",
    "version": "1.2.3",
    "description": "d",
    "author": "a",
}

DESKTOP_TEMPLATE = """[Desktop Entry]
Name={{productName}}
Comment={{description}}
Exec=/opt/{{name}}/{{name}}
Icon=/opt/{{name}}/icon.png
X-App-Version={{version}}
X-Author={{author}}
X-Untouched={{unknown}}
Type=Application
"""

CONTROL_TEMPLATE = """Package: {{name}}
Version: {{version}}
Section: base
Priority: optional
Architecture: amd64
Installed-Size: {{size}}
Maintainer: {{author}}
Description: {{description}}
"""

SPEC_TEMPLATE = """Name: {{name}}
Version: {{version}}
Release: 1
Summary: {{description}}
Packager: {{author}}
License: MIT

%description
{{description}}

%install
cp -r %{_builddir}/* %{buildroot}

%files
/opt/{{name}}/
/usr/share/applications/{{name}}.desktop
"""

RPM_ARCH = "x86_64"


def _write(path: Path, content, mode=None):
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    if mode is not None:
        path.chmod(mode)
    return path


@pytest.fixture
def project(tmp_path) -> Path:
    root = tmp_path / "my project"
    _write(root / "app" / "package.json", json.dumps(MANIFEST))

    _write(root / "build" / "index.html", "<html><body>sample</body></html>")
    _write(root / "build" / "js" / "app.js", "console.log('sample');\n")
    _write(root / "build" / "package.json", json.dumps(MANIFEST))

    runtime = root / "runtime" / "dist"
    _write(runtime / "electron" / "electron", b"\x7fELF" + b"\0" * 2044, mode=0o755)
    _write(runtime / "electron" / "locales" / "en-US.pak", b"\0" * 100)
    _write(runtime / "libnode.so", b"\0" * 4096)
    _write(runtime / "resources" / "default_app.asar", b"\0" * 10)

    _write(root / "resources" / "linux" / "app.desktop", DESKTOP_TEMPLATE)
    _write(root / "resources" / "linux" / "DEBIAN" / "control", CONTROL_TEMPLATE)
    _write(root / "resources" / "linux" / "RHEL" / "app.spec", SPEC_TEMPLATE)
    _write(root / "app" / "images" / "linux" / "icon.png", b"\x89PNG\r\n\x1a\n" + b"\0" * 56)
    _write(root / "dictionaries" / "en_US.dic", "2\nhello\nworld\n")
    return root


@pytest.fixture
def config(project):
    return load_config(project, overrides={"runtime_dir": "runtime/dist", "rpm_arch": RPM_ARCH})


class FakeRunner:
    """
    Records every command and imitates the packaging tools.

    ``results`` maps a tool name (``dpkg-deb``/``rpmbuild``) to the
    ``(returncode, stderr)`` it should report; tools that succeed write their
    output files.
    """

    def __init__(self, results=None):
        self.calls: List[List[str]] = []
        self.results = results or {}

    def __call__(self, args, timeout=None, cwd=None):
        args = [str(a) for a in args]
        self.calls.append(args)
        tool = args[1] if args[0] == "fakeroot" else args[0]
        returncode, stderr = self.results.get(tool, (0, ""))

        if returncode == 0 and not stderr:
            if tool == "dpkg-deb":
                _write(Path(args[-1]), b"!<arch>\n")
            elif tool == "rpmbuild":
                topdir = Path(self._define(args, "_topdir"))
                _write(topdir / "RPMS" / RPM_ARCH / "sample-1.2.3-1.x86_64.rpm", b"\xed\xab\xee\xdb")

        return CommandResult(args=args, returncode=returncode, stderr=stderr)

    @staticmethod
    def _define(args, macro):
        for i, arg in enumerate(args):
            if arg == "-D" and args[i + 1].startswith(macro + " "):
                return args[i + 1][len(macro) + 1:]
        raise AssertionError(f"macro {macro} not defined in {args}")

    def calls_for(self, tool):
        return [c for c in self.calls if tool in c]


@pytest.fixture
def fake_runner():
    return FakeRunner()
