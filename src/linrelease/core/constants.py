# filename: src/linrelease/core/constants.py
"""
linrelease - Linux Release Packager - Constants Module
Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published
by the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with this program. If not, see <https://www.gnu.org/licenses/>.
"""

import platform

# --- File Names ---
CONFIG_FILENAME = "linrelease.yaml"
DESKTOP_SUFFIX = ".desktop"
DEB_SUFFIX = ".deb"
RPM_GLOB = "*.rpm"

# --- Project Layout (relative to the project root) ---
DEFAULT_MANIFEST_PATH = "app/package.json"
DEFAULT_BUILD_DIR = "build"
DEFAULT_RUNTIME_DIR = "node_modules/electron-prebuilt/dist"
DEFAULT_DESKTOP_TEMPLATE = "resources/linux/app.desktop"
DEFAULT_CONTROL_TEMPLATE = "resources/linux/DEBIAN/control"
DEFAULT_RPM_SPEC_TEMPLATE = "resources/linux/RHEL/app.spec"
DEFAULT_ICON_PATH = "app/images/linux/icon.png"
DEFAULT_DICTIONARIES_DIR = "dictionaries"
DEFAULT_TMP_DIR = "tmp"
DEFAULT_RELEASES_DIR = "releases"

# --- Staged Install Image Layout (relative to the pack dir) ---
INSTALL_PREFIX = "opt"
APPLICATIONS_DIR = "usr/share/applications"
DEBIAN_CONTROL_PATH = "DEBIAN/control"
RPM_SPEC_PATH = "SPECS/app.spec"
RPM_OUTPUT_DIR = "RPMS"
RESOURCES_DIR = "resources"
ICON_FILENAME = "icon.png"
DICTIONARIES_DIRNAME = "dictionaries"

# --- Runtime & Archive ---
DEFAULT_RUNTIME_EXECUTABLE = "electron"
DEFAULT_ARCHIVE_NAME = "app.asar"
DEFAULT_PACKAGE_NAME_TEMPLATE = "{{name}}-{{version}}-{{platform}}-{{arch}}"

# --- Native Packaging Tools ---
FAKEROOT = "fakeroot"
DPKG_DEB = "dpkg-deb"
RPMBUILD = "rpmbuild"
DEFAULT_DEB_COMPRESSION = "xz"
SUPPORTED_FORMATS = ("deb", "rpm")

TOOL_INSTALL_HINTS = {
    FAKEROOT: "sudo apt install fakeroot  |  sudo dnf install fakeroot",
    DPKG_DEB: "sudo apt install dpkg-dev  |  sudo dnf install dpkg",
    RPMBUILD: "sudo apt install rpm  |  sudo dnf install rpm-build",
}

# Node-style architecture names used in release package names.
NODE_ARCH_NAMES = {
    "x86_64": "x64",
    "amd64": "x64",
    "i386": "ia32",
    "i686": "ia32",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
}


def host_machine() -> str:
    """Machine name as rpmbuild uses it for its output directory, e.g. 'x86_64'."""
    return platform.machine() or "x86_64"


def host_arch() -> str:
    """Node-style architecture name of the host, e.g. 'x64'."""
    machine = host_machine().lower()
    return NODE_ARCH_NAMES.get(machine, machine)
