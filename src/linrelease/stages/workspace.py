# src/linrelease/stages/workspace.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
from pathlib import Path

from ..core import fsutils
from ..core.config import ReleaseConfig
from ..core.context import WorkspaceContext
from ..core.exceptions import ConfigurationError
from ..core.manifest import load_manifest, release_package_name

log = logging.getLogger(__name__)


def _overlaps(a: Path, b: Path) -> bool:
    return a == b or a in b.parents or b in a.parents


def _check_tmp_dir(project_dir: Path, tmp_dir: Path, config: ReleaseConfig):
    """Refuses temp roots whose emptying or removal would destroy project files or releases."""
    if tmp_dir == project_dir or tmp_dir in project_dir.parents:
        raise ConfigurationError(f"Refusing to use {tmp_dir} as staging directory: it contains the project")
    for key in ("releases_dir", "build_dir", "runtime_dir"):
        other = config.resolve(project_dir, key).resolve()
        if _overlaps(tmp_dir, other):
            raise ConfigurationError(
                f"Refusing to use {tmp_dir} as staging directory: it overlaps {key} ({other})"
            )


def initialize_workspace(project_dir: Path, config: ReleaseConfig) -> WorkspaceContext:
    """
    Empties the staging root, loads the manifest and computes every path the
    later stages use.
    """
    project_dir = Path(project_dir).resolve()
    tmp_dir = config.resolve(project_dir, "tmp_dir").resolve()
    _check_tmp_dir(project_dir, tmp_dir, config)

    log.info(f"[CLEAN] Preparing staging directory {tmp_dir}")
    fsutils.empty_dir(tmp_dir)

    manifest = load_manifest(config.resolve(project_dir, "manifest_path"))
    pack_name = release_package_name(manifest, config.package_name_template)

    ctx = WorkspaceContext(project_dir, config, manifest, pack_name)
    ctx.releases_dir.mkdir(parents=True, exist_ok=True)

    log.info(f"[INIT] Packaging {manifest.name} {manifest.version} as {pack_name}")
    return ctx


def clean_workspace(tmp_dir: Path):
    """Removes the whole staging tree."""
    log.info(f"[CLEAN] Removing staging directory {tmp_dir}")
    fsutils.remove_tree(tmp_dir)
