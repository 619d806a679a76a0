# src/linrelease/stages/resources.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging

from .. import archive
from ..core import constants, fsutils
from ..core.context import WorkspaceContext
from ..core.exceptions import ArchiveError
from ..core.templates import render_template_file

log = logging.getLogger(__name__)


def archive_resources(ctx: WorkspaceContext, archiver: archive.Archiver = archive.default_archiver):
    """
    Seals the built application into ``resources/<archive_name>``.

    Whatever the archiver raises is fatal, and so is an archiver that returns
    without producing the archive.
    """
    build_dir = ctx.input_path("build_dir")
    archive_path = ctx.resources_dir / ctx.config.archive_name
    log.info(f"[ARCHIVE] Packing {build_dir} into {archive_path.name}")

    try:
        archiver(build_dir, archive_path)
    except ArchiveError:
        raise
    except Exception as e:
        raise ArchiveError(f"Archiver failed for {build_dir}: {e}") from e

    if not archive_path.is_file():
        raise ArchiveError(f"Archiver finished but {archive_path} was not created")


def finalize_metadata(ctx: WorkspaceContext):
    """Writes the desktop entry and copies the icon and dictionaries into the image."""
    manifest = ctx.manifest

    desktop = render_template_file(ctx.input_path("desktop_template"), manifest.template_fields())
    desktop_path = ctx.pack_dir / constants.APPLICATIONS_DIR / f"{manifest.name}{constants.DESKTOP_SUFFIX}"
    fsutils.write_text(desktop_path, desktop)
    log.info(f"[FILES] Desktop entry written: {desktop_path.name}")

    icon_src = ctx.input_path("icon_path")
    if icon_src.is_file():
        fsutils.copy_file(icon_src, ctx.ready_app_dir / constants.ICON_FILENAME)
    else:
        log.warning(f"[FILES] Icon not found, skipping: {icon_src}")

    dictionaries_src = ctx.input_path("dictionaries_dir")
    if dictionaries_src.is_dir():
        fsutils.copy_tree(dictionaries_src, ctx.resources_dir / constants.DICTIONARIES_DIRNAME)
    else:
        log.warning(f"[FILES] Dictionaries not found, skipping: {dictionaries_src}")
