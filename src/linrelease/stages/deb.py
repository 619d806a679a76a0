# src/linrelease/stages/deb.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
from pathlib import Path

from ..core import constants, fsutils
from ..core.context import WorkspaceContext
from ..core.process import CommandRunner, run_command
from ..core.report import StageOutcome, StageStatus, command_outcome
from ..core.templates import render_template_file

log = logging.getLogger(__name__)

STAGE = "deb"


def installed_size_kib(app_dir: Path) -> int:
    """Installed-Size for the Debian control file, in KiB."""
    return fsutils.size_in_kib(fsutils.tree_size(app_dir))


def build_deb(ctx: WorkspaceContext, runner: CommandRunner = run_command) -> StageOutcome:
    """
    Writes DEBIAN/control and runs dpkg-deb over the staged image.

    Best-effort: a failing dpkg-deb is logged and reported in the outcome, the
    pipeline carries on with the next stage.
    """
    deb_name = f"{ctx.pack_name}{constants.DEB_SUFFIX}"
    deb_path = ctx.releases_dir / deb_name
    log.info(f"[DEB] Creating DEB package... ({deb_name})")

    fields = ctx.manifest.packaging_fields()
    fields["size"] = installed_size_kib(ctx.ready_app_dir)
    control = render_template_file(ctx.input_path("control_template"), fields)
    fsutils.write_text(ctx.pack_dir / constants.DEBIAN_CONTROL_PATH, control)

    args = ctx.tool_prefix() + [
        constants.DPKG_DEB,
        f"-Z{ctx.config.deb_compression}",
        "--build",
        str(ctx.pack_dir),
        str(deb_path),
    ]
    result = runner(args, timeout=ctx.config.command_timeout)
    outcome = command_outcome(STAGE, result)

    if outcome.status != StageStatus.OK:
        log.error(f"[ERROR] DEB package build failed: {outcome.detail}")
        if result.stderr.strip():
            log.error(f"STDERR: {result.stderr.strip()}")
        return outcome

    ctx.artifacts.append(deb_path)
    log.info(f"[SUCCESS] DEB package ready: {deb_path}")
    return outcome
