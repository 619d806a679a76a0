# src/linrelease/stages/rpm.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging

from ..core import constants, fsutils
from ..core.context import WorkspaceContext
from ..core.process import CommandRunner, run_command
from ..core.report import StageOutcome, StageStatus, command_outcome
from ..core.templates import render_template_file

log = logging.getLogger(__name__)

STAGE = "rpm"


def build_rpm(ctx: WorkspaceContext, runner: CommandRunner = run_command) -> StageOutcome:
    """
    Writes the spec file, runs rpmbuild with the staging root as ``_topdir``
    and the install image as ``_builddir``, then copies the built packages
    into the releases directory. Best-effort, like the DEB stage.
    """
    log.info(f"[RPM] Creating RPM package... ({ctx.pack_name})")

    spec = render_template_file(ctx.input_path("rpm_spec_template"), ctx.manifest.packaging_fields())
    spec_path = fsutils.write_text(ctx.tmp_dir / constants.RPM_SPEC_PATH, spec)

    args = ctx.tool_prefix() + [
        constants.RPMBUILD,
        "--quiet",
        "-D", f"_topdir {ctx.tmp_dir}",
        "-D", f"_builddir {ctx.pack_dir}",
        "-bb",
        str(spec_path),
    ]
    result = runner(args, timeout=ctx.config.command_timeout)
    outcome = command_outcome(STAGE, result)

    if outcome.status != StageStatus.OK:
        log.error(f"[ERROR] RPM package build failed: {outcome.detail}")
        if result.stderr.strip():
            log.error(f"STDERR: {result.stderr.strip()}")
        return outcome

    output_dir = ctx.tmp_dir / constants.RPM_OUTPUT_DIR / ctx.rpm_arch
    copied = fsutils.copy_matching(output_dir, ctx.releases_dir, constants.RPM_GLOB)
    if not copied:
        log.error(f"[ERROR] rpmbuild succeeded but no package was found in {output_dir}")
        return StageOutcome(
            stage=STAGE, status=StageStatus.FAILED, detail=f"no *.rpm in {output_dir}", command=result
        )

    for rpm_path in copied:
        ctx.artifacts.append(rpm_path)
        log.info(f"[SUCCESS] RPM package ready: {rpm_path}")
    return outcome
