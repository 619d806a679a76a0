# filename: src/linrelease/pipeline.py
"""
linrelease - Linux Release Packager - Release Pipeline
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

import logging
from functools import partial
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from . import archive, stages
from .core.config import ReleaseConfig, load_config
from .core.context import WorkspaceContext
from .core.process import CommandRunner, check_packaging_tools, run_command
from .core.report import ReleaseReport, StageOutcome, StageStatus

log = logging.getLogger(__name__)

INIT_STAGE = "workspace"
CLEAN_STAGE = "cleanup"

StageFunc = Callable[[WorkspaceContext], Optional[StageOutcome]]


class ReleasePipeline:
    """
    Runs the packaging stages in order over one shared workspace context.

    The first fatal error stops the run. It is caught here, logged and
    recorded in the returned report. Cleanup of the staging tree only runs on
    the success path unless ``clean_on_failure`` is set, so a failed run
    leaves its staging tree behind for inspection.
    """

    def __init__(
        self,
        project_dir: Union[str, Path],
        config: ReleaseConfig,
        runner: CommandRunner = run_command,
        archiver: archive.Archiver = archive.default_archiver,
    ):
        self.project_dir = Path(project_dir).resolve()
        self.config = config
        self.runner = runner
        self.archiver = archiver

    def stages(self) -> List[Tuple[str, StageFunc]]:
        """The stages that follow workspace initialization, in execution order."""
        plan: List[Tuple[str, StageFunc]] = [
            ("runtime", stages.stage_runtime),
            ("archive", partial(stages.archive_resources, archiver=self.archiver)),
            ("finalize", stages.finalize_metadata),
            ("rename", stages.rename_runtime),
        ]
        if self.config.wants("deb"):
            plan.append(("deb", partial(stages.build_deb, runner=self.runner)))
        if self.config.wants("rpm"):
            plan.append(("rpm", partial(stages.build_rpm, runner=self.runner)))
        return plan

    def run(self) -> ReleaseReport:
        report = ReleaseReport()
        plan = self.stages()
        pending = [INIT_STAGE] + [name for name, _ in plan] + [CLEAN_STAGE]
        current = INIT_STAGE
        ctx = None

        for fmt in ("deb", "rpm"):
            if not self.config.wants(fmt):
                log.info(f"[INFO] Skipping {fmt.upper()} package (not requested)")

        try:
            ctx = stages.initialize_workspace(self.project_dir, self.config)
            report.pack_name = ctx.pack_name
            report.outcomes.append(StageOutcome(stage=INIT_STAGE))
            pending.pop(0)
            tmp_dir = ctx.tmp_dir

            for name, func in plan:
                current = name
                outcome = func(ctx)
                report.outcomes.append(outcome or StageOutcome(stage=name))
                pending.pop(0)

            current = CLEAN_STAGE
            stages.clean_workspace(tmp_dir)
            report.cleaned = True
            report.outcomes.append(StageOutcome(stage=CLEAN_STAGE))
            pending.pop(0)
        except Exception as e:
            log.exception(f"[ERROR] Packaging failed during '{current}' stage: {e}")
            report.failed_stage = current
            report.error = str(e)
            report.outcomes.append(
                StageOutcome(stage=current, status=StageStatus.FAILED, detail=str(e), fatal=True)
            )
            for name in pending[1:]:
                if name != CLEAN_STAGE:
                    report.outcomes.append(StageOutcome(stage=name, status=StageStatus.SKIPPED))
            cleanup = self._handle_failed_cleanup(ctx, report)
            if current != CLEAN_STAGE:
                report.outcomes.append(cleanup)

        if ctx is not None:
            report.artifacts = [str(p) for p in ctx.artifacts]
        return report

    def _handle_failed_cleanup(self, ctx: Optional[WorkspaceContext], report: ReleaseReport) -> StageOutcome:
        if ctx is None:
            # Only a workspace this run initialized is ever removed.
            return StageOutcome(stage=CLEAN_STAGE, status=StageStatus.SKIPPED)
        tmp_dir = ctx.tmp_dir
        if not self.config.clean_on_failure:
            log.warning(f"[CLEAN] Staging directory left in place: {tmp_dir}")
            return StageOutcome(stage=CLEAN_STAGE, status=StageStatus.SKIPPED, detail=f"left {tmp_dir} in place")
        try:
            stages.clean_workspace(tmp_dir)
        except OSError as e:
            log.error(f"[CLEAN] Could not remove staging directory {tmp_dir}: {e}")
            return StageOutcome(stage=CLEAN_STAGE, status=StageStatus.FAILED, detail=str(e))
        report.cleaned = True
        return StageOutcome(stage=CLEAN_STAGE)


def package_linux(
    project_dir: Union[str, Path] = ".",
    config: Optional[ReleaseConfig] = None,
    runner: CommandRunner = run_command,
    archiver: archive.Archiver = archive.default_archiver,
    check_tools: bool = True,
) -> ReleaseReport:
    """
    Stages the application found in ``project_dir`` and builds its .deb and
    .rpm packages into the releases directory.

    Never raises for pipeline failures; inspect the returned report.
    """
    if config is None:
        config = load_config(project_dir)
    if check_tools:
        check_packaging_tools(config.formats, config.use_fakeroot)
    return ReleasePipeline(project_dir, config, runner=runner, archiver=archiver).run()
