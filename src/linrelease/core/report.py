# src/linrelease/core/report.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .process import CommandResult


class StageStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


class StageOutcome(BaseModel):
    stage: str
    status: StageStatus = StageStatus.OK
    detail: str = ""
    fatal: bool = False
    command: Optional[CommandResult] = None


class ReleaseReport(BaseModel):
    """What one pipeline run did. Returned to the caller instead of raising."""

    pack_name: Optional[str] = None
    artifacts: List[str] = Field(default_factory=list)
    outcomes: List[StageOutcome] = Field(default_factory=list)
    failed_stage: Optional[str] = None
    error: Optional[str] = None
    cleaned: bool = False

    @property
    def succeeded(self) -> bool:
        """True when no fatal stage failed. Best-effort packaging failures do not count."""
        return self.failed_stage is None

    @property
    def packaging_failures(self) -> List[StageOutcome]:
        return [o for o in self.outcomes if o.status == StageStatus.FAILED and not o.fatal]

    def outcome(self, stage: str) -> Optional[StageOutcome]:
        for o in self.outcomes:
            if o.stage == stage:
                return o
        return None


def command_outcome(stage: str, result: CommandResult) -> StageOutcome:
    """Best-effort outcome of a packaging-tool run; failures are recorded, never raised."""
    if result.ok:
        return StageOutcome(stage=stage, command=result)
    return StageOutcome(
        stage=stage, status=StageStatus.FAILED, detail=result.describe_failure(), command=result
    )
