# src/linrelease/core/context.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

from pathlib import Path
from typing import List

from . import constants
from .config import ReleaseConfig
from .manifest import Manifest


class WorkspaceContext:
    """
    Paths and metadata shared by every stage of one pipeline run.

    Created once by the workspace initializer and passed explicitly to each
    stage. Only ``artifacts`` changes after construction.
    """

    def __init__(self, project_dir: Path, config: ReleaseConfig, manifest: Manifest, pack_name: str):
        self.project_dir = Path(project_dir)
        self.config = config
        self.manifest = manifest
        self.pack_name = pack_name

        self.tmp_dir = config.resolve(self.project_dir, "tmp_dir")
        self.releases_dir = config.resolve(self.project_dir, "releases_dir")
        self.pack_dir = self.tmp_dir / pack_name
        self.ready_app_dir = self.pack_dir / constants.INSTALL_PREFIX / manifest.name
        self.resources_dir = self.ready_app_dir / constants.RESOURCES_DIR

        self.artifacts: List[Path] = []

    def input_path(self, key: str) -> Path:
        """Resolves an input setting (template, icon, ...) against the project root."""
        return self.config.resolve(self.project_dir, key)

    def tool_prefix(self) -> List[str]:
        return [constants.FAKEROOT] if self.config.use_fakeroot else []

    @property
    def rpm_arch(self) -> str:
        return self.config.rpm_arch or constants.host_machine()

    def __repr__(self):
        return f"WorkspaceContext(pack_name={self.pack_name!r}, pack_dir={str(self.pack_dir)!r})"
