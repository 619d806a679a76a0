# src/linrelease/stages/runtime.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging

from ..core import fsutils
from ..core.context import WorkspaceContext
from ..core.exceptions import FileOperationError

log = logging.getLogger(__name__)


def stage_runtime(ctx: WorkspaceContext):
    """Copies the prebuilt runtime verbatim into the staged install directory."""
    runtime_dir = ctx.input_path("runtime_dir")
    if not runtime_dir.is_dir():
        raise FileOperationError(f"Runtime directory not found: {runtime_dir}")

    log.info(f"[RUNTIME] Copying runtime from {runtime_dir}")
    fsutils.copy_tree(runtime_dir, ctx.ready_app_dir)


def rename_runtime(ctx: WorkspaceContext):
    """Renames the runtime's executable entry after the application."""
    old_name = ctx.config.runtime_executable_name
    new_name = ctx.manifest.name
    log.info(f"[RENAME] {old_name} -> {new_name}")
    fsutils.rename_entry(ctx.ready_app_dir, old_name, new_name)
