# src/linrelease/stages/__init__.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

from .workspace import initialize_workspace, clean_workspace
from .runtime import stage_runtime, rename_runtime
from .resources import archive_resources, finalize_metadata
from .deb import build_deb, installed_size_kib
from .rpm import build_rpm

__all__ = [
    "initialize_workspace",
    "clean_workspace",
    "stage_runtime",
    "rename_runtime",
    "archive_resources",
    "finalize_metadata",
    "build_deb",
    "installed_size_kib",
    "build_rpm",
]
