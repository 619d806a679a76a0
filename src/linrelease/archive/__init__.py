# src/linrelease/archive/__init__.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

"""Resource archivers. An archiver is any callable ``(source_dir, output_path)`` that raises on failure."""

from pathlib import Path
from typing import Callable

from .asar import create_package, read_file, read_index

Archiver = Callable[[Path, Path], object]

default_archiver: Archiver = create_package

__all__ = ["Archiver", "create_package", "default_archiver", "read_file", "read_index"]
