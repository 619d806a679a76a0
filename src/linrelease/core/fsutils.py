# src/linrelease/core/fsutils.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import List

from .exceptions import FileOperationError

log = logging.getLogger(__name__)


def empty_dir(path: Path) -> Path:
    """Creates ``path`` as an empty directory, removing anything already there."""
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def copy_tree(src: Path, dst: Path) -> Path:
    """Recursively copies ``src`` into ``dst``, overwriting existing files and keeping symlinks."""
    src, dst = Path(src), Path(dst)
    if not src.is_dir():
        raise FileOperationError(f"Directory does not exist: {src}")
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(src, dst, symlinks=True, dirs_exist_ok=True)
    return dst


def copy_file(src: Path, dst: Path) -> Path:
    src, dst = Path(src), Path(dst)
    if not src.is_file():
        raise FileOperationError(f"File does not exist: {src}")
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
    return dst


def copy_matching(src_dir: Path, dst_dir: Path, pattern: str) -> List[Path]:
    """Copies files in ``src_dir`` matching ``pattern`` into ``dst_dir`` (overwriting)."""
    src_dir, dst_dir = Path(src_dir), Path(dst_dir)
    if not src_dir.is_dir():
        return []
    dst_dir.mkdir(parents=True, exist_ok=True)
    copied = []
    for src in sorted(src_dir.glob(pattern)):
        if src.is_file():
            dst = dst_dir / src.name
            shutil.copy2(src, dst)
            copied.append(dst)
    return copied


def write_text(path: Path, text: str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(text)
    return path


def tree_size(root: Path) -> int:
    """Total size in bytes of all regular files under ``root``. Symlinks are not followed."""
    total = 0
    for cur_root, _dirs, files in os.walk(root):
        for fn in files:
            st = os.lstat(os.path.join(cur_root, fn))
            if stat.S_ISREG(st.st_mode):
                total += st.st_size
    return total


def size_in_kib(size_bytes: int) -> int:
    """Rounds a byte count to the nearest KiB, halves rounding up."""
    return (size_bytes + 512) // 1024


def rename_entry(parent: Path, old_name: str, new_name: str) -> Path:
    """Renames ``parent/old_name`` to ``parent/new_name``."""
    src = Path(parent) / old_name
    dst = Path(parent) / new_name
    if not src.exists() and not src.is_symlink():
        raise FileOperationError(f"Cannot rename missing path: {src}")
    if old_name == new_name:
        return dst
    if dst.exists():
        raise FileOperationError(f"Cannot rename {src}: {dst} already exists")
    src.rename(dst)
    return dst


def remove_tree(path: Path):
    path = Path(path)
    if path.exists():
        shutil.rmtree(path)
