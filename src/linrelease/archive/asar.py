# src/linrelease/archive/asar.py
"""
linrelease - Linux Release Packager - ASAR Archive Writer
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

Layout of an archive:

    uint32 4 | uint32 len(header)          size pickle
    uint32 len(payload) | uint32 len(json) | json | pad to 4 bytes
    file data, concatenated in index order

The JSON index maps names to ``{"files": {...}}`` for directories,
``{"size": n, "offset": "o"}`` for files (offset is a decimal string relative
to the end of the header) and ``{"link": "rel/path"}`` for symlinks that stay
inside the archived tree.
"""

import json
import logging
import os
import shutil
import stat
import struct
from pathlib import Path
from typing import Any, Dict, List, Tuple

from ..core.exceptions import ArchiveError

log = logging.getLogger(__name__)

UINT32 = struct.Struct("<I")


def _align4(n: int) -> int:
    return (n + 3) & ~3


def _build_index(root: Path) -> Tuple[Dict[str, Any], List[Path]]:
    """Walks ``root`` in sorted order and returns the JSON index plus the files to append."""
    real_root = os.path.realpath(root)
    files_in_order: List[Path] = []
    offset = 0

    def _walk(directory: Path) -> Dict[str, Any]:
        nonlocal offset
        entries: Dict[str, Any] = {}
        for entry in sorted(os.scandir(directory), key=lambda e: e.name):
            path = Path(entry.path)
            if entry.is_symlink():
                target = os.path.realpath(path)
                if os.path.commonpath([real_root, target]) == real_root and os.path.exists(target):
                    entries[entry.name] = {"link": os.path.relpath(target, real_root).replace(os.sep, "/")}
                    continue
                if os.path.isdir(target):
                    raise ArchiveError(f"Directory link leaves the archived tree: {path} -> {target}")
                # File links pointing outside the tree are stored as their targets.

            if path.is_dir():
                entries[entry.name] = {"files": _walk(path)}
            elif path.is_file():
                st = path.stat()
                node: Dict[str, Any] = {"size": st.st_size, "offset": str(offset)}
                if st.st_mode & stat.S_IXUSR:
                    node["executable"] = True
                entries[entry.name] = node
                files_in_order.append(path)
                offset += st.st_size
            else:
                log.warning(f"[ARCHIVE] Skipping unsupported entry: {path}")
        return entries

    return {"files": _walk(root)}, files_in_order


def _encode_header(index: Dict[str, Any]) -> bytes:
    data = json.dumps(index, separators=(",", ":")).encode("utf-8")
    payload = UINT32.pack(len(data)) + data + b"\0" * (_align4(len(data)) - len(data))
    header_pickle = UINT32.pack(len(payload)) + payload
    size_pickle = UINT32.pack(4) + UINT32.pack(len(header_pickle))
    return size_pickle + header_pickle


def create_package(src_dir, dest_path):
    """
    Seals ``src_dir`` into a single asar archive at ``dest_path``.

    The source tree is only read. A partially written archive is removed
    before the error is raised.
    """
    src_dir, dest_path = Path(src_dir), Path(dest_path)
    if not src_dir.is_dir():
        raise ArchiveError(f"Archive source directory does not exist: {src_dir}")

    try:
        index, files = _build_index(src_dir)
        header = _encode_header(index)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        with open(dest_path, "wb") as out:
            out.write(header)
            for path in files:
                with open(path, "rb") as f:
                    shutil.copyfileobj(f, out)
    except OSError as e:
        if dest_path.exists():
            dest_path.unlink()
        raise ArchiveError(f"Failed to create archive {dest_path}: {e}") from e

    log.debug(f"[ARCHIVE] Wrote {len(files)} file(s) to {dest_path}")
    return dest_path


def read_index(archive_path) -> Tuple[Dict[str, Any], int]:
    """Returns the JSON index of an archive and the offset where file data starts."""
    with open(archive_path, "rb") as f:
        size_pickle = f.read(8)
        if len(size_pickle) != 8:
            raise ArchiveError(f"Truncated archive header: {archive_path}")
        (header_size,) = UINT32.unpack(size_pickle[4:8])
        header_pickle = f.read(header_size)
    if len(header_pickle) != header_size:
        raise ArchiveError(f"Truncated archive header: {archive_path}")
    (json_size,) = UINT32.unpack(header_pickle[4:8])
    index = json.loads(header_pickle[8:8 + json_size].decode("utf-8"))
    return index, 8 + header_size


def read_file(archive_path, inner_path: str) -> bytes:
    """Reads one file's contents out of an archive, e.g. ``read_file(p, "js/app.js")``."""
    index, data_start = read_index(archive_path)
    node = index
    for part in inner_path.strip("/").split("/"):
        try:
            node = node["files"][part]
        except KeyError:
            raise ArchiveError(f"{inner_path} not found in {archive_path}")
    if "size" not in node:
        raise ArchiveError(f"{inner_path} is not a regular file in {archive_path}")
    with open(archive_path, "rb") as f:
        f.seek(data_start + int(node["offset"]))
        return f.read(node["size"])
