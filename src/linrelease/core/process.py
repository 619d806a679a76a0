# src/linrelease/core/process.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel

from . import constants

log = logging.getLogger(__name__)


class CommandResult(BaseModel):
    """Outcome of one external command. Never raised, always inspected by the caller."""

    args: List[str]
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        # The packaging tools report problems on stderr even when they exit 0.
        return self.error is None and self.returncode == 0 and not self.stderr.strip()

    def describe_failure(self) -> str:
        if self.error:
            return self.error
        if self.returncode:
            return f"exited with code {self.returncode}"
        if self.stderr.strip():
            return "reported errors on stderr"
        return "no failure"


CommandRunner = Callable[..., CommandResult]


def format_command(args: Sequence[Union[str, Path]]) -> str:
    """Shell-quoted rendering of an argument list, for logs."""
    return shlex.join(str(a) for a in args)


def run_command(
    args: Sequence[Union[str, Path]],
    timeout: Optional[float] = None,
    cwd: Optional[Path] = None,
) -> CommandResult:
    """
    Runs a command to completion and captures its output.

    Arguments are passed as a list, so paths containing whitespace reach the
    tool intact. Spawn failures and timeouts are reported through
    ``CommandResult.error`` instead of being raised.
    """
    argv = [str(a) for a in args]
    log.info(f"[RUN] {format_command(argv)}")
    try:
        proc = subprocess.run(
            argv, cwd=cwd, capture_output=True, text=True, timeout=timeout
        )
    except FileNotFoundError:
        return CommandResult(args=argv, error=f"Command '{argv[0]}' not found")
    except subprocess.TimeoutExpired as e:
        return CommandResult(
            args=argv,
            stdout=_decode(e.stdout),
            stderr=_decode(e.stderr),
            error=f"Command timed out after {timeout} seconds",
        )
    except OSError as e:
        return CommandResult(args=argv, error=f"Command could not be started: {e}")

    return CommandResult(
        args=argv, returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or ""
    )


def _decode(output) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def check_packaging_tools(formats: Sequence[str], use_fakeroot: bool = True) -> Dict[str, bool]:
    """
    Reports which native packaging tools are on PATH and logs install hints for
    the missing ones. Never aborts; the packaging stages record spawn failures.
    """
    wanted = []
    if use_fakeroot:
        wanted.append(constants.FAKEROOT)
    if "deb" in formats:
        wanted.append(constants.DPKG_DEB)
    if "rpm" in formats:
        wanted.append(constants.RPMBUILD)

    available = {tool: shutil.which(tool) is not None for tool in wanted}
    missing = [tool for tool, found in available.items() if not found]
    if missing:
        log.warning("[CHECK] Missing packaging tools:")
        for tool in missing:
            log.warning(f"  - {tool}: {constants.TOOL_INSTALL_HINTS[tool]}")
    else:
        log.info("[CHECK] Packaging tools OK")
    return available
