# filename: src/linrelease/main.py
#!/usr/bin/env python3
"""
linrelease - Linux Release Packager
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

import argparse
import logging
import sys
from pathlib import Path

from .core import constants
from .core.config import load_config
from .core.exceptions import ConfigurationError
from .core.logging_config import setup_logging
from .core.report import ReleaseReport, StageStatus
from .core.version import __app_name__, __version__
from .pipeline import package_linux


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="Package a built desktop application as .deb and .rpm installers.",
    )
    parser.add_argument("--project-dir", default=".", help="Project root (default: current directory).")
    parser.add_argument("--config", help=f"YAML settings file (default: {constants.CONFIG_FILENAME} in the project root).")
    parser.add_argument(
        "--format", dest="formats", action="append", choices=constants.SUPPORTED_FORMATS,
        help="Package format to build; repeat for several (default: deb and rpm).",
    )
    parser.add_argument("--runtime-dir", help="Directory holding the prebuilt application runtime.")
    parser.add_argument("--timeout", type=float, help="Seconds before a packaging tool is given up on.")
    parser.add_argument("--no-fakeroot", action="store_true", help="Run packaging tools without fakeroot.")
    parser.add_argument(
        "--clean-on-failure", action="store_true",
        help="Remove the staging directory even when a stage fails.",
    )
    parser.add_argument("--log-file", help="Also write logs to this file (rotated at 5 MB).")
    parser.add_argument("--strict", action="store_true", help="Exit with code 1 if anything failed.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"{__app_name__} {__version__}")
    return parser


def print_summary(report: ReleaseReport):
    """Prints the build summary."""
    print("\n--- Build Summary ---")
    if report.artifacts:
        print(f"[SUCCESS] Built {len(report.artifacts)} package(s):")
        for artifact in report.artifacts:
            print(f"  ✓ {artifact}")

    failed = [o for o in report.outcomes if o.status == StageStatus.FAILED]
    if failed:
        print(f"[FAILED] {len(failed)} stage(s) failed:")
        for outcome in failed:
            print(f"  ✗ {outcome.stage}: {outcome.detail}")

    skipped = [o.stage for o in report.outcomes if o.status == StageStatus.SKIPPED]
    if skipped:
        print(f"[SKIPPED] {', '.join(skipped)}")


def main(argv=None) -> int:
    """Main entry point for linrelease."""
    args = build_parser().parse_args(argv)
    project_dir = Path(args.project_dir)

    overrides = {
        "formats": args.formats,
        "runtime_dir": args.runtime_dir,
        "command_timeout": args.timeout,
        "use_fakeroot": False if args.no_fakeroot else None,
        "clean_on_failure": True if args.clean_on_failure else None,
        "log_file": args.log_file,
    }

    level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(level)
    log = logging.getLogger(__name__)

    try:
        config = load_config(project_dir, args.config, overrides)
    except ConfigurationError as e:
        log.error(f"[ERROR] {e}")
        return 2

    if config.log_file:
        setup_logging(level, config.resolve(project_dir, "log_file"))

    log.info(f"--- {__app_name__} v{__version__} ---")
    log.info(f"Building packages: {', '.join(config.formats)}")

    report = package_linux(project_dir, config)
    print_summary(report)

    if args.strict and (not report.succeeded or report.packaging_failures):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
