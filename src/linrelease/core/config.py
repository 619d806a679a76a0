# src/linrelease/core/config.py
"""
linrelease - Linux Release Packager - Configuration Management
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
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import constants
from .exceptions import ConfigurationError

log = logging.getLogger(__name__)

# --- Default Configuration Values ---
# Central source of truth for all packaging settings and their defaults.
# Paths are relative to the project root unless given as absolute paths.

DEFAULT_SETTINGS = {
    # Inputs
    "manifest_path": constants.DEFAULT_MANIFEST_PATH,
    "build_dir": constants.DEFAULT_BUILD_DIR,
    "runtime_dir": constants.DEFAULT_RUNTIME_DIR,
    "runtime_executable_name": constants.DEFAULT_RUNTIME_EXECUTABLE,
    "desktop_template": constants.DEFAULT_DESKTOP_TEMPLATE,
    "control_template": constants.DEFAULT_CONTROL_TEMPLATE,
    "rpm_spec_template": constants.DEFAULT_RPM_SPEC_TEMPLATE,
    "icon_path": constants.DEFAULT_ICON_PATH,
    "dictionaries_dir": constants.DEFAULT_DICTIONARIES_DIR,

    # Outputs
    "tmp_dir": constants.DEFAULT_TMP_DIR,
    "releases_dir": constants.DEFAULT_RELEASES_DIR,
    "archive_name": constants.DEFAULT_ARCHIVE_NAME,
    "package_name_template": None,

    # Packaging tools
    "formats": list(constants.SUPPORTED_FORMATS),
    "deb_compression": constants.DEFAULT_DEB_COMPRESSION,
    "rpm_arch": None,
    "use_fakeroot": True,
    "command_timeout": None,

    # Pipeline behaviour
    "clean_on_failure": False,
    "log_file": None,
}


class ReleaseConfig(BaseModel):
    """Validated, immutable packaging settings for one pipeline run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    manifest_path: str
    build_dir: str
    runtime_dir: str
    runtime_executable_name: str = Field(min_length=1)
    desktop_template: str
    control_template: str
    rpm_spec_template: str
    icon_path: str
    dictionaries_dir: str
    tmp_dir: str
    releases_dir: str
    archive_name: str = Field(min_length=1)
    package_name_template: Optional[str] = None
    formats: Tuple[str, ...]
    deb_compression: str
    rpm_arch: Optional[str] = None
    use_fakeroot: bool
    command_timeout: Optional[float] = Field(default=None, gt=0)
    clean_on_failure: bool
    log_file: Optional[str] = None

    @field_validator("formats", mode="before")
    @classmethod
    def _normalize_formats(cls, value):
        if isinstance(value, str):
            value = [value]
        formats = []
        for fmt in value:
            fmt = str(fmt).strip().lower()
            if fmt not in constants.SUPPORTED_FORMATS:
                raise ValueError(
                    f"unsupported package format '{fmt}' "
                    f"(expected one of: {', '.join(constants.SUPPORTED_FORMATS)})"
                )
            if fmt not in formats:
                formats.append(fmt)
        return tuple(formats)

    def resolve(self, project_dir: Path, key: str) -> Path:
        """Resolves a path setting against the project root."""
        value = getattr(self, key)
        if value is None:
            raise ConfigurationError(f"Setting '{key}' is not set")
        path = Path(value).expanduser()
        return path if path.is_absolute() else Path(project_dir) / path

    def wants(self, fmt: str) -> bool:
        return fmt in self.formats


def _read_yaml(config_file: Path) -> Dict[str, Any]:
    """Reads a YAML settings file into a mapping."""
    try:
        with config_file.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (IOError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read config file {config_file}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_file} must contain a mapping")
    return data


def load_config(
    project_dir: Union[str, Path],
    config_file: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ReleaseConfig:
    """
    Builds the release configuration from defaults, the optional YAML file and
    command-line overrides, in increasing order of precedence.

    When no config file is given, ``linrelease.yaml`` in the project root is
    used if it exists.
    """
    settings = DEFAULT_SETTINGS.copy()

    explicit = config_file is not None
    config_path = Path(config_file) if explicit else Path(project_dir) / constants.CONFIG_FILENAME
    if explicit and not config_path.is_file():
        raise ConfigurationError(f"Config file not found: {config_path}")

    if config_path.is_file():
        user_settings = _read_yaml(config_path)
        for key, value in user_settings.items():
            if key not in DEFAULT_SETTINGS:
                log.warning(f"Ignoring unknown configuration key: '{key}'")
                continue
            settings[key] = value
        log.info(f"Configuration loaded from {config_path}")
    else:
        log.debug("No config file found, using default settings.")

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key not in DEFAULT_SETTINGS:
            raise ConfigurationError(f"Unknown configuration key: '{key}'")
        settings[key] = value

    try:
        return ReleaseConfig(**settings)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
