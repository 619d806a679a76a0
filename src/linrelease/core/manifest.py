# src/linrelease/core/manifest.py
"""
linrelease - Linux Release Packager - Application Manifest
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

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import constants
from .exceptions import ManifestError
from .templates import render_template

log = logging.getLogger(__name__)


class Manifest(BaseModel):
    """
    Read-only view of the application's package.json.

    Only the fields the packaging templates need are kept. ``author`` accepts
    both the npm string form and the ``{name, email, url}`` object form.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    product_name: str = Field(default="", alias="productName")
    version: str = Field(min_length=1)
    description: str = ""
    author: str = ""
    package_name_template: Optional[str] = Field(default=None, alias="packageNameTemplate")

    @field_validator("author", mode="before")
    @classmethod
    def _normalize_author(cls, value):
        if value is None:
            return ""
        if isinstance(value, dict):
            name = str(value.get("name", "")).strip()
            email = str(value.get("email", "")).strip()
            return f"{name} <{email}>" if email else name
        return value

    @field_validator("name", "version", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    def template_fields(self) -> Dict[str, str]:
        """Fields available to the desktop-entry template."""
        return {
            "name": self.name,
            "productName": self.product_name or self.name,
            "description": self.description,
            "version": self.version,
            "author": self.author,
        }

    def packaging_fields(self) -> Dict[str, str]:
        """Fields shared by the Debian control and RPM spec templates."""
        return {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "author": self.author,
        }


def load_manifest(path: Path) -> Manifest:
    """Loads and validates the manifest. Any problem is fatal for the pipeline."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ManifestError(f"Manifest not found: {path}")
    except (IOError, json.JSONDecodeError) as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}")

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must contain a JSON object")

    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest {path}: {e}")

    log.debug(f"Manifest loaded from {path}: {manifest.name} {manifest.version}")
    return manifest


def release_package_name(manifest: Manifest, template: Optional[str] = None) -> str:
    """
    Derives the release package name, e.g. ``sample-1.2.3-linux-x64``.

    The template is taken from the argument, then the manifest's
    ``packageNameTemplate``, then the default.
    """
    template = template or manifest.package_name_template or constants.DEFAULT_PACKAGE_NAME_TEMPLATE
    return render_template(template, {
        "name": manifest.name,
        "productName": manifest.product_name or manifest.name,
        "version": manifest.version,
        "platform": "linux",
        "arch": constants.host_arch(),
    })
