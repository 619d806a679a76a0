# src/linrelease/core/templates.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
import re
from pathlib import Path
from typing import Any, Mapping

from .exceptions import TemplateError

log = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def render_template(text: str, fields: Mapping[str, Any]) -> str:
    """
    Replaces every ``{{key}}`` token whose key is in ``fields`` with ``str(value)``.
    Tokens without a matching key are left untouched.
    """

    def _substitute(match):
        key = match.group(1)
        if key not in fields:
            return match.group(0)
        return str(fields[key])

    return PLACEHOLDER_RE.sub(_substitute, text)


def read_template(path: Path) -> str:
    """Reads a packaging template, normalizing line endings to LF."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (IOError, UnicodeDecodeError) as e:
        raise TemplateError(f"Cannot read template {path}: {e}")
    return content.replace("\r\n", "\n").replace("\r", "\n")


def render_template_file(path: Path, fields: Mapping[str, Any]) -> str:
    rendered = render_template(read_template(path), fields)
    leftover = sorted(set(PLACEHOLDER_RE.findall(rendered)))
    if leftover:
        log.debug(f"Unresolved placeholders in {Path(path).name}: {', '.join(leftover)}")
    return rendered
