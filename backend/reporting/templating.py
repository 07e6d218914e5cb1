"""
{{token}} substitution for document templates.

Templates are plain-text files read from disk on every call (no caching), so an
edited template takes effect on the next generation.
"""
from __future__ import annotations

import os
import re
from pathlib import Path
from typing import List, Mapping, Tuple

_TOKEN_RE = re.compile(r"\{\{(.*?)\}\}")

_DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


class TemplateNotFoundError(Exception):
    """Raised when a document template cannot be read."""


def template_dir() -> Path:
    override = (os.environ.get("DOCUMENT_TEMPLATES_DIR") or "").strip()
    return Path(override) if override else _DEFAULT_TEMPLATE_DIR


def load_template(path: str | Path) -> str:
    """Read a template by absolute path or by name relative to template_dir()."""
    p = Path(path)
    if not p.is_absolute():
        p = template_dir() / p
    try:
        return p.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateNotFoundError(f"Template not found: {path}") from e


def fill_template(template: str, values: Mapping[str, str]) -> str:
    """Replace every {{ key }} with values[key.strip()]; unknown keys become ""."""
    return _TOKEN_RE.sub(lambda m: values.get(m.group(1).strip(), "") or "", template)


def substitute_tokens(template: str, values: Mapping[str, str]) -> Tuple[str, List[str]]:
    """
    Same substitution as fill_template, also returning the dynamic values.

    dynamic_values lists every non-empty substituted string in the order the
    tokens occur in the template. Duplicates are kept: two tokens resolving
    to the same text contribute two entries.
    """
    dynamic_values: List[str] = []

    def _replace(m: re.Match) -> str:
        value = values.get(m.group(1).strip(), "") or ""
        if value:
            dynamic_values.append(value)
        return value

    body = _TOKEN_RE.sub(_replace, template)
    return body, dynamic_values
