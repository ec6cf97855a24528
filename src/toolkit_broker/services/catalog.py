"""Vendor tool catalog loading from JSON/YAML definition files."""

import json
import logging
import os
from pathlib import Path
from string import Template
from typing import Any, Iterable, List, Union

import yaml
from pydantic import ValidationError

from ..models.tool import ToolSchema
from .errors import CatalogLoadError

logger = logging.getLogger(__name__)

CATALOG_SUFFIXES = (".json", ".yaml", ".yml")


def _substitute_env_vars(content: str) -> str:
    """Replace ${VAR} references, leaving unknown variables untouched."""
    return Template(content).safe_substitute(dict(os.environ))


def load_catalog_file(path: Union[str, Path]) -> List[Any]:
    """Read one definition file holding a list of tools or {"tools": [...]}."""
    file_path = Path(path)
    try:
        raw_content = file_path.read_text(encoding="utf-8")
        substituted_content = _substitute_env_vars(raw_content)
        if file_path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(substituted_content)
        else:
            data = json.loads(substituted_content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.error(f"Catalog parsing failed for {file_path}: {e}")
        raise CatalogLoadError(f"Invalid catalog format in {file_path}: {e}", {"path": str(file_path)}) from e
    except OSError as e:
        logger.error(f"Failed to read catalog file {file_path}: {e}")
        raise CatalogLoadError(f"Cannot read catalog file {file_path}: {e}", {"path": str(file_path)}) from e

    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("tools", [])
    if not isinstance(data, list):
        raise CatalogLoadError(
            f"Catalog file {file_path} must contain a list of tools or a 'tools' key",
            {"path": str(file_path)},
        )
    logger.debug(f"Read {len(data)} tool definitions from {file_path}")
    return data


def load_catalog(path: Union[str, Path]) -> List[Any]:
    """Load raw tool definitions from a file or every definition file in a directory."""
    catalog_path = Path(path)
    if not catalog_path.exists():
        logger.warning(f"Catalog path {catalog_path} not found, starting with an empty catalog")
        return []

    if catalog_path.is_file():
        return load_catalog_file(catalog_path)

    entries: List[Any] = []
    for file_path in sorted(catalog_path.iterdir()):
        if file_path.is_file() and file_path.suffix.lower() in CATALOG_SUFFIXES:
            entries.extend(load_catalog_file(file_path))
    logger.info(f"Loaded {len(entries)} tool definitions from {catalog_path}")
    return entries


def coerce_tools(raw_tools: Iterable[Any]) -> List[ToolSchema]:
    """Validate raw definitions into ToolSchema, skipping the ones that fail."""
    tools: List[ToolSchema] = []
    for index, entry in enumerate(raw_tools):
        if isinstance(entry, ToolSchema):
            tools.append(entry)
            continue
        try:
            tools.append(ToolSchema.model_validate(entry))
        except ValidationError as e:
            name = entry.get("name") if isinstance(entry, dict) else None
            logger.warning(f"Skipping catalog entry #{index} ({name!r}): {e.error_count()} validation error(s)")
    return tools
