"""Discovers model files and builds one node description per file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from comfy_ml.model_node import InvalidModelFileName, ModelNodeDescriptor
from comfy_ml.runtime import MLRuntime, ModelLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogConfig:
    search_paths: tuple[str, ...] = ()
    extensions: tuple[str, ...] = (".joblib", ".pkl")


@dataclass(frozen=True)
class CatalogEntry:
    path: str
    description: ModelNodeDescriptor | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.description is not None


def _model_files(config: CatalogConfig) -> Iterable[Path]:
    extensions = {ext.lower() for ext in config.extensions}
    for search_path in config.search_paths:
        root = Path(search_path)
        if not root.is_dir():
            logger.debug("Skipping missing model directory %s", root)
            continue
        for path in sorted(root.rglob("*")):
            if path.is_file() and path.suffix.lower() in extensions:
                yield path


def scan_model_nodes(config: CatalogConfig, factory: Any = None, runtime: MLRuntime | None = None) -> list[CatalogEntry]:
    """Build descriptions for every model file; failures are recorded, not raised."""
    entries: list[CatalogEntry] = []
    for path in _model_files(config):
        try:
            description = ModelNodeDescriptor(factory, path, runtime=runtime)
        except (ModelLoadError, InvalidModelFileName) as exc:
            logger.error("Skipping model %s: %s", path, exc)
            entries.append(CatalogEntry(path=os.fspath(path), error=exc))
            continue
        entries.append(CatalogEntry(path=os.fspath(path), description=description))

    logger.info(
        "Found %d model nodes (%d failed) in %d directories",
        sum(1 for entry in entries if entry.ok),
        sum(1 for entry in entries if not entry.ok),
        len(config.search_paths),
    )
    return entries


def node_class_mappings(entries: Iterable[CatalogEntry]) -> tuple[dict[str, type], dict[str, str]]:
    """Return node class and display name mappings for the loaded entries."""
    class_mappings: dict[str, type] = {}
    display_names: dict[str, str] = {}
    for entry in entries:
        description = entry.description
        if description is None:
            continue
        key = f"{description.name}_{description.model_type}"
        if key in class_mappings:
            logger.warning("Duplicate model node %s from %s ignored", key, entry.path)
            continue
        class_mappings[key] = description.as_node_class()
        display_names[key] = description.name
    return class_mappings, display_names
