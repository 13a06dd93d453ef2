"""
Catalog building from sample files.

For every file source of a catalog description, the header of one or
more sample files is resolved into resources. Sample files are either
listed explicitly (``catalog_source_files``) or supplied by a file
discovery callback. File sources without settings are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from csvgrid.core.engine import open_lines
from csvgrid.core.resolver import read_resource_descriptors
from csvgrid.models.catalog import CatalogResource, ResourceCatalog
from csvgrid.models.requests import ResourceDescriptor
from csvgrid.models.settings import CatalogDescription, FileSource, FileSourceSettings

logger = logging.getLogger(__name__)

FirstFileFinder = Callable[[str, FileSource], Optional[Path]]


def descriptors_to_resources(
    descriptors: Iterable[Optional[ResourceDescriptor]],
    file_source_id: str,
    settings: FileSourceSettings,
) -> List[CatalogResource]:
    """
    Turn resolved columns into catalog resources.

    Dropped columns (None) are ignored and the configured default group is
    applied to columns without an extracted group.
    """
    resources = []

    for descriptor in descriptors:
        if descriptor is None:
            continue

        group = descriptor.group if descriptor.group is not None else settings.default_group

        resources.append(
            CatalogResource(
                id=descriptor.resource_id,
                original_name=descriptor.original_name,
                file_source_id=file_source_id,
                sample_period=settings.sample_period,
                unit=descriptor.unit,
                groups=[group] if group is not None else [],
            )
        )

    return resources


def _merge(resources: Dict[str, CatalogResource], new: Iterable[CatalogResource]) -> None:
    for resource in new:
        existing = resources.get(resource.id)

        if existing is None:
            resources[resource.id] = resource
            continue

        # keep the first definition, only complete missing unit and groups
        updates = {}
        if existing.unit is None and resource.unit is not None:
            updates["unit"] = resource.unit
        extra_groups = [g for g in resource.groups if g not in existing.groups]
        if extra_groups:
            updates["groups"] = existing.groups + extra_groups
        if updates:
            resources[resource.id] = existing.model_copy(update=updates)

        logger.debug(f"Merged duplicate resource {resource.id!r} from file source {resource.file_source_id!r}")


def sample_files(
    file_source_id: str,
    file_source: FileSource,
    root: Path,
    find_first_file: Optional[FirstFileFinder] = None,
) -> List[Path]:
    """Sample files used to build the catalog of one file source."""
    explicit = file_source.resolve_source_files(root)

    if explicit is not None:
        return explicit

    if find_first_file is None:
        return []

    first = find_first_file(file_source_id, file_source)
    return [first] if first is not None else []


def file_source_resources(
    file_source_id: str,
    file_source: FileSource,
    root: Path,
    find_first_file: Optional[FirstFileFinder] = None,
) -> List[CatalogResource]:
    """
    Resources of one file source, merged over its sample files.

    File sources without settings or without a header row have none.
    """
    settings = file_source.settings

    if settings is None:
        logger.debug(f"File source {file_source_id!r} has no settings, skipping")
        return []

    if not settings.has_header:
        logger.debug(f"File source {file_source_id!r} has no header row, skipping")
        return []

    resources: Dict[str, CatalogResource] = {}

    for path in sample_files(file_source_id, file_source, root, find_first_file):
        with open_lines(path, settings.encoding) as lines:
            descriptors = read_resource_descriptors(lines, settings)

        new = descriptors_to_resources(descriptors, file_source_id, settings)
        logger.debug(f"{path}: {len(new)} resources for file source {file_source_id!r}")
        _merge(resources, new)

    return list(resources.values())


def build_catalog(
    catalog_id: str,
    description: CatalogDescription,
    root: Path = Path("."),
    find_first_file: Optional[FirstFileFinder] = None,
    cancel_event=None,
) -> ResourceCatalog:
    """
    Build the resource catalog of one catalog description.

    Args:
        catalog_id: Catalog id (e.g. "/A/B/C")
        description: Title and file sources of the catalog
        root: Directory that relative sample file paths are resolved against
        find_first_file: File discovery callback for file sources without
            explicit ``catalog_source_files``
        cancel_event: Optional object with ``is_set()``; checked per file source

    Returns:
        ResourceCatalog with the merged resources of all file sources

    Raises:
        FileIncompleteError: If a sample file ends before its data row

    Example:
        >>> catalog = build_catalog("/A/B/C", load_catalog_config(path)["/A/B/C"], root=path.parent)
        >>> catalog.resource_ids
        ['ThisIsTheFooVariable', 'Anything']
    """
    resources: Dict[str, CatalogResource] = {}

    for file_source_id, file_source in description.file_sources.items():
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Catalog build for {catalog_id!r} cancelled")
            break

        _merge(resources, file_source_resources(file_source_id, file_source, root, find_first_file))

    return ResourceCatalog(id=catalog_id, title=description.title, resources=list(resources.values()))
