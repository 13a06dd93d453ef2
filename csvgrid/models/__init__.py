"""Data models: file source settings, read requests and catalogs."""

from .settings import (
    CatalogDescription,
    DateTimeModeOptions,
    FileSource,
    FileSourceSettings,
    ReplaceNameRule,
)
from .requests import (
    ReadInfo,
    ReadRequest,
    ReadResult,
    ResourceDescriptor,
    create_buffers,
)
from .catalog import CatalogResource, ResourceCatalog

__all__ = [
    "CatalogDescription",
    "DateTimeModeOptions",
    "FileSource",
    "FileSourceSettings",
    "ReplaceNameRule",
    "ReadInfo",
    "ReadRequest",
    "ReadResult",
    "ResourceDescriptor",
    "create_buffers",
    "CatalogResource",
    "ResourceCatalog",
]
