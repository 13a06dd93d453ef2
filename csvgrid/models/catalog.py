"""
Resource catalog records.

A catalog is built from the header lines of sample files and lists every
resource (measurement channel) a catalog id offers, with the file source
it comes from, its unit and its groups.
"""

from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

import polars as pl
from pydantic import BaseModel, ConfigDict, Field


class CatalogResource(BaseModel):
    """Resource entry of a built catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    original_name: str
    file_source_id: str
    sample_period: timedelta
    unit: Optional[str] = None
    groups: List[str] = Field(default_factory=list)


class ResourceCatalog(BaseModel):
    """Catalog id and its ordered resources."""

    id: str
    title: str = ""
    resources: List[CatalogResource] = Field(default_factory=list)

    def find(self, resource_id: str) -> Optional[CatalogResource]:
        for resource in self.resources:
            if resource.id == resource_id:
                return resource
        return None

    @property
    def resource_ids(self) -> List[str]:
        return [r.id for r in self.resources]

    def to_frame(self) -> pl.DataFrame:
        """Resources as a polars DataFrame (one row per resource)."""
        return pl.DataFrame(
            {
                "id": [r.id for r in self.resources],
                "original_name": [r.original_name for r in self.resources],
                "file_source_id": [r.file_source_id for r in self.resources],
                "unit": [r.unit for r in self.resources],
                "groups": [",".join(r.groups) for r in self.resources],
                "sample_period_s": [r.sample_period.total_seconds() for r in self.resources],
            },
            schema={
                "id": pl.Utf8,
                "original_name": pl.Utf8,
                "file_source_id": pl.Utf8,
                "unit": pl.Utf8,
                "groups": pl.Utf8,
                "sample_period_s": pl.Float64,
            },
        )
