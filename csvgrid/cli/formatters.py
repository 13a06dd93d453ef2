"""
Output formatters for CLI commands.

Decoded buffers are turned into a polars DataFrame (one row per grid
slot, a value and a status column per resource) which is then rendered
as a rich table or written as CSV/Parquet.
"""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Dict, List, Optional

import polars as pl
from rich import box
from rich.table import Table

from csvgrid.core.source import CatalogRegistration
from csvgrid.models import ReadRequest, ResourceCatalog


def registrations_table(registrations: List[CatalogRegistration]) -> Table:
    table = Table(title="Catalogs", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Catalog", style="bold", no_wrap=True)
    table.add_column("Title", style="green")
    for registration in registrations:
        table.add_row(registration.path, registration.title)
    return table


def catalog_table(catalog: ResourceCatalog) -> Table:
    """Rich table listing the resources of a catalog."""
    title = f"{catalog.id} ({catalog.title})" if catalog.title else catalog.id
    table = Table(title=title, box=box.ROUNDED, header_style="bold cyan")

    table.add_column("Resource", style="bold", no_wrap=True)
    table.add_column("Original name")
    table.add_column("Unit", style="green")
    table.add_column("Groups", style="yellow")
    table.add_column("File source", style="dim")

    for resource in catalog.resources:
        table.add_row(
            resource.id,
            resource.original_name,
            resource.unit or "",
            ", ".join(resource.groups),
            resource.file_source_id,
        )

    return table


def read_frame(
    requests: Dict[str, ReadRequest],
    begin: dt.datetime,
    sample_period: dt.timedelta,
    file_offset: int = 0,
) -> pl.DataFrame:
    """
    Decoded buffers as a DataFrame.

    Columns: ``timestamp`` followed by ``<resource>`` and ``<resource>_status``
    for every resource.
    """
    length = len(next(iter(requests.values()))) if requests else 0
    first = begin + sample_period * file_offset
    columns = {"timestamp": [first + sample_period * i for i in range(length)]}

    for resource_id, request in requests.items():
        columns[resource_id] = request.data
        columns[f"{resource_id}_status"] = request.status

    return pl.DataFrame(columns)


def frame_table(df: pl.DataFrame, title: str = "", max_rows: Optional[int] = None) -> Table:
    """Render a DataFrame as a rich table; NaN values shown as 'nan'."""
    table = Table(title=title, box=box.SIMPLE_HEAVY, header_style="bold cyan")
    for name in df.columns:
        table.add_column(name, justify="left" if name == "timestamp" else "right")

    rows = df.rows() if max_rows is None else df.head(max_rows).rows()
    for row in rows:
        table.add_row(*(v.isoformat() if isinstance(v, dt.datetime) else str(v) for v in row))

    return table


def write_frame(df: pl.DataFrame, path: Path, fmt: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "parquet":
        df.write_parquet(path)
    else:
        df.write_csv(path)
