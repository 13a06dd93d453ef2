"""
Unit tests for CLI output formatters.
"""

import datetime as dt

import numpy as np
import polars as pl
from rich.console import Console

from csvgrid.cli.formatters import catalog_table, frame_table, read_frame, write_frame
from csvgrid.models import CatalogResource, ReadRequest, ResourceCatalog

UTC = dt.timezone.utc
BEGIN = dt.datetime(2020, 1, 1, tzinfo=UTC)
PERIOD = dt.timedelta(seconds=1)


def make_requests():
    data = np.array([1.0, np.nan, 3.0])
    status = np.array([1, 1, 0], dtype=np.uint8)
    return {"Foo": ReadRequest("Foo (m/s)", data, status)}


def render(table) -> str:
    console = Console(width=200, record=True)
    console.print(table)
    return console.export_text()


class TestReadFrame:
    """Decoded buffers as a DataFrame."""

    def test_columns(self):
        df = read_frame(make_requests(), BEGIN, PERIOD)

        assert df.columns == ["timestamp", "Foo", "Foo_status"]
        assert df.height == 3
        assert df["Foo_status"].to_list() == [1, 1, 0]
        assert df["timestamp"].to_list()[2] == BEGIN + 2 * PERIOD

    def test_file_offset_shifts_timestamps(self):
        df = read_frame(make_requests(), BEGIN, PERIOD, file_offset=10)
        assert df["timestamp"].to_list()[0] == BEGIN + 10 * PERIOD

    def test_empty(self):
        assert read_frame({}, BEGIN, PERIOD).height == 0

    def test_write_csv_and_parquet(self, tmp_path):
        df = read_frame(make_requests(), BEGIN, PERIOD)

        write_frame(df, tmp_path / "out" / "a.csv", "csv")
        write_frame(df, tmp_path / "out" / "a.parquet", "parquet")

        assert pl.read_csv(tmp_path / "out" / "a.csv").height == 3
        assert pl.read_parquet(tmp_path / "out" / "a.parquet")["Foo_status"].to_list() == [1, 1, 0]


class TestTables:

    def test_frame_table(self):
        text = render(frame_table(read_frame(make_requests(), BEGIN, PERIOD), title="data.csv"))

        assert "Foo_status" in text
        assert "2020-01-01T00:00:02+00:00" in text
        assert "nan" in text

    def test_catalog_table(self):
        catalog = ResourceCatalog(
            id="/A/B/C",
            title="Test",
            resources=[
                CatalogResource(
                    id="Foo", original_name="Foo (m/s)", file_source_id="default",
                    sample_period=PERIOD, unit="m/s", groups=["raw"],
                )
            ],
        )

        text = render(catalog_table(catalog))

        assert "/A/B/C (Test)" in text
        assert "m/s" in text
