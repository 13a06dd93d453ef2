"""
CSV data source facade.

Ties the catalog configuration, catalog building and the read engine
together:

    source = CsvDataSource.from_root(Path("data"))      # reads data/config.json
    source.get_catalog_registrations("/")              # [CatalogRegistration("/A/B/C", "Test")]
    catalog = source.get_catalog("/A/B/C")
    requests, result = source.read_file(
        "/A/B/C", "default", Path("data/2020-01-01.csv"),
        begin=datetime(2020, 1, 1, tzinfo=timezone.utc),
        resource_ids=["ThisIsTheFooVariable"],
        file_block=10,
    )

Catalog configuration files map catalog ids to a title and named file
sources. JSON and YAML are both accepted; keys may be camelCase.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError

from csvgrid.core.catalog import FirstFileFinder, build_catalog, file_source_resources
from csvgrid.core.engine import CancellationSignal, IndexLookup, read
from csvgrid.errors import ConfigurationError
from csvgrid.models.catalog import ResourceCatalog
from csvgrid.models.requests import FileLike, ReadInfo, ReadRequest, ReadResult, create_buffers
from csvgrid.models.settings import CatalogDescription, FileSourceSettings

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4

ReadJob = Tuple[ReadInfo, Sequence[ReadRequest]]


# ----------------------------- Configuration -----------------------------

def load_catalog_config(path: Path) -> Dict[str, CatalogDescription]:
    """
    Load a catalog configuration file.

    Args:
        path: JSON file, or YAML file (``.yml`` / ``.yaml``)

    Returns:
        Dictionary mapping catalog ids to their descriptions

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the file is not valid JSON/YAML or does not
            match the expected schema

    Example config.json:
        {
          "/A/B/C": {
            "title": "Test catalog",
            "fileSources": {
              "default": {
                "additionalProperties": {
                  "samplePeriod": "00:00:01",
                  "separator": ";",
                  "unitPattern": "\\\\((.*)\\\\)",
                  "defaultGroup": "raw",
                  "catalogSourceFiles": ["DATA/2020-01-01.csv"]
                }
              }
            }
          }
        }
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file {path} not found.")

    text = path.read_text(encoding="utf-8")

    try:
        if path.suffix.lower() in {".yml", ".yaml"}:
            raw = yaml.safe_load(text) or {}
        else:
            raw = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Unable to parse configuration file {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping of catalog ids")

    try:
        return {catalog_id: CatalogDescription.model_validate(value) for catalog_id, value in raw.items()}
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}:\n{e}") from e


@dataclass(frozen=True)
class CatalogRegistration:
    """Catalog id and title as listed by the data source."""
    path: str
    title: str


# ----------------------------- Data source -----------------------------

class CsvDataSource:
    """
    Data source serving catalogs and reads for CSV files.

    Parameters
    ----------
    root : Path
        Directory that relative sample file paths are resolved against
    config : Dict[str, CatalogDescription]
        Catalog descriptions by catalog id
    find_first_file : Optional[FirstFileFinder]
        File discovery callback used for catalog building when a file source
        does not list ``catalog_source_files``
    index_lookup : Optional[IndexLookup]
        Column index lookup for file sources without a header row
    """

    CONFIG_FILE_NAME = "config.json"

    def __init__(
        self,
        root: Path,
        config: Dict[str, CatalogDescription],
        find_first_file: Optional[FirstFileFinder] = None,
        index_lookup: Optional[IndexLookup] = None,
    ):
        self.root = Path(root)
        self.config = config
        self.find_first_file = find_first_file
        self.index_lookup = index_lookup

        logger.info(f"Initialized CsvDataSource at {self.root} with {len(config)} catalogs")

    @classmethod
    def from_root(cls, root: Path, config_file: Optional[Path] = None, **kwargs) -> "CsvDataSource":
        """Create a data source from ``root/config.json`` (or an explicit config file)."""
        root = Path(root)
        config_path = Path(config_file) if config_file is not None else root / cls.CONFIG_FILE_NAME
        return cls(root, load_catalog_config(config_path), **kwargs)

    # Catalogs

    def get_catalog_registrations(self, path: str = "/") -> List[CatalogRegistration]:
        """Catalogs registered below ``path`` (all catalogs live at the root)."""
        if path != "/":
            return []
        return [CatalogRegistration(catalog_id, d.title) for catalog_id, d in self.config.items()]

    def get_description(self, catalog_id: str) -> CatalogDescription:
        try:
            return self.config[catalog_id]
        except KeyError:
            raise KeyError(f"Unknown catalog {catalog_id!r}") from None

    def get_catalog(self, catalog_id: str, cancel_event: Optional[CancellationSignal] = None) -> ResourceCatalog:
        """Build the resource catalog of ``catalog_id`` from its sample files."""
        return build_catalog(
            catalog_id,
            self.get_description(catalog_id),
            root=self.root,
            find_first_file=self.find_first_file,
            cancel_event=cancel_event,
        )

    def get_settings(self, catalog_id: str, file_source_id: str) -> FileSourceSettings:
        description = self.get_description(catalog_id)

        try:
            file_source = description.file_sources[file_source_id]
        except KeyError:
            raise KeyError(f"Unknown file source {file_source_id!r} in catalog {catalog_id!r}") from None

        if file_source.settings is None:
            raise ConfigurationError(f"File source {file_source_id!r} of {catalog_id!r} has no settings")

        return file_source.settings

    # Reads

    def read(
        self,
        info: ReadInfo,
        requests: Sequence[ReadRequest],
        cancel_event: Optional[CancellationSignal] = None,
    ) -> ReadResult:
        """Decode one file (see ``csvgrid.core.engine.read``)."""
        return read(info, requests, index_lookup=self.index_lookup, cancel_event=cancel_event)

    def read_file(
        self,
        catalog_id: str,
        file_source_id: str,
        file: FileLike,
        begin: dt.datetime,
        resource_ids: Sequence[str],
        file_block: int,
        file_offset: int = 0,
        cancel_event: Optional[CancellationSignal] = None,
    ) -> Tuple[Dict[str, ReadRequest], ReadResult]:
        """
        Allocate buffers for catalog resources and decode one file into them.

        Resource ids are mapped to their original column names through the
        sample files of this file source only, so ids shared with other file
        sources of the catalog resolve to this source's columns.

        Returns:
            ``(requests_by_resource_id, result)``
        """
        settings = self.get_settings(catalog_id, file_source_id)
        file_source = self.get_description(catalog_id).file_sources[file_source_id]
        resources = {
            r.id: r
            for r in file_source_resources(file_source_id, file_source, self.root, self.find_first_file)
        }

        requests: Dict[str, ReadRequest] = {}

        for resource_id in resource_ids:
            resource = resources.get(resource_id)

            if resource is None:
                raise KeyError(f"Unknown resource {resource_id!r} in file source {file_source_id!r} of {catalog_id!r}")

            end = begin + settings.sample_period * file_block
            data, status = create_buffers(begin, end, settings.sample_period)
            requests[resource_id] = ReadRequest(resource.original_name, data, status)

        info = ReadInfo(file, file_offset=file_offset, file_block=file_block, begin=begin, settings=settings)
        result = self.read(info, list(requests.values()), cancel_event=cancel_event)
        return requests, result

    def read_many(
        self,
        jobs: Sequence[ReadJob],
        workers: int = DEFAULT_WORKERS,
        cancel_event: Optional[CancellationSignal] = None,
    ) -> List[ReadResult]:
        """
        Run independent file reads concurrently.

        Every job owns its file handle and its buffers. Results are returned
        in job order. If any job failed, the first failure (in job order)
        is raised after all jobs have finished.
        """
        results: List[Optional[ReadResult]] = [None] * len(jobs)
        errors: Dict[int, BaseException] = {}

        with ThreadPoolExecutor(max_workers=workers) as ex:
            future_to_index = {
                ex.submit(self.read, info, requests, cancel_event): i
                for i, (info, requests) in enumerate(jobs)
            }

            for fut in as_completed(future_to_index):
                i = future_to_index[fut]

                try:
                    results[i] = fut.result()
                except Exception as e:
                    logger.error(f"Read of {jobs[i][0].name} failed: {e}")
                    errors[i] = e

        if errors:
            raise errors[min(errors)]

        return results
