"""
CSV Decoding Engine
===================

Decodes delimited measurement files into pre-allocated buffers aligned to
a time grid, and resolves file headers into resource catalogs.

Key Functions
-------------
- locate_cell: Quote-aware extraction of one field of a line
- resolve: Header/unit/group resolution into resource descriptors
- decode_cell: Locale-independent cell decoding (NaN on failure)
- read: Sequential or timestamp-keyed read into caller buffers
- build_catalog: Catalog building from sample files

Architecture
------------
header line ──> resolve() ──> ResourceDescriptor[] ──> build_catalog()
                    │
data lines ──> locate_cell() ──> decode_cell() ──> read() ──> data/status buffers
                                                     │
                                       sequential  /  timestamp-keyed

See Also
--------
- csvgrid.models: settings and request records
- csvgrid.core.source: CsvDataSource facade
"""

from .tokenizer import get_cell, locate_cell
from .decoder import decode_cell, parse_float, unquote_cell
from .identifiers import enforce_naming_convention, is_valid_id
from .resolver import find_column_index, read_header_lines, resolve
from .timestamps import TimestampParser, slot_index, to_strptime_format
from .engine import no_index_lookup, read
from .catalog import build_catalog
from .source import CatalogRegistration, CsvDataSource, load_catalog_config

__all__ = [
    "get_cell",
    "locate_cell",
    "decode_cell",
    "parse_float",
    "unquote_cell",
    "enforce_naming_convention",
    "is_valid_id",
    "find_column_index",
    "read_header_lines",
    "resolve",
    "TimestampParser",
    "slot_index",
    "to_strptime_format",
    "no_index_lookup",
    "read",
    "build_catalog",
    "CatalogRegistration",
    "CsvDataSource",
    "load_catalog_config",
]
