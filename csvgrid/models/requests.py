"""
Records exchanged with the read engine.

Buffers are numpy arrays owned by the caller: one ``float64`` per grid
slot for values and one ``uint8`` per slot for status (0 = not written,
1 = valid data written). The engine writes into them in place and never
resizes or replaces them.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TextIO, Tuple, Union

import numpy as np

from csvgrid.models.settings import FileSourceSettings

FileLike = Union[str, Path, TextIO]


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    One retained column of a header line.

    Attributes:
        original_name: Column name as written in the header
        resource_id: Canonical id after rewrite rules and naming convention
        unit: Unit extracted from the unit row or header (None if absent)
        group: Group extracted from the column name (None if absent)
    """
    original_name: str
    resource_id: str
    unit: Optional[str] = None
    group: Optional[str] = None


@dataclass
class ReadRequest:
    """
    Request to decode one column into caller-owned buffers.

    Attributes:
        original_name: Header name of the column to read
        data: float64 output buffer, one value per grid slot
        status: uint8 output buffer of the same length
    """
    original_name: str
    data: np.ndarray
    status: np.ndarray

    def __post_init__(self):
        if self.data.dtype != np.float64:
            raise TypeError(f"data buffer must be float64, got {self.data.dtype}")
        if self.status.dtype != np.uint8:
            raise TypeError(f"status buffer must be uint8, got {self.status.dtype}")
        if self.data.shape != self.status.shape or self.data.ndim != 1:
            raise ValueError("data and status buffers must be 1-D and of equal length")

    def __len__(self) -> int:
        return len(self.data)


@dataclass
class ReadInfo:
    """
    Where and what to read from one file.

    Attributes:
        file: Path of the file, or an already-open text stream
        file_offset: Grid slots to skip from the start of the file
        file_block: Grid slots to fill from this file
        begin: Grid origin of the file (naive values are taken as UTC)
        settings: Settings of the owning file source
    """
    file: FileLike
    file_offset: int
    file_block: int
    begin: dt.datetime
    settings: FileSourceSettings

    def __post_init__(self):
        if self.file_offset < 0:
            raise ValueError("file_offset must not be negative")
        if self.file_block < 0:
            raise ValueError("file_block must not be negative")

    @property
    def name(self) -> str:
        if isinstance(self.file, (str, Path)):
            return str(self.file)
        return getattr(self.file, "name", "<stream>")


@dataclass
class ReadResult:
    """
    Summary of one read operation.

    ``valid_slots`` counts, per request (in request order), the slots whose
    status was set to 1. ``complete`` is False when the file ended early or
    a request had to be aborted; ``cancelled`` is True when the read
    stopped because of the cancellation signal.
    """
    file: str
    lines_read: int = 0
    valid_slots: List[int] = field(default_factory=list)
    complete: bool = True
    cancelled: bool = False


def create_buffers(
    begin: dt.datetime,
    end: dt.datetime,
    sample_period: dt.timedelta,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Allocate zeroed value and status buffers covering ``[begin, end)``.

    Example:
        >>> begin = dt.datetime(2020, 1, 1, 0, 0, 1)
        >>> data, status = create_buffers(begin, begin + dt.timedelta(seconds=10), dt.timedelta(seconds=1))
        >>> data.shape, status.dtype
        ((10,), dtype('uint8'))
    """
    length = (end - begin) // sample_period
    if length < 0:
        raise ValueError("end must not precede begin")
    return np.zeros(length, dtype=np.float64), np.zeros(length, dtype=np.uint8)
