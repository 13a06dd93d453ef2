"""
Read engine: decodes one file into caller-owned grid buffers.

Two alignment strategies are supported:

Sequential mode
    One file row per grid slot. After the header, ``file_offset`` rows are
    discarded and the next ``file_block`` rows fill slots
    ``0 .. file_block - 1``. Status bytes are set in one pass at the end,
    for every slot a request decoded (cells that decode to NaN included).

Timestamp-keyed mode
    Each row carries a timestamp. The slot is
    ``floor((timestamp - begin) / sample_period) - file_offset``; rows
    outside ``[0, file_block)`` are ignored. Values and status bytes are
    written per slot, and only for successful (non-NaN) decodes.

Incomplete files (premature end of file, short rows, broken quoting) are
not errors: the affected requests stop, the condition is logged at DEBUG
level and unset status bytes tell the caller which slots have no data.

Usage:
    from csvgrid.core.engine import read
    from csvgrid.models import ReadInfo, ReadRequest, create_buffers

    data, status = create_buffers(begin, end, settings.sample_period)
    request = ReadRequest("Foo (m/s)", data, status)
    info = ReadInfo("data/2020-01-01.csv", file_offset=0,
                    file_block=len(data), begin=begin, settings=settings)
    result = read(info, [request])
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Protocol, Sequence

from csvgrid.core.decoder import decode_cell, unquote_cell
from csvgrid.core.resolver import (
    find_column_index,
    read_header_lines,
    rows_before_data,
    strip_terminator,
)
from csvgrid.core.timestamps import TimestampParser, ensure_utc, slot_index
from csvgrid.core.tokenizer import locate_cell
from csvgrid.errors import ConfigurationError
from csvgrid.models.requests import FileLike, ReadInfo, ReadRequest, ReadResult

logger = logging.getLogger(__name__)

# Lines between two polls of the cancellation signal.
CANCEL_POLL_INTERVAL = 1024

INCOMPLETE_FILE_MESSAGE = (
    "The actual buffer size does not match the expected size, which indicates an incomplete file"
)


class CancellationSignal(Protocol):
    def is_set(self) -> bool: ...


IndexLookup = Callable[[ReadInfo, Sequence[ReadRequest]], Sequence[int]]


def no_index_lookup(info: ReadInfo, requests: Sequence[ReadRequest]) -> List[int]:
    """Default index lookup for header-less files: no column is found."""
    return [-1] * len(requests)


# ----------------------------- Helpers -----------------------------

@contextmanager
def open_lines(file: FileLike, encoding: str) -> Iterator[Iterator[str]]:
    """
    Yield a line iterator for a path or an open text stream.

    Paths are opened with universal newlines and closed on exit. Streams
    passed by the caller are left open.
    """
    if isinstance(file, (str, Path)):
        with open(file, "r", encoding=encoding, newline=None) as f:
            yield iter(f)
    else:
        yield iter(file)


def _is_cancelled(cancel_event: Optional[CancellationSignal]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def resolve_column_indices(
    header_line: Optional[str],
    info: ReadInfo,
    requests: Sequence[ReadRequest],
    index_lookup: Optional[IndexLookup] = None,
) -> List[int]:
    """
    Map every request to a zero-based line column (-1 when not found).

    Uses the header line when the file source has one, otherwise the
    external ``index_lookup`` (default: nothing is found).
    """
    settings = info.settings

    if settings.has_header:
        if header_line is None:
            raise ConfigurationError(f"Header row {settings.header_row} is required but was not read")
        return [find_column_index(header_line, r.original_name, settings.separator) for r in requests]

    lookup = index_lookup or no_index_lookup
    indices = list(lookup(info, requests))

    if len(indices) != len(requests):
        raise ConfigurationError(
            f"Index lookup returned {len(indices)} indices for {len(requests)} requests"
        )

    return indices


def _check_buffers(info: ReadInfo, requests: Sequence[ReadRequest]) -> None:
    for request in requests:
        if len(request) < info.file_block:
            raise ValueError(
                f"Buffer for {request.original_name!r} holds {len(request)} slots, "
                f"file block needs {info.file_block}"
            )


# ----------------------------- Sequential mode -----------------------------

def _read_sequential(
    lines: Iterator[str],
    info: ReadInfo,
    requests: Sequence[ReadRequest],
    indices: Sequence[int],
    result: ReadResult,
    cancel_event: Optional[CancellationSignal],
) -> None:
    settings = info.settings
    sep = settings.separator
    invalid = settings.invalid_value
    decimal = settings.decimal_separator

    active = [k for k, index in enumerate(indices) if index >= 0]
    decoded = [0] * len(requests)

    if not active:
        result.valid_slots = decoded
        return

    # seek
    for _ in range(info.file_offset):
        if next(lines, None) is None:
            logger.debug(f"{info.name}: {INCOMPLETE_FILE_MESSAGE}")
            result.complete = False
            result.valid_slots = decoded
            return
        result.lines_read += 1

    # read
    for i in range(info.file_block):
        if i % CANCEL_POLL_INTERVAL == 0 and _is_cancelled(cancel_event):
            logger.debug(f"{info.name}: read cancelled at slot {i}")
            result.cancelled = True
            result.complete = False
            break

        raw = next(lines, None)

        if raw is None:
            logger.debug(f"{info.name}: {INCOMPLETE_FILE_MESSAGE}")
            result.complete = False
            break

        result.lines_read += 1
        line = strip_terminator(raw)
        still_active = []

        for k in active:
            bounds = locate_cell(line, indices[k], sep)

            if bounds is None:
                logger.debug(
                    f"{info.name}: column {indices[k]} missing in slot {i} "
                    f"({requests[k].original_name!r}); {INCOMPLETE_FILE_MESSAGE}"
                )
                result.complete = False
                continue

            start, stop = bounds
            requests[k].data[i] = decode_cell(line[start:stop], invalid, decimal)
            decoded[k] = i + 1
            still_active.append(k)

        active = still_active

        if not active:
            break

    # blanket status for everything that was decoded
    for request, count in zip(requests, decoded):
        if count:
            request.status[:count] = 1

    result.valid_slots = decoded


# ----------------------------- Timestamp-keyed mode -----------------------------

def _read_timestamp_keyed(
    lines: Iterator[str],
    info: ReadInfo,
    requests: Sequence[ReadRequest],
    indices: Sequence[int],
    result: ReadResult,
    cancel_event: Optional[CancellationSignal],
) -> None:
    settings = info.settings
    options = settings.datetime_mode
    sep = settings.separator
    invalid = settings.invalid_value
    decimal = settings.decimal_separator

    parser = TimestampParser(
        options.timestamp_pattern,
        utc_offset=settings.utc_offset,
        timestamp_offset=options.timestamp_offset,
    )
    timestamp_index = options.timestamp_column - 1
    begin = ensure_utc(info.begin)

    active = [k for k, index in enumerate(indices) if index >= 0]
    valid = [0] * len(requests)
    result.valid_slots = valid

    if not active:
        return

    line_number = rows_before_data(settings)

    for n, raw in enumerate(lines):
        if n % CANCEL_POLL_INTERVAL == 0 and _is_cancelled(cancel_event):
            logger.debug(f"{info.name}: read cancelled at line {line_number + 1}")
            result.cancelled = True
            result.complete = False
            return

        line_number += 1
        result.lines_read += 1
        line = strip_terminator(raw)

        if not line.strip():
            continue

        bounds = locate_cell(line, timestamp_index, sep)

        if bounds is None:
            logger.debug(f"{info.name}: timestamp column missing in line {line_number}; {INCOMPLETE_FILE_MESSAGE}")
            result.complete = False
            return

        start, stop = bounds
        timestamp = parser.parse(unquote_cell(line[start:stop]), line_number)
        slot = slot_index(timestamp, begin, settings.sample_period, info.file_offset)

        if slot < 0 or slot >= info.file_block:
            continue

        still_active = []

        for k in active:
            bounds = locate_cell(line, indices[k], sep)

            if bounds is None:
                logger.debug(
                    f"{info.name}: column {indices[k]} missing in line {line_number} "
                    f"({requests[k].original_name!r}); {INCOMPLETE_FILE_MESSAGE}"
                )
                result.complete = False
                continue

            still_active.append(k)
            start, stop = bounds
            value = decode_cell(line[start:stop], invalid, decimal)

            if math.isnan(value):
                continue

            request = requests[k]
            request.data[slot] = value

            if request.status[slot] != 1:
                request.status[slot] = 1
                valid[k] += 1

        active = still_active

        if not active:
            return


# ----------------------------- Entry point -----------------------------

def read(
    info: ReadInfo,
    requests: Sequence[ReadRequest],
    index_lookup: Optional[IndexLookup] = None,
    cancel_event: Optional[CancellationSignal] = None,
) -> ReadResult:
    """
    Decode one file into the buffers of the given read requests.

    Args:
        info: File, grid position and settings of this read
        requests: Columns to decode and their output buffers
        index_lookup: Column index lookup used when the file has no header
        cancel_event: Object with ``is_set()``; polled every
            ``CANCEL_POLL_INTERVAL`` lines

    Returns:
        ReadResult with per-request valid slot counts and completion flags

    Raises:
        FileIncompleteError: If the file ends before its data row
        TimestampParseError: If a timestamp cannot be parsed (timestamp mode)
        ConfigurationError: If column indices cannot be resolved
        ValueError: If a buffer is shorter than ``info.file_block``
    """
    _check_buffers(info, requests)
    settings = info.settings
    result = ReadResult(file=info.name, valid_slots=[0] * len(requests))

    with open_lines(info.file, settings.encoding) as lines:
        header_line, _ = read_header_lines(lines, settings)
        indices = resolve_column_indices(header_line, info, requests, index_lookup)

        for request, index in zip(requests, indices):
            if index < 0:
                logger.debug(f"{info.name}: column {request.original_name!r} not found")

        if settings.datetime_mode is None:
            _read_sequential(lines, info, requests, indices, result, cancel_event)
        else:
            _read_timestamp_keyed(lines, info, requests, indices, result, cancel_event)

    logger.debug(
        f"{info.name}: read {result.lines_read} lines, valid slots {result.valid_slots}, "
        f"complete={result.complete}, cancelled={result.cancelled}"
    )
    return result
