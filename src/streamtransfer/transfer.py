# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Bulk copy, exact-length reads, and line iteration over caller-owned streams.

All functions are stateless and blocking. Streams are never closed here;
ownership stays with the caller. Arguments are validated before the first
read so a call that raises :class:`~streamtransfer.errors.InvalidArgumentError`
has not touched its streams.

Example::

    with open("payload.bin", "rb") as source, open("copy.bin", "wb") as sink:
        copied = copy_all(source, sink, buffer_size=65_536)

    header = read_exactly(sock_file, 16)
    for line in lines(io.StringIO("a\\nb\\n")):
        ...
"""

from __future__ import annotations

import io
from collections.abc import Buffer, Callable, Iterator
from typing import Final

from .errors import (
    IndexOutOfRangeError,
    InvalidArgumentError,
    StreamTransferError,
    UnexpectedEndOfStreamError,
)
from .logging import StructuredLogger, get_logger
from .protocols import ByteSink, ByteSource, LineReader, Readable, ReadIntoSource

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "copy_all",
    "lines",
    "read_all",
    "read_exactly",
    "read_exactly_into",
]

#: Default transfer window for copy_all and read_all (8KB).
DEFAULT_BUFFER_SIZE: Final[int] = 8192

_logger: StructuredLogger = get_logger(__name__, context={"component": "transfer"})

type _ChunkReader = Callable[[memoryview], int]


def copy_all(
    source: Readable,
    destination: ByteSink,
    *,
    buffer_size: int | None = None,
    buffer: Buffer | None = None,
) -> int:
    """Copy everything from ``source`` to ``destination``.

    Reads start at the source's current position and continue until the
    source reports end-of-data. The contents of a caller-supplied ``buffer``
    are ignored and overwritten. The buffer is only borrowed for the
    duration of the call and can be resized again once it returns or raises.

    Args:
        source: Stream to drain.
        destination: Stream that receives every chunk.
        buffer_size: Size of the internal transfer window. Defaults to
            :data:`DEFAULT_BUFFER_SIZE`.
        buffer: Writable buffer to use as the transfer window instead.

    Returns:
        Number of bytes copied.

    Raises:
        InvalidArgumentError: If a stream is missing or unusable,
            ``buffer_size`` is below one, ``buffer`` is empty or read-only,
            or both ``buffer_size`` and ``buffer`` are given.
        StreamTransferError: If a stream misbehaves (non-blocking source
            with no data, destination accepting zero bytes).
    """
    window_size = _check_window(buffer_size, buffer)
    _require_readable(source, "source")
    _require_sink(destination, "destination")

    context: dict[str, object]
    if type(source) is io.BytesIO:
        copied = _copy_from_memory(source, destination)
        context = {"bytes": copied, "strategy": "memory"}
    else:
        # Allocated only here; the memory path never needs a window.
        with _transfer_window(window_size, buffer) as window:
            copied = _copy_chunks(_chunk_reader(source), destination, window)
        context = {"bytes": copied, "strategy": "chunked", "buffer_size": window_size}

    _logger.debug(
        "Stream copy complete.",
        event="stream.copy_all.complete",
        context=context,
    )
    return copied


def read_all(
    source: Readable,
    *,
    buffer_size: int | None = None,
    buffer: Buffer | None = None,
) -> bytes:
    """Read ``source`` to end-of-data and return exactly the bytes read.

    Accepts the same transfer window arguments as :func:`copy_all` and
    raises under the same conditions.
    """
    with io.BytesIO() as accumulator:
        _ = copy_all(source, accumulator, buffer_size=buffer_size, buffer=buffer)
        contents = accumulator.getvalue()

    _logger.debug(
        "Stream drained.",
        event="stream.read_all.complete",
        context={"bytes": len(contents)},
    )
    return contents


def read_exactly(source: Readable, bytes_to_read: int) -> bytearray:
    """Read exactly ``bytes_to_read`` bytes into a new ``bytearray``.

    Raises:
        InvalidArgumentError: If ``source`` is missing or unusable.
        IndexOutOfRangeError: If ``bytes_to_read`` is below one.
        UnexpectedEndOfStreamError: If the source ends early.
    """
    _require_readable(source, "source")
    if bytes_to_read < 1:
        msg = f"bytes_to_read must be at least 1, got {bytes_to_read}."
        raise IndexOutOfRangeError(msg)
    return read_exactly_into(source, bytearray(bytes_to_read), 0, bytes_to_read)


def read_exactly_into[B: Buffer](
    source: Readable,
    buffer: B,
    start_index: int = 0,
    bytes_to_read: int | None = None,
) -> B:
    """Fill ``buffer[start_index:start_index + bytes_to_read]`` from ``source``.

    Short reads are retried until the window is full. Indexes are byte
    offsets into ``buffer``. On failure the bytes already read stay in
    ``buffer`` and ``buffer`` is no longer borrowed.

    Args:
        source: Stream to read from.
        buffer: Writable buffer receiving the data.
        start_index: First byte offset to fill.
        bytes_to_read: Bytes to read. ``None`` fills the buffer from
            ``start_index`` to its end.

    Returns:
        ``buffer`` itself.

    Raises:
        InvalidArgumentError: If ``source`` or ``buffer`` is missing or
            unusable.
        IndexOutOfRangeError: If the window does not fit inside ``buffer``
            or ``bytes_to_read`` is below one.
        UnexpectedEndOfStreamError: If the source ends before the window is
            full.
    """
    _require_readable(source, "source")
    with _writable_view(buffer, "buffer") as view:
        length = len(view)
        if not 0 <= start_index < length:
            msg = f"start_index must be in [0, {length}), got {start_index}."
            raise IndexOutOfRangeError(msg)

        if bytes_to_read is None:
            bytes_to_read = length - start_index
        if bytes_to_read < 1 or start_index + bytes_to_read > length:
            msg = (
                f"bytes_to_read must be in [1, {length - start_index}] for "
                f"start_index {start_index}, got {bytes_to_read}."
            )
            raise IndexOutOfRangeError(msg)

        with view[start_index : start_index + bytes_to_read] as window:
            _fill(_chunk_reader(source), window)

    _logger.debug(
        "Exact read complete.",
        event="stream.read_exactly.complete",
        context={"bytes": bytes_to_read, "start_index": start_index},
    )
    return buffer


def lines(reader: LineReader) -> Iterator[str]:
    """Lazily yield lines from ``reader`` without their terminators.

    The iterator is single-pass: advancing it consumes ``reader``. Iteration
    stops at the reader's end-of-stream marker (``""`` or ``None``); an empty
    line reads as ``"\\n"`` and is yielded as ``""``. ``reader`` must be a
    text reader; wrap binary streams in :class:`io.TextIOWrapper`.

    Raises:
        InvalidArgumentError: Immediately, if ``reader`` is missing, has no
            ``readline`` method, or is a binary ``io`` stream. On iteration,
            if ``reader`` returns anything other than ``str``.
    """
    if reader is None:
        raise InvalidArgumentError("reader must not be None.")
    if not isinstance(reader, LineReader):
        msg = f"reader must provide readline(), got {type(reader).__name__}."
        raise InvalidArgumentError(msg)
    if isinstance(reader, (io.RawIOBase, io.BufferedIOBase)):
        msg = f"reader must be a text stream, got binary {type(reader).__name__}."
        raise InvalidArgumentError(msg)
    return _iter_lines(reader)


def _iter_lines(reader: LineReader) -> Iterator[str]:
    while line := reader.readline():
        if not isinstance(line, str):
            msg = f"reader must return str lines, got {type(line).__name__}."
            raise InvalidArgumentError(msg)
        yield line.removesuffix("\n").removesuffix("\r")


def _check_window(buffer_size: int | None, buffer: Buffer | None) -> int:
    """Validate the transfer window arguments and return the window size."""

    if buffer is not None:
        if buffer_size is not None:
            raise InvalidArgumentError("Pass either buffer_size or buffer, not both.")
        with _writable_view(buffer, "buffer") as view:
            size = len(view)
        if size == 0:
            raise InvalidArgumentError("buffer has length of 0.")
        return size

    size = DEFAULT_BUFFER_SIZE if buffer_size is None else buffer_size
    if size < 1:
        msg = f"buffer_size must be at least 1, got {size}."
        raise InvalidArgumentError(msg)
    return size


def _transfer_window(size: int, buffer: Buffer | None) -> memoryview:
    if buffer is not None:
        return _writable_view(buffer, "buffer")
    return memoryview(bytearray(size))


def _writable_view(buffer: Buffer | None, name: str) -> memoryview:
    if buffer is None:
        msg = f"{name} must not be None."
        raise InvalidArgumentError(msg)
    try:
        view = memoryview(buffer).cast("B")
    except TypeError as error:
        msg = f"{name} must be a contiguous bytes-like object, got {type(buffer).__name__}."
        raise InvalidArgumentError(msg) from error
    if view.readonly:
        view.release()
        msg = f"{name} must be writable, got read-only {type(buffer).__name__}."
        raise InvalidArgumentError(msg)
    return view


def _require_readable(source: Readable | None, name: str) -> None:
    if source is None:
        msg = f"{name} must not be None."
        raise InvalidArgumentError(msg)
    if not isinstance(source, (ReadIntoSource, ByteSource)):
        msg = f"{name} must provide readinto() or read(), got {type(source).__name__}."
        raise InvalidArgumentError(msg)


def _require_sink(destination: ByteSink | None, name: str) -> None:
    if destination is None:
        msg = f"{name} must not be None."
        raise InvalidArgumentError(msg)
    if not isinstance(destination, ByteSink):
        msg = f"{name} must provide write(), got {type(destination).__name__}."
        raise InvalidArgumentError(msg)


_NON_BLOCKING_MSG: Final[str] = (
    "Source returned no data in non-blocking mode; "
    "non-blocking streams are not supported."
)


def _chunk_reader(source: Readable) -> _ChunkReader:
    """Return a callable that reads one chunk into a view and returns its size."""

    if isinstance(source, ReadIntoSource):
        readinto = source.readinto

        def read_chunk(view: memoryview) -> int:
            count = readinto(view)
            if count is None:
                raise StreamTransferError(_NON_BLOCKING_MSG)
            return count

        return read_chunk

    read = source.read

    def read_copy(view: memoryview) -> int:
        data = read(len(view))
        if data is None:
            raise StreamTransferError(_NON_BLOCKING_MSG)
        count = len(data)
        view[:count] = data
        return count

    return read_copy


# Every slice of a borrowed buffer is released with ``with`` so that a
# traceback holding these frames does not keep the caller's buffer exported.


def _copy_chunks(
    read_chunk: _ChunkReader, destination: ByteSink, window: memoryview
) -> int:
    total = 0
    while (count := read_chunk(window)) > 0:
        with window[:count] as chunk:
            _write_fully(destination, chunk)
        total += count
    return total


def _copy_from_memory(source: io.BytesIO, destination: ByteSink) -> int:
    # Writes straight from the BytesIO's own storage; no transfer window.
    position = source.tell()
    with source.getbuffer() as contents, contents[position:] as pending:
        copied = len(pending)
        _write_fully(destination, pending)
    _ = source.seek(position + copied)
    return copied


def _write_fully(destination: ByteSink, chunk: memoryview) -> None:
    total = len(chunk)
    offset = 0
    while offset < total:
        with chunk[offset:] as pending:
            written = destination.write(pending)
        if written is None:
            return
        if written <= 0:
            raise StreamTransferError("Destination accepted no bytes.")
        offset += written


def _fill(read_chunk: _ChunkReader, window: memoryview) -> None:
    requested = len(window)
    filled = 0
    while filled < requested:
        with window[filled:] as pending:
            count = read_chunk(pending)
        if count == 0:
            raise UnexpectedEndOfStreamError(requested - filled, requested)
        filled += count
