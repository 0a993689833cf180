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

"""Stream capability protocols consumed by the transfer helpers.

Defines the ReadIntoSource, ByteSource, ByteSink, and LineReader protocols.
They are structural: standard ``io`` objects (files, ``BytesIO``,
``StringIO``, socket files) satisfy them without subclassing.
"""

from __future__ import annotations

from collections.abc import Buffer
from typing import Protocol, runtime_checkable

__all__ = [
    "ByteSink",
    "ByteSource",
    "LineReader",
    "ReadIntoSource",
    "Readable",
]


@runtime_checkable
class ReadIntoSource(Protocol):
    """Byte source that fills a caller-supplied buffer.

    Matches ``io.RawIOBase`` and ``io.BufferedIOBase`` readers. Preferred
    over :class:`ByteSource` because it avoids an intermediate copy.
    """

    def readinto(self, buffer: Buffer, /) -> int | None:
        """Read up to ``len(buffer)`` bytes into ``buffer``.

        Returns:
            Number of bytes read, ``0`` at end-of-data, or ``None`` when a
            non-blocking stream has nothing available.
        """
        ...


@runtime_checkable
class ByteSource(Protocol):
    """Byte source that returns freshly allocated chunks.

    Example::

        class Chunks:
            def read(self, size: int = -1, /) -> bytes:
                return next(self._chunks, b"")
    """

    def read(self, size: int = -1, /) -> bytes | None:
        """Read up to ``size`` bytes.

        Returns:
            Bytes read, empty bytes at end-of-data, or ``None`` when a
            non-blocking stream has nothing available.
        """
        ...


@runtime_checkable
class ByteSink(Protocol):
    """Byte destination."""

    def write(self, data: Buffer, /) -> int | None:
        """Write ``data``.

        Returns:
            Number of bytes accepted, or ``None`` when the whole chunk was
            accepted and the sink does not report counts.

        ``data`` is only valid for the duration of the call; sinks that
        keep it must copy it first.
        """
        ...


@runtime_checkable
class LineReader(Protocol):
    """Line-oriented text reader.

    Matches ``io.TextIOBase``: ``readline`` returns the next line including
    its terminator and ``""`` at end-of-stream. ``None`` is also accepted as
    the end-of-stream marker. Binary readers match structurally but are
    rejected by :func:`~streamtransfer.transfer.lines`.
    """

    def readline(self) -> str | bytes | None:
        """Read the next line, or return an end-of-stream marker."""
        ...


type Readable = ReadIntoSource | ByteSource