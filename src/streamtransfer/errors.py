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

"""Base exception hierarchy for :mod:`streamtransfer`."""

from __future__ import annotations

__all__ = [
    "IndexOutOfRangeError",
    "InvalidArgumentError",
    "StreamTransferError",
    "UnexpectedEndOfStreamError",
]


class StreamTransferError(Exception):
    """Base class for all streamtransfer exceptions.

    Callers can catch every library-specific failure with a single handler
    while standard Python exceptions raised by the underlying streams
    (``OSError``, ``ValueError`` on closed files, ...) propagate untouched.

    Example:
        Catch any streamtransfer error::

            try:
                payload = read_all(response)
            except StreamTransferError as e:
                logger.error("Transfer failed: %s", e)

    Note:
        Subclasses also inherit from the matching builtin exception so
        handlers written against ``ValueError``, ``IndexError`` or
        ``EOFError`` keep working.
    """


class InvalidArgumentError(StreamTransferError, ValueError):
    """Raised when a stream, buffer or size argument is unusable.

    Common causes:

    - ``None`` passed where a stream or buffer is required
    - An object that lacks the required ``read``/``readinto``/``write``/
      ``readline`` method
    - A non-positive ``buffer_size`` or an empty transfer buffer
    - A read-only buffer (``bytes``, read-only ``memoryview``)

    Validation happens before any I/O, so a call that raises this error has
    not touched its streams.
    """


class IndexOutOfRangeError(InvalidArgumentError, IndexError):
    """Raised when a requested read window falls outside the target buffer.

    Covers a ``start_index`` outside ``[0, len(buffer))`` and a
    ``bytes_to_read`` that is below one or runs past the end of the buffer.
    Inherits from :class:`InvalidArgumentError`, so catching that class also
    catches this one.
    """


class UnexpectedEndOfStreamError(StreamTransferError, EOFError):
    """Raised when a source runs dry before an exact-length read completes.

    Attributes:
        remaining: Bytes still outstanding when end-of-data was reported.
        requested: Total bytes the caller asked for.
    """

    def __init__(self, remaining: int, requested: int) -> None:
        suffix = "" if remaining == 1 else "s"
        super().__init__(
            f"End of stream reached with {remaining} byte{suffix} left to read."
        )
        self.remaining = remaining
        self.requested = requested
