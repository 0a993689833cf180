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

"""Byte and line transfer helpers for caller-owned streams.

Example usage::

    from streamtransfer import copy_all, read_all, read_exactly, lines

    payload = read_all(response)
    header = read_exactly(sock_file, 16)
"""

from __future__ import annotations

from .errors import (
    IndexOutOfRangeError,
    InvalidArgumentError,
    StreamTransferError,
    UnexpectedEndOfStreamError,
)
from .logging import StructuredLogger, configure_logging, get_logger
from .protocols import (
    ByteSink,
    ByteSource,
    LineReader,
    Readable,
    ReadIntoSource,
)
from .transfer import (
    DEFAULT_BUFFER_SIZE,
    copy_all,
    lines,
    read_all,
    read_exactly,
    read_exactly_into,
)

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "ByteSink",
    "ByteSource",
    "IndexOutOfRangeError",
    "InvalidArgumentError",
    "LineReader",
    "ReadIntoSource",
    "Readable",
    "StreamTransferError",
    "StructuredLogger",
    "UnexpectedEndOfStreamError",
    "configure_logging",
    "copy_all",
    "get_logger",
    "lines",
    "read_all",
    "read_exactly",
    "read_exactly_into",
]
