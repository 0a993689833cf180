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

"""Property-based tests for the transfer helpers."""

from __future__ import annotations

import io

import pytest
from hypothesis import given, settings, strategies as st

from streamtransfer import (
    UnexpectedEndOfStreamError,
    copy_all,
    lines,
    read_all,
    read_exactly,
    read_exactly_into,
)
from tests.helpers import ChunkSource, RecordingSink, TrickleSource

payloads = st.binary(max_size=4096)
chunk_limits = st.integers(min_value=1, max_value=512)


# ============================================================================
# Property Tests: read_all / copy_all
# ============================================================================


@pytest.mark.parametrize("buffer_size", [1, 1024, 65_536])
@given(data=payloads)
@settings(max_examples=50)
def test_read_all_returns_source_bytes(buffer_size: int, data: bytes) -> None:
    """read_all returns the payload byte-for-byte for any window size."""

    assert read_all(TrickleSource(data, max_chunk=700), buffer_size=buffer_size) == data


@given(data=payloads, max_chunk=chunk_limits, buffer_size=chunk_limits)
@settings(max_examples=100)
def test_read_all_is_independent_of_read_pattern(
    data: bytes, max_chunk: int, buffer_size: int
) -> None:
    """Short reads of any size never change what read_all returns."""

    assert read_all(TrickleSource(data, max_chunk=max_chunk), buffer_size=buffer_size) == data


@given(data=payloads, prefix=st.binary(max_size=64), accept=chunk_limits)
@settings(max_examples=100)
def test_copy_all_appends_after_prior_content(
    data: bytes, prefix: bytes, accept: int
) -> None:
    """copy_all leaves exactly prefix + payload, even with short writes."""

    sink = RecordingSink(initial=prefix, max_accept=accept)
    copied = copy_all(ChunkSource([data]), sink, buffer_size=256)
    assert copied == len(data)
    assert sink.contents == prefix + data


@given(data=payloads, offset=st.integers(min_value=0, max_value=4096))
@settings(max_examples=100)
def test_memory_fast_path_matches_chunked_copy(data: bytes, offset: int) -> None:
    """The BytesIO shortcut copies what a generic reader would."""

    fast_source = io.BytesIO(data)
    fast_source.seek(offset)
    slow_source = io.BufferedReader(io.BytesIO(data))
    slow_source.seek(offset)

    fast = io.BytesIO()
    slow = io.BytesIO()
    copy_all(fast_source, fast)
    copy_all(slow_source, slow, buffer_size=7)
    assert fast.getvalue() == slow.getvalue() == data[offset:]


# ============================================================================
# Property Tests: read_exactly
# ============================================================================


@given(data=st.binary(min_size=1, max_size=1024), max_chunk=chunk_limits)
@settings(max_examples=100)
def test_read_exactly_matches_payload(data: bytes, max_chunk: int) -> None:
    """Reading exactly len(data) bytes returns the payload for any read size."""

    assert read_exactly(TrickleSource(data, max_chunk=max_chunk), len(data)) == data


@given(
    data=st.binary(max_size=256),
    missing=st.integers(min_value=1, max_value=256),
    max_chunk=chunk_limits,
)
@settings(max_examples=100)
def test_read_exactly_reports_precise_shortfall(
    data: bytes, missing: int, max_chunk: int
) -> None:
    """A short source reports exactly how many bytes were outstanding."""

    requested = len(data) + missing
    with pytest.raises(UnexpectedEndOfStreamError) as excinfo:
        read_exactly_into(
            TrickleSource(data, max_chunk=max_chunk), bytearray(requested), 0, requested
        )
    assert excinfo.value.remaining == missing
    noun = "byte" if missing == 1 else "bytes"
    assert str(excinfo.value) == f"End of stream reached with {missing} {noun} left to read."


# ============================================================================
# Property Tests: lines
# ============================================================================

line_text = st.text(
    alphabet=st.characters(exclude_categories=("Cs",), exclude_characters="\r\n"),
    max_size=20,
)


@given(items=st.lists(line_text, max_size=20), trailing_newline=st.booleans())
@settings(max_examples=100)
def test_lines_recovers_joined_lines(items: list[str], trailing_newline: bool) -> None:
    """Joining lines with newlines and iterating gives the lines back."""

    text = "\n".join(items)
    if trailing_newline and items:
        text += "\n"
    expected = items
    if items and items[-1] == "" and not trailing_newline:
        # A final empty line without a terminator is indistinguishable from EOF.
        expected = items[:-1]
    assert list(lines(io.StringIO(text))) == expected
