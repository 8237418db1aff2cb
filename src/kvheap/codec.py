# Copyright 2025 Sushanth (https://github.com/sushanthpy)
#
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

"""
kvheap Record Codec

Byte layouts shared by the queue and its store:

Priority key (8 bytes):
    priority: u64 big-endian, so byte order of keys == numeric order

Packed element list (the value under a priority key):
    count: u32 big-endian
    repeated `count` times:
        element_length: u32 big-endian
        element_bytes: element_length bytes

Elements in a packed list are kept oldest first. All functions here are pure;
none of them touch a store.
"""

from __future__ import annotations

import struct
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from .errors import (
    CorruptRecordError,
    ElementTooLargeError,
    InvalidElementError,
    InvalidPriorityError,
)


MAX_PRIORITY = (1 << 64) - 1
MAX_ELEMENT_LENGTH = (1 << 32) - 1

PRIORITY_KEY_SIZE = 8
HEADER_SIZE = 4
LENGTH_PREFIX_SIZE = 4


# ============================================================================
# Integer Encoding - Big-Endian for Lexicographic Ordering
# ============================================================================

def encode_u64_be(value: int) -> bytes:
    """Encode a u64 as big-endian bytes for lexicographic ordering."""
    return struct.pack('>Q', value)


def decode_u64_be(data: bytes) -> int:
    """Decode a big-endian u64 from bytes."""
    return struct.unpack('>Q', data[:8])[0]


def encode_u32_be(value: int) -> bytes:
    """Encode a u32 as big-endian bytes."""
    return struct.pack('>I', value)


def decode_u32_be(data: bytes, offset: int = 0) -> int:
    """Decode a big-endian u32 starting at `offset`."""
    return struct.unpack_from('>I', data, offset)[0]


# ============================================================================
# Priority Keys
# ============================================================================

def encode_priority(priority: Any) -> bytes:
    """
    Encode a priority as its 8-byte store key.

    Raises:
        InvalidPriorityError: if priority is not an int in [0, 2**64 - 1]
    """
    # bool is an int subclass but never a meaningful priority
    if not isinstance(priority, int) or isinstance(priority, bool):
        raise InvalidPriorityError(priority)
    if priority < 0 or priority > MAX_PRIORITY:
        raise InvalidPriorityError(priority)
    return encode_u64_be(priority)


def decode_priority(key: bytes) -> int:
    """Decode an 8-byte store key back into its priority."""
    if len(key) != PRIORITY_KEY_SIZE:
        raise CorruptRecordError(
            f"Priority key must be {PRIORITY_KEY_SIZE} bytes, got {len(key)}",
            context={"key": key.hex()},
        )
    return decode_u64_be(key)


# ============================================================================
# Element Validation
# ============================================================================

def check_element(element: Any, limit: int = MAX_ELEMENT_LENGTH) -> bytes:
    """
    Validate an element and normalise it to bytes.

    bytearray and memoryview are accepted; str is not, since its byte length
    depends on an encoding the queue knows nothing about.

    Raises:
        InvalidElementError: if element is not bytes-like
        ElementTooLargeError: if element is longer than `limit`
    """
    if isinstance(element, (bytearray, memoryview)):
        element = bytes(element)
    elif not isinstance(element, bytes):
        raise InvalidElementError(type(element).__name__)

    if len(element) > limit:
        raise ElementTooLargeError(len(element), limit)
    return element


# ============================================================================
# Packed Element List
# ============================================================================

def encode_elements(elements: Iterable[bytes]) -> bytes:
    """
    Encode elements (oldest first) as a packed element list.

    Every element is validated before anything is written, so an oversize
    element raises without producing a partial buffer.
    """
    checked = [check_element(element) for element in elements]

    parts = [encode_u32_be(len(checked))]
    for element in checked:
        parts.append(encode_u32_be(len(element)))
        parts.append(element)
    return b"".join(parts)


def element_count(data: bytes) -> int:
    """Read the element count from the 4-byte header only."""
    if len(data) < HEADER_SIZE:
        raise CorruptRecordError(
            f"Packed list shorter than its {HEADER_SIZE} byte header",
            context={"size": len(data)},
        )
    return decode_u32_be(data)


def _walk(data: bytes) -> Iterator[Tuple[int, int, int]]:
    """
    Forward cursor over a packed list.

    Yields (record_start, payload_start, payload_end) for each element, where
    record_start is the offset of the element's length prefix.
    """
    count = element_count(data)
    size = len(data)
    offset = HEADER_SIZE

    for index in range(count):
        if offset + LENGTH_PREFIX_SIZE > size:
            raise CorruptRecordError(
                f"Packed list truncated in length prefix of element {index}",
                context={"count": count, "offset": offset, "size": size},
            )
        length = decode_u32_be(data, offset)
        start = offset + LENGTH_PREFIX_SIZE
        end = start + length
        if end > size:
            raise CorruptRecordError(
                f"Packed list truncated in payload of element {index}",
                context={"count": count, "offset": offset, "length": length, "size": size},
            )
        yield offset, start, end
        offset = end


def iter_records(data: bytes) -> Iterator[Tuple[int, bytes]]:
    """Iterate (record_offset, element) pairs of a packed list, oldest first."""
    for record_start, start, end in _walk(data):
        yield record_start, data[start:end]


def decode_elements(data: bytes) -> List[bytes]:
    """
    Decode a packed list into its elements, oldest first.

    Bytes after the last declared element are ignored.
    """
    return [element for _, element in iter_records(data)]


def append_element(data: bytes, element: bytes) -> bytes:
    """
    Append an element to an encoded packed list without decoding it.

    Equivalent to encode_elements(decode_elements(data) + [element]).
    """
    element = check_element(element)
    count = element_count(data)
    return b"".join((
        encode_u32_be(count + 1),
        data[HEADER_SIZE:],
        encode_u32_be(len(element)),
        element,
    ))


def last_element(data: bytes) -> bytes:
    """Return the newest element of a packed list without re-encoding it."""
    tail = None
    for tail in _walk(data):
        pass

    if tail is None:
        raise CorruptRecordError("Packed list is empty", context={"count": 0})

    _, start, end = tail
    return data[start:end]


def remove_last(data: bytes) -> Tuple[bytes, Optional[bytes]]:
    """
    Remove the newest element from a packed list.

    A single forward pass finds the tail record; everything before it is the
    shortened list.

    Returns:
        (removed_element, remaining) where remaining is the re-encoded list
        with count decremented, or None when the removed element was the only
        one and the key should be deleted.
    """
    count = element_count(data)
    tail = None
    for tail in _walk(data):
        pass

    if tail is None:
        raise CorruptRecordError("Packed list is empty", context={"count": 0})

    record_start, start, end = tail
    removed = data[start:end]

    if count == 1:
        return removed, None
    return removed, encode_u32_be(count - 1) + data[HEADER_SIZE:record_start]
