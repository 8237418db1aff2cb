#!/usr/bin/env python3
"""
Tests for kvheap record codec

Covers priority key encoding and the packed element list layout.
"""

import pytest

from kvheap.codec import (
    MAX_PRIORITY,
    encode_u64_be,
    decode_u64_be,
    encode_u32_be,
    decode_u32_be,
    encode_priority,
    decode_priority,
    check_element,
    encode_elements,
    decode_elements,
    element_count,
    iter_records,
    append_element,
    last_element,
    remove_last,
)
from kvheap.errors import (
    CorruptRecordError,
    ElementTooLargeError,
    InvalidElementError,
    InvalidPriorityError,
)


# ============================================================================
# Key Encoding Tests
# ============================================================================

class TestKeyEncoding:
    """Test big-endian key encoding for lexicographic ordering."""

    def test_u64_encode_decode(self):
        """Test u64 encoding roundtrip."""
        values = [0, 1, 100, 1000, 2**32, 2**63-1, 2**64-1]
        for value in values:
            encoded = encode_u64_be(value)
            assert len(encoded) == 8
            assert decode_u64_be(encoded) == value, f"Failed for {value}"

    def test_u64_ordering(self):
        """Test that encoded u64 preserves lexicographic order."""
        values = [0, 3, 100, 255, 256, 1000, 10000, 2**32, 2**64-1]
        encoded = [encode_u64_be(v) for v in values]
        assert encoded == sorted(encoded), "Ordering not preserved"

    def test_u32_encode_decode(self):
        assert encode_u32_be(258) == b"\x00\x00\x01\x02"
        assert decode_u32_be(b"\x00\x00\x01\x02") == 258
        assert decode_u32_be(b"xx\x00\x00\x00\x07", offset=2) == 7

    def test_priority_key(self):
        assert encode_priority(10) == b"\x00" * 7 + b"\x0a"
        assert decode_priority(encode_priority(MAX_PRIORITY)) == MAX_PRIORITY
        assert decode_priority(encode_priority(0)) == 0

    @pytest.mark.parametrize("priority", [-1, 2**64, True, 1.5, "3", None])
    def test_priority_rejects_non_u64(self, priority):
        with pytest.raises(InvalidPriorityError):
            encode_priority(priority)

    def test_decode_priority_wrong_length(self):
        with pytest.raises(CorruptRecordError):
            decode_priority(b"\x00\x01")


# ============================================================================
# Element Validation Tests
# ============================================================================

class TestCheckElement:
    """Test element validation and normalisation."""

    def test_bytes_pass_through(self):
        assert check_element(b"abc") == b"abc"

    def test_bytes_like_normalised(self):
        assert check_element(bytearray(b"abc")) == b"abc"
        assert isinstance(check_element(bytearray(b"abc")), bytes)
        assert check_element(memoryview(b"xyz")) == b"xyz"

    def test_str_rejected(self):
        with pytest.raises(InvalidElementError):
            check_element("text")

    def test_too_large(self):
        assert check_element(b"1234", limit=4) == b"1234"
        with pytest.raises(ElementTooLargeError) as exc_info:
            check_element(b"12345", limit=4)
        assert exc_info.value.length == 5
        assert exc_info.value.limit == 4


# ============================================================================
# Packed Element List Tests
# ============================================================================

class TestPackedElementList:
    """Test the packed element list layout and operations."""

    def test_encode_layout(self):
        encoded = encode_elements([b"ab", b""])
        assert encoded == (
            b"\x00\x00\x00\x02"
            b"\x00\x00\x00\x02ab"
            b"\x00\x00\x00\x00"
        )

    @pytest.mark.parametrize("elements", [
        [b""],
        [b"\x00"],
        [b"a", b"bb", b"ccc"],
        [b"same", b"same"],
        [bytes(range(256)), b"", b"\xff" * 1000],
    ])
    def test_encode_decode_roundtrip(self, elements):
        assert decode_elements(encode_elements(elements)) == elements

    def test_element_count_reads_header_only(self):
        # Payloads are never parsed, so a bare header is enough
        assert element_count(b"\x00\x00\x00\x05") == 5
        assert element_count(encode_elements([b"a", b"b", b"c"])) == 3

    def test_element_count_short_buffer(self):
        with pytest.raises(CorruptRecordError):
            element_count(b"\x00\x01")

    def test_iter_records_offsets(self):
        data = encode_elements([b"ab", b"c"])
        assert list(iter_records(data)) == [(4, b"ab"), (10, b"c")]

    def test_trailing_bytes_ignored(self):
        data = encode_elements([b"x"]) + b"garbage"
        assert decode_elements(data) == [b"x"]

    def test_truncated_payload(self):
        data = encode_elements([b"hello"])[:-2]
        with pytest.raises(CorruptRecordError):
            decode_elements(data)

    def test_truncated_length_prefix(self):
        data = b"\x00\x00\x00\x02" + b"\x00\x00\x00\x01a" + b"\x00\x00"
        with pytest.raises(CorruptRecordError):
            decode_elements(data)

    def test_append_matches_reencode(self):
        cases = [[b"a"], [b"", b"b"], [b"x" * 300, b"y", b""]]
        for elements in cases:
            data = encode_elements(elements)
            for new in [b"", b"z", b"long" * 50]:
                assert append_element(data, new) == encode_elements(elements + [new])

    def test_append_rejects_str(self):
        with pytest.raises(InvalidElementError):
            append_element(encode_elements([b"a"]), "b")

    def test_last_element(self):
        assert last_element(encode_elements([b"first", b"second", b"third"])) == b"third"
        assert last_element(encode_elements([b""])) == b""

    def test_last_element_empty_list(self):
        with pytest.raises(CorruptRecordError):
            last_element(b"\x00\x00\x00\x00")

    def test_remove_last_single(self):
        removed, remaining = remove_last(encode_elements([b"only"]))
        assert removed == b"only"
        assert remaining is None

    def test_remove_last_many(self):
        elements = [b"a", b"", b"ccc", b"dddd"]
        data = encode_elements(elements)

        removed, remaining = remove_last(data)
        assert removed == b"dddd"
        assert remaining == encode_elements(elements[:-1])
        assert decode_elements(remaining) == elements[:-1]

    def test_remove_last_until_empty(self):
        elements = [b"1", b"2", b"3"]
        data = encode_elements(elements)
        popped = []
        while data is not None:
            removed, data = remove_last(data)
            popped.append(removed)
        assert popped == [b"3", b"2", b"1"]

    def test_remove_last_empty_list(self):
        with pytest.raises(CorruptRecordError):
            remove_last(b"\x00\x00\x00\x00")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
