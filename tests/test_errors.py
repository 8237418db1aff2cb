"""Tests for kvheap error taxonomy."""

import pytest

from kvheap.errors import (
    ErrorCode,
    KvHeapError,
    ValidationError,
    ElementTooLargeError,
    InvalidElementError,
    InvalidPriorityError,
    CorruptRecordError,
)


class TestErrors:
    """Tests for error codes and rendering."""

    def test_base_error_defaults(self):
        err = KvHeapError("boom")
        assert err.code == ErrorCode.INTERNAL_ERROR
        assert str(err) == "[INTERNAL_ERROR] boom"
        assert err.context == {}

    def test_code_override(self):
        err = KvHeapError("bad", code=ErrorCode.CORRUPT_RECORD)
        assert err.code == ErrorCode.CORRUPT_RECORD

    def test_element_too_large(self):
        err = ElementTooLargeError(10, 4)
        assert isinstance(err, ValidationError)
        assert err.code == ErrorCode.ELEMENT_TOO_LARGE
        assert err.length == 10
        assert err.limit == 4
        assert err.remediation

    def test_to_dict(self):
        data = InvalidPriorityError(-1).to_dict()
        assert data["code"] == 6003
        assert data["code_name"] == "INVALID_PRIORITY"
        assert data["context"] == {"priority": "-1"}

    @pytest.mark.parametrize("err, code", [
        (InvalidElementError("str"), ErrorCode.INVALID_ELEMENT),
        (InvalidPriorityError(None), ErrorCode.INVALID_PRIORITY),
        (CorruptRecordError("truncated"), ErrorCode.CORRUPT_RECORD),
    ])
    def test_codes(self, err, code):
        assert isinstance(err, KvHeapError)
        assert err.code == code
        assert str(err).startswith(f"[{code.name}]")
