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
kvheap Error Types

Machine-readable error codes with actionable remediation messages.

Error Code Ranges:
- 6xxx: Validation errors (rejected before the store is touched)
- 9xxx: Internal errors (store contents that cannot be parsed)
"""

from enum import IntEnum
from typing import Optional, Dict, Any


class ErrorCode(IntEnum):
    """Machine-readable error codes."""

    # Validation errors (6xxx)
    INVALID_ELEMENT = 6001
    ELEMENT_TOO_LARGE = 6002
    INVALID_PRIORITY = 6003

    # Internal errors (9xxx)
    INTERNAL_ERROR = 9001
    CORRUPT_RECORD = 9003


class KvHeapError(Exception):
    """
    Base exception for kvheap errors.

    All kvheap exceptions inherit from this class, providing:
    - Machine-readable error codes
    - Human-readable messages
    - Optional remediation hints
    - Optional context data

    Example:
        try:
            queue.insert(payload, priority=7)
        except ElementTooLargeError as e:
            print(f"Error {e.code}: {e.message}")
            print(f"Remediation: {e.remediation}")
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        remediation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.remediation = remediation
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "remediation": self.remediation,
            "context": self.context,
        }


# ============================================================================
# Validation Errors
# ============================================================================

class ValidationError(KvHeapError):
    """Base class for validation errors."""
    pass


class ElementTooLargeError(ValidationError):
    """Element does not fit in the 32-bit length field of a packed list."""
    code = ErrorCode.ELEMENT_TOO_LARGE

    def __init__(self, length: int, limit: int):
        super().__init__(
            f"Element of {length} bytes exceeds the {limit} byte limit",
            remediation="Split the payload or store a reference to it instead of the bytes",
            context={"length": length, "limit": limit},
        )

    @property
    def length(self) -> int:
        return self.context["length"]

    @property
    def limit(self) -> int:
        return self.context["limit"]


class InvalidElementError(ValidationError):
    """Element is not a bytes-like object."""
    code = ErrorCode.INVALID_ELEMENT

    def __init__(self, element_type: str):
        super().__init__(
            f"Element must be bytes-like, got {element_type}",
            remediation="Encode text payloads first, e.g. payload.encode('utf-8')",
            context={"type": element_type},
        )


class InvalidPriorityError(ValidationError):
    """Priority is not an unsigned 64-bit integer."""
    code = ErrorCode.INVALID_PRIORITY

    def __init__(self, priority: Any):
        super().__init__(
            f"Priority must be an integer in [0, 2**64 - 1], got {priority!r}",
            remediation="Map signed or wider priorities onto the u64 range before inserting",
            context={"priority": repr(priority)},
        )


# ============================================================================
# Internal Errors
# ============================================================================

class CorruptRecordError(KvHeapError):
    """Bytes read back from the store do not parse as a queue record."""
    code = ErrorCode.CORRUPT_RECORD

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            remediation="The store must only be written through PriorityQueue",
            context=context,
        )
