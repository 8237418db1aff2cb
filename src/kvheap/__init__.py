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
kvheap v0.1.0

A priority queue simulated entirely on top of an ordered key-value store.

Example:
    from kvheap import PriorityQueue

    queue = PriorityQueue()
    queue.insert(b"task", priority=5)
    element = queue.pop()
"""

__version__ = "0.1.0"

from .queue import PriorityQueue, QueueConfig, QueueStats, create_queue
from .store import OrderedKeyValueStore, InMemoryOrderedStore
from .codec import MAX_ELEMENT_LENGTH, MAX_PRIORITY
from .errors import (
    KvHeapError,
    ErrorCode,
    ValidationError,
    ElementTooLargeError,
    InvalidElementError,
    InvalidPriorityError,
    CorruptRecordError,
)

__all__ = [
    # Version
    "__version__",

    # Queue
    "PriorityQueue",
    "QueueConfig",
    "QueueStats",
    "create_queue",

    # Stores
    "OrderedKeyValueStore",
    "InMemoryOrderedStore",

    # Limits
    "MAX_ELEMENT_LENGTH",
    "MAX_PRIORITY",

    # Errors
    "KvHeapError",
    "ErrorCode",
    "ValidationError",
    "ElementTooLargeError",
    "InvalidElementError",
    "InvalidPriorityError",
    "CorruptRecordError",
]
