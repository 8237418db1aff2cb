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
kvheap Priority Queue

A max-priority queue whose only storage is an ordered key-value store.
There is no in-memory heap: ordering comes from the store's key order.

Layout:
- One key per distinct priority (u64 big-endian, so the largest priority is
  the last key in the store)
- The value under a key is a packed element list holding every element
  inserted at that priority, oldest first

Example:
    from kvheap import PriorityQueue

    queue = PriorityQueue()
    queue.insert(b"low", priority=1)
    queue.insert(b"urgent", priority=10)

    queue.peek()   # b"urgent"
    queue.pop()    # b"urgent"
    queue.size()   # 1

Within one priority, pop returns the most recently inserted element first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from . import codec
from .errors import ElementTooLargeError
from .store import InMemoryOrderedStore, OrderedKeyValueStore

logger = logging.getLogger(__name__)


# ============================================================================
# QueueConfig - Queue Configuration
# ============================================================================

@dataclass
class QueueConfig:
    """Queue configuration."""
    name: str = "default"
    max_element_length: int = codec.MAX_ELEMENT_LENGTH

    def __post_init__(self):
        self._check_max_element_length(self.max_element_length)

    @staticmethod
    def _check_max_element_length(limit: int) -> None:
        if limit < 0 or limit > codec.MAX_ELEMENT_LENGTH:
            raise ValueError(
                f"max_element_length must be in [0, {codec.MAX_ELEMENT_LENGTH}], got {limit}"
            )

    def with_name(self, name: str) -> 'QueueConfig':
        """Builder pattern for the queue name."""
        self.name = name
        return self

    def with_max_element_length(self, limit: int) -> 'QueueConfig':
        """Builder pattern for the element size limit."""
        self._check_max_element_length(limit)
        self.max_element_length = limit
        return self


# ============================================================================
# QueueStats - Queue Statistics
# ============================================================================

@dataclass
class QueueStats:
    """Queue statistics."""
    name: str
    priorities: int = 0
    elements: int = 0
    max_priority: Optional[int] = None
    min_priority: Optional[int] = None
    largest_tier: int = 0


# ============================================================================
# PriorityQueue - The Main Queue Implementation
# ============================================================================

class PriorityQueue:
    """
    Priority queue backed by an ordered key-value store.

    Higher priority values are served first. Elements that share a priority
    are packed into a single store value and popped newest first.

    Not thread-safe: a queue exclusively owns its store.
    """

    def __init__(
        self,
        store: Optional[OrderedKeyValueStore] = None,
        config: Optional[QueueConfig] = None,
    ):
        """
        Initialize a priority queue.

        Args:
            store: Ordered store to use (default: a fresh InMemoryOrderedStore)
            config: Queue configuration (default: QueueConfig())
        """
        self._store = store if store is not None else InMemoryOrderedStore()
        self._config = config if config is not None else QueueConfig()

    @classmethod
    def new(cls) -> "PriorityQueue":
        """Create an empty queue over its own in-memory store."""
        return cls()

    @classmethod
    def from_store(
        cls,
        store: OrderedKeyValueStore,
        name: str = "default",
        max_element_length: int = codec.MAX_ELEMENT_LENGTH,
    ) -> "PriorityQueue":
        """
        Create a queue over an existing store.

        The store must only ever be written through this queue.

        Args:
            store: Ordered store instance
            name: Queue name, used in logs and stats
            max_element_length: Largest accepted element in bytes

        Returns:
            PriorityQueue instance
        """
        config = QueueConfig(name=name, max_element_length=max_element_length)
        return cls(store, config)

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def store(self) -> OrderedKeyValueStore:
        return self._store

    # =========================================================================
    # Core Operations
    # =========================================================================

    def is_empty(self) -> bool:
        """Check whether the queue has no elements."""
        return self._store.is_empty()

    def size(self) -> int:
        """
        Return the number of elements in the queue.

        Only each tier's 4-byte count header is read.

        Complexity: O(number of distinct priorities)
        """
        return sum(codec.element_count(value) for value in self._store.values())

    def peek(self) -> Optional[bytes]:
        """
        Return the highest-priority element without removing it.

        Returns:
            The newest element of the highest priority, or None if empty
        """
        entry = self._store.max_entry()
        if entry is None:
            return None
        _, value = entry
        return codec.last_element(value)

    def insert(self, element: bytes, priority: int) -> None:
        """
        Add an element with the given priority.

        Duplicate priorities and duplicate payloads are both kept.

        Args:
            element: Element payload bytes
            priority: Unsigned 64-bit priority (higher = served first)

        Raises:
            ElementTooLargeError: element exceeds max_element_length
            InvalidElementError: element is not bytes-like
            InvalidPriorityError: priority is not a u64
        """
        element, key = self._prepare(element, priority)
        self._put(key, element)

    def pop(self) -> Optional[bytes]:
        """
        Remove and return the highest-priority element.

        Returns:
            The newest element of the highest priority, or None if empty
        """
        popped = self.pop_with_priority()
        if popped is None:
            return None
        return popped[1]

    # =========================================================================
    # Extended Operations
    # =========================================================================

    def insert_many(self, items: Iterable[Tuple[bytes, int]]) -> int:
        """
        Insert multiple (element, priority) pairs.

        All pairs are validated before the first write, so a rejected pair
        leaves the queue unchanged.

        Returns:
            Number of elements inserted
        """
        prepared = [self._prepare(element, priority) for element, priority in items]
        for element, key in prepared:
            self._put(key, element)
        return len(prepared)

    def peek_with_priority(self) -> Optional[Tuple[int, bytes]]:
        """Like peek(), but return (priority, element)."""
        entry = self._store.max_entry()
        if entry is None:
            return None
        key, value = entry
        return codec.decode_priority(key), codec.last_element(value)

    def pop_with_priority(self) -> Optional[Tuple[int, bytes]]:
        """Like pop(), but return (priority, element)."""
        entry = self._store.max_entry()
        if entry is None:
            return None

        key, value = entry
        priority = codec.decode_priority(key)
        element, remaining = codec.remove_last(value)

        if remaining is None:
            self._store.remove(key)
            logger.debug("queue %s: priority %d drained, key removed", self.name, priority)
        else:
            self._store.insert(key, remaining)

        return priority, element

    def drain(self) -> Iterator[bytes]:
        """Pop elements until the queue is empty."""
        while True:
            element = self.pop()
            if element is None:
                return
            yield element

    def priorities(self) -> List[int]:
        """Return the distinct priorities present, highest first."""
        return [codec.decode_priority(key) for key, _ in self._store.items(reverse=True)]

    def list_elements(self, limit: int = 100) -> List[Tuple[int, bytes]]:
        """
        List (priority, element) pairs in pop order without removing them.

        Args:
            limit: Maximum number of pairs to return

        Returns:
            Pairs ordered by descending priority, newest first within a priority
        """
        result: List[Tuple[int, bytes]] = []
        if limit <= 0:
            return result

        for key, value in self._store.items(reverse=True):
            priority = codec.decode_priority(key)
            for element in reversed(codec.decode_elements(value)):
                result.append((priority, element))
                if len(result) >= limit:
                    return result
        return result

    def stats(self) -> QueueStats:
        """
        Get queue statistics.

        Returns:
            Tier and element counts plus the priority range
        """
        stats = QueueStats(name=self.name)

        for key, value in self._store.items():
            count = codec.element_count(value)
            priority = codec.decode_priority(key)
            stats.priorities += 1
            stats.elements += count
            stats.largest_tier = max(stats.largest_tier, count)
            if stats.min_priority is None:
                stats.min_priority = priority
            stats.max_priority = priority

        return stats

    def clear(self) -> None:
        """Remove every element."""
        self._store.clear()
        logger.debug("queue %s: cleared", self.name)

    def __len__(self) -> int:
        return self.size()

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __repr__(self) -> str:
        return f"PriorityQueue(name={self.name!r}, priorities={len(self._store)})"

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _prepare(self, element: Any, priority: Any) -> Tuple[bytes, bytes]:
        """Validate an element and priority, returning (element, key)."""
        key = codec.encode_priority(priority)
        try:
            element = codec.check_element(element, self._config.max_element_length)
        except ElementTooLargeError as e:
            logger.warning(
                "queue %s: rejected %d byte element at priority %d (limit %d)",
                self.name, e.length, priority, e.limit,
            )
            raise
        return element, key

    def _put(self, key: bytes, element: bytes) -> None:
        """Append a validated element under its priority key."""
        existing = self._store.get(key)
        if existing is None:
            self._store.insert(key, codec.encode_elements([element]))
            logger.debug(
                "queue %s: new priority %d", self.name, codec.decode_priority(key)
            )
        else:
            self._store.insert(key, codec.append_element(existing, element))


# ============================================================================
# Convenience Functions
# ============================================================================

def create_queue(
    store: Optional[OrderedKeyValueStore] = None,
    name: str = "default",
    max_element_length: int = codec.MAX_ELEMENT_LENGTH,
) -> PriorityQueue:
    """
    Create a priority queue, optionally over an existing store.

    Args:
        store: OrderedKeyValueStore instance (default: new in-memory store)
        name: Queue name
        max_element_length: Largest accepted element in bytes

    Returns:
        PriorityQueue instance

    Example:
        queue = create_queue(name="jobs")

        store = InMemoryOrderedStore()
        queue = create_queue(store, name="jobs")
    """
    if store is None:
        store = InMemoryOrderedStore()
    elif not isinstance(store, OrderedKeyValueStore):
        raise TypeError(f"Expected OrderedKeyValueStore, got {type(store)}")

    return PriorityQueue.from_store(
        store,
        name=name,
        max_element_length=max_element_length,
    )
