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
kvheap Ordered Key-Value Stores

The queue never keeps elements anywhere but in a store implementing
OrderedKeyValueStore: byte keys kept in ascending byte-lexicographic order,
opaque byte values.
"""

from __future__ import annotations

import bisect
from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional, Tuple


# ============================================================================
# OrderedKeyValueStore - Abstract Store Interface
# ============================================================================

class OrderedKeyValueStore(ABC):
    """
    Abstract interface for the ordered map a queue is built on.

    Implementations must iterate keys in ascending byte order, so the last
    entry is always the maximum key.
    """

    @abstractmethod
    def contains_key(self, key: bytes) -> bool:
        """Check whether a key is present."""
        pass

    @abstractmethod
    def get(self, key: bytes) -> Optional[bytes]:
        """Get a value by key."""
        pass

    @abstractmethod
    def insert(self, key: bytes, value: bytes) -> None:
        """Store a key-value pair, overwriting any previous value."""
        pass

    @abstractmethod
    def remove(self, key: bytes) -> None:
        """Delete a key. Removing an absent key is a no-op."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        """Number of distinct keys."""
        pass

    @abstractmethod
    def max_entry(self) -> Optional[Tuple[bytes, bytes]]:
        """Return the (key, value) pair with the largest key, or None."""
        pass

    @abstractmethod
    def items(self, reverse: bool = False) -> Iterator[Tuple[bytes, bytes]]:
        """Iterate (key, value) pairs in ascending (or descending) key order."""
        pass

    def is_empty(self) -> bool:
        return len(self) == 0

    def values(self) -> Iterator[bytes]:
        """Iterate values in ascending key order."""
        for _, value in self.items():
            yield value

    def clear(self) -> None:
        """Remove every key."""
        for key in [key for key, _ in self.items()]:
            self.remove(key)


# ============================================================================
# InMemoryOrderedStore - Default Store
# ============================================================================

class InMemoryOrderedStore(OrderedKeyValueStore):
    """
    In-memory ordered store.

    Values live in a dictionary; a parallel key list is kept sorted with
    bisect so the maximum key is always the last list entry.
    """

    def __init__(self):
        self._store: Dict[bytes, bytes] = {}
        self._keys: List[bytes] = []

    def contains_key(self, key: bytes) -> bool:
        return key in self._store

    def get(self, key: bytes) -> Optional[bytes]:
        return self._store.get(key)

    def insert(self, key: bytes, value: bytes) -> None:
        key = bytes(key)
        if key not in self._store:
            bisect.insort(self._keys, key)
        self._store[key] = bytes(value)

    def remove(self, key: bytes) -> None:
        if self._store.pop(key, None) is None:
            return
        index = bisect.bisect_left(self._keys, key)
        del self._keys[index]

    def __len__(self) -> int:
        return len(self._keys)

    def max_entry(self) -> Optional[Tuple[bytes, bytes]]:
        if not self._keys:
            return None
        key = self._keys[-1]
        return key, self._store[key]

    def items(self, reverse: bool = False) -> Iterator[Tuple[bytes, bytes]]:
        keys = reversed(self._keys) if reverse else self._keys
        # Snapshot so callers may mutate the store while iterating
        for key in list(keys):
            value = self._store.get(key)
            if value is not None:
                yield key, value

    def clear(self) -> None:
        self._store.clear()
        self._keys.clear()
