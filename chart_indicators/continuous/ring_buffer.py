"""
Ring Buffer - Fixed-size circular buffer backing the rolling windows.

O(1) append and O(1) positional access; appending to a full buffer
overwrites (and returns) the oldest item.
"""

from typing import Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """
    Fixed-size circular buffer with O(1) operations.

    Example:
        buf = RingBuffer[float](maxlen=3)
        buf.append(1.0)
        buf.append(2.0)
        latest = buf[-1]  # 2.0
        all_data = buf.to_list()  # [1.0, 2.0]
    """

    __slots__ = ("_buffer", "_maxlen", "_head", "_size")

    def __init__(self, maxlen: int):
        """
        Args:
            maxlen: Maximum number of elements (must be > 0)
        """
        if maxlen <= 0:
            raise ValueError("maxlen must be positive")
        self._buffer: List[Optional[T]] = [None] * maxlen
        self._maxlen = maxlen
        self._head = 0  # Next write position
        self._size = 0

    def append(self, item: T) -> Optional[T]:
        """Append item. Returns the evicted item when the buffer was full."""
        evicted = self._buffer[self._head] if self._size == self._maxlen else None
        self._buffer[self._head] = item
        self._head = (self._head + 1) % self._maxlen
        if self._size < self._maxlen:
            self._size += 1
        return evicted

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __getitem__(self, index: int) -> T:
        """
        Get item by index. Supports negative indexing.

        buf[0] = oldest item
        buf[-1] = newest item
        """
        if index < 0:
            index += self._size
        if index < 0 or index >= self._size:
            raise IndexError(f"index {index} out of range for size {self._size}")

        start = (self._head - self._size) % self._maxlen
        return self._buffer[(start + index) % self._maxlen]  # type: ignore[return-value]

    def __iter__(self) -> Iterator[T]:
        """Iterate from oldest to newest."""
        for i in range(self._size):
            yield self[i]

    @property
    def maxlen(self) -> int:
        return self._maxlen

    @property
    def is_full(self) -> bool:
        return self._size == self._maxlen

    def clear(self) -> None:
        self._buffer = [None] * self._maxlen
        self._head = 0
        self._size = 0

    def to_list(self) -> List[T]:
        """Convert to list (oldest first)."""
        return list(self)
