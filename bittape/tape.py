"""
bittape Tape

The machine's memory: a logically infinite, zero-initialized bit array.

Physically the tape is one contiguous buffer plus an offset. A logical
cursor ``position`` (signed, starts at 0) maps to the physical index
``position + offset``. The buffer grows on demand:

- Moving right past the end doubles the capacity (new cells are zero).
- Moving left past the start prepends a block as large as the current
  buffer and adds that size to ``offset``, so every logical cell keeps
  its value.

Capacity never shrinks during a run.
"""

from __future__ import annotations

from typing import Callable, Optional

DEFAULT_CAPACITY = 256

# Called as listener(direction, capacity, offset) after the buffer grows.
GrowthListener = Callable[[str, int, int], None]


class Tape:
    """Growable bidirectional bit tape addressed by a cursor and an offset.

    Usage:
        tape = Tape()
        tape.flip()
        tape.move_left()          # grows to the left, offset becomes 256
        tape.move_right()
        assert tape.read() is True
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        on_grow: Optional[GrowthListener] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"Tape capacity must be at least 1, got {capacity}")
        self._cells: list[bool] = [False] * capacity
        self.position = 0
        self.offset = 0
        self._on_grow = on_grow

    @property
    def capacity(self) -> int:
        return len(self._cells)

    @property
    def index(self) -> int:
        """Physical index of the cell under the cursor."""
        return self.position + self.offset

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def read(self) -> bool:
        return self._cells[self.index]

    def write(self, bit: bool) -> None:
        self._cells[self.index] = bool(bit)

    def flip(self) -> None:
        i = self.index
        self._cells[i] = not self._cells[i]

    # ------------------------------------------------------------------
    # Cursor movement
    # ------------------------------------------------------------------

    def move_right(self) -> None:
        self.position += 1
        if self.index >= len(self._cells):
            self._cells.extend([False] * len(self._cells))
            self._grew("right")

    def move_left(self) -> None:
        self.position -= 1
        if self.index < 0:
            size = len(self._cells)
            self._cells[:0] = [False] * size
            self.offset += size
            self._grew("left")

    def _grew(self, direction: str) -> None:
        if self._on_grow is not None:
            self._on_grow(direction, len(self._cells), self.offset)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def cell(self, position: int) -> bool:
        """Value at a logical position; unallocated cells read as zero."""
        i = position + self.offset
        if 0 <= i < len(self._cells):
            return self._cells[i]
        return False

    def window(self, radius: int = 8) -> list[tuple[int, bool]]:
        """(logical position, bit) pairs around the cursor. Never grows."""
        return [
            (pos, self.cell(pos))
            for pos in range(self.position - radius, self.position + radius + 1)
        ]

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return (
            f"<Tape position={self.position} offset={self.offset} "
            f"capacity={self.capacity} cell={int(self.read())}>"
        )
