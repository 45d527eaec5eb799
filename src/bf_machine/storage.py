"""Tape storage for the machine.

The tape is bounded on the left at cell 0 and unbounded on the right:
it comes pre-grown with DEFAULT_TAPE_SIZE zeroed cells and extends itself
whenever the head walks past the end.
"""

from typing import List, Optional

from .errors import PointerUnderflowError


CELL_MODULUS = 256
DEFAULT_TAPE_SIZE = 30000


class Tape:
    """Growable byte tape with a read/write head.

    Attributes:
        cells: Underlying bytearray (every value is 0-255)
        head: Data pointer, never negative
    """

    def __init__(self, size: int = DEFAULT_TAPE_SIZE):
        if size < 1:
            raise ValueError(f"Tape size must be positive, got {size}")
        self.cells = bytearray(size)
        self.head = 0

    def __len__(self) -> int:
        return len(self.cells)

    def wind(self, offset: int, position: Optional[int] = None) -> None:
        """Move the head `offset` cells (negative = left).

        Args:
            offset: Signed distance to move
            position: Instruction index reported if the move underflows

        Raises:
            PointerUnderflowError: If the head would move left of cell 0.
                The head is left where it was.
        """
        target = self.head + offset
        if target < 0:
            where = self.head if position is None else position
            raise PointerUnderflowError(
                message=f"Pointer underflow at instruction {where}: "
                        f"cannot move left of cell 0",
                position=where,
            )
        if target >= len(self.cells):
            self.cells.extend(bytes(target - len(self.cells) + 1))
        self.head = target

    @property
    def cell(self) -> int:
        """Value of the cell under the head."""
        return self.cells[self.head]

    @cell.setter
    def cell(self, value: int) -> None:
        self.cells[self.head] = value % CELL_MODULUS

    def add(self, delta: int) -> None:
        """Add `delta` to the current cell, wrapping modulo 256."""
        self.cell = self.cell + delta

    def window(self, start: int = 0, width: int = 16) -> List[int]:
        """Copy of `width` cells beginning at `start` (for display)."""
        start = max(0, start)
        return list(self.cells[start:start + width])

    def used_extent(self) -> int:
        """Index one past the last non-zero cell, or past the head."""
        last = len(self.cells.rstrip(b"\x00"))
        return max(last, self.head + 1)
