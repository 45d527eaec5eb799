"""Instruction set for the tape machine.

Each instruction is identified by its single source symbol:

    >   INCREMENT_POINTER   move the head one cell right
    <   DECREMENT_POINTER   move the head one cell left
    +   INCREMENT_CELL      add 1 to the current cell (mod 256)
    -   DECREMENT_CELL      subtract 1 from the current cell (mod 256)
    .   OUTPUT              write the current cell to the output sink
    ,   INPUT               read one byte into the current cell (EOF -> 0)
    [   LOOP_OPEN           if the cell is zero, jump past the matching `]`
    ]   LOOP_CLOSE          if the cell is non-zero, jump past the matching `[`
"""

from enum import Enum
from typing import Dict, Optional


class Instruction(Enum):
    INCREMENT_POINTER = ">"
    DECREMENT_POINTER = "<"
    INCREMENT_CELL = "+"
    DECREMENT_CELL = "-"
    OUTPUT = "."
    INPUT = ","
    LOOP_OPEN = "["
    LOOP_CLOSE = "]"

    @property
    def symbol(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


SYMBOLS: Dict[str, Instruction] = {op.value: op for op in Instruction}


def from_symbol(char: str) -> Optional[Instruction]:
    """Return the instruction for `char`, or None for comment characters."""
    return SYMBOLS.get(char)
