"""MachineState: execution state of the tape machine.

State Components:
    - PC: Program counter (index into the program)
    - Tape: Growable byte tape with its data pointer (head)
    - Halted: Set once the PC passes the end or a fatal error occurs
    - Cycle count: Total executed instructions

Unlike the program, the state is mutated in place by the registry
handlers; `snapshot()` produces detached copies for tracing.
"""

from dataclasses import dataclass, field
from typing import Dict

from .storage import Tape, DEFAULT_TAPE_SIZE


# Cells shown either side of the head in snapshots
SNAPSHOT_RADIUS = 4


@dataclass
class MachineState:
    """Mutable machine state owned by a single Machine.

    Attributes:
        pc: Program counter
        tape: Tape holding the cells and the data pointer
        halted: Whether execution has terminated
        cycle_count: Number of instructions executed
    """
    pc: int = 0
    tape: Tape = field(default_factory=Tape)
    halted: bool = False
    cycle_count: int = 0

    @property
    def pointer(self) -> int:
        """Data pointer (the tape head)."""
        return self.tape.head

    @property
    def cell(self) -> int:
        return self.tape.cell

    def advance(self) -> None:
        self.pc += 1

    def jump(self, target: int) -> None:
        self.pc = target

    def snapshot(self) -> dict:
        """Detached view of the state for tracing.

        Returns:
            Dictionary with pc, pointer, current cell, a window of cells
            around the head, halted flag and cycle count
        """
        start = max(0, self.tape.head - SNAPSHOT_RADIUS)
        return {
            "pc": self.pc,
            "pointer": self.tape.head,
            "cell": self.tape.cell,
            "window_start": start,
            "window": self.tape.window(start, 2 * SNAPSHOT_RADIUS + 1),
            "halted": self.halted,
            "cycle_count": self.cycle_count,
        }

    def validate(self) -> bool:
        """Check state integrity.

        Checks:
            - PC and data pointer are non-negative
            - Data pointer lies inside the tape
            - Cycle count is non-negative
        """
        if self.pc < 0 or self.tape.head < 0:
            return False
        if self.tape.head >= len(self.tape):
            return False
        if self.cycle_count < 0:
            return False
        return True

    def dump_tape(self) -> Dict[int, int]:
        """Non-zero cells as an index -> value mapping."""
        return {i: v for i, v in enumerate(self.tape.cells) if v}

    def __str__(self) -> str:
        return (f"[Cycle {self.cycle_count}] PC={self.pc} PTR={self.tape.head} "
                f"CELL={self.tape.cell} {'HALTED' if self.halted else ''}").rstrip()


def create_initial_state(tape_size: int = DEFAULT_TAPE_SIZE) -> MachineState:
    """Fresh state: PC 0, pointer 0, all cells zero."""
    return MachineState(pc=0, tape=Tape(tape_size), halted=False, cycle_count=0)
