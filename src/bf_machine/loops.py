"""Loop resolution: pair every `[` with its `]` before execution.

A single left-to-right pass over the flat instruction sequence, keeping a
stack of pending LOOP_OPEN positions. The result is an index-to-index map
in both directions; no nested tree is built.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from .errors import unmatched_close, unmatched_open
from .lexer import tokenize
from .operators import Instruction


@dataclass(frozen=True)
class BoundaryMap:
    """Matching bracket positions.

    Attributes:
        forward: LOOP_OPEN index -> matching LOOP_CLOSE index
        backward: LOOP_CLOSE index -> matching LOOP_OPEN index
    """
    forward: Dict[int, int] = field(default_factory=dict)
    backward: Dict[int, int] = field(default_factory=dict)

    def match(self, index: int) -> int:
        """Return the partner of the bracket at `index`.

        Raises:
            KeyError: If `index` is not a loop boundary
        """
        if index in self.forward:
            return self.forward[index]
        if index in self.backward:
            return self.backward[index]
        raise KeyError(f"No loop boundary at instruction {index}")

    def __len__(self) -> int:
        return len(self.forward)


def resolve_loops(instructions: Sequence[Instruction]) -> BoundaryMap:
    """Validate bracket nesting and build the boundary map.

    Args:
        instructions: Instruction sequence from the lexer

    Returns:
        BoundaryMap covering every loop

    Raises:
        UnbalancedLoopError: On an unmatched `]` (reported at its position)
            or unmatched `[` (reported at the first one left open)
    """
    pending: List[int] = []
    forward: Dict[int, int] = {}
    backward: Dict[int, int] = {}

    for index, op in enumerate(instructions):
        if op is Instruction.LOOP_OPEN:
            pending.append(index)
        elif op is Instruction.LOOP_CLOSE:
            if not pending:
                raise unmatched_close(index)
            start = pending.pop()
            forward[start] = index
            backward[index] = start

    if pending:
        raise unmatched_open(tuple(pending))

    return BoundaryMap(forward=forward, backward=backward)


@dataclass(frozen=True)
class Program:
    """A validated, immutable program ready for execution.

    The boundary map is always derived from the instructions, so every
    Program in existence has balanced brackets.

    Raises:
        UnbalancedLoopError: On construction, if brackets do not pair up
    """
    instructions: Tuple[Instruction, ...] = ()
    boundaries: BoundaryMap = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        ops = tuple(self.instructions)
        object.__setattr__(self, "instructions", ops)
        object.__setattr__(self, "boundaries", resolve_loops(ops))

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def __str__(self) -> str:
        return "".join(op.value for op in self.instructions)

    @classmethod
    def from_instructions(cls, instructions: Sequence[Instruction]) -> "Program":
        return cls(instructions=tuple(instructions))


def parse_program(source: str) -> Program:
    """Lex and validate program source.

    Args:
        source: Program text (comments allowed anywhere)

    Returns:
        Program with its boundary map

    Raises:
        UnbalancedLoopError: If brackets are not properly paired
    """
    return Program.from_instructions(tokenize(source))
