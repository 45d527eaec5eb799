"""InstructionRegistry: verified handlers for the eight instructions.

Each instruction maps to exactly one handler. A handler receives the
machine state and a StepContext (program boundaries plus I/O ports),
applies the instruction's effect and updates the program counter.

    INCREMENT_POINTER   head += 1 (tape grows on demand)       PC += 1
    DECREMENT_POINTER   head -= 1, PointerUnderflowError at 0  PC += 1
    INCREMENT_CELL      cell += 1 (mod 256)                    PC += 1
    DECREMENT_CELL      cell -= 1 (mod 256)                    PC += 1
    OUTPUT              write cell to the output sink          PC += 1
    INPUT               read one byte (EOF -> 0) into cell     PC += 1
    LOOP_OPEN           cell == 0 ? PC = match + 1 : PC += 1
    LOOP_CLOSE          cell != 0 ? PC = match + 1 : PC += 1

The registry is frozen after initialization so that no handler can be
swapped at runtime.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .loops import BoundaryMap
from .operators import Instruction
from .state import MachineState
from .streams import ByteInput, ByteOutput


@dataclass
class StepContext:
    """Everything a handler may touch besides the state itself."""
    boundaries: BoundaryMap
    input: ByteInput
    output: ByteOutput


Handler = Callable[[MachineState, StepContext], None]


class InstructionRegistry:
    """Frozen registry of instruction handlers.

    Attributes:
        _handlers: Mapping from Instruction to handler function
        _frozen: Whether the registry is locked against modifications
    """

    def __init__(self):
        self._handlers: Dict[Instruction, Handler] = {}
        self._frozen = False
        self._register_all_handlers()
        self.freeze()

    def _register_all_handlers(self) -> None:
        # Pointer movement
        self.register(Instruction.INCREMENT_POINTER, self._op_increment_pointer)
        self.register(Instruction.DECREMENT_POINTER, self._op_decrement_pointer)

        # Cell arithmetic
        self.register(Instruction.INCREMENT_CELL, self._op_increment_cell)
        self.register(Instruction.DECREMENT_CELL, self._op_decrement_cell)

        # I/O
        self.register(Instruction.OUTPUT, self._op_output)
        self.register(Instruction.INPUT, self._op_input)

        # Control flow
        self.register(Instruction.LOOP_OPEN, self._op_loop_open)
        self.register(Instruction.LOOP_CLOSE, self._op_loop_close)

    def register(self, op: Instruction, handler: Handler) -> None:
        """Register the handler for an instruction.

        Raises:
            RuntimeError: If registry is frozen
            ValueError: If the instruction already has a handler
        """
        if self._frozen:
            raise RuntimeError("Cannot register handlers: registry is frozen")
        if op in self._handlers:
            raise ValueError(f"Handler already registered: {op.name}")
        self._handlers[op] = handler

    def freeze(self) -> None:
        self._frozen = True

    def is_frozen(self) -> bool:
        return self._frozen

    def get_instructions(self) -> set:
        """Set of all instructions with a handler."""
        return set(self._handlers.keys())

    def execute(self, state: MachineState, op: Instruction, context: StepContext) -> None:
        """Apply one instruction to the state and count the cycle.

        Raises:
            KeyError: If the instruction has no handler
            PointerUnderflowError: From DECREMENT_POINTER at cell 0
        """
        if op not in self._handlers:
            raise KeyError(f"Unknown instruction: {op!r}")

        self._handlers[op](state, context)
        state.cycle_count += 1

    # =========================================================================
    # Pointer Movement
    # =========================================================================

    def _op_increment_pointer(self, state: MachineState, context: StepContext) -> None:
        state.tape.wind(1)
        state.advance()

    def _op_decrement_pointer(self, state: MachineState, context: StepContext) -> None:
        """`<` - Move the head left; fatal at cell 0 (PC is not advanced)."""
        state.tape.wind(-1, position=state.pc)
        state.advance()

    # =========================================================================
    # Cell Arithmetic
    # =========================================================================

    def _op_increment_cell(self, state: MachineState, context: StepContext) -> None:
        state.tape.add(1)
        state.advance()

    def _op_decrement_cell(self, state: MachineState, context: StepContext) -> None:
        state.tape.add(-1)
        state.advance()

    # =========================================================================
    # I/O
    # =========================================================================

    def _op_output(self, state: MachineState, context: StepContext) -> None:
        context.output.write_byte(state.tape.cell)
        state.advance()

    def _op_input(self, state: MachineState, context: StepContext) -> None:
        """`,` - Replace the current cell with the next input byte (0 at EOF)."""
        state.tape.cell = context.input.read_byte()
        state.advance()

    # =========================================================================
    # Control Flow
    # =========================================================================

    def _op_loop_open(self, state: MachineState, context: StepContext) -> None:
        """`[` - Skip the loop body when the current cell is zero."""
        if state.tape.cell == 0:
            state.jump(context.boundaries.match(state.pc) + 1)
        else:
            state.advance()

    def _op_loop_close(self, state: MachineState, context: StepContext) -> None:
        """`]` - Repeat the loop body while the current cell is non-zero."""
        if state.tape.cell != 0:
            state.jump(context.boundaries.match(state.pc) + 1)
        else:
            state.advance()


# Singleton registry instance
_registry: Optional[InstructionRegistry] = None


def get_registry() -> InstructionRegistry:
    """Get the shared, frozen registry instance."""
    global _registry
    if _registry is None:
        _registry = InstructionRegistry()
    return _registry
