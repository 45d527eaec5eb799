"""Machine: the executor for tape programs.

Pipeline:
    SOURCE -> LEXER -> LOOP RESOLVER -> PROGRAM -> FETCH -> REGISTRY -> STATE

The machine drives the program counter over a validated Program, fetching
one instruction per step and dispatching it through the frozen
InstructionRegistry. Execution ends when the PC passes the last
instruction. There is no built-in step limit; callers that need one pass
`max_cycles`.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import BinaryIO, Dict, List, Optional, TextIO

from .errors import CycleLimitExceeded, PointerUnderflowError
from .loops import Program, parse_program
from .operators import Instruction
from .registry import StepContext, get_registry
from .state import MachineState, create_initial_state
from .storage import DEFAULT_TAPE_SIZE
from .streams import ByteInput, ByteOutput, InputLike


logger = logging.getLogger(__name__)


@dataclass
class ExecutionTraceEntry:
    """Single entry in the execution trace.

    Attributes:
        cycle: Cycle number (0-indexed)
        pc: Program counter the instruction was fetched from
        instruction: The executed instruction
        pre_state: Snapshot before execution
        post_state: Snapshot after execution
        error: Error message if execution failed
    """
    cycle: int
    pc: int
    instruction: Instruction
    pre_state: dict
    post_state: dict
    error: Optional[str] = None


class Machine:
    """Tape machine interpreter.

    Attributes:
        registry: Frozen InstructionRegistry
        program: Currently loaded program
        state: Current machine state
        trace: Execution trace entries (only filled when tracing)
        max_cycles: Optional cycle limit; None runs until the program ends
        tape_size: Initial number of tape cells
    """

    def __init__(
        self,
        max_cycles: Optional[int] = None,
        trace: bool = False,
        tape_size: int = DEFAULT_TAPE_SIZE
    ):
        self.registry = get_registry()
        self.program: Optional[Program] = None
        self.state: Optional[MachineState] = None
        self.trace: List[ExecutionTraceEntry] = []
        self.tracing = trace
        self.max_cycles = max_cycles
        self.tape_size = tape_size
        self.input = ByteInput()
        self.output = ByteOutput()
        self.errors: List[str] = []

    def load_source(
        self,
        source: str,
        input_data: InputLike = None,
        output_sink: Optional[BinaryIO] = None
    ) -> Program:
        """Parse program text and load it.

        Raises:
            UnbalancedLoopError: If the brackets do not pair up. Nothing is
                loaded in that case.
        """
        program = parse_program(source)
        self.load_program(program, input_data=input_data, output_sink=output_sink)
        return program

    def load_program(
        self,
        program: Program,
        input_data: InputLike = None,
        output_sink: Optional[BinaryIO] = None
    ) -> None:
        """Load a validated program and reset all state.

        Args:
            program: Program from parse_program
            input_data: Byte source for `,` (None means already exhausted)
            output_sink: Optional binary stream receiving `.` output
        """
        self.program = program
        self.state = create_initial_state(self.tape_size)
        self.input = ByteInput(input_data)
        self.output = ByteOutput(output_sink)
        self.trace = []
        self.errors = []
        logger.debug("Loaded program: %d instructions, %d loops",
                     len(program), len(program.boundaries))

    def _context(self) -> StepContext:
        return StepContext(
            boundaries=self.program.boundaries,
            input=self.input,
            output=self.output,
        )

    def _require_loaded(self) -> MachineState:
        if self.state is None or self.program is None:
            raise RuntimeError("No program loaded")
        return self.state

    def step(self) -> Optional[ExecutionTraceEntry]:
        """Execute a single instruction.

        Returns:
            The trace entry when tracing, else None

        Raises:
            RuntimeError: If no program is loaded or the machine is halted
            PointerUnderflowError: On `<` at cell 0 (machine halts)
        """
        state = self._require_loaded()
        if state.halted:
            raise RuntimeError("Machine is halted")

        return self._step(self._context())

    def _step(self, context: StepContext) -> Optional[ExecutionTraceEntry]:
        state = self.state
        pc = state.pc

        if pc >= len(self.program):
            state.halted = True
            logger.debug("Halted after %d cycles", state.cycle_count)
            return None

        op = self.program[pc]
        pre_state = state.snapshot() if self.tracing else None
        cycle = state.cycle_count

        try:
            self.registry.execute(state, op, context)
        except PointerUnderflowError as e:
            state.halted = True
            self.errors.append(str(e))
            logger.warning("%s", e)
            if self.tracing:
                self._record(cycle, pc, op, pre_state, error=str(e))
            raise

        if self.tracing:
            return self._record(cycle, pc, op, pre_state)
        return None

    def _record(self, cycle: int, pc: int, op: Instruction, pre_state: dict,
                error: Optional[str] = None) -> ExecutionTraceEntry:
        entry = ExecutionTraceEntry(
            cycle=cycle,
            pc=pc,
            instruction=op,
            pre_state=pre_state,
            post_state=self.state.snapshot(),
            error=error
        )
        self.trace.append(entry)
        return entry

    def run(self, max_cycles: Optional[int] = None) -> bytes:
        """Run until the program counter passes the end of the program.

        Args:
            max_cycles: Override the instance cycle limit (None keeps it)

        Returns:
            All bytes written by `.` during this run

        Raises:
            RuntimeError: If no program is loaded
            PointerUnderflowError: On `<` at cell 0
            CycleLimitExceeded: If a cycle limit is set and reached first
        """
        state = self._require_loaded()
        limit = max_cycles if max_cycles is not None else self.max_cycles
        context = self._context()

        while not state.halted:
            if limit is not None and state.cycle_count >= limit and state.pc < len(self.program):
                message = f"Max cycles ({limit}) exceeded"
                self.errors.append(message)
                logger.warning("%s at PC=%d", message, state.pc)
                raise CycleLimitExceeded(message=message, limit=limit)
            self._step(context)

        return self.output.getvalue()

    def execute(self, source: str, input_data: InputLike = None) -> bytes:
        """Parse, load and run `source` in one call, returning its output."""
        self.load_source(source, input_data=input_data)
        return self.run()

    def get_output(self) -> bytes:
        return self.output.getvalue()

    def get_pc(self) -> int:
        return self._require_loaded().pc

    def get_pointer(self) -> int:
        return self._require_loaded().pointer

    def get_cell(self, index: Optional[int] = None) -> int:
        """Value of cell `index` (default: the cell under the head)."""
        state = self._require_loaded()
        if index is None:
            return state.cell
        if index < 0:
            raise IndexError(f"Negative tape index: {index}")
        if index >= len(state.tape):
            return 0
        return state.tape.cells[index]

    def dump_tape(self) -> Dict[int, int]:
        return self._require_loaded().dump_tape()

    def get_cycle_count(self) -> int:
        if self.state is None:
            return 0
        return self.state.cycle_count

    def is_halted(self) -> bool:
        if self.state is None:
            return True
        return self.state.halted

    def print_trace(self, file: Optional[TextIO] = None) -> None:
        """Print the execution trace in human-readable form.

        Args:
            file: Text stream to print to (default: sys.stdout)
        """
        out = partial(print, file=file)
        out("=" * 70)
        out("EXECUTION TRACE")
        out("=" * 70)

        for entry in self.trace:
            status = "OK" if not entry.error else f"ERROR: {entry.error}"
            pre, post = entry.pre_state, entry.post_state
            line = f"[Cycle {entry.cycle}] PC={entry.pc} `{entry.instruction}` {status}"
            changes = []
            if pre["pointer"] != post["pointer"]:
                changes.append(f"PTR: {pre['pointer']} -> {post['pointer']}")
            if pre["cell"] != post["cell"] and pre["pointer"] == post["pointer"]:
                changes.append(f"CELL: {pre['cell']} -> {post['cell']}")
            if post["pc"] != entry.pc + 1:
                changes.append(f"JUMP -> {post['pc']}")
            if changes:
                line += "  " + ", ".join(changes)
            out(line)

        out("=" * 70)
        out("FINAL STATE")
        out("=" * 70)
        if self.state:
            out(f"  {self.state}")
            out(f"  Output: {self.output.getvalue()!r}")

    def get_summary(self) -> Dict:
        """Execution statistics and final state."""
        return {
            "cycles": self.get_cycle_count(),
            "halted": self.is_halted(),
            "pc": self.state.pc if self.state else 0,
            "pointer": self.state.pointer if self.state else 0,
            "tape_extent": self.state.tape.used_extent() if self.state else 0,
            "output_length": len(self.output),
            "input_read": self.input.bytes_read,
            "trace_length": len(self.trace),
            "errors": list(self.errors),
        }
