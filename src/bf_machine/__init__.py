"""bf_machine: an interpreter for the eight-instruction tape language.

Pipeline:
    SOURCE -> tokenize -> resolve_loops -> Program -> Machine -> OUTPUT
               |              |                        |
          [comments     [bracket pairs,         [PC, tape, EOF-as-zero
           dropped]      checked up front]       input, byte output]

Modules:
    operators: Instruction enum (one member per source symbol)
    lexer: Source text -> instruction tuple
    loops: BoundaryMap, Program and the bracket resolver
    storage: Growable byte tape bounded at cell 0
    state: MachineState dataclass
    registry: Frozen handlers for each instruction
    streams: ByteInput / ByteOutput
    machine: Machine executor
    errors: Exception hierarchy
"""

__version__ = "0.1.0"

from .errors import (
    MachineError,
    UnbalancedLoopError,
    PointerUnderflowError,
    CycleLimitExceeded,
)
from .operators import Instruction
from .lexer import tokenize
from .loops import BoundaryMap, Program, resolve_loops, parse_program
from .storage import Tape
from .state import MachineState
from .registry import InstructionRegistry
from .streams import ByteInput, ByteOutput
from .machine import Machine, ExecutionTraceEntry

__all__ = [
    "MachineError",
    "UnbalancedLoopError",
    "PointerUnderflowError",
    "CycleLimitExceeded",
    "Instruction",
    "tokenize",
    "BoundaryMap",
    "Program",
    "resolve_loops",
    "parse_program",
    "Tape",
    "MachineState",
    "InstructionRegistry",
    "ByteInput",
    "ByteOutput",
    "Machine",
    "ExecutionTraceEntry",
]
