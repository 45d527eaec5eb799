"""Integration tests running whole programs on the Machine."""

import io
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from bf_machine import (
    Instruction,
    Machine,
    PointerUnderflowError,
    CycleLimitExceeded,
    Program,
    UnbalancedLoopError,
    parse_program,
)


PROGRAMS_DIR = Path(__file__).parent.parent / "programs"


class TestCoreSemantics:
    """Properties every run must satisfy."""

    @pytest.fixture
    def machine(self):
        return Machine()

    def test_letter_a(self, machine):
        """8 * 8 + 1 = 65 composes increment, loop and output."""
        assert machine.execute("++++++++[>++++++++<-]>+.") == b"A"

    def test_wraparound(self, machine):
        """256 increments bring a cell back to zero."""
        assert machine.execute("+" * 256 + ".") == b"\x00"

    def test_decrement_wraps_to_255(self, machine):
        assert machine.execute("-.") == b"\xff"

    def test_eof_reads_zero(self, machine):
        """`,.` on exhausted input outputs a single zero byte."""
        assert machine.execute(",.", input_data=None) == b"\x00"

    def test_eof_overwrites_cell(self, machine):
        assert machine.execute("+++++,.", input_data=b"") == b"\x00"

    def test_pointer_underflow(self, machine):
        """`<` at cell 0 fails and emits nothing."""
        with pytest.raises(PointerUnderflowError) as info:
            machine.execute("<")
        assert info.value.position == 0
        assert machine.get_output() == b""
        assert machine.is_halted() is True

    def test_underflow_keeps_earlier_output(self, machine):
        """Output before the failing instruction is kept; nothing after."""
        with pytest.raises(PointerUnderflowError) as info:
            machine.execute("+.<.")
        assert info.value.position == 2
        assert machine.get_output() == b"\x01"
        assert machine.get_pc() == 2
        assert machine.get_cycle_count() == 2

    def test_comment_tolerance(self, machine):
        """Non-instruction characters have no effect."""
        commented = machine.execute("this is + ignored + text .")
        plain = Machine().execute("++.")
        assert commented == plain == b"\x02"

    def test_idempotent(self):
        """Same program and input give identical output."""
        source = ">,[>,]<[.<]"
        first = Machine().execute(source, input_data=b"hello")
        second = Machine().execute(source, input_data=b"hello")
        assert first == second == b"olleh"

    def test_rerun_on_same_machine(self, machine):
        """Reloading resets the tape and output."""
        first = machine.execute("+++.", input_data=None)
        second = machine.execute("+++.", input_data=None)
        assert first == second == b"\x03"

    def test_unbalanced_program_never_runs(self, machine):
        """Structural errors surface before any instruction executes."""
        with pytest.raises(UnbalancedLoopError):
            machine.execute(".[")
        assert machine.program is None
        assert machine.get_cycle_count() == 0

    def test_empty_program(self, machine):
        assert machine.execute("") == b""
        assert machine.is_halted() is True
        assert machine.get_cycle_count() == 0

    def test_skipped_loop_body(self, machine):
        """A loop entered on zero skips straight past its `]`."""
        assert machine.execute("[<]+.") == b"\x01"

    def test_pointer_grows_tape(self):
        machine = Machine(tape_size=4)
        machine.execute(">" * 10 + "+")
        assert machine.get_pointer() == 10
        assert machine.get_cell(10) == 1
        assert machine.get_cell(500) == 0


    def test_directly_built_program_runs(self):
        """A Program built without parse_program still has its loops resolved."""
        program = Program(instructions=(
            Instruction.INCREMENT_CELL,
            Instruction.LOOP_OPEN,
            Instruction.DECREMENT_CELL,
            Instruction.LOOP_CLOSE,
            Instruction.OUTPUT,
        ))
        machine = Machine()
        machine.load_program(program)
        assert machine.run() == b"\x00"
        assert machine.get_cycle_count() == 5

    def test_empty_loop_skipped(self):
        machine = Machine()
        machine.load_program(Program(instructions=(Instruction.LOOP_OPEN, Instruction.LOOP_CLOSE)))
        assert machine.run() == b""
        assert machine.is_halted() is True


class TestInputOutput:

    def test_cat(self):
        assert Machine().execute(",[.,]", input_data="abc") == b"abc"

    def test_input_stream(self):
        machine = Machine()
        machine.load_source(",.,.", input_data=io.BytesIO(b"xy"))
        assert machine.run() == b"xy"

    def test_output_sink_receives_bytes(self):
        sink = io.BytesIO()
        machine = Machine()
        machine.load_source("++++++++[>++++++++<-]>+.+.", output_sink=sink)
        machine.run()
        assert sink.getvalue() == b"AB"

    def test_input_counted(self):
        machine = Machine()
        machine.execute(",,,", input_data=b"ab")
        assert machine.get_summary()["input_read"] == 2


class TestNestedLoops:

    def test_multiply(self):
        """3 * 4 via nested loops."""
        machine = Machine()
        machine.execute("+++[>++++[>+<-]<-]>>")
        assert machine.get_cell(2) == 12
        assert machine.get_cell(0) == 0

    def test_clear_loop(self):
        machine = Machine()
        machine.execute("+++++[-]")
        assert machine.get_cell(0) == 0
        assert machine.get_cycle_count() == 5 + 1 + 5 * 2


class TestStepping:
    """Test single-step execution and cycle accounting."""

    @pytest.fixture
    def machine(self):
        machine = Machine()
        machine.load_source("+>+")
        return machine

    def test_step_advances_pc(self, machine):
        machine.step()
        assert machine.get_pc() == 1
        assert machine.get_cell() == 1

    def test_step_to_halt(self, machine):
        for _ in range(3):
            machine.step()
        assert machine.is_halted() is False
        machine.step()
        assert machine.is_halted() is True
        assert machine.get_cycle_count() == 3

    def test_step_after_halt(self, machine):
        machine.run()
        with pytest.raises(RuntimeError, match="halted"):
            machine.step()

    def test_no_program_loaded(self):
        machine = Machine()
        with pytest.raises(RuntimeError, match="No program loaded"):
            machine.run()
        assert machine.is_halted() is True
        assert machine.get_cycle_count() == 0


class TestCycleLimit:
    """Test the opt-in cycle limit."""

    def test_infinite_loop_stops(self):
        machine = Machine(max_cycles=50)
        machine.load_source("+[]")
        with pytest.raises(CycleLimitExceeded, match="Max cycles") as info:
            machine.run()
        assert info.value.limit == 50
        assert machine.get_cycle_count() == 50
        assert machine.is_halted() is False

    def test_limit_is_runtime_error(self):
        machine = Machine()
        machine.load_source("+[]")
        with pytest.raises(RuntimeError):
            machine.run(max_cycles=10)

    def test_exact_limit_completes(self):
        """A program needing exactly `limit` cycles finishes normally."""
        machine = Machine(max_cycles=3)
        assert machine.execute("++.") == b"\x02"
        assert machine.is_halted() is True

    def test_no_limit_by_default(self):
        assert Machine().max_cycles is None


class TestExecutionTrace:

    def test_trace_disabled_by_default(self):
        machine = Machine()
        machine.execute("+++")
        assert machine.trace == []

    def test_trace_records_every_cycle(self):
        machine = Machine(trace=True)
        machine.execute("+[-]")
        assert len(machine.trace) == machine.get_cycle_count() == 4
        assert [e.instruction for e in machine.trace] == [
            Instruction.INCREMENT_CELL,
            Instruction.LOOP_OPEN,
            Instruction.DECREMENT_CELL,
            Instruction.LOOP_CLOSE,
        ]

    def test_trace_captures_state_changes(self):
        machine = Machine(trace=True)
        machine.execute(">+")
        assert machine.trace[0].pre_state["pointer"] == 0
        assert machine.trace[0].post_state["pointer"] == 1
        assert machine.trace[1].post_state["cell"] == 1

    def test_trace_records_error(self):
        machine = Machine(trace=True)
        with pytest.raises(PointerUnderflowError):
            machine.execute("+<")
        assert machine.trace[-1].error is not None
        assert machine.get_summary()["errors"]

    def test_print_trace(self, capsys):
        machine = Machine(trace=True)
        machine.execute("+.")
        machine.print_trace()
        out = capsys.readouterr().out
        assert "EXECUTION TRACE" in out
        assert "CELL: 0 -> 1" in out


class TestSummary:

    def test_summary_fields(self):
        machine = Machine()
        machine.execute("++.>.")
        summary = machine.get_summary()
        assert summary["cycles"] == 5
        assert summary["halted"] is True
        assert summary["pointer"] == 1
        assert summary["tape_extent"] == 2
        assert summary["output_length"] == 2
        assert summary["errors"] == []


class TestProgramFiles:
    """Run the programs shipped in programs/."""

    def test_hello_world(self):
        source = (PROGRAMS_DIR / "hello.bf").read_text()
        assert Machine().execute(source) == b"Hello World!\n"

    def test_cat_file(self):
        source = (PROGRAMS_DIR / "cat.bf").read_text()
        assert Machine().execute(source, input_data=b"meow") == b"meow"

    def test_reverse_file(self):
        source = (PROGRAMS_DIR / "reverse.bf").read_text()
        assert Machine().execute(source, input_data=b"abc") == b"cba"

    def test_program_files_parse(self):
        for path in PROGRAMS_DIR.glob("*.bf"):
            parse_program(path.read_text())
