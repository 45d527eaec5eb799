#!/usr/bin/env python3
"""bf-machine Command Line Interface.

Run tape-language programs with the bf_machine interpreter.

Usage:
    python main.py --program programs/hello.bf
    python main.py --program programs/cat.bf --input "some text"
    echo hello | python main.py --program programs/reverse.bf
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from bf_machine import Machine, MachineError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="bf-machine: tape-language interpreter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Print "Hello World!"
    python main.py --program programs/hello.bf

    # Echo the given input
    python main.py --program programs/cat.bf --input "abc"

    # Run inline code with a full execution trace
    python main.py --inline "++++++++[>++++++++<-]>+." --trace

    # Bound a possibly non-terminating program
    python main.py --inline "+[]" --max-cycles 1000
        """
    )

    parser.add_argument(
        "--program", "-p",
        type=str,
        help="Path to program source file"
    )
    parser.add_argument(
        "--inline", "-i",
        type=str,
        help="Inline program source"
    )
    parser.add_argument(
        "--input",
        type=str,
        help="Input text fed to `,` (UTF-8 encoded)"
    )
    parser.add_argument(
        "--input-file",
        type=str,
        help="File whose bytes are fed to `,`"
    )
    parser.add_argument(
        "--max-cycles",
        type=int,
        default=None,
        help="Maximum executed instructions. Default: unlimited"
    )
    parser.add_argument(
        "--trace", "-t",
        action="store_true",
        help="Print full execution trace"
    )
    parser.add_argument(
        "--summary", "-s",
        action="store_true",
        help="Print run summary to stderr"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def read_input(args):
    """Pick the byte source for `,` from the arguments or stdin."""
    if args.input is not None:
        return args.input
    if args.input_file:
        return Path(args.input_file).read_bytes()
    if not sys.stdin.isatty():
        return sys.stdin.buffer
    return None


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate arguments
    if not args.program and args.inline is None:
        parser.error("Either --program or --inline is required")
    if args.input is not None and args.input_file:
        parser.error("--input and --input-file are mutually exclusive")
    if args.max_cycles is not None and args.max_cycles < 0:
        parser.error("--max-cycles must be non-negative")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Load program
    if args.program:
        program_path = Path(args.program)
        if not program_path.exists():
            print(f"Error: Program file not found: {args.program}", file=sys.stderr)
            return 1
        # Only the eight ASCII symbols matter; comments may hold any bytes
        source = program_path.read_bytes().decode("utf-8", errors="replace")
    else:
        source = args.inline

    if args.input_file and not Path(args.input_file).exists():
        print(f"Error: Input file not found: {args.input_file}", file=sys.stderr)
        return 1

    machine = Machine(max_cycles=args.max_cycles, trace=args.trace)
    stdout = sys.stdout.buffer

    try:
        machine.load_source(source, input_data=read_input(args), output_sink=stdout)
    except MachineError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1

    status = 0
    try:
        machine.run()
    except MachineError as e:
        print(f"\nExecution error: {e}", file=sys.stderr)
        status = 1
    finally:
        stdout.flush()

    if args.trace:
        machine.print_trace(file=sys.stderr)

    if args.summary:
        summary = machine.get_summary()
        print(f"Cycles: {summary['cycles']}", file=sys.stderr)
        print(f"Halted: {summary['halted']}", file=sys.stderr)
        print(f"Pointer: {summary['pointer']}", file=sys.stderr)
        print(f"Output bytes: {summary['output_length']}", file=sys.stderr)
        if summary['errors']:
            print(f"Errors: {summary['errors']}", file=sys.stderr)

    return status


if __name__ == "__main__":
    sys.exit(main())
