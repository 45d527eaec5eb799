"""bf-machine Interactive Demo.

A Gradio web interface for running and inspecting tape-language programs.

Usage:
    cd /path/to/bf-machine
    python demo/gradio_app.py

Features:
    - Write or load example programs
    - Feed input bytes to `,`
    - See program output, final tape window and step-by-step trace
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import gradio as gr
from bf_machine import Machine, MachineError


# =============================================================================
# Example Programs
# =============================================================================

EXAMPLE_PROGRAMS = {
    "Hello World": """++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]
>>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++.""",

    "Letter A": """++++++++        set cell 0 to 8
[>++++++++<-]   add 8 to cell 1 eight times
>+.             65 is A""",

    "Cat": """,[.,]   echo input until EOF""",

    "Reverse": """>,[>,]<[.<]   print input backwards""",

    "Wraparound": "-.   0 minus 1 wraps to 255",

    "Custom": ""
}

# Cells shown in the final tape panel
TAPE_WINDOW = 16
TRACE_LIMIT = 200


# =============================================================================
# Execution Functions
# =============================================================================

def format_tape(machine: Machine) -> str:
    """Render a window of cells around the final head position."""
    pointer = machine.get_pointer()
    start = max(0, pointer - TAPE_WINDOW // 2)
    lines = [
        "FINAL TAPE",
        "=" * 30,
    ]
    for index in range(start, start + TAPE_WINDOW):
        value = machine.get_cell(index)
        marker = " <- PTR" if index == pointer else ""
        lines.append(f"  [{index:>5}] {value:>3}{marker}")
    return "\n".join(lines)


def format_trace(machine: Machine) -> str:
    lines = [
        "EXECUTION TRACE",
        "=" * 60,
    ]
    for entry in machine.trace[:TRACE_LIMIT]:
        post = entry.post_state
        line = (f"[{entry.cycle:>5}] PC={entry.pc:<5} `{entry.instruction}`  "
                f"PTR={post['pointer']:<4} CELL={post['cell']:<3}")
        if entry.error:
            line += f"  ERROR: {entry.error}"
        lines.append(line)

    if len(machine.trace) > TRACE_LIMIT:
        lines.append(f"\n... ({len(machine.trace) - TRACE_LIMIT} more entries)")
    return "\n".join(lines)


def run_program(program: str, input_text: str, max_cycles: int, trace: bool) -> tuple:
    """Execute a program and return results.

    Args:
        program: Program source
        input_text: Text fed to `,` (UTF-8 encoded)
        max_cycles: Maximum executed instructions
        trace: Record a step-by-step trace

    Returns:
        Tuple of (output_text, summary_text, tape_text, trace_text)
    """
    if not program.strip():
        return "", "Error: No program provided", "", ""

    machine = Machine(max_cycles=int(max_cycles), trace=trace)

    try:
        machine.load_source(program, input_data=input_text or None)
    except MachineError as e:
        return "", f"Parse error: {e}", "", ""

    try:
        machine.run()
    except MachineError as e:
        error_msg = str(e)
    else:
        error_msg = None

    summary = machine.get_summary()
    summary_lines = [
        "EXECUTION SUMMARY",
        "=" * 40,
        f"Cycles: {summary['cycles']}",
        f"Halted: {'Yes' if summary['halted'] else 'No'}",
        f"Output bytes: {summary['output_length']}",
        f"Input bytes read: {summary['input_read']}",
    ]
    if error_msg:
        summary_lines.append(f"\nRuntime: {error_msg}")

    trace_text = format_trace(machine) if trace else ""
    return machine.output.text(), "\n".join(summary_lines), format_tape(machine), trace_text


def load_example(example_name: str) -> str:
    """Load an example program."""
    return EXAMPLE_PROGRAMS.get(example_name, "")


# =============================================================================
# Gradio Interface
# =============================================================================

def create_demo():
    """Create and return the Gradio demo interface."""

    with gr.Blocks(title="bf-machine Demo", theme=gr.themes.Soft()) as demo:
        gr.Markdown("""
        # bf-machine

        An interpreter for the eight-instruction tape language.
        Every character other than `+ - < > . , [ ]` is a comment.
        """)

        with gr.Row():
            with gr.Column(scale=2):
                gr.Markdown("### Program")

                example_dropdown = gr.Dropdown(
                    choices=list(EXAMPLE_PROGRAMS.keys()),
                    value="Hello World",
                    label="Load Example"
                )

                program_input = gr.Textbox(
                    value=EXAMPLE_PROGRAMS["Hello World"],
                    label="Source Code",
                    lines=12,
                    placeholder="Enter program here..."
                )

                input_box = gr.Textbox(
                    label="Input",
                    lines=2,
                    placeholder="Bytes read by `,` (EOF reads as 0)"
                )

                gr.Markdown("### Settings")

                with gr.Row():
                    max_cycles = gr.Slider(
                        minimum=100,
                        maximum=1000000,
                        value=100000,
                        step=100,
                        label="Max Cycles"
                    )
                    trace_checkbox = gr.Checkbox(
                        value=False,
                        label="Record Trace"
                    )

                run_button = gr.Button("Run Program", variant="primary")

            with gr.Column(scale=3):
                output_box = gr.Textbox(
                    label="Output",
                    lines=4,
                    interactive=False
                )
                with gr.Row():
                    summary_output = gr.Textbox(
                        label="Summary",
                        lines=10,
                        interactive=False
                    )
                    tape_output = gr.Textbox(
                        label="Final Tape",
                        lines=10,
                        interactive=False
                    )

                trace_output = gr.Textbox(
                    label="Execution Trace",
                    lines=20,
                    interactive=False
                )

        with gr.Accordion("Instruction Reference", open=False):
            gr.Markdown("""
            | Symbol | Effect |
            |--------|--------|
            | `>` | Move the pointer one cell right |
            | `<` | Move the pointer one cell left (error at cell 0) |
            | `+` | Increment the current cell (wraps 255 -> 0) |
            | `-` | Decrement the current cell (wraps 0 -> 255) |
            | `.` | Output the current cell as a byte |
            | `,` | Read one byte into the current cell (0 at EOF) |
            | `[` | Jump past the matching `]` if the cell is 0 |
            | `]` | Jump back past the matching `[` if the cell is not 0 |
            """)

        example_dropdown.change(
            fn=load_example,
            inputs=[example_dropdown],
            outputs=[program_input]
        )

        run_button.click(
            fn=run_program,
            inputs=[program_input, input_box, max_cycles, trace_checkbox],
            outputs=[output_box, summary_output, tape_output, trace_output]
        )

    return demo


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    demo = create_demo()
    demo.launch(
        share=False,
        server_name="0.0.0.0",
        server_port=7861,
        show_error=True
    )
