"""Lexer: source text -> instruction sequence.

Anything that is not one of the eight instruction symbols is a comment.
"""

from typing import Tuple

from .operators import Instruction, from_symbol


def tokenize(source: str) -> Tuple[Instruction, ...]:
    """Filter source text down to its instructions, preserving order.

    Args:
        source: Arbitrary program text

    Returns:
        Tuple of instructions, one per recognised character
    """
    ops = (from_symbol(char) for char in source)
    return tuple(op for op in ops if op is not None)
