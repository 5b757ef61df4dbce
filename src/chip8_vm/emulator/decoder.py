"""
CHIP-8 Instruction Decoder
==========================

Splits a 16-bit instruction word into its addressing fields.

Every CHIP-8 opcode is two bytes, big-endian, usually written as four
nibbles. Example: $6A15 means "set VA to $15".

    15   12 11    8 7     4 3     0
    +------+-------+-------+------+
    |family|   X   |   Y   |  N   |
    +------+-------+-------+------+
                   |      NN      |
           |         NNN          |

Decoding never fails: every word maps to some Instruction, and validity is
judged later by the execution engine.

Copyright (c) 2025 chip8-vm contributors
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Instruction:
    """
    A decoded instruction word.

    Attributes:
        opcode: The raw 16-bit word
        family: Top nibble (0-15), selects the instruction group
        x: Second nibble, usually a register index
        y: Third nibble, usually a register index
        n: Low nibble (4-bit immediate)
        nn: Low byte (8-bit immediate)
        nnn: Low 12 bits (address)
    """
    opcode: int
    family: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    def __str__(self) -> str:
        return f"${self.opcode:04X}"


def decode(word: int) -> Instruction:
    """
    Decode a 16-bit instruction word.

    Args:
        word: Instruction word (masked to 16 bits)

    Returns:
        Instruction with all fields extracted
    """
    word &= 0xFFFF
    return Instruction(
        opcode=word,
        family=(word >> 12) & 0xF,
        x=(word >> 8) & 0xF,
        y=(word >> 4) & 0xF,
        n=word & 0xF,
        nn=word & 0xFF,
        nnn=word & 0xFFF,
    )
