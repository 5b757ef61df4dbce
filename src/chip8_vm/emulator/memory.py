"""
Memory Subsystem for the CHIP-8 VM
==================================

Memory Map:
    $000-$04F  Hexadecimal font (16 glyphs x 5 bytes)
    $050-$1FF  Reserved for the interpreter on original machines (zero here)
    $200-$FFF  Program ROM and work RAM

All 4096 cells are readable and writable; any access outside the address
space raises MemoryFaultError, which the CPU turns into a halt.

Copyright (c) 2025 chip8-vm contributors
"""

from typing import Iterable

from chip8_vm.errors import MemoryFaultError


MEMORY_SIZE = 0x1000
PROGRAM_START = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START  # 3584 bytes

FONT_ADDRESS = 0x000
GLYPH_SIZE = 5

# 4x5 pixel glyphs for 0-F, one byte per row, high nibble used.
FONT = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


class Memory:
    """
    Flat 4KB memory with the font preloaded.

    Example:
        >>> mem = Memory()
        >>> mem.read(0x000)
        240
        >>> mem.load_program(bytes([0x60, 0x0A]))
        >>> mem.read_word(0x200)
        24586
    """

    def __init__(self):
        self._data = bytearray(MEMORY_SIZE)
        self.reset()

    def reset(self) -> None:
        """Zero all memory and reinstall the font."""
        self._data[:] = bytes(MEMORY_SIZE)
        self._data[FONT_ADDRESS:FONT_ADDRESS + len(FONT)] = FONT

    @staticmethod
    def check_range(address: int, count: int = 1) -> None:
        """
        Verify that [address, address+count) lies inside memory.

        Raises:
            MemoryFaultError: If any byte of the range is out of bounds
        """
        if address < 0 or address + count > MEMORY_SIZE:
            raise MemoryFaultError(
                f"access to ${address:04X}+{count} outside memory",
                address=address,
            )

    def read(self, address: int) -> int:
        """Read one byte."""
        self.check_range(address)
        return self._data[address]

    def write(self, address: int, value: int) -> None:
        """Write one byte (value masked to 8 bits)."""
        self.check_range(address)
        self._data[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word (high byte at `address`)."""
        self.check_range(address, 2)
        return (self._data[address] << 8) | self._data[address + 1]

    def read_block(self, address: int, count: int) -> bytes:
        """Read `count` bytes; the whole range is checked before reading."""
        self.check_range(address, count)
        return bytes(self._data[address:address + count])

    def write_block(self, address: int, data: Iterable[int]) -> None:
        """Write bytes; the whole range is checked before writing."""
        values = bytes(v & 0xFF for v in data)
        self.check_range(address, len(values))
        self._data[address:address + len(values)] = values

    def load_program(self, data: bytes) -> None:
        """Copy a program image to $200."""
        self.write_block(PROGRAM_START, data)

    def dump(self) -> bytes:
        """Copy of the full 4KB contents."""
        return bytes(self._data)
