"""
CHIP-8 VM Error Hierarchy
=========================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from Chip8Error, allowing callers to catch every
package error with a single except clause if desired.

Exception Hierarchy
-------------------
Chip8Error (base)
├── RomLoadError - ROM file unreadable or too large
└── MachineFault (raised inside the execution engine only)
    ├── StackOverflowError - CALL with a full call stack
    ├── StackUnderflowError - RET with an empty call stack
    └── MemoryFaultError - access outside the 4KB address space

Machine faults never escape Chip8CPU.step(). The CPU catches them,
records a Fault value on its state and halts, so that a host can decide
whether to reset, report or stop.

Copyright (c) 2025 chip8-vm contributors
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Chip8Error(Exception):
    """
    Base exception for all chip8_vm errors.

        try:
            emu.load_rom("pong.ch8")
        except Chip8Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# ROM Loading
# =============================================================================

class RomLoadError(Chip8Error):
    """
    A ROM image could not be loaded.

    Raised before any machine memory is touched, so the machine stays in
    its post-reset state.

    Attributes:
        path: File that failed to load (None for in-memory data)
        reason: Short description of the failure
    """

    def __init__(self, reason: str, path: Optional[str] = None):
        self.reason = reason
        self.path = path
        if path:
            super().__init__(f"cannot load ROM '{path}': {reason}")
        else:
            super().__init__(f"cannot load ROM: {reason}")


# =============================================================================
# Machine Faults
# =============================================================================

class FaultKind(Enum):
    """Fatal conditions that halt the machine."""
    STACK_OVERFLOW = "stack overflow"
    STACK_UNDERFLOW = "stack underflow"
    MEMORY_FAULT = "memory fault"


@dataclass(frozen=True)
class Fault:
    """
    A halting fault as reported to the host.

    Attributes:
        kind: Which fault occurred
        pc: Address of the faulting instruction
        opcode: The faulting 16-bit instruction word (None if the fetch itself faulted)
        address: Offending memory address for memory faults
        message: Human-readable description
    """
    kind: FaultKind
    pc: int
    opcode: Optional[int] = None
    address: Optional[int] = None
    message: str = ""

    def __str__(self) -> str:
        if self.opcode is None:
            where = f"at ${self.pc:03X}"
        else:
            where = f"at ${self.pc:03X} (opcode ${self.opcode:04X})"
        text = f"{self.kind.value} {where}"
        if self.message:
            text += f": {self.message}"
        return text


class MachineFault(Chip8Error):
    """
    Base class for faults raised while executing an instruction.

    Subclasses set `kind`. The CPU converts these into Fault values.
    """

    kind: FaultKind = FaultKind.MEMORY_FAULT

    def __init__(self, message: str, address: Optional[int] = None):
        self.message = message
        self.address = address
        super().__init__(message)


class StackOverflowError(MachineFault):
    """CALL executed while the call stack already holds 16 entries."""

    kind = FaultKind.STACK_OVERFLOW


class StackUnderflowError(MachineFault):
    """RET executed with an empty call stack."""

    kind = FaultKind.STACK_UNDERFLOW


class MemoryFaultError(MachineFault):
    """
    Memory access outside [0x000, 0xFFF].

    Raised for index-register dereferences (DRW, BCD, register dump/load)
    and for instruction fetches past the end of memory.
    """

    kind = FaultKind.MEMORY_FAULT
