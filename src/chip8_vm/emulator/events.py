"""
Step Results
============

Every call to Chip8CPU.step() (and Emulator.step()) returns a StepEvent
describing what happened, so hosts never need to catch exceptions for
anticipated conditions.

Example:

    >>> event = emu.step()
    >>> if event.outcome == StepOutcome.HALTED:
    ...     print(f"Machine stopped: {event.fault}")

Copyright (c) 2025 chip8-vm contributors
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from chip8_vm.errors import Fault


class StepOutcome(Enum):
    """What a single step did."""
    EXECUTED = auto()          # Instruction applied normally
    UNKNOWN_OPCODE = auto()    # Unrecognised word skipped as a 2-byte no-op
    WAITING_FOR_KEY = auto()   # Key wait in progress, nothing changed
    HALTED = auto()            # Machine is (now) halted on a fault


@dataclass(frozen=True)
class StepEvent:
    """
    Result of one step.

    Attributes:
        outcome: What happened
        pc: Address of the instruction that was (or would have been) executed
        opcode: Instruction word, if it was fetched
        fault: The halting fault when outcome is HALTED
    """
    outcome: StepOutcome
    pc: int
    opcode: Optional[int] = None
    fault: Optional[Fault] = None

    @property
    def halted(self) -> bool:
        return self.outcome == StepOutcome.HALTED

    def __str__(self) -> str:
        match self.outcome:
            case StepOutcome.EXECUTED:
                return f"Executed ${self.opcode:04X} at ${self.pc:03X}"
            case StepOutcome.UNKNOWN_OPCODE:
                return f"Unknown opcode ${self.opcode:04X} at ${self.pc:03X}"
            case StepOutcome.WAITING_FOR_KEY:
                return f"Waiting for key at ${self.pc:03X}"
            case StepOutcome.HALTED:
                return f"Halted: {self.fault}"
            case _:
                return "Unknown"
