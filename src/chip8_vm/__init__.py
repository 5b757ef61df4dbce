"""
chip8-vm - CHIP-8 Virtual Machine
=================================

This package emulates the CHIP-8, the 1970s interpreted instruction set
designed for writing small games on 8-bit computers such as the COSMAC VIP.

The CHIP-8 machine has 4KB of memory, sixteen 8-bit registers, a 16-bit
index register, a 16-level call stack, two 60 Hz timers, a 16-key hex
keypad and a 64x32 monochrome display. Programs are raw ROM images loaded
at $200.

Main Components
---------------
- **emulator**: the virtual machine (decoder, execution engine, memory,
  display, keypad, timers, quirk profiles)

- **cli**: command-line runner (chip8run)
    Runs a ROM headless and prints or saves the final screen

Quick Start
-----------
Run a ROM for two seconds of machine time:
    >>> from chip8_vm import Emulator
    >>> emu = Emulator()
    >>> emu.load_rom("ibm_logo.ch8")
    >>> emu.run(frames=120)
    >>> print(emu.display_text)

Or use the command-line tool:
    $ chip8run ibm_logo.ch8 --frames 120

Reference Documentation
-----------------------
- Cowgod's CHIP-8 Technical Reference: http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
- CHIP-8 quirks: https://chip8.gulrak.net/

Version History
---------------
1.0.0 - Initial release with the complete instruction set and quirk profiles

Copyright (c) 2025 chip8-vm contributors
"""

__version__ = "1.0.0"
__author__ = "chip8-vm contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from chip8_vm.emulator import (
    Emulator,
    EmulatorConfig,
    Chip8CPU,
    StepEvent,
    StepOutcome,
    Quirks,
    get_quirks,
    list_quirk_profiles,
)
from chip8_vm.errors import (
    Chip8Error,
    RomLoadError,
    MachineFault,
    StackOverflowError,
    StackUnderflowError,
    MemoryFaultError,
    Fault,
    FaultKind,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Emulator
    "Emulator",
    "EmulatorConfig",
    "Chip8CPU",
    "StepEvent",
    "StepOutcome",
    "Quirks",
    "get_quirks",
    "list_quirk_profiles",
    # Exception hierarchy
    "Chip8Error",
    "RomLoadError",
    "MachineFault",
    "StackOverflowError",
    "StackUnderflowError",
    "MemoryFaultError",
    # Fault values
    "Fault",
    "FaultKind",
]
