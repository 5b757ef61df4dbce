"""
CHIP-8 Virtual Machine
======================

A complete CHIP-8 interpreter core.

This package provides:

- **Decoder**: pure split of a 16-bit word into its fields
- **Execution engine**: the full 35-instruction CHIP-8 set, table dispatched
- **Memory**: 4KB with the hex font at $000
- **Display**: 64x32 XOR framebuffer with collision detection
- **Keypad**: 16 keys with non-blocking key-wait support
- **Timers**: 60 Hz delay and sound timers
- **Quirks**: named profiles for historically ambiguous instructions

Quick Start
-----------

Basic usage::

    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(quirks="default"))
    >>> emu.load_rom("maze.ch8")
    >>> emu.run(frames=120)
    >>> print(emu.display_text)

Hosts that render and play sound poll the boundary API::

    >>> emu.step()
    >>> if emu.needs_redraw:
    ...     draw(emu.pixel_at)
    ...     emu.acknowledge_redraw()
    >>> beep(emu.should_emit_tone)

Module Structure
----------------

- `emulator.py`: Emulator class and EmulatorConfig (high-level API)
- `cpu.py`: execution engine and register state
- `decoder.py`: instruction decoding
- `memory.py`: memory and font
- `display.py`: framebuffer
- `keyboard.py`: keypad
- `timers.py`: delay/sound timers
- `quirks.py`: quirk profiles
- `events.py`: step results
- `rom.py`: ROM file loading

Copyright (c) 2025 chip8-vm contributors
"""

# Main entry point
from .emulator import Emulator, EmulatorConfig

# Execution engine
from .cpu import Chip8CPU, CPUState
from .decoder import Instruction, decode
from .events import StepEvent, StepOutcome

# Machine state
from .memory import Memory, FONT, MEMORY_SIZE, PROGRAM_START, MAX_ROM_SIZE
from .display import Display, DisplayState
from .keyboard import Keypad, KeypadState, key_index
from .timers import Timers

# Configuration
from .quirks import (
    Quirks,
    get_quirks,
    list_quirk_profiles,
    QUIRKS_DEFAULT,
    QUIRKS_COSMAC,
    QUIRKS_SCHIP,
)

# ROM loading
from .rom import read_rom, validate_rom

__all__ = [
    # Main API
    "Emulator",
    "EmulatorConfig",

    # Engine
    "Chip8CPU",
    "CPUState",
    "Instruction",
    "decode",
    "StepEvent",
    "StepOutcome",

    # Memory
    "Memory",
    "FONT",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "MAX_ROM_SIZE",

    # Display
    "Display",
    "DisplayState",

    # Keypad
    "Keypad",
    "KeypadState",
    "key_index",

    # Timers
    "Timers",

    # Quirks
    "Quirks",
    "get_quirks",
    "list_quirk_profiles",
    "QUIRKS_DEFAULT",
    "QUIRKS_COSMAC",
    "QUIRKS_SCHIP",

    # ROM
    "read_rom",
    "validate_rom",
]
