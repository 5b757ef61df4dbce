"""
CHIP-8 VM - Main Orchestrator
=============================

This module provides the `Emulator` class that owns one complete machine
(memory, CPU, display, keypad, timers) and exposes the host-facing API:

- Program loading from ROM files or raw bytes
- Execution control (step, tick, run_frame, run, run_until)
- Display inspection and the redraw handshake
- Keypad input
- Audio state (tone on/off)

The emulator never schedules itself. A host calls step() at its chosen
instruction rate and tick() at 60 Hz, or uses run_frame() which does both
for one 1/60 s frame.

Example usage:
    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(EmulatorConfig(instructions_per_second=700))
    >>> emu.load_rom("pong.ch8")
    >>> emu.run(frames=60)
    >>> print(emu.display_text)

Copyright (c) 2025 chip8-vm contributors
"""

import logging
import os
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from chip8_vm.errors import Fault
from .cpu import Chip8CPU
from .display import Display
from .events import StepEvent, StepOutcome
from .keyboard import Keypad
from .memory import Memory
from .quirks import Quirks, get_quirks
from .rom import read_rom, validate_rom
from .timers import TIMER_HZ, Timers


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        instructions_per_second: Target CPU speed used by run_frame().
            Original interpreters ran at roughly 500-1000 instructions/s.
        timer_hz: Timer tick rate; run_frame() covers 1/timer_hz seconds.
        quirks: Quirk profile name ("default", "cosmac", "schip")
        seed: Seed for the RND instruction, None for nondeterministic

    Example:
        >>> config = EmulatorConfig(quirks="cosmac", seed=1234)
    """
    instructions_per_second: int = 700
    timer_hz: int = TIMER_HZ
    quirks: str = "default"
    seed: Optional[int] = None

    def __post_init__(self):
        if self.instructions_per_second < 1:
            raise ValueError(
                f"instructions_per_second must be >= 1, got {self.instructions_per_second}"
            )
        if self.timer_hz < 1:
            raise ValueError(f"timer_hz must be >= 1, got {self.timer_hz}")
        # Fail early on bad profile names.
        get_quirks(self.quirks)

    @property
    def instructions_per_frame(self) -> int:
        """Instructions executed between two timer ticks."""
        return max(1, round(self.instructions_per_second / self.timer_hz))

    @classmethod
    def from_env(cls) -> "EmulatorConfig":
        """
        Create EmulatorConfig from environment variables.

        Environment variables (all optional):
            CHIP8_IPS: Instructions per second (integer)
            CHIP8_TIMER_HZ: Timer rate (integer)
            CHIP8_QUIRKS: Quirk profile name
            CHIP8_SEED: RNG seed (integer)

        Returns:
            EmulatorConfig with values from environment variables
        """
        values: Dict[str, object] = {}

        for env_name, attr in (
            ("CHIP8_IPS", "instructions_per_second"),
            ("CHIP8_TIMER_HZ", "timer_hz"),
            ("CHIP8_SEED", "seed"),
        ):
            if raw := os.environ.get(env_name):
                try:
                    values[attr] = int(raw, 0)
                except ValueError:
                    logger.warning(f"Ignoring invalid {env_name}={raw!r}")

        if quirks := os.environ.get("CHIP8_QUIRKS"):
            values["quirks"] = quirks

        return cls(**values)


class Emulator:
    """
    One complete CHIP-8 machine.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        quirks: The resolved quirk profile
        memory: 4KB memory
        cpu: The execution engine (accessible for low-level control)
        display: 64x32 framebuffer
        keypad: 16-key hex keypad
        timers: Delay and sound timers

    Example:
        >>> emu = Emulator()
        >>> emu.load_bytes(bytes([0x60, 0x0A, 0x70, 0x0B]))
        >>> emu.step().outcome
        <StepOutcome.EXECUTED: 1>
        >>> emu.step().outcome
        <StepOutcome.EXECUTED: 1>
        >>> emu.registers["v0"]
        21
    """

    def __init__(self, config: Optional[EmulatorConfig] = None):
        """
        Initialize the emulator in its post-reset state.

        Args:
            config: EmulatorConfig. If None, defaults are used.

        Raises:
            ValueError: If the quirk profile is unknown
        """
        self.config = config or EmulatorConfig()
        self.quirks: Quirks = get_quirks(self.config.quirks)

        self.memory = Memory()
        self.display = Display()
        self.keypad = Keypad()
        self.timers = Timers()
        self.cpu = Chip8CPU(
            self.memory,
            self.display,
            self.keypad,
            self.timers,
            quirks=self.quirks,
            rng=random.Random(self.config.seed),
        )

        self._total_steps = 0
        self._rom_size = 0

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load_rom(self, path: Union[str, Path]) -> int:
        """
        Load a ROM file at $200.

        The file is read and validated before memory is touched; on failure
        the machine is left exactly as it was.

        Args:
            path: Path to the ROM file

        Returns:
            Number of bytes loaded

        Raises:
            RomLoadError: If the file is unreadable or larger than 3584 bytes
        """
        data = read_rom(path)
        self._install(data)
        logger.info(f"Loaded ROM {path} ({len(data)} bytes)")
        return len(data)

    def load_bytes(self, data: bytes) -> int:
        """
        Load a program image from memory at $200.

        Raises:
            RomLoadError: If data is larger than 3584 bytes
        """
        data = validate_rom(data)
        self._install(data)
        logger.info(f"Loaded program image ({len(data)} bytes)")
        return len(data)

    def _install(self, data: bytes) -> None:
        self.memory.load_program(data)
        self._rom_size = len(data)

    @property
    def rom_size(self) -> int:
        """Size of the last loaded program."""
        return self._rom_size

    # =========================================================================
    # Execution Control
    # =========================================================================

    def reset(self) -> None:
        """
        Reset to power-on state.

        Memory is cleared and the font reinstalled, so any loaded program
        is gone and must be loaded again. A halted machine runs again, and the
        random number generator restarts from the configured seed.
        """
        self.memory.reset()
        self.display.reset()
        self.keypad.reset()
        self.timers.reset()
        self.cpu.reset()
        self.cpu.rng = random.Random(self.config.seed)
        self._total_steps = 0
        self._rom_size = 0
        logger.info("Emulator reset")

    def step(self) -> StepEvent:
        """
        Execute a single instruction.

        Returns:
            StepEvent describing the outcome
        """
        event = self.cpu.step()
        if event.outcome in (StepOutcome.EXECUTED, StepOutcome.UNKNOWN_OPCODE):
            self._total_steps += 1
        return event

    def tick(self) -> None:
        """Advance the delay and sound timers by one 60 Hz tick (no-op while halted)."""
        if self.cpu.halted:
            return
        self.timers.tick()

    def run_frame(self) -> StepEvent:
        """
        Run one timer period: instructions_per_frame steps, then one tick.

        Stops early if the machine halts (the tick is skipped then).

        Returns:
            The last StepEvent
        """
        event = None
        for _ in range(self.config.instructions_per_frame):
            event = self.step()
            if event.halted:
                return event
        self.tick()
        return event

    def run(self, frames: int = 1) -> StepEvent:
        """
        Run several frames.

        Args:
            frames: Number of frames to run

        Returns:
            The last StepEvent (HALTED if a fault stopped execution)
        """
        event = StepEvent(StepOutcome.EXECUTED, self.cpu.pc)
        for _ in range(frames):
            event = self.run_frame()
            if event.halted:
                break
        return event

    def run_until(
        self,
        predicate: Callable[["Emulator"], bool],
        max_steps: int = 100_000,
        tick_timers: bool = True,
    ) -> bool:
        """
        Step until a condition holds.

        Timers are ticked every instructions_per_frame steps so programs
        that poll the delay timer make progress.

        Args:
            predicate: Called with the emulator after every step
            max_steps: Give up after this many steps
            tick_timers: Tick timers at the configured rate

        Returns:
            True if the predicate became true, False on limit or halt
        """
        per_frame = self.config.instructions_per_frame
        for count in range(1, max_steps + 1):
            event = self.step()
            if predicate(self):
                return True
            if event.halted:
                return False
            if tick_timers and count % per_frame == 0:
                self.tick()
        return False

    # =========================================================================
    # Keypad Input
    # =========================================================================

    def set_key(self, index: int, pressed: bool) -> None:
        """Press or release keypad key 0-15."""
        self.keypad.set_key(index, pressed)

    def press_key(self, key) -> None:
        """Press a key by index or hex label ("A", 0xA)."""
        self.keypad.key_down(key)

    def release_key(self, key) -> None:
        """Release a key by index or hex label."""
        self.keypad.key_up(key)

    # =========================================================================
    # Display and Audio Output
    # =========================================================================

    def pixel_at(self, x: int, y: int) -> bool:
        """Get framebuffer pixel (x in 0-63, y in 0-31)."""
        return self.display.pixel_at(x, y)

    @property
    def needs_redraw(self) -> bool:
        """True if the framebuffer changed since acknowledge_redraw()."""
        return self.display.needs_redraw

    def acknowledge_redraw(self) -> None:
        """Clear the redraw flag after presenting a frame."""
        self.display.acknowledge_redraw()

    @property
    def display_text(self) -> str:
        """Framebuffer as text ('#' on, '.' off)."""
        return self.display.get_text()

    def render_display(self, scale: int = 8) -> bytes:
        """Framebuffer as PNG bytes."""
        return self.display.render_image(scale=scale)

    @property
    def should_emit_tone(self) -> bool:
        """True exactly while the sound timer is nonzero."""
        return self.timers.tone_active

    # =========================================================================
    # State Inspection
    # =========================================================================

    def read_byte(self, address: int) -> int:
        """
        Read one byte of memory.

        Raises:
            MemoryFaultError: If address is outside $000-$FFF
        """
        return self.memory.read(address)

    def read_bytes(self, address: int, count: int) -> bytes:
        """Read a block of memory."""
        return self.memory.read_block(address, count)

    @property
    def registers(self) -> dict:
        """
        Current register values.

        Returns:
            Dictionary with keys v0-vf, i, pc, sp, dt, st
        """
        regs = {f"v{n:x}": value for n, value in enumerate(self.cpu.v)}
        regs.update({
            "i": self.cpu.i,
            "pc": self.cpu.pc,
            "sp": self.cpu.sp,
            "dt": self.timers.delay,
            "st": self.timers.sound,
        })
        return regs

    @property
    def pc(self) -> int:
        return self.cpu.pc

    @property
    def halted(self) -> bool:
        return self.cpu.halted

    @property
    def fault(self) -> Optional[Fault]:
        return self.cpu.fault

    @property
    def awaiting_key(self) -> bool:
        return self.cpu.awaiting_key

    @property
    def total_steps(self) -> int:
        """Instructions executed since the last reset."""
        return self._total_steps

    def __repr__(self) -> str:
        status = "halted" if self.halted else "running"
        return (
            f"Emulator(quirks={self.quirks.name}, "
            f"pc=${self.cpu.pc:03X}, "
            f"steps={self._total_steps}, {status})"
        )
