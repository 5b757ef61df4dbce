"""
Delay and sound timers.

Both are 8-bit counters that the host decrements at 60 Hz by calling
tick(). The CPU only loads them (FX15/FX18) and reads the delay timer
(FX07). The sound timer drives the tone: a host should beep while it is
nonzero.

Copyright (c) 2025 chip8-vm contributors
"""

from dataclasses import dataclass


TIMER_HZ = 60


@dataclass
class Timers:
    """
    Delay and sound timer registers.

    Example:
        >>> timers = Timers()
        >>> timers.sound = 2
        >>> timers.tick(); timers.tick(); timers.tick()
        >>> timers.sound
        0
    """
    delay: int = 0
    sound: int = 0

    def __setattr__(self, name: str, value: int) -> None:
        super().__setattr__(name, value & 0xFF)

    def tick(self) -> None:
        """Count both timers down by one, stopping at zero."""
        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1

    def reset(self) -> None:
        self.delay = 0
        self.sound = 0

    @property
    def tone_active(self) -> bool:
        """True while the sound timer is nonzero."""
        return self.sound > 0
