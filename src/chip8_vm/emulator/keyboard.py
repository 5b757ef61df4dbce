"""
Keypad for the CHIP-8 VM
========================

The CHIP-8 has a 16-key hexadecimal keypad:

    1 2 3 C
    4 5 6 D
    7 8 9 E
    A 0 B F

The keypad is owned by the host: the host presses and releases keys, the
CPU only reads them (SKP/SKNP) or waits for a new press (FX0A).

To support the key-wait instruction without blocking, the keypad latches
the most recent released-to-pressed transition. The CPU clears the latch
when it starts waiting and consumes it once a press arrives.

Copyright (c) 2025 chip8-vm contributors
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional


logger = logging.getLogger(__name__)

KEY_COUNT = 16


@dataclass
class KeypadState:
    """
    Complete keypad state.

    Attributes:
        pressed: One flag per key
        latched: Key index of the last new press not yet consumed, or None
    """
    pressed: List[bool] = field(default_factory=lambda: [False] * KEY_COUNT)
    latched: Optional[int] = None


def key_index(key) -> int:
    """
    Resolve a key given as an index or a hex label ("A", "0xA").

    Raises:
        ValueError: If the key cannot be resolved
    """
    if isinstance(key, int):
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"Key index must be 0-15, got {key}")
        return key
    name = str(key).strip().upper()
    if name.startswith("0X"):
        name = name[2:]
    if len(name) == 1 and name in "0123456789ABCDEF":
        return int(name, 16)
    raise ValueError(f"Unknown key: {key!r}")


class Keypad:
    """
    16-key hex keypad.

    Example:
        >>> pad = Keypad()
        >>> pad.set_key(0xA, True)
        >>> pad.is_pressed(0xA)
        True
        >>> pad.take_latched()
        10
    """

    def __init__(self):
        self._state = KeypadState()

    def reset(self) -> None:
        """Release every key and drop any latched press."""
        self._state = KeypadState()

    def set_key(self, index: int, pressed: bool) -> None:
        """
        Press or release a key.

        Args:
            index: Key index 0-15
            pressed: True for key down, False for key up

        Raises:
            ValueError: If index is out of range
        """
        if not 0 <= index < KEY_COUNT:
            raise ValueError(f"Key index must be 0-15, got {index}")
        was_pressed = self._state.pressed[index]
        self._state.pressed[index] = bool(pressed)
        if pressed and not was_pressed:
            self._state.latched = index
            logger.debug(f"Key ${index:X} pressed")

    def key_down(self, key) -> None:
        """Press a key by index or hex label."""
        self.set_key(key_index(key), True)

    def key_up(self, key) -> None:
        """Release a key by index or hex label."""
        self.set_key(key_index(key), False)

    def is_pressed(self, index: int) -> bool:
        """Check one key. Only the low nibble of `index` is used."""
        return self._state.pressed[index & 0xF]

    @property
    def pressed_keys(self) -> List[int]:
        """Indices of all keys currently held."""
        return [i for i, down in enumerate(self._state.pressed) if down]

    def clear_latch(self) -> None:
        """Forget any press that happened before now."""
        self._state.latched = None

    def take_latched(self) -> Optional[int]:
        """Consume and return the latched new press, if any."""
        key = self._state.latched
        self._state.latched = None
        return key
