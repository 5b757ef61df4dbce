"""
CHIP-8 Quirk Profiles
=====================

Several CHIP-8 instructions behave differently between the original COSMAC
VIP interpreter and later implementations (CHIP-48, SUPER-CHIP, most PC
interpreters). Programs are usually written against one of them, so the
differences are exposed as named toggles rather than hard-coded.

Toggles:
- shift_uses_vy: 8XY6/8XYE shift VY into VX (COSMAC) instead of shifting VX
- draw_wrap: DRW wraps pixels around the screen edges instead of clipping
- memory_increments_i: FX55/FX65 leave I pointing past the last register
- jump_uses_vx: BNNN jumps to NNN + VX (X = high nibble of NNN) instead of NNN + V0
- logic_resets_vf: 8XY1/8XY2/8XY3 reset VF to 0

Profiles:
- default: two-register shifts and wrap-around drawing; everything else off
- cosmac: original COSMAC VIP behaviour
- schip: SUPER-CHIP 1.1 behaviour

Copyright (c) 2025 chip8-vm contributors
"""

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class Quirks:
    """
    Behaviour switches for historically ambiguous instructions.

    Attributes:
        name: Profile name
        shift_uses_vy: Shift source is VY rather than VX
        draw_wrap: Sprite pixels wrap instead of clipping at the edges
        memory_increments_i: Register dump/load advance I by X+1
        jump_uses_vx: Indexed jump adds VX instead of V0
        logic_resets_vf: OR/AND/XOR clear VF
    """
    name: str = "default"
    shift_uses_vy: bool = True
    draw_wrap: bool = True
    memory_increments_i: bool = False
    jump_uses_vx: bool = False
    logic_resets_vf: bool = False


QUIRKS_DEFAULT = Quirks()

QUIRKS_COSMAC = Quirks(
    name="cosmac",
    shift_uses_vy=True,
    draw_wrap=False,
    memory_increments_i=True,
    jump_uses_vx=False,
    logic_resets_vf=True,
)

QUIRKS_SCHIP = Quirks(
    name="schip",
    shift_uses_vy=False,
    draw_wrap=False,
    memory_increments_i=False,
    jump_uses_vx=True,
    logic_resets_vf=False,
)

_PROFILES: Dict[str, Quirks] = {
    q.name: q for q in (QUIRKS_DEFAULT, QUIRKS_COSMAC, QUIRKS_SCHIP)
}


def get_quirks(name: str) -> Quirks:
    """
    Get a quirk profile by name (case-insensitive).

    Raises:
        ValueError: If the profile is unknown
    """
    key = name.strip().lower()
    if key not in _PROFILES:
        valid = ", ".join(sorted(_PROFILES))
        raise ValueError(f"Unknown quirk profile '{name}'. Valid profiles: {valid}")
    return _PROFILES[key]


def list_quirk_profiles() -> List[str]:
    """Names of all available quirk profiles."""
    return sorted(_PROFILES)
