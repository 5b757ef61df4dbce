"""
ROM Image Loading
=================

CHIP-8 programs are raw binaries: a sequence of big-endian instruction
words (and inline data) with no header. They are loaded at $200, so the
largest program that fits is 4096 - 512 = 3584 bytes.

Loading is validated completely before anything is returned, so callers
can copy the result into memory knowing it fits.

Copyright (c) 2025 chip8-vm contributors
"""

import logging
from pathlib import Path
from typing import Union

from chip8_vm.errors import RomLoadError
from .memory import MAX_ROM_SIZE


logger = logging.getLogger(__name__)


def validate_rom(data: bytes, path: Union[str, Path, None] = None) -> bytes:
    """
    Check that a ROM image fits in program memory.

    Args:
        data: Raw ROM bytes
        path: Source file, for error messages

    Returns:
        The data as immutable bytes

    Raises:
        RomLoadError: If the image exceeds 3584 bytes
    """
    if len(data) > MAX_ROM_SIZE:
        logger.debug(f"ROM rejected: {len(data)} bytes > {MAX_ROM_SIZE}")
        raise RomLoadError(
            f"ROM is {len(data)} bytes, maximum is {MAX_ROM_SIZE}",
            path=str(path) if path is not None else None,
        )
    return bytes(data)


def read_rom(path: Union[str, Path]) -> bytes:
    """
    Read and validate a ROM file.

    Args:
        path: Path to the .ch8 file

    Returns:
        ROM bytes, at most 3584 long

    Raises:
        RomLoadError: If the file is missing, unreadable or too large
    """
    path = Path(path)
    try:
        size = path.stat().st_size
    except OSError as e:
        raise RomLoadError(e.strerror or str(e), path=str(path)) from e

    # Check the size before reading so oversized files are never slurped.
    if size > MAX_ROM_SIZE:
        raise RomLoadError(
            f"ROM is {size} bytes, maximum is {MAX_ROM_SIZE}",
            path=str(path),
        )

    try:
        data = path.read_bytes()
    except OSError as e:
        raise RomLoadError(e.strerror or str(e), path=str(path)) from e

    return validate_rom(data, path)
