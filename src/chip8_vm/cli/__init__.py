"""
CHIP-8 VM Command-Line Interface
================================

This package provides command-line tools for the CHIP-8 VM:

- **chip8run**: headless ROM runner

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.

Copyright (c) 2025 chip8-vm contributors
"""

__all__ = ["chip8run"]
