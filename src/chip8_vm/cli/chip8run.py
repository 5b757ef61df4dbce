"""
chip8run - Headless CHIP-8 Runner
=================================

Runs a ROM for a fixed number of 60 Hz frames without a window, then
prints the final screen as text and optionally saves it as a PNG.

Usage Examples
--------------
Run for ten seconds of machine time:
    $ chip8run maze.ch8 --frames 600

Use COSMAC VIP behaviour with a fixed RNG seed:
    $ chip8run game.ch8 --quirks cosmac --seed 42

Hold keypad key 5 for the whole run and save a screenshot:
    $ chip8run game.ch8 --hold 5 --screenshot screen.png

Exit codes: 0 on success, 1 on bad arguments or ROM load failure,
2 if the program halted the machine.

Copyright (c) 2025 chip8-vm contributors
"""

import dataclasses
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Tuple

import click

from chip8_vm import __version__
from chip8_vm.cli.errors import Chip8Command, ExitCode, handle_cli_exception
from chip8_vm.emulator import Emulator, EmulatorConfig, list_quirk_profiles, key_index


# =============================================================================
# CLI Definition
# =============================================================================

@click.command(cls=Chip8Command)
@click.argument(
    "rom_file",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-f", "--frames",
    type=click.IntRange(min=0),
    default=600,
    show_default=True,
    help="Number of 60 Hz frames to run",
)
@click.option(
    "--ips",
    type=click.IntRange(min=1),
    default=None,
    help="Instructions per second (default: 700 or $CHIP8_IPS)",
)
@click.option(
    "-q", "--quirks",
    type=click.Choice(list_quirk_profiles(), case_sensitive=False),
    default=None,
    help="Quirk profile (default: 'default' or $CHIP8_QUIRKS)",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the random number instruction",
)
@click.option(
    "--hold",
    multiple=True,
    help="Keypad key (0-F) held down for the whole run; repeatable",
)
@click.option(
    "--realtime",
    is_flag=True,
    help="Pace frames at 60 Hz instead of running as fast as possible",
)
@click.option(
    "-s", "--screenshot",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the final screen to a PNG file",
)
@click.option(
    "--scale",
    type=click.IntRange(min=1),
    default=8,
    show_default=True,
    help="Screenshot pixel scale",
)
@click.option(
    "--no-screen",
    is_flag=True,
    help="Do not print the final screen",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging)",
)
@click.version_option(version=__version__, prog_name="chip8run")
def main(
    rom_file: Path,
    frames: int,
    ips: Optional[int],
    quirks: Optional[str],
    seed: Optional[int],
    hold: Tuple[str, ...],
    realtime: bool,
    screenshot: Optional[Path],
    scale: int,
    no_screen: bool,
    verbose: bool,
) -> None:
    """
    Run a CHIP-8 ROM headless.

    ROM_FILE is a raw CHIP-8 program image (at most 3584 bytes).

    Examples:

        # Run for 10 seconds of machine time and print the screen
        chip8run maze.ch8

        # Run 2 seconds with SUPER-CHIP quirks and save a screenshot
        chip8run game.ch8 --frames 120 --quirks schip -s out.png
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = EmulatorConfig.from_env()
        overrides = {}
        if ips is not None:
            overrides["instructions_per_second"] = ips
        if quirks is not None:
            overrides["quirks"] = quirks.lower()
        if seed is not None:
            overrides["seed"] = seed
        if overrides:
            config = dataclasses.replace(config, **overrides)

        held_keys = [key_index(k) for k in hold]

        emu = Emulator(config)
        size = emu.load_rom(rom_file)
    except Exception as e:
        handle_cli_exception(e, verbose)

    if verbose:
        click.echo(f"ROM: {rom_file} ({size} bytes)", err=True)
        click.echo(
            f"Quirks: {emu.quirks.name}, "
            f"{config.instructions_per_frame} instructions/frame",
            err=True,
        )

    for key in held_keys:
        emu.set_key(key, True)

    frame_time = 1.0 / config.timer_hz
    for _ in range(frames):
        started = time.perf_counter()
        event = emu.run_frame()
        if event.halted:
            break
        if realtime:
            remaining = frame_time - (time.perf_counter() - started)
            if remaining > 0:
                time.sleep(remaining)

    if not no_screen:
        click.echo(emu.display_text)

    if screenshot:
        try:
            screenshot.write_bytes(emu.render_display(scale=scale))
        except OSError as e:
            handle_cli_exception(e, verbose)
        if verbose:
            click.echo(f"Screenshot: {screenshot}", err=True)

    if verbose:
        click.echo(f"Executed {emu.total_steps} instructions, PC=${emu.pc:03X}", err=True)

    if emu.halted:
        click.echo(f"Machine halted: {emu.fault}", err=True)
        sys.exit(ExitCode.MACHINE_FAULT)


if __name__ == "__main__":
    main()
