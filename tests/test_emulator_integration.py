"""
Emulator Integration Tests
==========================

Tests for the complete emulator system, verifying that all components
work together correctly.

These tests ensure:
- Reset state and configuration
- Program loading from files and bytes
- Frame pacing and timers
- Display, audio and keypad boundaries
- Fault reporting through the orchestrator

Copyright (c) 2025 chip8-vm contributors
"""

import pytest

from chip8_vm.emulator import (
    Emulator,
    EmulatorConfig,
    StepOutcome,
    FONT,
    MAX_ROM_SIZE,
)
from chip8_vm.errors import RomLoadError, FaultKind


def words(*values: int) -> bytes:
    """Assemble instruction words into a program image."""
    return b"".join(v.to_bytes(2, "big") for v in values)


# =============================================================================
# Configuration Tests
# =============================================================================

class TestEmulatorConfig:
    """Test EmulatorConfig."""

    def test_defaults(self):
        config = EmulatorConfig()
        assert config.instructions_per_second == 700
        assert config.timer_hz == 60
        assert config.quirks == "default"
        assert config.seed is None
        assert config.instructions_per_frame == 12

    def test_instructions_per_frame_minimum(self):
        assert EmulatorConfig(instructions_per_second=1).instructions_per_frame == 1

    def test_invalid_speed(self):
        with pytest.raises(ValueError):
            EmulatorConfig(instructions_per_second=0)

    def test_invalid_quirks(self):
        with pytest.raises(ValueError):
            EmulatorConfig(quirks="bogus")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CHIP8_IPS", "600")
        monkeypatch.setenv("CHIP8_QUIRKS", "cosmac")
        monkeypatch.setenv("CHIP8_SEED", "0x10")
        config = EmulatorConfig.from_env()
        assert config.instructions_per_second == 600
        assert config.instructions_per_frame == 10
        assert config.quirks == "cosmac"
        assert config.seed == 16

    def test_from_env_ignores_bad_integers(self, monkeypatch):
        monkeypatch.setenv("CHIP8_IPS", "fast")
        monkeypatch.delenv("CHIP8_QUIRKS", raising=False)
        assert EmulatorConfig.from_env().instructions_per_second == 700


# =============================================================================
# Reset and Loading Tests
# =============================================================================

class TestResetAndLoad:
    """Test power-on state and program loading."""

    def test_reset_state(self):
        emu = Emulator()
        emu.load_bytes(words(0x6042, 0xF015, 0xA000, 0xD005))
        for _ in range(4):
            emu.step()
        emu.reset()

        regs = emu.registers
        assert regs["pc"] == 0x200
        assert regs["sp"] == 0
        assert regs["dt"] == 0 and regs["st"] == 0
        assert all(regs[f"v{n:x}"] == 0 for n in range(16))
        assert emu.display.lit_count() == 0
        assert emu.read_bytes(0, 80) == FONT
        assert emu.read_bytes(80, 4096 - 80) == bytes(4096 - 80)

    def test_load_only_touches_rom_region(self):
        emu = Emulator()
        program = words(0x1200)
        emu.load_bytes(program)
        memory = emu.memory.dump()
        assert memory[:80] == FONT
        assert memory[0x200:0x202] == program
        assert memory[80:0x200] == bytes(0x200 - 80)
        assert memory[0x202:] == bytes(4096 - 0x202)

    def test_oversize_rom_leaves_memory(self):
        emu = Emulator()
        emu.load_bytes(words(0x1234))
        before = emu.memory.dump()
        with pytest.raises(RomLoadError):
            emu.load_bytes(bytes(MAX_ROM_SIZE + 1))
        assert emu.memory.dump() == before
        assert emu.rom_size == 2

    def test_load_rom_file(self, tmp_path):
        rom = tmp_path / "prog.ch8"
        rom.write_bytes(words(0x600A, 0x700B))
        emu = Emulator()
        assert emu.load_rom(rom) == 4
        emu.step()
        emu.step()
        assert emu.registers["v0"] == 0x15

    def test_load_oversize_file(self, tmp_path):
        rom = tmp_path / "big.ch8"
        rom.write_bytes(bytes(MAX_ROM_SIZE + 1))
        emu = Emulator()
        before = emu.memory.dump()
        with pytest.raises(RomLoadError):
            emu.load_rom(rom)
        assert emu.memory.dump() == before

    def test_empty_rom(self, tmp_path):
        rom = tmp_path / "empty.ch8"
        rom.write_bytes(b"")
        emu = Emulator()
        assert emu.load_rom(rom) == 0

    def test_instances_are_independent(self):
        a = Emulator()
        b = Emulator()
        a.load_bytes(words(0x6001))
        a.step()
        assert a.registers["v0"] == 1
        assert b.registers["v0"] == 0


# =============================================================================
# Execution Tests
# =============================================================================

class TestExecution:
    """Test step/tick/run helpers."""

    def test_step_counts(self):
        emu = Emulator()
        emu.load_bytes(words(0x6001, 0x0123))
        emu.step()
        assert emu.step().outcome == StepOutcome.UNKNOWN_OPCODE
        assert emu.total_steps == 2

    def test_run_frame(self):
        emu = Emulator()
        emu.load_bytes(words(0x603C, 0xF015, 0x1204))
        emu.run_frame()
        assert emu.total_steps == 12
        assert emu.registers["dt"] == 59

    def test_run_frames(self):
        emu = Emulator()
        emu.load_bytes(words(0x603C, 0xF015, 0x1204))
        emu.run(frames=10)
        assert emu.total_steps == 120
        assert emu.registers["dt"] == 50

    def test_tick_independent_of_steps(self):
        emu = Emulator()
        emu.load_bytes(words(0x600A, 0xF015, 0x1204))
        for _ in range(500):
            emu.step()
        emu.tick()
        assert emu.registers["dt"] == 9

    def test_run_until(self):
        emu = Emulator()
        emu.load_bytes(words(0x7001, 0x1200))
        assert emu.run_until(lambda e: e.registers["v0"] == 10)
        assert emu.registers["v0"] == 10

    def test_run_until_limit(self):
        emu = Emulator()
        emu.load_bytes(words(0x1200))
        assert not emu.run_until(lambda e: False, max_steps=50)
        assert emu.total_steps == 50

    def test_run_stops_on_fault(self):
        emu = Emulator()
        emu.load_bytes(words(0x00EE))
        event = emu.run(frames=5)
        assert event.halted
        assert emu.halted
        assert emu.fault.kind == FaultKind.STACK_UNDERFLOW
        assert "stack underflow at $200" in str(emu.fault)

    def test_reset_recovers_from_fault(self):
        emu = Emulator()
        emu.load_bytes(words(0x00EE))
        emu.step()
        emu.reset()
        assert not emu.halted
        assert emu.rom_size == 0

    def test_tick_frozen_while_halted(self):
        emu = Emulator()
        emu.load_bytes(words(0x6005, 0xF015, 0xF018, 0x00EE))
        for _ in range(4):
            emu.step()
        assert emu.halted
        emu.tick()
        emu.tick()
        assert (emu.registers["dt"], emu.registers["st"]) == (5, 5)
        assert emu.should_emit_tone

    def test_reset_reseeds_random(self):
        program = words(0xC0FF, 0xC1FF, 0xC2FF)
        emu = Emulator(EmulatorConfig(seed=7))
        emu.load_bytes(program)
        emu.run_until(lambda e: e.pc == 0x206)
        first = [emu.registers[f"v{n}"] for n in range(3)]

        emu.reset()
        emu.load_bytes(program)
        emu.run_until(lambda e: e.pc == 0x206)
        assert [emu.registers[f"v{n}"] for n in range(3)] == first

    def test_seeded_random(self):
        program = words(0xC0FF, 0xC1FF, 0xC2FF)
        a = Emulator(EmulatorConfig(seed=7))
        b = Emulator(EmulatorConfig(seed=7))
        for emu in (a, b):
            emu.load_bytes(program)
            emu.run_until(lambda e: e.pc == 0x206)
        assert a.registers == b.registers

    def test_repr(self):
        assert "pc=$200" in repr(Emulator())


# =============================================================================
# Boundary Tests
# =============================================================================

class TestBoundaries:
    """Test the display, audio and keypad host interfaces."""

    def test_redraw_handshake(self):
        emu = Emulator()
        emu.load_bytes(words(0xA000, 0xD005))
        assert emu.needs_redraw
        emu.acknowledge_redraw()
        assert not emu.needs_redraw
        emu.step()
        emu.step()
        assert emu.needs_redraw
        assert emu.pixel_at(0, 0)

    def test_pixel_at_bounds(self):
        with pytest.raises(ValueError):
            Emulator().pixel_at(64, 32)

    def test_tone(self):
        emu = Emulator()
        emu.load_bytes(words(0x6002, 0xF018))
        emu.step()
        emu.step()
        assert emu.should_emit_tone
        emu.tick()
        emu.tick()
        assert not emu.should_emit_tone

    def test_key_wait_through_emulator(self):
        emu = Emulator()
        emu.load_bytes(words(0xF50A, 0x1202))
        emu.step()
        for _ in range(10):
            assert emu.step().outcome == StepOutcome.WAITING_FOR_KEY
            assert emu.pc == 0x200
        assert emu.awaiting_key
        emu.set_key(0xC, True)
        emu.step()
        assert emu.registers["v5"] == 0xC
        assert emu.pc == 0x202

    def test_press_key_by_label(self):
        emu = Emulator()
        emu.load_bytes(words(0x600E, 0xE09E))
        emu.press_key("E")
        emu.step()
        emu.step()
        assert emu.pc == 0x206
        emu.release_key("E")
        assert not emu.keypad.is_pressed(0xE)

    def test_display_text_and_png(self):
        emu = Emulator()
        emu.load_bytes(words(0xA000, 0xD005))
        emu.step()
        emu.step()
        assert emu.display_text.split("\n")[0].startswith("####.")
        assert emu.render_display(scale=1).startswith(b"\x89PNG")

    def test_read_byte(self):
        emu = Emulator()
        assert emu.read_byte(0) == 0xF0
