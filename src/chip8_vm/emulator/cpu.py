"""
CHIP-8 Execution Engine
=======================

Fetches, decodes and executes one instruction per step() call.

Registers:
- V0-VF: 16 general-purpose 8-bit registers; VF doubles as the flag output
  for carry, borrow, shift-out and sprite collision
- I: 16-bit index register
- PC: 16-bit program counter, starts at $200
- Call stack of up to 16 return addresses

Dispatch is table driven. Each entry is keyed by (family, sub-key), where
the sub-key discriminates instructions inside a family:

    family $0        -> NNN   ($0E0 CLS, $0EE RET)
    family $5, $9    -> N     (only N=0 is defined)
    family $8        -> N     (ALU operation)
    family $E, $F    -> NN
    all other        -> None

Fetch advances PC by 2 before the handler runs, so every handler sees the
address of the following instruction in PC. Handlers that transfer control
simply overwrite PC. Handlers check every fault condition before mutating
anything; if a MachineFault is raised the CPU rewinds PC to the faulting
instruction, records the Fault and halts.

Copyright (c) 2025 chip8-vm contributors
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from chip8_vm.errors import Fault, MachineFault, StackOverflowError, StackUnderflowError
from .decoder import Instruction, decode
from .display import Display
from .events import StepEvent, StepOutcome
from .keyboard import Keypad
from .memory import FONT_ADDRESS, GLYPH_SIZE, PROGRAM_START, Memory
from .quirks import QUIRKS_DEFAULT, Quirks
from .timers import Timers


logger = logging.getLogger(__name__)

STACK_SIZE = 16
REGISTER_COUNT = 16
VF = 0xF


@dataclass
class CPUState:
    """
    Complete register state.

    Attributes:
        v: V0-VF
        i: Index register (16-bit)
        pc: Program counter (16-bit)
        stack: Return addresses, innermost last
        awaiting_key: FX0A is waiting for a key press
        key_register: Destination register of the pending key wait
        fault: Halting fault, or None while running
    """
    v: bytearray = field(default_factory=lambda: bytearray(REGISTER_COUNT))
    i: int = 0
    pc: int = PROGRAM_START
    stack: List[int] = field(default_factory=list)
    awaiting_key: bool = False
    key_register: int = 0
    fault: Optional[Fault] = None


class Chip8CPU:
    """
    CHIP-8 interpreter core.

    The CPU does not own its peripherals; the Emulator creates them and
    passes them in, which keeps the CPU easy to drive from tests.

    Example:
        >>> cpu = Chip8CPU(Memory(), Display(), Keypad(), Timers())
        >>> cpu.memory.load_program(bytes([0x60, 0x0A, 0x70, 0x0B]))
        >>> cpu.step().outcome
        <StepOutcome.EXECUTED: 1>
        >>> cpu.step().outcome
        <StepOutcome.EXECUTED: 1>
        >>> hex(cpu.v[0])
        '0x15'
    """

    def __init__(
        self,
        memory: Memory,
        display: Display,
        keypad: Keypad,
        timers: Timers,
        quirks: Quirks = QUIRKS_DEFAULT,
        rng: Optional[random.Random] = None,
    ):
        self.memory = memory
        self.display = display
        self.keypad = keypad
        self.timers = timers
        self.quirks = quirks
        self.rng = rng or random.Random()
        self.state = CPUState()
        self._dispatch = self._build_dispatch_table()

    def _build_dispatch_table(self) -> Dict[Tuple[int, Optional[int]], Callable[[Instruction], None]]:
        return {
            (0x0, 0x0E0): self._op_cls,
            (0x0, 0x0EE): self._op_ret,
            (0x1, None): self._op_jp,
            (0x2, None): self._op_call,
            (0x3, None): self._op_se_imm,
            (0x4, None): self._op_sne_imm,
            (0x5, 0x0): self._op_se_reg,
            (0x6, None): self._op_ld_imm,
            (0x7, None): self._op_add_imm,
            (0x8, 0x0): self._op_ld_reg,
            (0x8, 0x1): self._op_or,
            (0x8, 0x2): self._op_and,
            (0x8, 0x3): self._op_xor,
            (0x8, 0x4): self._op_add_reg,
            (0x8, 0x5): self._op_sub,
            (0x8, 0x6): self._op_shr,
            (0x8, 0x7): self._op_subn,
            (0x8, 0xE): self._op_shl,
            (0x9, 0x0): self._op_sne_reg,
            (0xA, None): self._op_ld_i,
            (0xB, None): self._op_jp_offset,
            (0xC, None): self._op_rnd,
            (0xD, None): self._op_drw,
            (0xE, 0x9E): self._op_skp,
            (0xE, 0xA1): self._op_sknp,
            (0xF, 0x07): self._op_ld_vx_dt,
            (0xF, 0x0A): self._op_ld_vx_key,
            (0xF, 0x15): self._op_ld_dt_vx,
            (0xF, 0x18): self._op_ld_st_vx,
            (0xF, 0x1E): self._op_add_i,
            (0xF, 0x29): self._op_ld_font,
            (0xF, 0x33): self._op_bcd,
            (0xF, 0x55): self._op_store_regs,
            (0xF, 0x65): self._op_load_regs,
        }

    @staticmethod
    def _sub_key(ins: Instruction) -> Optional[int]:
        """Secondary dispatch key for an instruction's family."""
        if ins.family == 0x0:
            return ins.nnn
        if ins.family in (0x5, 0x8, 0x9):
            return ins.n
        if ins.family in (0xE, 0xF):
            return ins.nn
        return None

    # ========================================
    # Register Properties
    # ========================================

    @property
    def v(self) -> bytearray:
        """V0-VF (live view)."""
        return self.state.v

    @property
    def i(self) -> int:
        """Index register (16-bit)."""
        return self.state.i

    @i.setter
    def i(self, value: int) -> None:
        self.state.i = value & 0xFFFF

    @property
    def pc(self) -> int:
        """Program counter (16-bit)."""
        return self.state.pc

    @pc.setter
    def pc(self, value: int) -> None:
        self.state.pc = value & 0xFFFF

    @property
    def sp(self) -> int:
        """Stack pointer: number of return addresses held (0-16)."""
        return len(self.state.stack)

    @property
    def stack(self) -> Tuple[int, ...]:
        """Copy of the call stack, innermost last."""
        return tuple(self.state.stack)

    @property
    def awaiting_key(self) -> bool:
        return self.state.awaiting_key

    @property
    def halted(self) -> bool:
        return self.state.fault is not None

    @property
    def fault(self) -> Optional[Fault]:
        return self.state.fault

    def get_register(self, index: int) -> int:
        """Read Vn."""
        return self.state.v[index & 0xF]

    def set_register(self, index: int, value: int) -> None:
        """Write Vn (value masked to 8 bits)."""
        self.state.v[index & 0xF] = value & 0xFF

    # ========================================
    # Reset and Execution
    # ========================================

    def reset(self) -> None:
        """Clear registers, stack, key wait and fault; PC = $200."""
        self.state = CPUState()

    def step(self) -> StepEvent:
        """
        Execute exactly one instruction.

        Returns:
            StepEvent describing the outcome. Faults are reported here,
            never raised.
        """
        pc = self.state.pc

        if self.state.fault is not None:
            return StepEvent(StepOutcome.HALTED, pc, self.state.fault.opcode, self.state.fault)

        if self.state.awaiting_key:
            return self._poll_key_wait(pc)

        try:
            word = self.memory.read_word(pc)
        except MachineFault as e:
            return self._halt(e, pc, None)

        ins = decode(word)
        handler = self._dispatch.get((ins.family, self._sub_key(ins)))
        self.pc = pc + 2

        if handler is None:
            logger.warning(f"Unknown opcode ${word:04X} at ${pc:03X}")
            return StepEvent(StepOutcome.UNKNOWN_OPCODE, pc, word)

        try:
            handler(ins)
        except MachineFault as e:
            self.state.pc = pc
            return self._halt(e, pc, word)

        if self.state.awaiting_key:
            return StepEvent(StepOutcome.WAITING_FOR_KEY, pc, word)
        return StepEvent(StepOutcome.EXECUTED, pc, word)

    def _halt(self, error: MachineFault, pc: int, opcode: Optional[int]) -> StepEvent:
        fault = Fault(
            kind=error.kind,
            pc=pc,
            opcode=opcode,
            address=error.address,
            message=error.message,
        )
        self.state.fault = fault
        logger.error(f"Machine halted: {fault}")
        return StepEvent(StepOutcome.HALTED, pc, opcode, fault)

    def _poll_key_wait(self, pc: int) -> StepEvent:
        """One step while FX0A is pending: capture a new press or do nothing."""
        key = self.keypad.take_latched()
        if key is None:
            return StepEvent(StepOutcome.WAITING_FOR_KEY, pc)

        self.set_register(self.state.key_register, key)
        self.state.awaiting_key = False
        self.pc = pc + 2
        logger.debug(f"Key wait at ${pc:03X} satisfied by key ${key:X}")
        return StepEvent(StepOutcome.EXECUTED, pc, self.memory.read_word(pc))

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.pc = self.state.pc + 2

    # ========================================
    # Flow Control ($0, $1, $2, $B)
    # ========================================

    def _op_cls(self, ins: Instruction) -> None:
        """00E0: clear the display."""
        self.display.clear()

    def _op_ret(self, ins: Instruction) -> None:
        """00EE: return from subroutine."""
        if not self.state.stack:
            raise StackUnderflowError("return with empty call stack")
        self.pc = self.state.stack.pop()
        logger.debug(f"RET to ${self.pc:03X} (depth {self.sp})")

    def _op_jp(self, ins: Instruction) -> None:
        """1NNN: jump."""
        self.pc = ins.nnn

    def _op_call(self, ins: Instruction) -> None:
        """2NNN: call subroutine; the return address is the next instruction."""
        if len(self.state.stack) >= STACK_SIZE:
            raise StackOverflowError(f"call depth exceeds {STACK_SIZE}")
        self.state.stack.append(self.state.pc)
        self.pc = ins.nnn
        logger.debug(f"CALL ${ins.nnn:03X} (depth {self.sp})")

    def _op_jp_offset(self, ins: Instruction) -> None:
        """BNNN: jump to NNN + V0 (or NNN + VX with jump_uses_vx)."""
        offset = self.state.v[ins.x] if self.quirks.jump_uses_vx else self.state.v[0]
        self.pc = ins.nnn + offset

    # ========================================
    # Conditional Skips ($3, $4, $5, $9)
    # ========================================

    def _op_se_imm(self, ins: Instruction) -> None:
        """3XNN: skip if VX == NN."""
        self._skip_if(self.state.v[ins.x] == ins.nn)

    def _op_sne_imm(self, ins: Instruction) -> None:
        """4XNN: skip if VX != NN."""
        self._skip_if(self.state.v[ins.x] != ins.nn)

    def _op_se_reg(self, ins: Instruction) -> None:
        """5XY0: skip if VX == VY."""
        self._skip_if(self.state.v[ins.x] == self.state.v[ins.y])

    def _op_sne_reg(self, ins: Instruction) -> None:
        """9XY0: skip if VX != VY."""
        self._skip_if(self.state.v[ins.x] != self.state.v[ins.y])

    # ========================================
    # Immediate Loads ($6, $7, $A, $C)
    # ========================================

    def _op_ld_imm(self, ins: Instruction) -> None:
        """6XNN: VX = NN."""
        self.state.v[ins.x] = ins.nn

    def _op_add_imm(self, ins: Instruction) -> None:
        """7XNN: VX += NN, no carry flag."""
        self.state.v[ins.x] = (self.state.v[ins.x] + ins.nn) & 0xFF

    def _op_ld_i(self, ins: Instruction) -> None:
        """ANNN: I = NNN."""
        self.i = ins.nnn

    def _op_rnd(self, ins: Instruction) -> None:
        """CXNN: VX = random byte AND NN."""
        self.state.v[ins.x] = self.rng.randrange(256) & ins.nn

    # ========================================
    # ALU ($8XYN)
    # ========================================
    # Operands are read before any write. The result goes to VX first and
    # VF last, so with X = F the flag wins.

    def _op_ld_reg(self, ins: Instruction) -> None:
        """8XY0: VX = VY."""
        self.state.v[ins.x] = self.state.v[ins.y]

    def _op_or(self, ins: Instruction) -> None:
        """8XY1: VX |= VY."""
        self.state.v[ins.x] |= self.state.v[ins.y]
        if self.quirks.logic_resets_vf:
            self.state.v[VF] = 0

    def _op_and(self, ins: Instruction) -> None:
        """8XY2: VX &= VY."""
        self.state.v[ins.x] &= self.state.v[ins.y]
        if self.quirks.logic_resets_vf:
            self.state.v[VF] = 0

    def _op_xor(self, ins: Instruction) -> None:
        """8XY3: VX ^= VY."""
        self.state.v[ins.x] ^= self.state.v[ins.y]
        if self.quirks.logic_resets_vf:
            self.state.v[VF] = 0

    def _op_add_reg(self, ins: Instruction) -> None:
        """8XY4: VX += VY, VF = carry."""
        total = self.state.v[ins.x] + self.state.v[ins.y]
        self.state.v[ins.x] = total & 0xFF
        self.state.v[VF] = 1 if total > 0xFF else 0

    def _op_sub(self, ins: Instruction) -> None:
        """8XY5: VX -= VY, VF = NOT borrow."""
        vx, vy = self.state.v[ins.x], self.state.v[ins.y]
        self.state.v[ins.x] = (vx - vy) & 0xFF
        self.state.v[VF] = 1 if vx >= vy else 0

    def _op_subn(self, ins: Instruction) -> None:
        """8XY7: VX = VY - VX, VF = NOT borrow."""
        vx, vy = self.state.v[ins.x], self.state.v[ins.y]
        self.state.v[ins.x] = (vy - vx) & 0xFF
        self.state.v[VF] = 1 if vy >= vx else 0

    def _shift_source(self, ins: Instruction) -> int:
        return self.state.v[ins.y] if self.quirks.shift_uses_vy else self.state.v[ins.x]

    def _op_shr(self, ins: Instruction) -> None:
        """8XY6: VX = source >> 1, VF = bit shifted out."""
        source = self._shift_source(ins)
        self.state.v[ins.x] = source >> 1
        self.state.v[VF] = source & 0x01

    def _op_shl(self, ins: Instruction) -> None:
        """8XYE: VX = source << 1, VF = bit shifted out."""
        source = self._shift_source(ins)
        self.state.v[ins.x] = (source << 1) & 0xFF
        self.state.v[VF] = (source >> 7) & 0x01

    # ========================================
    # Graphics ($D)
    # ========================================

    def _op_drw(self, ins: Instruction) -> None:
        """DXYN: XOR an N-row sprite from memory[I] at (VX, VY), VF = collision."""
        sprite = self.memory.read_block(self.state.i, ins.n)
        collision = self.display.draw_sprite(
            self.state.v[ins.x],
            self.state.v[ins.y],
            sprite,
            wrap=self.quirks.draw_wrap,
        )
        self.state.v[VF] = 1 if collision else 0

    # ========================================
    # Keypad ($E, FX0A)
    # ========================================

    def _op_skp(self, ins: Instruction) -> None:
        """EX9E: skip if key VX is pressed."""
        self._skip_if(self.keypad.is_pressed(self.state.v[ins.x]))

    def _op_sknp(self, ins: Instruction) -> None:
        """EXA1: skip if key VX is not pressed."""
        self._skip_if(not self.keypad.is_pressed(self.state.v[ins.x]))

    def _op_ld_vx_key(self, ins: Instruction) -> None:
        """FX0A: wait for a new key press and store it in VX."""
        self.keypad.clear_latch()
        self.state.awaiting_key = True
        self.state.key_register = ins.x
        self.pc = self.state.pc - 2
        logger.debug(f"Waiting for key into V{ins.x:X} at ${self.pc:03X}")

    # ========================================
    # Timers and Index ($F)
    # ========================================

    def _op_ld_vx_dt(self, ins: Instruction) -> None:
        """FX07: VX = delay timer."""
        self.state.v[ins.x] = self.timers.delay

    def _op_ld_dt_vx(self, ins: Instruction) -> None:
        """FX15: delay timer = VX."""
        self.timers.delay = self.state.v[ins.x]

    def _op_ld_st_vx(self, ins: Instruction) -> None:
        """FX18: sound timer = VX."""
        self.timers.sound = self.state.v[ins.x]

    def _op_add_i(self, ins: Instruction) -> None:
        """FX1E: I += VX (16-bit wrap, no flag)."""
        self.i = self.state.i + self.state.v[ins.x]

    def _op_ld_font(self, ins: Instruction) -> None:
        """FX29: I = address of the glyph for the low nibble of VX."""
        self.i = FONT_ADDRESS + (self.state.v[ins.x] & 0xF) * GLYPH_SIZE

    def _op_bcd(self, ins: Instruction) -> None:
        """FX33: store the decimal digits of VX at I, I+1, I+2."""
        value = self.state.v[ins.x]
        self.memory.write_block(self.state.i, (value // 100, (value // 10) % 10, value % 10))

    def _op_store_regs(self, ins: Instruction) -> None:
        """FX55: memory[I..I+X] = V0..VX."""
        self.memory.write_block(self.state.i, self.state.v[:ins.x + 1])
        if self.quirks.memory_increments_i:
            self.i = self.state.i + ins.x + 1

    def _op_load_regs(self, ins: Instruction) -> None:
        """FX65: V0..VX = memory[I..I+X]."""
        data = self.memory.read_block(self.state.i, ins.x + 1)
        self.state.v[:ins.x + 1] = data
        if self.quirks.memory_increments_i:
            self.i = self.state.i + ins.x + 1

    def __repr__(self) -> str:
        regs = " ".join(f"V{n:X}={value:02X}" for n, value in enumerate(self.state.v))
        status = " HALTED" if self.halted else ""
        return f"Chip8CPU(PC=${self.pc:03X} I=${self.i:03X} SP={self.sp} {regs}{status})"
