"""
CHIP-8 CPU core

One Chip8 instance owns all machine state (memory, registers, timers, keypad
and framebuffer) and runs it as a small state machine:

    RUNNING       fetch, decode and execute one instruction per step()
    AWAITING_KEY  FX0A is pending; each step() polls the keypad
    HALTED        a fault or the host stopped the machine; step() is a no-op

Timers are not advanced by step(). The host calls tick_timers() at the timer
rate, independently of the instruction rate.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

import numpy as np

from .constants import ADDRESS_MASK, FONT_ADDRESS, FONT_GLYPH_SIZE, PROGRAM_START
from .decoder import Instruction, Op, decode, disassemble
from .display import Framebuffer
from .errors import Chip8Error, ErrorKind, InvalidOpcodeError
from .keypad import Keypad
from .memory import Memory
from .quirks import ClipMode, JumpMode, OpcodePolicy, Quirks, ShiftMode
from .registers import RegisterFile
from .timers import Timers

logger = logging.getLogger(__name__)


class ExecState(Enum):
    RUNNING = 'running'
    AWAITING_KEY = 'awaiting_key'
    HALTED = 'halted'


@dataclass(frozen=True)
class Halt:
    """Why the machine stopped. kind is None when the host requested the stop."""
    kind: Optional[ErrorKind]
    address: Optional[int] = None
    opcode: Optional[int] = None
    message: str = ""

    @property
    def is_error(self) -> bool:
        return self.kind is not None


class Chip8:
    """Complete CHIP-8 virtual machine"""

    def __init__(self, quirks: Optional[Quirks] = None, load_address: int = PROGRAM_START,
                 rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.quirks = quirks or Quirks()
        self.load_address = load_address
        self.rng = rng or random.Random(seed)

        self.memory = Memory()
        self.registers = RegisterFile(PC=load_address)
        self.timers = Timers()
        self.keypad = Keypad()
        self.display = Framebuffer()

        self.state = ExecState.RUNNING
        self.halt: Optional[Halt] = None
        self.awaiting_register: Optional[int] = None
        self.cycles = 0

        self._dispatch: Dict[Op, Callable[[Instruction], None]] = {
            Op.CLS: self._op_cls,
            Op.RET: self._op_ret,
            Op.SYS: self._op_sys,
            Op.JP: self._op_jp,
            Op.CALL: self._op_call,
            Op.SE_BYTE: self._op_se_byte,
            Op.SNE_BYTE: self._op_sne_byte,
            Op.SE_REG: self._op_se_reg,
            Op.LD_BYTE: self._op_ld_byte,
            Op.ADD_BYTE: self._op_add_byte,
            Op.LD_REG: self._op_ld_reg,
            Op.OR: self._op_or,
            Op.AND: self._op_and,
            Op.XOR: self._op_xor,
            Op.ADD_REG: self._op_add_reg,
            Op.SUB: self._op_sub,
            Op.SHR: self._op_shr,
            Op.SUBN: self._op_subn,
            Op.SHL: self._op_shl,
            Op.SNE_REG: self._op_sne_reg,
            Op.LD_I: self._op_ld_i,
            Op.JP_OFFSET: self._op_jp_offset,
            Op.RND: self._op_rnd,
            Op.DRW: self._op_drw,
            Op.SKP: self._op_skp,
            Op.SKNP: self._op_sknp,
            Op.LD_VX_DT: self._op_ld_vx_dt,
            Op.LD_KEY: self._op_ld_key,
            Op.LD_DT: self._op_ld_dt,
            Op.LD_ST: self._op_ld_st,
            Op.ADD_I: self._op_add_i,
            Op.LD_FONT: self._op_ld_font,
            Op.LD_BCD: self._op_ld_bcd,
            Op.STORE: self._op_store,
            Op.LOAD: self._op_load,
            Op.UNKNOWN: self._op_unknown,
        }
        missing = set(Op) - set(self._dispatch)
        if missing:
            raise RuntimeError(f"no handler for {missing}")

    # ═══════════════════════════════════════════════════════════════════════════
    # HOST INTERFACE
    # ═══════════════════════════════════════════════════════════════════════════

    def reset(self):
        """Reset CPU to initial state; the program has to be loaded again"""
        self.memory.reset()
        self.registers.reset(self.load_address)
        self.timers.reset()
        self.keypad.clear()
        self.display.reset()
        self.state = ExecState.RUNNING
        self.halt = None
        self.awaiting_register = None
        self.cycles = 0
        logger.info("Machine reset, PC=$%03X", self.load_address)

    def load_program(self, data: bytes, base: Optional[int] = None) -> int:
        """Load ROM data into memory and point PC at it"""
        if base is None:
            base = self.load_address
        base &= ADDRESS_MASK
        size = self.memory.load_program(data, base)
        self.registers.set_pc(base)
        return size

    def step(self) -> ExecState:
        """Execute one CPU cycle"""
        self.display.changed = False

        if self.state is ExecState.HALTED:
            return self.state

        if self.state is ExecState.AWAITING_KEY:
            self._poll_key()
            return self.state

        address = self.registers.PC
        opcode = self.memory.read_word(address)
        instruction = decode(opcode)
        self.registers.set_pc(address + 2)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("$%03X  %04X  %s", address, opcode, instruction)

        try:
            self._dispatch[instruction.op](instruction)
        except Chip8Error as exc:
            self._fault(exc, address, opcode)

        self.cycles += 1
        return self.state

    def run(self, max_cycles: int) -> int:
        """Step up to max_cycles times, stopping as soon as the machine is not running"""
        executed = 0
        while executed < max_cycles:
            state = self.step()
            executed += 1
            if state is not ExecState.RUNNING:
                break
        return executed

    def tick_timers(self):
        """Decrement timers (call at 60Hz)"""
        self.timers.tick()

    def stop(self, message: str = "Stopped by host"):
        self.state = ExecState.HALTED
        self.halt = Halt(kind=None, address=self.registers.PC, message=message)
        logger.info(message)

    def key_down(self, key: int):
        """Handle key press"""
        self.keypad.press(key)

    def key_up(self, key: int):
        """Handle key release"""
        self.keypad.release(key)

    def set_key(self, key: int, pressed: bool):
        self.keypad.set_key(key, pressed)

    @property
    def sound_active(self) -> bool:
        return self.timers.sound_active

    @property
    def draw_flag(self) -> bool:
        """True if CLS or DRW ran during the last step()"""
        return self.display.changed

    @property
    def framebuffer(self) -> np.ndarray:
        return self.display.snapshot()

    def dump_state(self) -> List[str]:
        """Register summary plus the next instruction, for debug overlays and logs"""
        r = self.registers
        lines = [
            f"PC: ${r.PC:03X}  I: ${r.I:03X}",
            f"SP: {r.SP}  DT: {self.timers.delay:02X}  ST: {self.timers.sound:02X}",
            "V0-V7: " + " ".join(f"{v:02X}" for v in r.V[:8]),
            "V8-VF: " + " ".join(f"{v:02X}" for v in r.V[8:]),
        ]
        opcode = self.memory.read_word(r.PC)
        lines.append(f"OP: ${opcode:04X} {disassemble(opcode)}")
        if self.state is not ExecState.RUNNING:
            lines.append(f"STATE: {self.state.value}")
        return lines

    # ═══════════════════════════════════════════════════════════════════════════
    # INTERNALS
    # ═══════════════════════════════════════════════════════════════════════════

    def _fault(self, exc: Chip8Error, address: int, opcode: int):
        self.state = ExecState.HALTED
        self.halt = Halt(kind=exc.kind, address=address, opcode=opcode, message=str(exc))
        logger.error("Halted at $%03X (opcode $%04X): %s", address, opcode, exc)

    def _poll_key(self):
        key = self.keypad.first_pressed()
        if key is None:
            return
        register = self.awaiting_register
        self.registers.set_v(register, key)
        self.state = ExecState.RUNNING
        self.awaiting_register = None
        logger.debug("Storing the key %X in V%X and resuming execution.", key, register)

    def _skip(self):
        self.registers.set_pc(self.registers.PC + 2)

    # ─── 0NNN ───

    def _op_cls(self, ins: Instruction):
        self.display.clear()

    def _op_ret(self, ins: Instruction):
        self.registers.set_pc(self.registers.pop())

    def _op_sys(self, ins: Instruction):
        # Machine code routines of the host CPU are not emulated
        logger.debug("SYSTEM JMP to $%03X ignored", ins.nnn)

    # ─── 1NNN-7XNN: flow control and immediates ───

    def _op_jp(self, ins: Instruction):
        self.registers.set_pc(ins.nnn)

    def _op_call(self, ins: Instruction):
        # PC already points past the CALL
        self.registers.push(self.registers.PC)
        self.registers.set_pc(ins.nnn)

    def _op_se_byte(self, ins: Instruction):
        if self.registers.get_v(ins.x) == ins.nn:
            self._skip()

    def _op_sne_byte(self, ins: Instruction):
        if self.registers.get_v(ins.x) != ins.nn:
            self._skip()

    def _op_se_reg(self, ins: Instruction):
        if self.registers.get_v(ins.x) == self.registers.get_v(ins.y):
            self._skip()

    def _op_ld_byte(self, ins: Instruction):
        self.registers.set_v(ins.x, ins.nn)

    def _op_add_byte(self, ins: Instruction):
        # No carry flag for the immediate form
        self.registers.set_v(ins.x, self.registers.get_v(ins.x) + ins.nn)

    # ─── 8XYZ: ALU operations ───
    # Operands are read before any write; VF is always written last.

    def _op_ld_reg(self, ins: Instruction):
        self.registers.set_v(ins.x, self.registers.get_v(ins.y))

    def _logic(self, ins: Instruction, result: int):
        self.registers.set_v(ins.x, result)
        if self.quirks.logic_quirk_reset_vf:
            self.registers.set_flag(0)

    def _op_or(self, ins: Instruction):
        self._logic(ins, self.registers.get_v(ins.x) | self.registers.get_v(ins.y))

    def _op_and(self, ins: Instruction):
        self._logic(ins, self.registers.get_v(ins.x) & self.registers.get_v(ins.y))

    def _op_xor(self, ins: Instruction):
        self._logic(ins, self.registers.get_v(ins.x) ^ self.registers.get_v(ins.y))

    def _op_add_reg(self, ins: Instruction):
        result = self.registers.get_v(ins.x) + self.registers.get_v(ins.y)
        self.registers.set_v(ins.x, result)
        self.registers.set_flag(1 if result > 0xFF else 0)

    def _op_sub(self, ins: Instruction):
        # VF = NOT borrow
        vx, vy = self.registers.get_v(ins.x), self.registers.get_v(ins.y)
        self.registers.set_v(ins.x, vx - vy)
        self.registers.set_flag(1 if vx >= vy else 0)

    def _op_subn(self, ins: Instruction):
        vx, vy = self.registers.get_v(ins.x), self.registers.get_v(ins.y)
        self.registers.set_v(ins.x, vy - vx)
        self.registers.set_flag(1 if vy >= vx else 0)

    def _shift_source(self, ins: Instruction) -> int:
        if self.quirks.shift_mode is ShiftMode.LEGACY:
            return self.registers.get_v(ins.y)
        return self.registers.get_v(ins.x)

    def _op_shr(self, ins: Instruction):
        src = self._shift_source(ins)
        self.registers.set_v(ins.x, src >> 1)
        self.registers.set_flag(src & 0x1)

    def _op_shl(self, ins: Instruction):
        src = self._shift_source(ins)
        self.registers.set_v(ins.x, src << 1)
        self.registers.set_flag((src >> 7) & 0x1)

    # ─── 9XY0-CXNN ───

    def _op_sne_reg(self, ins: Instruction):
        if self.registers.get_v(ins.x) != self.registers.get_v(ins.y):
            self._skip()

    def _op_ld_i(self, ins: Instruction):
        self.registers.set_i(ins.nnn)

    def _op_jp_offset(self, ins: Instruction):
        if self.quirks.jump_offset_mode is JumpMode.MODERN:
            # BXNN jumps to XNN + VX
            offset = self.registers.get_v(ins.x)
        else:
            offset = self.registers.get_v(0)
        self.registers.set_pc((ins.nnn + offset) & 0xFFF)

    def _op_rnd(self, ins: Instruction):
        self.registers.set_v(ins.x, self.rng.randint(0, 255) & ins.nn)

    # ─── DXYN: DRW Vx, Vy, nibble ───

    def _op_drw(self, ins: Instruction):
        rows = self.memory.read_block(self.registers.I, ins.n)
        collision = self.display.draw_sprite(
            self.registers.get_v(ins.x),
            self.registers.get_v(ins.y),
            rows,
            wrap=self.quirks.draw_clip_mode is ClipMode.WRAP,
        )
        self.registers.set_flag(1 if collision else 0)

    # ─── EX9E/EXA1: Key operations ───

    def _op_skp(self, ins: Instruction):
        if self.keypad.is_pressed(self.registers.get_v(ins.x)):
            self._skip()

    def _op_sknp(self, ins: Instruction):
        if not self.keypad.is_pressed(self.registers.get_v(ins.x)):
            self._skip()

    # ─── FX07-FX65: Misc operations ───

    def _op_ld_vx_dt(self, ins: Instruction):
        self.registers.set_v(ins.x, self.timers.delay)

    def _op_ld_key(self, ins: Instruction):
        self.state = ExecState.AWAITING_KEY
        self.awaiting_register = ins.x
        logger.debug("Waiting for a key press to store in V%X.", ins.x)

    def _op_ld_dt(self, ins: Instruction):
        self.timers.set_delay(self.registers.get_v(ins.x))

    def _op_ld_st(self, ins: Instruction):
        self.timers.set_sound(self.registers.get_v(ins.x))

    def _op_add_i(self, ins: Instruction):
        self.registers.set_i(self.registers.I + self.registers.get_v(ins.x))

    def _op_ld_font(self, ins: Instruction):
        digit = self.registers.get_v(ins.x) & 0xF
        self.registers.set_i(FONT_ADDRESS + digit * FONT_GLYPH_SIZE)

    def _op_ld_bcd(self, ins: Instruction):
        value = self.registers.get_v(ins.x)
        i = self.registers.I
        self.memory.write_byte(i, value // 100)
        self.memory.write_byte(i + 1, (value // 10) % 10)
        self.memory.write_byte(i + 2, value % 10)

    def _op_store(self, ins: Instruction):
        i = self.registers.I
        for r in range(ins.x + 1):
            self.memory.write_byte(i + r, self.registers.get_v(r))
        if self.quirks.save_load_increments_i:
            self.registers.set_i(i + ins.x + 1)

    def _op_load(self, ins: Instruction):
        i = self.registers.I
        for r in range(ins.x + 1):
            self.registers.set_v(r, self.memory.read_byte(i + r))
        if self.quirks.save_load_increments_i:
            self.registers.set_i(i + ins.x + 1)

    def _op_unknown(self, ins: Instruction):
        if self.quirks.unknown_opcode_policy is OpcodePolicy.STRICT:
            raise InvalidOpcodeError(ins.opcode, (self.registers.PC - 2) & 0xFFF)
        logger.warning("Skipping unknown opcode $%04X", ins.opcode)
