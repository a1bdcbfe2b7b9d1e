"""Register file: V0-VF, I, PC and the 16-level call stack."""

from dataclasses import dataclass, field
from typing import List

from .constants import FLAG_REGISTER, NUM_REGISTERS, PROGRAM_START, STACK_SIZE
from .errors import StackOverflowError, StackUnderflowError


@dataclass
class RegisterFile:
    """CHIP-8 register state container"""
    V: bytearray = field(default_factory=lambda: bytearray(NUM_REGISTERS))  # V0-VF
    I: int = 0              # Index register (16-bit)
    PC: int = PROGRAM_START # Program counter
    stack: List[int] = field(default_factory=list)

    @property
    def SP(self) -> int:
        """Stack pointer, 0 (empty) to 16 (full)"""
        return len(self.stack)

    def get_v(self, x: int) -> int:
        return self.V[x & 0xF]

    def set_v(self, x: int, value: int):
        self.V[x & 0xF] = value & 0xFF

    def set_flag(self, value: int):
        """Write VF; always the last register write of an instruction"""
        self.V[FLAG_REGISTER] = value & 0xFF

    def set_i(self, value: int):
        self.I = value & 0xFFFF

    def set_pc(self, value: int):
        self.PC = value & 0xFFFF

    def push(self, addr: int):
        if len(self.stack) >= STACK_SIZE:
            raise StackOverflowError(addr, len(self.stack))
        self.stack.append(addr & 0xFFFF)

    def pop(self) -> int:
        if not self.stack:
            raise StackUnderflowError()
        return self.stack.pop()

    def reset(self, pc: int = PROGRAM_START):
        """Clear every register and set PC to the program entry point"""
        self.V[:] = bytes(NUM_REGISTERS)
        self.I = 0
        self.PC = pc
        self.stack.clear()
