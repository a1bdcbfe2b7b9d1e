"""Error taxonomy for the CHIP-8 core.

Components raise these exceptions; the executor catches them inside a cycle
and converts them into a halted state so the host can decide what to do.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    PROGRAM_TOO_LARGE = 'ProgramTooLarge'
    INVALID_OPCODE = 'InvalidOpcode'
    STACK_OVERFLOW = 'StackOverflow'
    STACK_UNDERFLOW = 'StackUnderflow'


class Chip8Error(Exception):
    """Base class for every error raised by the interpreter"""

    kind: Optional[ErrorKind] = None
    address: Optional[int] = None
    opcode: Optional[int] = None


class ProgramTooLargeError(Chip8Error):
    kind = ErrorKind.PROGRAM_TOO_LARGE

    def __init__(self, max_size: int, actual: int, address: Optional[int] = None):
        self.max_size = max_size
        self.actual = actual
        self.address = address
        super().__init__(
            f"CHIP-8 ROM too large for memory. Expected <= {max_size}, got {actual} bytes"
        )


class StackOverflowError(Chip8Error):
    kind = ErrorKind.STACK_OVERFLOW

    def __init__(self, address: int, depth: int):
        self.address = address
        super().__init__(f"Stack overflow: cannot push ${address:03X}, {depth} levels in use")


class StackUnderflowError(Chip8Error):
    kind = ErrorKind.STACK_UNDERFLOW

    def __init__(self):
        super().__init__("Stack underflow: return with an empty call stack")


class InvalidOpcodeError(Chip8Error):
    kind = ErrorKind.INVALID_OPCODE

    def __init__(self, opcode: int, address: Optional[int] = None):
        self.opcode = opcode
        self.address = address
        where = f" at ${address:03X}" if address is not None else ""
        super().__init__(f"Invalid opcode ${opcode:04X}{where}")


class RomLoadError(Chip8Error):
    """A ROM image could not be opened or read"""
