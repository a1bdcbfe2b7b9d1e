"""Cat's CHIP-8: a CHIP-8 virtual machine with a pygame front end."""

from .clock import FrameClock
from .cpu import Chip8, ExecState, Halt
from .decoder import Instruction, Op, decode, disassemble, disassemble_program
from .errors import (
    Chip8Error, ErrorKind, InvalidOpcodeError, ProgramTooLargeError, RomLoadError,
    StackOverflowError, StackUnderflowError,
)
from .quirks import ClipMode, JumpMode, OpcodePolicy, Quirks, ShiftMode

__version__ = "0.1.0"

__all__ = [
    "Chip8", "ExecState", "Halt", "FrameClock",
    "Instruction", "Op", "decode", "disassemble", "disassemble_program",
    "Chip8Error", "ErrorKind", "InvalidOpcodeError", "ProgramTooLargeError",
    "RomLoadError", "StackOverflowError", "StackUnderflowError",
    "Quirks", "ShiftMode", "JumpMode", "ClipMode", "OpcodePolicy",
]
