"""
Opcode decoder and disassembler

Every 16-bit opcode maps to exactly one Instruction. Decoding is table-driven
on the high nibble; the 0, 5, 8, 9, E and F classes are disambiguated by the
low nibble or low byte. Anything that matches no pattern decodes to
Op.UNKNOWN, which still carries the raw opcode.

Operand fields are extracted the same way for every opcode:

    nnn  12-bit address         (opcode & 0x0FFF)
    nn   8-bit constant         (opcode & 0x00FF)
    n    4-bit constant         (opcode & 0x000F)
    x    4-bit register index   (opcode >> 8 & 0xF)
    y    4-bit register index   (opcode >> 4 & 0xF)
"""

from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache
from typing import List

from .constants import PROGRAM_START


class Op(Enum):
    CLS = auto()        # 00E0
    RET = auto()        # 00EE
    SYS = auto()        # 0NNN
    JP = auto()         # 1NNN
    CALL = auto()       # 2NNN
    SE_BYTE = auto()    # 3XNN
    SNE_BYTE = auto()   # 4XNN
    SE_REG = auto()     # 5XY0
    LD_BYTE = auto()    # 6XNN
    ADD_BYTE = auto()   # 7XNN
    LD_REG = auto()     # 8XY0
    OR = auto()         # 8XY1
    AND = auto()        # 8XY2
    XOR = auto()        # 8XY3
    ADD_REG = auto()    # 8XY4
    SUB = auto()        # 8XY5
    SHR = auto()        # 8XY6
    SUBN = auto()       # 8XY7
    SHL = auto()        # 8XYE
    SNE_REG = auto()    # 9XY0
    LD_I = auto()       # ANNN
    JP_OFFSET = auto()  # BNNN
    RND = auto()        # CXNN
    DRW = auto()        # DXYN
    SKP = auto()        # EX9E
    SKNP = auto()       # EXA1
    LD_VX_DT = auto()   # FX07
    LD_KEY = auto()     # FX0A
    LD_DT = auto()      # FX15
    LD_ST = auto()      # FX18
    ADD_I = auto()      # FX1E
    LD_FONT = auto()    # FX29
    LD_BCD = auto()     # FX33
    STORE = auto()      # FX55
    LOAD = auto()       # FX65
    UNKNOWN = auto()


MNEMONICS = {
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.SYS: "SYS ${nnn:03X}",
    Op.JP: "JP ${nnn:03X}",
    Op.CALL: "CALL ${nnn:03X}",
    Op.SE_BYTE: "SE V{x:X}, ${nn:02X}",
    Op.SNE_BYTE: "SNE V{x:X}, ${nn:02X}",
    Op.SE_REG: "SE V{x:X}, V{y:X}",
    Op.LD_BYTE: "LD V{x:X}, ${nn:02X}",
    Op.ADD_BYTE: "ADD V{x:X}, ${nn:02X}",
    Op.LD_REG: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD_REG: "ADD V{x:X}, V{y:X}",
    Op.SUB: "SUB V{x:X}, V{y:X}",
    Op.SHR: "SHR V{x:X}, V{y:X}",
    Op.SUBN: "SUBN V{x:X}, V{y:X}",
    Op.SHL: "SHL V{x:X}, V{y:X}",
    Op.SNE_REG: "SNE V{x:X}, V{y:X}",
    Op.LD_I: "LD I, ${nnn:03X}",
    Op.JP_OFFSET: "JP V0, ${nnn:03X}",
    Op.RND: "RND V{x:X}, ${nn:02X}",
    Op.DRW: "DRW V{x:X}, V{y:X}, {n}",
    Op.SKP: "SKP V{x:X}",
    Op.SKNP: "SKNP V{x:X}",
    Op.LD_VX_DT: "LD V{x:X}, DT",
    Op.LD_KEY: "LD V{x:X}, K",
    Op.LD_DT: "LD DT, V{x:X}",
    Op.LD_ST: "LD ST, V{x:X}",
    Op.ADD_I: "ADD I, V{x:X}",
    Op.LD_FONT: "LD F, V{x:X}",
    Op.LD_BCD: "LD B, V{x:X}",
    Op.STORE: "LD [I], V{x:X}",
    Op.LOAD: "LD V{x:X}, [I]",
    Op.UNKNOWN: "??? ${opcode:04X}",
}


@dataclass(frozen=True)
class Instruction:
    """A decoded opcode: the operation tag plus every operand field"""
    op: Op
    opcode: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    def mnemonic(self) -> str:
        return MNEMONICS[self.op].format(
            x=self.x, y=self.y, n=self.n, nn=self.nn, nnn=self.nnn, opcode=self.opcode
        )

    def __str__(self) -> str:
        return self.mnemonic()


# ═══════════════════════════════════════════════════════════════════════════════
# DECODE TABLES
# ═══════════════════════════════════════════════════════════════════════════════

# opcodes beginning with 8 are selected by the low nibble
_ALU_OPS = {
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

# opcodes beginning with E and F are selected by the low byte
_KEY_OPS = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

_MISC_OPS = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_KEY,
    0x15: Op.LD_DT,
    0x18: Op.LD_ST,
    0x1E: Op.ADD_I,
    0x29: Op.LD_FONT,
    0x33: Op.LD_BCD,
    0x55: Op.STORE,
    0x65: Op.LOAD,
}


def _system(opcode: int) -> Op:
    if opcode == 0x00E0:
        return Op.CLS
    if opcode == 0x00EE:
        return Op.RET
    return Op.SYS


def _register_pair(op: Op):
    """5XY0 / 9XY0 are only defined with a zero low nibble"""
    def select(opcode: int) -> Op:
        return op if opcode & 0x000F == 0 else Op.UNKNOWN
    return select


def _by_low_nibble(table):
    def select(opcode: int) -> Op:
        return table.get(opcode & 0x000F, Op.UNKNOWN)
    return select


def _by_low_byte(table):
    def select(opcode: int) -> Op:
        return table.get(opcode & 0x00FF, Op.UNKNOWN)
    return select


# One entry per high nibble: either the operation itself or a selector.
_DECODE_TABLE = [
    _system,
    Op.JP,
    Op.CALL,
    Op.SE_BYTE,
    Op.SNE_BYTE,
    _register_pair(Op.SE_REG),
    Op.LD_BYTE,
    Op.ADD_BYTE,
    _by_low_nibble(_ALU_OPS),
    _register_pair(Op.SNE_REG),
    Op.LD_I,
    Op.JP_OFFSET,
    Op.RND,
    Op.DRW,
    _by_low_byte(_KEY_OPS),
    _by_low_byte(_MISC_OPS),
]


@lru_cache(maxsize=None)
def decode(opcode: int) -> Instruction:
    """Decode a 16-bit opcode. Pure: the same opcode always yields the same Instruction."""
    opcode &= 0xFFFF
    entry = _DECODE_TABLE[opcode >> 12]
    op = entry if isinstance(entry, Op) else entry(opcode)
    return Instruction(
        op=op,
        opcode=opcode,
        x=(opcode >> 8) & 0x0F,
        y=(opcode >> 4) & 0x0F,
        n=opcode & 0x000F,
        nn=opcode & 0x00FF,
        nnn=opcode & 0x0FFF,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# DISASSEMBLER
# ═══════════════════════════════════════════════════════════════════════════════

def disassemble(opcode: int) -> str:
    """Disassemble opcode to human-readable string"""
    return decode(opcode).mnemonic()


def disassemble_program(data: bytes, start_addr: int = PROGRAM_START) -> List[str]:
    """
    Convert a ROM image into a list of disassembly lines.
    Each line: "ADDR:  MNEMONIC"
    """
    lines = []
    addr = start_addr
    i = 0
    while i + 1 < len(data):
        # Read two bytes (big-endian)
        opcode = (data[i] << 8) | data[i + 1]
        lines.append(f"{addr:04X}:  {disassemble(opcode)}")
        addr += 2
        i += 2
    # If there is a trailing byte, show it as data
    if i < len(data):
        lines.append(f"{addr:04X}:  .byte ${data[i]:02X}  ; odd trailing byte")
    return lines
