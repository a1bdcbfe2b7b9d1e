"""Flat 4KB byte store with the built-in hexadecimal font."""

import logging

from .constants import ADDRESS_MASK, FONT_ADDRESS, FONTSET, MEMORY_SIZE, PROGRAM_START
from .errors import ProgramTooLargeError

logger = logging.getLogger(__name__)

FONT_END = FONT_ADDRESS + len(FONTSET)


def in_font(addr: int) -> bool:
    return FONT_ADDRESS <= (addr & ADDRESS_MASK) < FONT_END


class Memory:
    """CHIP-8 RAM. Every address is wrapped to the 12-bit address bus.

    The font table is written once at init (and again on reset); program
    writes that land on it are dropped.
    """

    def __init__(self):
        self.data = bytearray(MEMORY_SIZE)
        self._load_fontset()

    def _load_fontset(self):
        """Load built-in font sprites to memory"""
        self.data[FONT_ADDRESS:FONT_END] = FONTSET

    def reset(self):
        """Zero RAM and restore the font table"""
        self.data[:] = bytes(MEMORY_SIZE)
        self._load_fontset()

    def read_byte(self, addr: int) -> int:
        return self.data[addr & ADDRESS_MASK]

    def write_byte(self, addr: int, value: int):
        addr &= ADDRESS_MASK
        if in_font(addr):
            logger.debug("Write of $%02X to font table at $%03X ignored", value & 0xFF, addr)
            return
        self.data[addr] = value & 0xFF

    def read_word(self, addr: int) -> int:
        """Fetch a big-endian 16-bit word (instructions are stored MSB first)"""
        hi = self.data[addr & ADDRESS_MASK]
        lo = self.data[(addr + 1) & ADDRESS_MASK]
        return (hi << 8) | lo

    def read_block(self, addr: int, length: int) -> bytes:
        return bytes(self.data[(addr + i) & ADDRESS_MASK] for i in range(length))

    def load_program(self, program: bytes, base_addr: int = PROGRAM_START) -> int:
        """Copy a ROM image verbatim into RAM at base_addr.

        The image must fit between base_addr and the top of memory; it is
        never wrapped around into the interpreter area.

        Returns:
            Number of bytes written

        Raises:
            ValueError: base_addr lies inside the font table
            ProgramTooLargeError: the image runs past 0xFFF
        """
        base_addr &= ADDRESS_MASK
        if in_font(base_addr):
            raise ValueError(f"load address ${base_addr:03X} overlaps the font table "
                             f"(${FONT_ADDRESS:03X}-${FONT_END - 1:03X})")
        available = MEMORY_SIZE - base_addr
        if len(program) > available:
            raise ProgramTooLargeError(available, len(program), base_addr)

        self.data[base_addr:base_addr + len(program)] = program
        logger.info("Loaded %d bytes at $%03X", len(program), base_addr)
        return len(program)
