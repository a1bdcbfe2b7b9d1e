"""ROM image loading and validation."""

import logging
from pathlib import Path
from typing import List, Union

from .constants import MEMORY_SIZE, PROGRAM_START, ROM_EXTENSIONS
from .errors import ProgramTooLargeError, RomLoadError

logger = logging.getLogger(__name__)


def read_rom(path: Union[str, Path], load_address: int = PROGRAM_START) -> bytes:
    """Read a ROM file and check it fits between load_address and the end of RAM"""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise RomLoadError(f"Failed to read CHIP-8 ROM file {path}: {e}") from e

    max_size = MEMORY_SIZE - load_address
    if len(data) > max_size:
        raise ProgramTooLargeError(max_size, len(data), load_address)
    if not data:
        logger.warning("ROM %s is empty", path)

    logger.info("Read %d bytes from CHIP-8 ROM '%s'", len(data), path)
    return data


def find_roms(directory: Union[str, Path] = ".") -> List[Path]:
    """CHIP-8 ROMs (*.ch8, *.c8) found in directory, sorted by name"""
    rom_dir = Path(directory)
    return sorted(p for p in rom_dir.iterdir() if p.is_file() and p.suffix.lower() in ROM_EXTENSIONS)
