"""Shared fixtures for the CHIP-8 test suite."""
import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from catchip8.cpu import Chip8
from catchip8.quirks import Quirks


def words(*opcodes: int) -> bytes:
    """Assemble 16-bit opcodes into big-endian program bytes."""
    return b"".join(op.to_bytes(2, "big") for op in opcodes)


@pytest.fixture
def vm():
    return Chip8(seed=1234)


@pytest.fixture
def make_vm():
    """Build a VM with the given opcodes loaded at 0x200 and optional quirk overrides."""
    def factory(*opcodes, quirks=None, **overrides):
        q = quirks or Quirks()
        if overrides:
            q = Quirks.from_mapping(overrides, base=q)
        machine = Chip8(quirks=q, seed=1234)
        machine.load_program(words(*opcodes))
        return machine
    return factory
