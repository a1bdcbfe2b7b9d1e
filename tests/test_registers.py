"""Register file and call stack."""
import pytest

from catchip8.constants import PROGRAM_START, STACK_SIZE
from catchip8.errors import ErrorKind, StackOverflowError, StackUnderflowError
from catchip8.registers import RegisterFile


class TestRegisters:

    def test_initial_state(self):
        regs = RegisterFile()
        assert list(regs.V) == [0] * 16
        assert regs.I == 0
        assert regs.PC == PROGRAM_START
        assert regs.SP == 0

    def test_set_v_wraps_to_8_bits(self):
        regs = RegisterFile()
        regs.set_v(3, 0x100)
        assert regs.get_v(3) == 0
        regs.set_v(3, -4)
        assert regs.get_v(3) == 0xFC

    def test_index_is_16_bit(self):
        regs = RegisterFile()
        regs.set_i(0x1FFFF)
        assert regs.I == 0xFFFF

    def test_flag_register_is_vf(self):
        regs = RegisterFile()
        regs.set_flag(1)
        assert regs.V[0xF] == 1


class TestStack:

    def test_push_pop_is_lifo(self):
        regs = RegisterFile()
        regs.push(0x202)
        regs.push(0x304)
        assert regs.SP == 2
        assert regs.pop() == 0x304
        assert regs.pop() == 0x202
        assert regs.SP == 0

    def test_sixteen_levels_then_overflow(self):
        regs = RegisterFile()
        for level in range(STACK_SIZE):
            regs.push(0x200 + 2 * level)
        assert regs.SP == STACK_SIZE
        with pytest.raises(StackOverflowError) as info:
            regs.push(0x400)
        assert info.value.kind is ErrorKind.STACK_OVERFLOW
        assert regs.SP == STACK_SIZE

    def test_pop_empty_underflows(self):
        regs = RegisterFile()
        with pytest.raises(StackUnderflowError) as info:
            regs.pop()
        assert info.value.kind is ErrorKind.STACK_UNDERFLOW

    def test_reset(self):
        regs = RegisterFile()
        regs.set_v(1, 9)
        regs.set_i(0x300)
        regs.push(0x222)
        regs.reset(0x600)
        assert regs.get_v(1) == 0
        assert regs.I == 0
        assert regs.SP == 0
        assert regs.PC == 0x600
