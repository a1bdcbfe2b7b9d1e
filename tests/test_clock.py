"""FrameClock pacing of CPU cycles and timer ticks."""
import pytest

from catchip8.clock import FrameClock
from catchip8.cpu import Chip8, ExecState
from conftest import words


class TestAdvance:

    def test_one_second(self):
        clock = FrameClock(500, 60, max_frame_time=2.0)
        assert clock.advance(1.0) == (500, 60)

    def test_fractions_carry_over(self):
        clock = FrameClock(500, 60)
        assert clock.advance(1 / 64) == (7, 0)
        assert clock.advance(1 / 64) == (8, 1)

    def test_rates_exact_under_jitter(self):
        clock = FrameClock(500, 60)
        # 64 uneven frames totalling exactly one second
        frames = [1 / 128, 3 / 128] * 32
        cycles = ticks = 0
        for elapsed in frames:
            c, t = clock.advance(elapsed)
            cycles += c
            ticks += t
        assert (cycles, ticks) == (500, 60)

    def test_stall_is_capped(self):
        clock = FrameClock(500, 60, max_frame_time=0.25)
        assert clock.advance(10.0) == (125, 15)

    def test_negative_elapsed_rejected(self):
        with pytest.raises(ValueError):
            FrameClock().advance(-0.1)

    @pytest.mark.parametrize("hz, timer_hz", [(0, 60), (500, 0), (-1, 60)])
    def test_bad_rates_rejected(self, hz, timer_hz):
        with pytest.raises(ValueError):
            FrameClock(hz, timer_hz)

    def test_set_speed(self):
        clock = FrameClock(500, 60, max_frame_time=2.0)
        clock.set_speed(1000)
        assert clock.advance(1.0) == (1000, 60)


class TestDrive:

    def _vm(self, *opcodes):
        vm = Chip8()
        vm.load_program(words(*opcodes))
        return vm

    def test_runs_due_cycles_and_ticks(self):
        # set DT = 255 then spin
        vm = self._vm(0x60FF, 0xF015, 0x1204)
        clock = FrameClock(500, 60, max_frame_time=2.0)
        clock.drive(vm, 1.0)
        assert vm.cycles == 500
        assert vm.timers.delay == 255 - 60

    def test_reports_framebuffer_change(self):
        vm = self._vm(0x1200)
        assert FrameClock(500, 60).drive(vm, 0.1) is False
        vm = self._vm(0x00E0, 0x1202)
        assert FrameClock(500, 60).drive(vm, 0.1) is True

    def test_ticks_continue_after_halt(self):
        vm = self._vm(0x60FF, 0xF015, 0xFFFF)
        clock = FrameClock(500, 60, max_frame_time=2.0)
        clock.drive(vm, 1.0)
        assert vm.state is ExecState.HALTED
        assert vm.cycles == 3
        assert vm.timers.delay == 255 - 60

    def test_ticks_while_awaiting_key(self):
        vm = self._vm(0x6010, 0xF015, 0xF00A)
        clock = FrameClock(500, 60, max_frame_time=2.0)
        clock.drive(vm, 0.5)
        assert vm.state is ExecState.AWAITING_KEY
        assert vm.timers.delay == 0
