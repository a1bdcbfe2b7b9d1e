"""
Host pacing for the CPU and timer clocks

The host loop measures real elapsed time once per frame and asks a FrameClock
how much emulated work is due. Fractional cycles and ticks carry over between
frames, so the long-run instruction and timer rates stay exact no matter how
unevenly the host gets scheduled.
"""

import logging
from typing import Tuple

from .constants import DEFAULT_CLOCK_HZ, MAX_FRAME_TIME, TIMER_HZ
from .cpu import Chip8, ExecState

logger = logging.getLogger(__name__)


class FrameClock:
    """Converts elapsed wall-clock seconds into due CPU cycles and timer ticks"""

    def __init__(self, instruction_hz: float = DEFAULT_CLOCK_HZ, timer_hz: float = TIMER_HZ,
                 max_frame_time: float = MAX_FRAME_TIME):
        if instruction_hz <= 0 or timer_hz <= 0:
            raise ValueError("Clock rates must be positive")
        self.instruction_hz = instruction_hz
        self.timer_hz = timer_hz
        self.max_frame_time = max_frame_time
        self._cycle_debt = 0.0
        self._tick_debt = 0.0

    def set_speed(self, hz: float):
        """Set CPU clock speed"""
        if hz <= 0:
            raise ValueError("Clock rates must be positive")
        self.instruction_hz = hz

    def reset(self):
        self._cycle_debt = 0.0
        self._tick_debt = 0.0

    def advance(self, elapsed: float) -> Tuple[int, int]:
        """
        Account for elapsed seconds

        Returns:
            (cycles, ticks) that are now due
        """
        if elapsed < 0:
            raise ValueError("elapsed time cannot be negative")
        if elapsed > self.max_frame_time:
            logger.debug("Host stalled for %.3fs, catching up %.3fs only", elapsed, self.max_frame_time)
            elapsed = self.max_frame_time

        self._cycle_debt += elapsed * self.instruction_hz
        self._tick_debt += elapsed * self.timer_hz
        cycles = int(self._cycle_debt)
        ticks = int(self._tick_debt)
        self._cycle_debt -= cycles
        self._tick_debt -= ticks
        return cycles, ticks

    def drive(self, vm: Chip8, elapsed: float) -> bool:
        """
        Run the cycles and timer ticks due after elapsed seconds

        Timer ticks are spread evenly through the cycle batch so a program
        polling the delay timer sees it move at the right point. Stops
        stepping once the machine halts; ticks still happen.

        Returns:
            True if the framebuffer changed during the batch
        """
        cycles, ticks = self.advance(elapsed)
        changed = False
        ticks_done = 0

        for n in range(cycles):
            if vm.state is ExecState.HALTED:
                break
            vm.step()
            changed = changed or vm.draw_flag
            # Ticks owed after cycle n of the batch
            due = (n + 1) * ticks // cycles
            while ticks_done < due:
                vm.tick_timers()
                ticks_done += 1

        while ticks_done < ticks:
            vm.tick_timers()
            ticks_done += 1

        return changed
