"""Delay and sound timers, decremented by the host at the timer rate."""

import logging

logger = logging.getLogger(__name__)


class Timers:
    """Two independent 8-bit countdown registers"""

    def __init__(self):
        self.delay = 0
        self.sound = 0

    def set_delay(self, value: int):
        self.delay = value & 0xFF
        if self.delay:
            logger.debug("Starting delay timer at %d.", self.delay)

    def set_sound(self, value: int):
        self.sound = value & 0xFF
        if self.sound:
            logger.debug("Starting sound timer at %d.", self.sound)

    @property
    def sound_active(self) -> bool:
        return self.sound > 0

    def tick(self):
        """Decrement both timers by one, never below zero (call at 60Hz)"""
        if self.delay > 0:
            self.delay -= 1

        if self.sound > 0:
            self.sound -= 1
            if self.sound == 0:
                logger.debug("Sound timer expired, stopping sound.")

    def reset(self):
        self.delay = 0
        self.sound = 0
