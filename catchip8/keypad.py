"""Input latch for the 16-key hexadecimal keypad."""

import logging
from typing import List, Optional

from .constants import NUM_KEYS

logger = logging.getLogger(__name__)


def _check_key(key: int):
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key index must be 0x0-0xF, got {key!r}")


class Keypad:
    """Current pressed/released state of each key; last write wins"""

    def __init__(self):
        self.keys: List[bool] = [False] * NUM_KEYS

    def set_key(self, key: int, pressed: bool):
        _check_key(key)
        if self.keys[key] != pressed:
            logger.debug("Key State Changed.  Key: %X, Pressed: %s.", key, pressed)
        self.keys[key] = bool(pressed)

    def press(self, key: int):
        self.set_key(key, True)

    def release(self, key: int):
        self.set_key(key, False)

    def is_pressed(self, key: int) -> bool:
        """Query a key by the value held in a register; only the low nibble counts"""
        return self.keys[key & 0xF]

    def first_pressed(self) -> Optional[int]:
        """Lowest-numbered key currently held down, or None"""
        for key, pressed in enumerate(self.keys):
            if pressed:
                return key
        return None

    def pressed_keys(self) -> List[int]:
        return [key for key, pressed in enumerate(self.keys) if pressed]

    def clear(self):
        self.keys = [False] * NUM_KEYS
