"""Monochrome 64x32 framebuffer mutated by CLS and DRW."""

import numpy as np

from .constants import DISPLAY_H, DISPLAY_W, SPRITE_WIDTH


class Framebuffer:
    """Pixel grid stored as a (height, width) uint8 array of 0/1 values"""

    def __init__(self, width: int = DISPLAY_W, height: int = DISPLAY_H):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width), dtype=np.uint8)
        self.changed = False    # Set by CLS/DRW during the current cycle

    def clear(self):
        self.pixels.fill(0)
        self.changed = True

    def pixel(self, x: int, y: int) -> int:
        return int(self.pixels[y % self.height, x % self.width])

    def draw_sprite(self, x: int, y: int, rows: bytes, wrap: bool = False) -> bool:
        """
        XOR an 8-pixel-wide sprite onto the grid

        Args:
            x, y: top-left corner, taken modulo the screen size
            rows: one byte per sprite row, MSB is the leftmost pixel
            wrap: wrap pixels past the right/bottom edge instead of clipping

        Returns:
            True if any pixel that was on got switched off (collision)
        """
        x %= self.width
        y %= self.height
        self.changed = True
        if not rows:
            return False

        sprite = np.unpackbits(np.frombuffer(bytes(rows), dtype=np.uint8))
        sprite = sprite.reshape(len(rows), SPRITE_WIDTH)

        if wrap:
            ys = (y + np.arange(sprite.shape[0])) % self.height
            xs = (x + np.arange(SPRITE_WIDTH)) % self.width
            region = np.ix_(ys, xs)
        else:
            sprite = sprite[:self.height - y, :self.width - x]
            region = (slice(y, y + sprite.shape[0]), slice(x, x + sprite.shape[1]))

        target = self.pixels[region]
        collision = bool(np.any(target & sprite))
        self.pixels[region] = target ^ sprite
        return collision

    def snapshot(self) -> np.ndarray:
        """Read-only copy for the rendering collaborator"""
        frame = self.pixels.copy()
        frame.flags.writeable = False
        return frame

    def reset(self):
        self.pixels.fill(0)
        self.changed = False
