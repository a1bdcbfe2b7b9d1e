"""
pygame host for the CHIP-8 core

Supplies the collaborators the core leaves to the host: rendering of the
framebuffer, the beeper, keyboard capture and the real-time driving loop.
"""

import logging
import time
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import pygame

from .clock import FrameClock
from .constants import (
    BEEP_FREQUENCY, BEEP_VOLUME, BLOOM_STRENGTH, BLUR_RADIUS, COLOR_SCHEMES, COLORS,
    DISPLAY_H, DISPLAY_W, GLOW_UPSCALE, SCALE, STATUS_BAR_H,
)
from .cpu import Chip8
from .errors import Chip8Error
from .rom import read_rom

logger = logging.getLogger(__name__)

# Keyboard mapping (QWERTY -> CHIP-8 hex keypad)
# CHIP-8 Keypad:    Keyboard:
# 1 2 3 C          1 2 3 4
# 4 5 6 D          Q W E R
# 7 8 9 E          A S D F
# A 0 B F          Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

CONTROLS_TEXT = ("Keys: 1234/QWER/ASDF/ZXCV | P=Pause | F5=Reset | F6=Step | "
                 "F2=Colors | TAB=Debug | ESC=Exit")


# ═══════════════════════════════════════════════════════════════════════════════
# GLOW EFFECT SYSTEM
# ═══════════════════════════════════════════════════════════════════════════════

class GlowRenderer:
    """Phosphor glow/bloom post-processing effect"""

    def __init__(self, width: int, height: int, scale: int,
                 fg_color: Tuple[int, int, int] = COLORS['fg_green'],
                 bg_color: Tuple[int, int, int] = COLORS['bg_dark']):
        self.width = width
        self.height = height
        self.scale = scale
        self.fg_color = fg_color
        self.bg_color = bg_color
        self.bloom_strength = BLOOM_STRENGTH
        self.blur_radius = BLUR_RADIUS
        self.glow_upscale = GLOW_UPSCALE

        self.final_size = (width * scale, height * scale)

    @staticmethod
    def box_blur(arr: np.ndarray, passes: int = 1) -> np.ndarray:
        """Fast box blur using rolling averages"""
        a = arr.copy()
        for _ in range(passes):
            a = (np.roll(a, 1, axis=1) + a + np.roll(a, -1, axis=1)) / 3.0
            a = (np.roll(a, 1, axis=0) + a + np.roll(a, -1, axis=0)) / 3.0
        return a

    def _colorize(self, intensity: np.ndarray) -> np.ndarray:
        """(w, h) intensities in 0..1 -> (w, h, 3) RGB in the foreground color"""
        rgb = np.zeros(intensity.shape + (3,), dtype=np.uint8)
        for i, c in enumerate(self.fg_color):
            rgb[:, :, i] = (intensity * c).astype(np.uint8)
        return rgb

    def render(self, framebuffer: np.ndarray) -> Tuple[pygame.Surface, pygame.Surface]:
        """
        Convert a (height, width) 0/1 framebuffer to (base_surface, glow_surface)
        """
        # surfarray is indexed [x, y]
        base = framebuffer.T.astype(np.float32)

        base_surf = pygame.surfarray.make_surface(self._colorize(base))
        base_final = pygame.transform.scale(base_surf, self.final_size)

        # Blur an upscaled copy to create the glow halo
        up = np.kron(base, np.ones((self.glow_upscale, self.glow_upscale), dtype=np.float32))
        glow = self.box_blur(up, passes=1 + self.blur_radius)
        glow = np.clip(glow * self.bloom_strength, 0.0, 1.0)

        glow_surf = pygame.surfarray.make_surface(self._colorize(glow))
        glow_final = pygame.transform.smoothscale(glow_surf, self.final_size)

        return base_final, glow_final

    def create_background(self) -> pygame.Surface:
        """Create CRT-style background with scanlines"""
        surf = pygame.Surface(self.final_size)
        surf.fill(self.bg_color)

        scanline = tuple(min(c + 5, 255) for c in self.bg_color)
        for y in range(0, self.final_size[1], 2):
            pygame.draw.line(surf, scanline, (0, y), (self.final_size[0], y))

        return surf


# ═══════════════════════════════════════════════════════════════════════════════
# SOUND
# ═══════════════════════════════════════════════════════════════════════════════

_SAMPLE_TYPES = {
    8: np.uint8, -8: np.int8,
    16: np.uint16, -16: np.int16,
    32: np.float32, -32: np.int32,
}


def build_square_wave(sample_rate: int, size_bits: int, channels: int,
                      frequency: int = BEEP_FREQUENCY) -> np.ndarray:
    """One period of a square wave in the mixer's sample format

    size_bits follows pygame.mixer.get_init(): negative means signed, 8/16
    unsigned, 32 is float.
    """
    try:
        dtype = _SAMPLE_TYPES[size_bits]
    except KeyError:
        raise ValueError(f"unsupported mixer sample size: {size_bits}") from None

    if size_bits == 32:
        high, low = 1.0, -1.0
    elif size_bits < 0:
        high = 2 ** (-size_bits - 1) - 1
        low = -high
    else:
        high, low = 2 ** size_bits - 1, 0

    period = int(round(sample_rate / frequency))
    samples = np.full(period, high, dtype=dtype)
    samples[period // 2:] = low
    if channels > 1:
        samples = np.ascontiguousarray(np.repeat(samples[:, None], channels, axis=1))
    return samples


class Beeper:
    """Plays a tone while the sound timer is running"""

    def __init__(self):
        self.playing = False
        self.sound: Optional[pygame.mixer.Sound] = None
        init = pygame.mixer.get_init()
        if init is None:
            logger.warning("Audio mixer unavailable, running silent")
            return
        sample_rate, size_bits, channels = init
        try:
            wave = build_square_wave(sample_rate, size_bits, channels)
        except ValueError as e:
            logger.warning("%s, running silent", e)
            return
        self.sound = pygame.sndarray.make_sound(wave)
        self.sound.set_volume(BEEP_VOLUME)

    def update(self, active: bool):
        if self.sound is None or active == self.playing:
            return
        if active:
            self.sound.play(-1)
        else:
            self.sound.stop()
        self.playing = active


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN EMULATOR APPLICATION
# ═══════════════════════════════════════════════════════════════════════════════

class StatusBar:
    """Bottom status bar"""

    def __init__(self, y: int, width: int, height: int):
        self.rect = pygame.Rect(0, y, width, height)
        self.text = "Ready"
        self.color = COLORS['text_dim']

    def draw(self, surface: pygame.Surface, font: pygame.font.Font):
        pygame.draw.rect(surface, COLORS['status_bg'], self.rect)
        text_surf = font.render(self.text, True, self.color)
        surface.blit(text_surf, (10, self.rect.y + 5))

    def set_text(self, text: str, error: bool = False):
        self.text = text
        self.color = COLORS['error'] if error else COLORS['text_dim']


class Chip8App:
    """Window, input and real-time loop around one Chip8 instance"""

    def __init__(self, vm: Chip8, clock: FrameClock, rom_path: Optional[Path] = None,
                 scale: int = SCALE):
        pygame.mixer.pre_init(44100, -16, 1, 1024)
        pygame.init()
        pygame.display.set_caption("Cat's CHIP-8")

        self.vm = vm
        self.clock = clock
        self.rom_path = rom_path

        display_size = (DISPLAY_W * scale, DISPLAY_H * scale)
        self.screen = pygame.display.set_mode((display_size[0], display_size[1] + STATUS_BAR_H))
        self.frame_clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 20)

        self.renderer = GlowRenderer(DISPLAY_W, DISPLAY_H, scale, COLOR_SCHEMES[0][1])
        self.background = self.renderer.create_background()
        self.status_bar = StatusBar(display_size[1], display_size[0], STATUS_BAR_H)
        self.beeper = Beeper()

        self.running = True
        self.paused = False
        self.show_debug = False
        self.color_scheme = 0
        self.needs_redraw = True
        self._reported_halt = None
        self._last_time = time.perf_counter()

        if rom_path is not None:
            self.status_bar.set_text(f"Loaded: {rom_path.stem}")

    def _reset(self):
        """Re-initialize the machine and reload the ROM"""
        self.vm.reset()
        self.clock.reset()
        if self.rom_path is not None:
            try:
                self.vm.load_program(read_rom(self.rom_path, self.vm.load_address))
            except Chip8Error as e:
                self.status_bar.set_text(f"Failed to load ROM: {e}", error=True)
                self.vm.stop(str(e))
                return
        self._reported_halt = None
        self.needs_redraw = True
        self.status_bar.set_text("Reset")

    def _toggle_pause(self):
        self.paused = not self.paused
        self.status_bar.set_text("Paused" if self.paused else "Running")

    def _step(self):
        """Single step execution while paused"""
        if not self.paused:
            return
        self.vm.step()
        self.needs_redraw = True
        self.status_bar.set_text(f"Step - PC: ${self.vm.registers.PC:03X}")

    def _cycle_colors(self):
        self.color_scheme = (self.color_scheme + 1) % len(COLOR_SCHEMES)
        name, color = COLOR_SCHEMES[self.color_scheme]
        self.renderer.fg_color = color
        self.needs_redraw = True
        self.status_bar.set_text(f"Color: {name}")

    def handle_events(self):
        """Process input events"""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_p:
                    self._toggle_pause()
                elif event.key == pygame.K_F5:
                    self._reset()
                elif event.key == pygame.K_F6:
                    self._step()
                elif event.key == pygame.K_F2:
                    self._cycle_colors()
                elif event.key == pygame.K_TAB:
                    self.show_debug = not self.show_debug
                    self.needs_redraw = True
                elif event.key == pygame.K_F1:
                    self.status_bar.set_text(CONTROLS_TEXT)
                elif event.key in KEY_MAP:
                    self.vm.key_down(KEY_MAP[event.key])

            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    self.vm.key_up(KEY_MAP[event.key])

    def update(self):
        """Run the CPU and timers for the real time elapsed since the last frame"""
        now = time.perf_counter()
        elapsed = now - self._last_time
        self._last_time = now

        if not self.paused:
            if self.clock.drive(self.vm, elapsed):
                self.needs_redraw = True

        self.beeper.update(self.vm.sound_active and not self.paused)

        halt = self.vm.halt
        if halt is not None and halt is not self._reported_halt:
            self._reported_halt = halt
            self.status_bar.set_text(f"Halted: {halt.message}", error=halt.is_error)
            for line in self.vm.dump_state():
                logger.info(line)

    def render(self):
        """Render display"""
        if self.needs_redraw or self.show_debug:
            self.screen.blit(self.background, (0, 0))

            base_surf, glow_surf = self.renderer.render(self.vm.framebuffer)
            # Draw glow layer (additive blend), then crisp pixels on top
            self.screen.blit(glow_surf, (0, 0), special_flags=pygame.BLEND_ADD)
            self.screen.blit(base_surf, (0, 0), special_flags=pygame.BLEND_ADD)

            if self.show_debug:
                self._render_debug()
            self.needs_redraw = False

        self.status_bar.draw(self.screen, self.font)
        pygame.display.flip()

    def _render_debug(self):
        """Render debug information overlay"""
        width = self.screen.get_width()
        overlay = pygame.Surface((220, 130), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 180))
        self.screen.blit(overlay, (width - 230, 5))

        for i, line in enumerate(self.vm.dump_state()):
            text = self.font.render(line, True, self.renderer.fg_color)
            self.screen.blit(text, (width - 225, 10 + i * 18))

    def run(self):
        """Main loop"""
        self._last_time = time.perf_counter()
        try:
            while self.running:
                self.handle_events()
                self.update()
                self.render()
                self.frame_clock.tick(60)
        finally:
            self.beeper.update(False)
            pygame.quit()
