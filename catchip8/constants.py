"""Machine and host constants shared by the CHIP-8 core and its front end."""

# ═══════════════════════════════════════════════════════════════════════════════
# MACHINE
# ═══════════════════════════════════════════════════════════════════════════════

MEMORY_SIZE = 4096                      # 4KB RAM
ADDRESS_MASK = MEMORY_SIZE - 1          # 12-bit address bus
PROGRAM_START = 0x200                   # Programs load at 0x200
ETI660_START = 0x600                    # Alternative start used by ETI 660 programs
STACK_SIZE = 16                         # 16-level stack
NUM_REGISTERS = 16                      # V0-VF registers
FLAG_REGISTER = 0xF                     # VF doubles as carry/borrow/collision flag
NUM_KEYS = 16                           # 16 hex keys

DISPLAY_W, DISPLAY_H = 64, 32           # CHIP-8 native resolution
SPRITE_WIDTH = 8                        # Sprites are always one byte wide

# CPU Timing
DEFAULT_CLOCK_HZ = 500                  # Instructions per second
TIMER_HZ = 60                           # Delay/Sound timer rate

# CHIP-8 Font (4x5 pixels, stored as 5 bytes each)
FONT_ADDRESS = 0x000
FONT_GLYPH_SIZE = 5
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])

# ═══════════════════════════════════════════════════════════════════════════════
# HOST
# ═══════════════════════════════════════════════════════════════════════════════

SCALE = 12                              # Display scale factor
GLOW_UPSCALE = 4                        # Internal upscale for glow blur
BLOOM_STRENGTH = 0.55                   # Glow intensity (0.0-1.0)
BLUR_RADIUS = 1                         # Box blur passes (0-3)
STATUS_BAR_H = 25

MAX_FRAME_TIME = 0.25                   # Longest stall the clock will catch up on
BEEP_FREQUENCY = 440                    # Square wave pitch in Hz
BEEP_VOLUME = 0.1

# Colors (RGB)
COLORS = {
    'bg_dark': (15, 15, 25),
    'fg_green': (0, 255, 128),
    'fg_amber': (255, 176, 0),
    'fg_white': (220, 220, 220),
    'fg_blue': (100, 180, 255),
    'status_bg': (20, 20, 35),
    'text': (200, 200, 200),
    'text_dim': (120, 120, 140),
    'error': (255, 100, 150),
}

COLOR_SCHEMES = [
    ('Green Phosphor', COLORS['fg_green']),
    ('Amber CRT', COLORS['fg_amber']),
    ('Cool White', COLORS['fg_white']),
    ('Ice Blue', COLORS['fg_blue']),
]

ROM_EXTENSIONS = ('.ch8', '.c8')
