"""Command-line entry point: run a ROM in a window or print its disassembly."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .constants import DEFAULT_CLOCK_HZ, ETI660_START, PROGRAM_START, SCALE, TIMER_HZ
from .decoder import disassemble_program
from .errors import Chip8Error
from .memory import FONT_END
from .quirks import ClipMode, JumpMode, OpcodePolicy, PRESETS, Quirks, ShiftMode
from .rom import read_rom

logger = logging.getLogger(__name__)


def _address(text: str) -> int:
    value = int(text, 0)
    if not FONT_END <= value < 0x1000:
        raise argparse.ArgumentTypeError(f"address out of range: {text}")
    return value


def _choices(enum_type) -> List[str]:
    return [member.value for member in enum_type]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="catchip8", description="Cat's CHIP-8 interpreter")
    parser.add_argument("rom", type=Path, help="input rom file")
    parser.add_argument("--hz", type=int, default=DEFAULT_CLOCK_HZ,
                        help="instructions per second (default: %(default)s)")
    parser.add_argument("--timer-hz", type=int, default=TIMER_HZ,
                        help="delay/sound timer rate (default: %(default)s)")
    parser.add_argument("--load-address", type=_address, default=PROGRAM_START,
                        help="where the ROM is loaded and execution starts (default: 0x200)")
    parser.add_argument("--eti660", dest="load_address", action="store_const", const=ETI660_START,
                        help="load at 0x600 like ETI 660 programs")
    parser.add_argument("--seed", type=int, default=None, help="seed for the RND instruction")
    parser.add_argument("--scale", type=int, default=SCALE, help="display scale factor")
    parser.add_argument("--disassemble", action="store_true",
                        help="print the ROM's disassembly and exit")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    quirks = parser.add_argument_group("quirks")
    quirks.add_argument("--preset", choices=sorted(PRESETS), default="modern",
                        help="starting quirk set (default: %(default)s)")
    quirks.add_argument("--shift-mode", choices=_choices(ShiftMode))
    quirks.add_argument("--logic-reset-vf", dest="logic_quirk_reset_vf",
                        action=argparse.BooleanOptionalAction, default=None)
    quirks.add_argument("--jump-mode", dest="jump_offset_mode", choices=_choices(JumpMode))
    quirks.add_argument("--increment-i", dest="save_load_increments_i",
                        action=argparse.BooleanOptionalAction, default=None)
    quirks.add_argument("--draw-mode", dest="draw_clip_mode", choices=_choices(ClipMode))
    quirks.add_argument("--unknown-opcodes", dest="unknown_opcode_policy",
                        choices=_choices(OpcodePolicy))
    return parser


QUIRK_OPTIONS = (
    "shift_mode", "logic_quirk_reset_vf", "jump_offset_mode",
    "save_load_increments_i", "draw_clip_mode", "unknown_opcode_policy",
)


def quirks_from_args(args: argparse.Namespace) -> Quirks:
    """Preset first, then any individually given quirk flags on top"""
    overrides = {name: getattr(args, name) for name in QUIRK_OPTIONS
                 if getattr(args, name) is not None}
    return Quirks.from_mapping(overrides, base=Quirks.preset(args.preset))


def run_gui(args: argparse.Namespace, program: bytes) -> int:
    # pygame is only needed once a window is opened
    from .clock import FrameClock
    from .cpu import Chip8
    from .frontend import CONTROLS_TEXT, Chip8App

    print("Cat's CHIP-8")
    print(CONTROLS_TEXT)

    vm = Chip8(quirks=quirks_from_args(args), load_address=args.load_address, seed=args.seed)
    vm.load_program(program)
    clock = FrameClock(args.hz, args.timer_hz)
    Chip8App(vm, clock, rom_path=args.rom, scale=args.scale).run()

    if vm.halt is not None and vm.halt.is_error:
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="[%(levelname)s]:  %(message)s",
                        stream=sys.stdout)

    try:
        quirks_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        program = read_rom(args.rom, args.load_address)
    except Chip8Error as e:
        logger.error("Error loading ROM: %s", e)
        return 2

    if args.disassemble:
        for line in disassemble_program(program, args.load_address):
            print(line)
        return 0

    return run_gui(args, program)
