"""ROM loading and the command-line interface."""
import pytest

from catchip8.cli import build_parser, main, quirks_from_args
from catchip8.constants import MEMORY_SIZE
from catchip8.errors import ProgramTooLargeError, RomLoadError
from catchip8.quirks import ClipMode, JumpMode, ShiftMode
from catchip8.rom import find_roms, read_rom


class TestReadRom:

    def test_reads_bytes(self, tmp_path):
        rom = tmp_path / "pong.ch8"
        rom.write_bytes(b"\x00\xE0\x12\x00")
        assert read_rom(rom) == b"\x00\xE0\x12\x00"

    def test_missing_file(self, tmp_path):
        with pytest.raises(RomLoadError):
            read_rom(tmp_path / "missing.ch8")

    def test_too_large_for_load_address(self, tmp_path):
        rom = tmp_path / "big.ch8"
        rom.write_bytes(bytes(MEMORY_SIZE - 0x600 + 1))
        read_rom(rom)
        with pytest.raises(ProgramTooLargeError):
            read_rom(rom, load_address=0x600)

    def test_find_roms(self, tmp_path):
        for name in ("b.ch8", "a.C8", "notes.txt"):
            (tmp_path / name).write_bytes(b"\x00")
        assert [p.name for p in find_roms(tmp_path)] == ["a.C8", "b.ch8"]


class TestCli:

    def test_default_quirks(self):
        args = build_parser().parse_args(["game.ch8"])
        q = quirks_from_args(args)
        assert q.shift_mode is ShiftMode.MODERN
        assert args.hz == 500
        assert args.load_address == 0x200

    def test_preset_with_overrides(self):
        args = build_parser().parse_args([
            "game.ch8", "--preset", "cosmac", "--no-increment-i",
            "--draw-mode", "wrap", "--jump-mode", "modern", "--load-address", "0x600",
        ])
        q = quirks_from_args(args)
        assert q.shift_mode is ShiftMode.LEGACY
        assert q.logic_quirk_reset_vf is True
        assert q.save_load_increments_i is False
        assert q.draw_clip_mode is ClipMode.WRAP
        assert q.jump_offset_mode is JumpMode.MODERN
        assert args.load_address == 0x600

    def test_bad_load_address(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["game.ch8", "--load-address", "0x1000"])

    def test_load_address_inside_font_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["game.ch8", "--load-address", "0x10"])

    def test_eti660_load_address(self):
        args = build_parser().parse_args(["game.ch8", "--eti660"])
        assert args.load_address == 0x600

    def test_disassemble(self, tmp_path, capsys):
        rom = tmp_path / "demo.ch8"
        rom.write_bytes(b"\x00\xE0\xA2\x2A\xD0\x15")
        assert main([str(rom), "--disassemble"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out == ["0200:  CLS", "0202:  LD I, $22A", "0204:  DRW V0, V1, 5"]

    def test_missing_rom_exit_code(self, tmp_path):
        assert main([str(tmp_path / "nope.ch8"), "--disassemble"]) == 2
