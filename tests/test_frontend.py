"""Headless pieces of the pygame host."""
import numpy as np
import pytest

pytest.importorskip("pygame")

from catchip8.frontend import KEY_MAP, GlowRenderer, build_square_wave


class TestHost:

    def test_key_map_covers_keypad(self):
        assert sorted(KEY_MAP.values()) == list(range(16))

    def test_square_wave_mono(self):
        wave = build_square_wave(44100, -16, 1, frequency=441)
        assert wave.shape == (100,)
        assert wave.dtype == np.int16
        assert wave[0] == 32767
        assert wave[-1] == -32767

    def test_square_wave_stereo(self):
        wave = build_square_wave(44100, -16, 2, frequency=441)
        assert wave.shape == (100, 2)
        assert wave.flags.c_contiguous

    def test_square_wave_unsigned_8bit(self):
        wave = build_square_wave(44100, 8, 1, frequency=441)
        assert wave.dtype == np.uint8
        assert wave[0] == 255
        assert wave[-1] == 0

    def test_square_wave_float32(self):
        wave = build_square_wave(44100, 32, 1, frequency=441)
        assert wave.dtype == np.float32
        assert wave[0] == 1.0
        assert wave[-1] == -1.0

    def test_square_wave_signed_32bit(self):
        wave = build_square_wave(44100, -32, 1, frequency=441)
        assert wave.dtype == np.int32
        assert wave[0] == 2 ** 31 - 1

    def test_square_wave_unknown_format(self):
        with pytest.raises(ValueError):
            build_square_wave(44100, 24, 1)

    def test_box_blur_spreads_and_conserves(self):
        arr = np.zeros((8, 8), dtype=np.float32)
        arr[4, 4] = 9.0
        blurred = GlowRenderer.box_blur(arr, passes=1)
        assert blurred[4, 4] == pytest.approx(1.0)
        assert blurred[3, 3] == pytest.approx(1.0)
        assert blurred.sum() == pytest.approx(9.0)
