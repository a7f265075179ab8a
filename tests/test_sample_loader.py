"""Tests for reading int16 IQ capture windows."""

import struct

import numpy as np
import pytest

from iq_xcorr.data.sample_loader import count_samples, decode_iq16, load_samples
from iq_xcorr.errors import CorrelationError, TruncatedReadError


class TestDecodeIQ16:
    """Tests for the pure byte decoder."""

    def test_decode_known_values(self):
        """I goes to real, Q to imag, no scaling."""
        raw = struct.pack("<4h", 1, -2, 2047, -2048)
        samples = decode_iq16(raw)

        assert samples.dtype == np.complex64
        assert list(samples) == [1 - 2j, 2047 - 2048j]

    def test_decode_full_int16_range(self):
        raw = struct.pack("<2h", 32767, -32768)
        samples = decode_iq16(raw)
        assert samples[0] == complex(32767, -32768)

    def test_decode_empty(self):
        assert len(decode_iq16(b"")) == 0

    def test_decode_rejects_partial_pair(self):
        with pytest.raises(ValueError):
            decode_iq16(b"\x01\x00\x02\x00\x03\x00")


class TestLoadSamples:
    """Tests for loading windows from files."""

    def test_round_trip_exact_values(self, write_iq16, rng):
        """Loading a whole file reproduces the written integers."""
        codes = rng.integers(-2048, 2048, size=(500, 2))
        path = write_iq16(codes)

        samples = load_samples(path, start_offset=0, count=500)

        assert len(samples) == 500
        np.testing.assert_array_equal(samples.real, codes[:, 0])
        np.testing.assert_array_equal(samples.imag, codes[:, 1])

    def test_window_at_offset(self, write_iq16):
        codes = np.arange(40).reshape(20, 2)
        path = write_iq16(codes)

        samples = load_samples(path, start_offset=5, count=3)

        assert list(samples) == [10 + 11j, 12 + 13j, 14 + 15j]

    def test_window_ending_at_eof(self, write_iq16):
        codes = np.arange(20).reshape(10, 2)
        path = write_iq16(codes)

        samples = load_samples(path, start_offset=7, count=3)
        assert samples[-1] == 18 + 19j

    def test_result_is_read_only(self, write_iq16):
        path = write_iq16(np.zeros((4, 2), dtype=int))
        samples = load_samples(path, 0, 4)

        with pytest.raises(ValueError):
            samples[0] = 1

    def test_zero_count_is_empty(self, write_iq16):
        path = write_iq16(np.zeros((4, 2), dtype=int))

        assert len(load_samples(path, 0, 0)) == 0
        assert len(load_samples(path, 4, 0)) == 0

    def test_count_past_end_raises(self, write_iq16):
        """Never returns a partially filled window."""
        path = write_iq16(np.zeros((10, 2), dtype=int))

        with pytest.raises(TruncatedReadError) as exc_info:
            load_samples(path, start_offset=5, count=6)

        assert exc_info.value.available == 10
        assert isinstance(exc_info.value, CorrelationError)

    def test_offset_past_end_raises(self, write_iq16):
        path = write_iq16(np.zeros((10, 2), dtype=int))

        with pytest.raises(TruncatedReadError):
            load_samples(path, start_offset=11, count=1)

    def test_trailing_partial_pair_is_ignored(self, tmp_path):
        path = tmp_path / "odd.bin"
        path.write_bytes(struct.pack("<5h", 1, 2, 3, 4, 5))

        assert count_samples(path) == 2
        assert list(load_samples(path, 0, 2)) == [1 + 2j, 3 + 4j]
        with pytest.raises(TruncatedReadError):
            load_samples(path, 0, 3)

    def test_missing_file_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            load_samples(tmp_path / "missing.bin", 0, 1)

    def test_negative_arguments_rejected(self, write_iq16):
        path = write_iq16(np.zeros((4, 2), dtype=int))

        with pytest.raises(ValueError):
            load_samples(path, -1, 2)
        with pytest.raises(ValueError):
            load_samples(path, 0, -2)
