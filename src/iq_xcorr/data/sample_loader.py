"""
Sample Loader - Read windows of interleaved int16 IQ samples from raw captures.

Capture files are headerless streams of little-endian signed 16-bit
integers, grouped in (I, Q) pairs. The number of samples is inferred
from the file size alone.
"""

import os
import logging
from pathlib import Path
from typing import Union

import numpy as np

from iq_xcorr.errors import TruncatedReadError

logger = logging.getLogger(__name__)

BYTES_PER_SAMPLE = 4  # int16 I + int16 Q
IQ16_DTYPE = np.dtype("<i2")

PathLike = Union[str, os.PathLike]


def decode_iq16(raw: bytes) -> np.ndarray:
    """
    Decode interleaved little-endian int16 (I, Q) pairs into complex samples.

    No scaling is applied: real and imaginary parts are the raw ADC codes.

    Args:
        raw: Byte buffer, length must be a multiple of 4

    Returns:
        complex64 array with one entry per (I, Q) pair
    """
    if len(raw) % BYTES_PER_SAMPLE != 0:
        raise ValueError(
            f"IQ16 buffer length {len(raw)} is not a multiple of {BYTES_PER_SAMPLE}"
        )

    codes = np.frombuffer(raw, dtype=IQ16_DTYPE)
    samples = np.empty(len(codes) // 2, dtype=np.complex64)
    samples.real = codes[0::2]
    samples.imag = codes[1::2]
    return samples


def count_samples(path: PathLike) -> int:
    """Number of complete (I, Q) pairs held by a capture file."""
    return os.stat(path).st_size // BYTES_PER_SAMPLE


def load_samples(path: PathLike, start_offset: int, count: int) -> np.ndarray:
    """
    Load a contiguous window of samples from a capture file.

    Args:
        path: Capture file path
        start_offset: Index of the first sample to read
        count: Number of samples to read

    Returns:
        Read-only complex64 array of exactly `count` samples

    Raises:
        OSError: The file cannot be opened
        TruncatedReadError: Fewer than `count` samples exist from `start_offset` on
    """
    if start_offset < 0:
        raise ValueError(f"start_offset must be >= 0 (got {start_offset})")
    if count < 0:
        raise ValueError(f"count must be >= 0 (got {count})")

    path = Path(path)
    logger.debug(f"Opening capture {path}")

    with path.open("rb") as f:
        file_size = f.seek(0, os.SEEK_END)
        available = file_size // BYTES_PER_SAMPLE
        logger.info(f"{path.name}: {file_size} bytes, {available} samples")

        if start_offset + count > available:
            raise TruncatedReadError(path, start_offset, count, available)

        f.seek(start_offset * BYTES_PER_SAMPLE)
        n_bytes = count * BYTES_PER_SAMPLE
        raw = f.read(n_bytes)

    # File shrank between the size check and the read
    if len(raw) != n_bytes:
        raise TruncatedReadError(
            path, start_offset, count, start_offset + len(raw) // BYTES_PER_SAMPLE
        )

    samples = decode_iq16(raw)
    samples.flags.writeable = False

    if len(samples):
        first, last = samples[0], samples[-1]
        logger.debug(f"  first sample I={first.real:.0f} Q={first.imag:.0f}, "
                     f"last sample I={last.real:.0f} Q={last.imag:.0f}")

    return samples
