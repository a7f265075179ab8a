"""Shared pytest fixtures for iq-xcorr tests."""

import numpy as np
import pytest


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator so failures are reproducible."""
    return np.random.default_rng(1234)


@pytest.fixture
def write_iq16(tmp_path):
    """Factory that writes (I, Q) integer pairs to a raw capture file."""
    counter = {"n": 0}

    def _write(samples, name: str = None):
        """Write complex or (N, 2) integer samples as little-endian int16 pairs.

        Args:
            samples: Complex array (integer-valued parts) or (N, 2) int array
            name: Optional file name inside tmp_path

        Returns:
            Path of the written file
        """
        samples = np.asarray(samples)
        if np.iscomplexobj(samples):
            pairs = np.column_stack([samples.real, samples.imag])
        else:
            pairs = samples.reshape(-1, 2)

        if name is None:
            counter["n"] += 1
            name = f"capture_{counter['n']}.bin"
        path = tmp_path / name
        pairs.astype("<i2").tofile(path)
        return path

    return _write


@pytest.fixture
def random_iq(rng):
    """Factory for random complex sequences with ADC-like integer codes."""
    def _generate(n: int) -> np.ndarray:
        codes = rng.integers(-2048, 2048, size=(n, 2))
        return (codes[:, 0] + 1j * codes[:, 1]).astype(np.complex64)

    return _generate
