"""
Peak extraction - Shift and phase at the correlation maximum.
"""

import math
import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from iq_xcorr.errors import EmptyInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeakReport:
    """Location and phase of the correlation peak."""
    index: int           # Position in the correlation vector
    shift: int           # Lag at the peak (positive = first sequence leads)
    phase_rad: float
    phase_deg: float
    magnitude: float

    def as_tuple(self) -> Tuple[int, float, float]:
        return self.shift, self.phase_rad, self.phase_deg


def extract_peak(correlation: np.ndarray) -> PeakReport:
    """
    Find the lag of maximum correlation magnitude and its phase.

    Ties resolve to the first occurrence in index order. The zero-lag
    index is len(correlation) // 2, i.e. N-1 for a vector of 2N-1 lags.

    Args:
        correlation: Complex correlation vector

    Returns:
        PeakReport for the peak entry
    """
    correlation = np.asarray(correlation)
    if len(correlation) == 0:
        raise EmptyInputError("Cannot extract a peak from an empty correlation vector")

    magnitude = np.abs(correlation)
    index = int(np.argmax(magnitude))
    peak = correlation[index]

    shift = index - len(correlation) // 2
    phase_rad = float(np.angle(peak))
    phase_deg = phase_rad * 180.0 / math.pi

    logger.info(f"Peak at shift {shift}: |r|={magnitude[index]:.6g}, "
                f"phase {phase_rad:.4f} rad ({phase_deg:.2f}°)")

    return PeakReport(
        index=index,
        shift=shift,
        phase_rad=phase_rad,
        phase_deg=phase_deg,
        magnitude=float(magnitude[index])
    )


def lag_axis(length: int) -> np.ndarray:
    """Lag value of every index of a correlation vector of the given length."""
    half = length // 2
    return np.arange(length, dtype=np.int64) - half


def estimate_confidence(correlation: np.ndarray, index: int, window: int = 10) -> float:
    """
    Estimate confidence in a peak from its sharpness.

    Compares the peak magnitude with the mean magnitude of up to `window`
    neighbours on each side. A peak-to-sidelobe ratio of 10 or more maps
    to full confidence.

    Returns:
        Confidence value 0-1
    """
    magnitude = np.abs(np.asarray(correlation))
    peak_value = magnitude[index]

    start = max(0, index - window)
    end = min(len(magnitude), index + window + 1)
    nearby = magnitude[start:end]

    # Lone sample: nothing to compare against
    if len(nearby) <= 1:
        return 1.0 if peak_value > 0 else 0.0

    nearby_mean = (np.sum(nearby) - peak_value) / (len(nearby) - 1)

    if nearby_mean > 0:
        psr = peak_value / nearby_mean
        confidence = min(1.0, (psr - 1) / 9)
    elif peak_value > 0:
        confidence = 1.0
    else:
        confidence = 0.0

    return float(max(0.0, confidence))
