"""SpectralPeakExtractor: picks up to three fundamentals from a dB spectrum."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from chordtuner.config import AnalysisConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PitchCandidate:
    """A local maximum of the spectrum."""

    frequency_hz: float
    amplitude_db: float


class SpectralPeakExtractor:
    """
    Finds the fundamentals present in one frame of a magnitude spectrum.

    Algorithm overview
    ------------------
    1. **Peak picking** – Bin ``i`` is a candidate when its level is above
       *amplitude_threshold_db*, strictly above both neighbours, and its
       frequency ``i * sample_rate / transform_size`` is below *max_frequency_hz*.

    2. **Ranking** – Candidates are ordered by descending amplitude. The sort is
       stable, so equally loud peaks keep ascending-frequency order.

    3. **Harmonic rejection** – Candidates are accepted greedily. A candidate
       whose frequency ratio to an already accepted fundamental lies within
       *harmonic_ratio_tolerance* of 2, 3 or 4 is skipped as an overtone.
       Acceptance stops after *max_fundamentals*.

    The greedy pass is not globally optimal: an overtone louder than its
    fundamental is accepted first (the fundamental then has ratio 0.5 and is
    accepted too), and non-integer ratios close to a harmonic can let spurious
    peaks through. Treat the result as approximate.
    """

    HARMONIC_RATIOS: tuple[int, ...] = (2, 3, 4)

    def __init__(
        self,
        amplitude_threshold_db: float = -40.0,
        max_frequency_hz: float = 1500.0,
        max_fundamentals: int = 3,
        harmonic_ratio_tolerance: float = 0.03,
    ) -> None:
        self.amplitude_threshold_db = amplitude_threshold_db
        self.max_frequency_hz = max_frequency_hz
        self.max_fundamentals = max_fundamentals
        self.harmonic_ratio_tolerance = harmonic_ratio_tolerance

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> SpectralPeakExtractor:
        return cls(
            amplitude_threshold_db=config.amplitude_threshold_db,
            max_frequency_hz=config.max_frequency_hz,
            max_fundamentals=config.max_fundamentals,
            harmonic_ratio_tolerance=config.harmonic_ratio_tolerance,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _is_harmonic(self, freq: float, fundamental: float) -> bool:
        ratio = freq / fundamental
        return any(abs(ratio - n) < self.harmonic_ratio_tolerance for n in self.HARMONIC_RATIOS)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def find_peaks(
        self,
        magnitudes_db: np.ndarray,
        sample_rate: float,
        transform_size: int,
    ) -> list[PitchCandidate]:
        """
        Return spectral peaks sorted by descending amplitude.

        Args:
            magnitudes_db:  1-D array of bin levels in dB (bin 0 = DC).
            sample_rate:    Sample rate of the analysed signal in Hz.
            transform_size: FFT size that produced the bins.
        """
        spectrum = np.asarray(magnitudes_db, dtype=float)
        if spectrum.ndim != 1 or spectrum.size < 3:
            return []

        inner = spectrum[1:-1]
        is_peak = (
            (inner > self.amplitude_threshold_db)
            & (inner > spectrum[:-2])
            & (inner > spectrum[2:])
        )
        bins = np.nonzero(is_peak)[0] + 1
        bin_width = sample_rate / transform_size

        candidates = [
            PitchCandidate(frequency_hz=float(i * bin_width), amplitude_db=float(spectrum[i]))
            for i in bins
            if i * bin_width < self.max_frequency_hz
        ]
        return sorted(candidates, key=lambda c: c.amplitude_db, reverse=True)

    def extract(
        self,
        magnitudes_db: np.ndarray,
        sample_rate: float,
        transform_size: int,
    ) -> list[float]:
        """
        Return up to *max_fundamentals* fundamental frequencies, loudest first.

        An empty list means no pitch was detected in this frame.
        """
        fundamentals: list[float] = []
        for candidate in self.find_peaks(magnitudes_db, sample_rate, transform_size):
            if len(fundamentals) >= self.max_fundamentals:
                break
            if any(self._is_harmonic(candidate.frequency_hz, f) for f in fundamentals):
                continue
            fundamentals.append(candidate.frequency_hz)

        logger.debug("Spectral fundamentals: %s", fundamentals)
        return fundamentals
