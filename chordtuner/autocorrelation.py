"""AutocorrelationPitchEstimator: single-pitch detection from a time-domain buffer."""

from __future__ import annotations

import logging

import numpy as np

from chordtuner.config import AnalysisConfig

logger = logging.getLogger(__name__)


class AutocorrelationPitchEstimator:
    """
    Estimates one fundamental frequency by searching for the signal's period.

    Algorithm overview
    ------------------
    1. **Silence gate** – Buffers whose RMS is below *silence_rms_threshold*
       have no pitch.

    2. **Edge trim** – The start index advances while samples are below
       *edge_trim_threshold* (up to the middle of the buffer) and the end index
       retreats the same way. This is a windowing heuristic, not onset detection.

    3. **Autocorrelation** – ``c[i] = sum_j buf[j] * buf[j + i]`` for every lag
       of the trimmed buffer (unnormalized).

    4. **Peak search** – The initial descending slope from lag 0 is skipped;
       the first lag with the largest value after it is the period ``T0``.

    The estimate is ``sample_rate / T0``. The autocorrelation is O(n²) in the
    buffer length, which is fine for analysis windows of a few thousand samples
    but grows quickly for longer buffers.
    """

    def __init__(
        self,
        silence_rms_threshold: float = 0.01,
        edge_trim_threshold: float = 0.2,
    ) -> None:
        """
        Args:
            silence_rms_threshold: RMS level below which a buffer counts as silent.
            edge_trim_threshold:   Sample level used to trim both buffer edges.
        """
        self.silence_rms_threshold = silence_rms_threshold
        self.edge_trim_threshold = edge_trim_threshold

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> AutocorrelationPitchEstimator:
        return cls(
            silence_rms_threshold=config.silence_rms_threshold,
            edge_trim_threshold=config.edge_trim_threshold,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _trim(self, buf: np.ndarray) -> np.ndarray:
        size = buf.size
        start, end = 0, size - 1
        while start < size / 2 and buf[start] < self.edge_trim_threshold:
            start += 1
        while end > size / 2 and buf[end] < self.edge_trim_threshold:
            end -= 1
        return buf[start:end]

    @staticmethod
    def _autocorrelate(buf: np.ndarray) -> np.ndarray:
        """Unnormalized autocorrelation for lags 0 .. len(buf) - 1."""
        return np.correlate(buf, buf, mode="full")[buf.size - 1:]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def rms(samples: np.ndarray) -> float:
        buf = np.asarray(samples, dtype=float)
        if buf.size == 0:
            return 0.0
        return float(np.sqrt(np.mean(buf * buf)))

    def estimate(self, samples: np.ndarray, sample_rate: float) -> float | None:
        """
        Estimate the fundamental frequency of a time-domain buffer.

        Args:
            samples:     1-D array of samples, nominally in [-1, 1].
            sample_rate: Sample rate in Hz.

        Returns:
            Frequency in Hz, or None when no pitch is detected (silence,
            sub-threshold signal or a degenerate autocorrelation).
        """
        buf = np.asarray(samples, dtype=float)
        if buf.ndim != 1 or buf.size == 0:
            return None

        if self.rms(buf) < self.silence_rms_threshold:
            return None

        trimmed = self._trim(buf)
        if trimmed.size < 2:
            return None

        corr = self._autocorrelate(trimmed)

        d = 0
        while d + 1 < corr.size and corr[d] > corr[d + 1]:
            d += 1

        tail = corr[d:]
        offset = int(np.argmax(tail))
        if tail[offset] <= -1:
            return None

        period = d + offset
        if period <= 0:
            return None

        freq = sample_rate / period
        logger.debug("Autocorrelation period %d samples -> %.2f Hz", period, freq)
        return float(freq)
