"""
Analysis configuration shared by every stage of a recognition session.

A single frozen dataclass carries all tunable constants so that each session
can be given its own overrides without touching module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Tunable constants for pitch estimation, chord tracking and quantization.

    Attributes:
        amplitude_threshold_db:   Spectral bins at or below this level are never peaks.
        max_frequency_hz:         Peaks at or above this frequency are ignored.
        max_fundamentals:         Upper bound on simultaneous fundamentals per frame.
        harmonic_ratio_tolerance: Distance from 2, 3 or 4 within which a peak is
                                  treated as a harmonic of an accepted fundamental.
        silence_rms_threshold:    Time-domain buffers quieter than this have no pitch.
        edge_trim_threshold:      Sample level used to trim buffer edges before
                                  autocorrelation.
        in_tune_tolerance_cents:  |cents| below this counts as in tune.
        tempo_bpm:                Fixed tempo used to turn seconds into beats.
        silence_close_after:      Seconds of silence after which the open chord
                                  segment is closed. ``None`` keeps it open.

    Example:
        >>> config = AnalysisConfig().with_overrides(tempo_bpm=90)
    """

    amplitude_threshold_db: float = -40.0
    max_frequency_hz: float = 1500.0
    max_fundamentals: int = 3
    harmonic_ratio_tolerance: float = 0.03
    silence_rms_threshold: float = 0.01
    edge_trim_threshold: float = 0.2
    in_tune_tolerance_cents: float = 5.0
    tempo_bpm: float = 120.0
    silence_close_after: float | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.max_frequency_hz <= 0:
            raise ValueError(f"max_frequency_hz must be positive, got {self.max_frequency_hz}")
        if self.max_fundamentals < 1:
            raise ValueError(f"max_fundamentals must be at least 1, got {self.max_fundamentals}")
        if self.harmonic_ratio_tolerance < 0:
            raise ValueError(
                f"harmonic_ratio_tolerance must be non-negative, got {self.harmonic_ratio_tolerance}"
            )
        if self.silence_rms_threshold < 0:
            raise ValueError(
                f"silence_rms_threshold must be non-negative, got {self.silence_rms_threshold}"
            )
        if self.in_tune_tolerance_cents < 0:
            raise ValueError(
                f"in_tune_tolerance_cents must be non-negative, got {self.in_tune_tolerance_cents}"
            )
        if self.tempo_bpm <= 0:
            raise ValueError(f"tempo_bpm must be positive, got {self.tempo_bpm}")
        if self.silence_close_after is not None and self.silence_close_after < 0:
            raise ValueError(
                f"silence_close_after must be non-negative, got {self.silence_close_after}"
            )

    def with_overrides(self, **overrides: Any) -> AnalysisConfig:
        """Return a copy with the given fields replaced (and re-validated)."""
        return replace(self, **overrides)
