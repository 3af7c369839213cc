"""RecognitionSession: the tick-driven pipeline from sample buffers to chord history."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

import numpy as np

from chordtuner.autocorrelation import AutocorrelationPitchEstimator
from chordtuner.chord_resolver import ChordNameResolver
from chordtuner.chord_tracker import ChordChangeTracker, ChordSegment
from chordtuner.config import AnalysisConfig
from chordtuner.duration_quantizer import DurationQuantizer
from chordtuner.notation_layout import NotationLine, NotationLineLayout
from chordtuner.note_mapper import FrequencyNoteMapper, Pitch, TuningStatus
from chordtuner.peak_extractor import SpectralPeakExtractor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpectrumFrame:
    """One frame of magnitudes in dB, indexed by FFT bin."""

    magnitudes_db: np.ndarray
    sample_rate: float
    transform_size: int


@dataclass(frozen=True)
class WaveformFrame:
    """One buffer of time-domain samples."""

    samples: np.ndarray
    sample_rate: float


Frame = Union[SpectrumFrame, WaveformFrame]


@dataclass(frozen=True)
class TickResult:
    """
    What one analysis tick detected.

    Attributes:
        pitches: Detected pitches, strongest first. Empty when no pitch was found.
        label:   Note or chord label of the open segment after this tick.
        tuning:  Tuning status of the strongest pitch, if any.
    """

    pitches: tuple[Pitch, ...] = field(default_factory=tuple)
    label: str | None = None
    tuning: TuningStatus | None = None

    @property
    def has_pitch(self) -> bool:
        return bool(self.pitches)

    @property
    def note_names(self) -> list[str]:
        return [pitch.note_name for pitch in self.pitches]


class RecognitionSession:
    """
    Owns all per-session state: configuration, chord history and lifecycle.

    The session never schedules itself. An external driver calls :meth:`tick`
    once per analysis frame with the frame's timestamp:

        session = RecognitionSession(AnalysisConfig(tempo_bpm=90))
        session.start()
        for timestamp, frame in source:
            session.tick(frame, timestamp)
        session.stop(end_time)
        lines = session.notation_lines(max_per_line=8)

    Spectrum frames yield up to ``max_fundamentals`` pitches; waveform frames
    yield at most one. A ``None`` frame (input unavailable) is skipped.
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        resolver: ChordNameResolver | None = None,
    ) -> None:
        self.config = config if config is not None else AnalysisConfig()
        self.mapper = FrequencyNoteMapper.from_config(self.config)
        self.peak_extractor = SpectralPeakExtractor.from_config(self.config)
        self.pitch_estimator = AutocorrelationPitchEstimator.from_config(self.config)
        self.tracker = ChordChangeTracker(
            resolver=resolver,
            silence_close_after=self.config.silence_close_after,
        )
        self.quantizer = DurationQuantizer.from_config(self.config)
        self.layout = NotationLineLayout(self.quantizer)
        self.running = False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _frequencies(self, frame: Frame) -> list[float]:
        if isinstance(frame, SpectrumFrame):
            return self.peak_extractor.extract(
                frame.magnitudes_db, frame.sample_rate, frame.transform_size
            )
        freq = self.pitch_estimator.estimate(frame.samples, frame.sample_rate)
        return [] if freq is None else [freq]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin a new session, discarding any previous history."""
        self.tracker.reset()
        self.running = True
        logger.info("Recognition session started (tempo %.1f BPM)", self.config.tempo_bpm)

    def stop(self, now: float) -> None:
        """Close the open segment at *now* and stop accepting ticks."""
        self.tracker.finalize(now)
        self.running = False
        logger.info("Recognition session stopped with %d segment(s)", len(self.tracker.history))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def history(self) -> tuple[ChordSegment, ...]:
        return self.tracker.history

    def tick(self, frame: Frame | None, timestamp: float) -> TickResult:
        """
        Analyse one frame and update the chord history.

        Args:
            frame:     Spectrum or waveform frame, or None when the source had
                       nothing to deliver for this tick.
            timestamp: Frame time in seconds.

        Returns:
            The pitches detected in this frame and the resulting label.
        """
        if not self.running:
            logger.warning("Ignoring tick at %.3fs: session is not running", timestamp)
            return TickResult()
        if frame is None:
            logger.debug("No input at %.3fs; skipping tick", timestamp)
            return TickResult(label=self.tracker.current_label)

        detected: dict[str, Pitch] = {}
        for freq in self._frequencies(frame):
            pitch = self.mapper.frequency_to_pitch(freq)
            # Two peaks can round to the same note; the louder one comes first.
            if pitch is not None and pitch.note_name not in detected:
                detected[pitch.note_name] = pitch
        pitches = tuple(detected.values())
        self.tracker.observe([pitch.note_name for pitch in pitches], timestamp)

        tuning = self.mapper.tuning_status(pitches[0].cents_offset) if pitches else None
        return TickResult(pitches=pitches, label=self.tracker.current_label, tuning=tuning)

    def notation_lines(self, max_per_line: int, now: float | None = None) -> list[NotationLine]:
        """Lay out the current history; see :meth:`NotationLineLayout.layout`."""
        return self.layout.layout(self.tracker.history, max_per_line, now=now)
