"""DurationQuantizer: snaps elapsed seconds to a notated note value."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from chordtuner.config import AnalysisConfig


@dataclass(frozen=True)
class DurationValue:
    """
    A notated duration.

    Attributes:
        beats:   Length in quarter-note beats.
        symbol:  Name of the value, e.g. "dotted-quarter".
        vexflow: VexFlow duration code, e.g. "qd".
    """

    beats: float
    symbol: str
    vexflow: str


# Ordered longest first; on an exact tie the earlier entry wins.
DURATION_TABLE: Final[tuple[DurationValue, ...]] = (
    DurationValue(4.0, "whole", "w"),
    DurationValue(2.0, "half", "h"),
    DurationValue(1.5, "dotted-quarter", "qd"),
    DurationValue(1.0, "quarter", "q"),
    DurationValue(0.666, "triplet-eighth", "8t"),
    DurationValue(0.5, "eighth", "8"),
    DurationValue(0.25, "sixteenth", "16"),
)


class DurationQuantizer:
    """Quantize wall-clock durations to the nearest entry of DURATION_TABLE at a fixed tempo."""

    DEFAULT_TEMPO = 120.0

    def __init__(self, tempo_bpm: float = DEFAULT_TEMPO) -> None:
        if tempo_bpm <= 0:
            raise ValueError(f"tempo_bpm must be positive, got {tempo_bpm}")
        self.tempo_bpm = tempo_bpm

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> DurationQuantizer:
        return cls(tempo_bpm=config.tempo_bpm)

    @property
    def beat_seconds(self) -> float:
        """Duration of one beat in seconds."""
        return 60.0 / self.tempo_bpm

    def seconds_to_beats(self, seconds: float) -> float:
        return seconds / self.beat_seconds

    def quantize_beats(self, beats: float) -> DurationValue:
        # min() keeps the first of equally close entries.
        return min(DURATION_TABLE, key=lambda value: abs(beats - value.beats))

    def quantize(self, elapsed_seconds: float) -> DurationValue:
        """
        Return the table entry closest to *elapsed_seconds*.

        Durations beyond the table clamp to a whole note or a sixteenth.
        """
        return self.quantize_beats(self.seconds_to_beats(elapsed_seconds))

    def symbol_for(self, elapsed_seconds: float) -> str:
        return self.quantize(elapsed_seconds).symbol
