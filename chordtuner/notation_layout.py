"""NotationLineLayout: wraps a chord history into fixed-width notation lines."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from chordtuner.chord_tracker import ChordSegment
from chordtuner.duration_quantizer import DurationQuantizer, DurationValue

# Horizontal space reserved per notated chord, and the stave's left/right margin.
DEFAULT_NOTE_SPACING = 80
DEFAULT_LINE_MARGIN = 20


@dataclass(frozen=True)
class NotationEntry:
    """One closed segment together with its quantized duration."""

    segment: ChordSegment
    duration: DurationValue

    @property
    def note_names(self) -> tuple[str, ...]:
        return self.segment.note_names

    @property
    def duration_symbol(self) -> str:
        return self.duration.symbol


@dataclass(frozen=True)
class NotationLine:
    """A single stave's worth of entries, in history order."""

    entries: tuple[NotationEntry, ...]

    def __len__(self) -> int:
        return len(self.entries)


def max_per_line_for_width(
    width: int,
    note_spacing: int = DEFAULT_NOTE_SPACING,
    margin: int = DEFAULT_LINE_MARGIN,
) -> int:
    """Number of entries that fit on a line *width* units wide (never less than 1)."""
    if note_spacing <= 0:
        raise ValueError(f"note_spacing must be positive, got {note_spacing}")
    return max(1, (width - margin) // note_spacing)


class NotationLineLayout:
    """
    Stateless layout of chord segments into notation lines.

    Every call rebuilds the lines from scratch; nothing is cached between calls.
    """

    def __init__(self, quantizer: DurationQuantizer | None = None) -> None:
        self.quantizer = quantizer if quantizer is not None else DurationQuantizer()

    def _closed_segments(
        self, segments: Iterable[ChordSegment], now: float | None
    ) -> list[tuple[ChordSegment, float]]:
        closed: list[tuple[ChordSegment, float]] = []
        for segment in segments:
            if segment.end_time is not None:
                closed.append((segment, segment.end_time))
            elif now is not None:
                end_time = max(now, segment.start_time)
                closed.append((replace(segment, end_time=end_time), end_time))
        return closed

    def layout(
        self,
        segments: Iterable[ChordSegment],
        max_per_line: int,
        now: float | None = None,
    ) -> list[NotationLine]:
        """
        Chunk *segments* into lines of at most *max_per_line* entries.

        Args:
            segments:     Chord history, oldest first.
            max_per_line: Maximum entries per line (at least 1).
            now:          If given, an open segment is laid out as if it ended
                          at *now*; the segment itself is not modified. If None,
                          open segments are left out.
        """
        if max_per_line < 1:
            raise ValueError(f"max_per_line must be at least 1, got {max_per_line}")

        entries: list[NotationEntry] = []
        for segment, end_time in self._closed_segments(segments, now):
            elapsed = end_time - segment.start_time
            entries.append(NotationEntry(segment=segment, duration=self.quantizer.quantize(elapsed)))

        return [
            NotationLine(entries=tuple(entries[i:i + max_per_line]))
            for i in range(0, len(entries), max_per_line)
        ]
