"""ChordChangeTracker: segments a stream of detected notes into chord events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from chordtuner.chord_resolver import ChordNameResolver, Music21ChordResolver, resolve_chord_name

logger = logging.getLogger(__name__)


@dataclass
class ChordSegment:
    """
    A stretch of time during which the detected chord label stayed constant.

    Attributes:
        note_names: Notes as first detected, in detection order (e.g. ("C4", "E4")).
        start_time: Time the label first appeared, in seconds.
        end_time:   Time the label changed or analysis stopped. None while open.
        label:      Note or chord label the segment was opened with.
    """

    note_names: tuple[str, ...]
    start_time: float
    end_time: float | None = None
    label: str = ""

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    @property
    def duration(self) -> float | None:
        """Length in seconds, or None while the segment is still open."""
        if self.end_time is None:
            return None
        return self.end_time - self.start_time


def pitch_class_of(note_name: str) -> str:
    """Strip the octave from a note name ("C#4" -> "C#", "A-1" -> "A")."""
    return note_name.rstrip("0123456789").rstrip("-")


class ChordChangeTracker:
    """
    Maintains the chord history of one recognition session.

    Each call to :meth:`observe` receives the notes detected in one analysis
    tick. The notes are reduced to a label:

      - a single note  →  the note itself (e.g. "G4");
      - several notes  →  the resolver's name for their pitch classes, or "Unknown".

    Repeated note names within one tick are collapsed, keeping the first.

    When the label differs from the open segment's label, the open segment is
    closed at the tick's timestamp and a new one is opened. An unchanged label
    leaves the open segment untouched; its ``note_names`` keep the values from
    the first detection.

    Empty note sets (silence) change nothing, so a chord stays open across
    pauses. Setting *silence_close_after* closes the open segment once silence
    has lasted that long; the segment ends at the moment silence began.
    """

    def __init__(
        self,
        resolver: ChordNameResolver | None = None,
        silence_close_after: float | None = None,
    ) -> None:
        """
        Args:
            resolver:            Chord-name resolver for multi-note ticks.
                                 Defaults to :class:`Music21ChordResolver`.
            silence_close_after: Seconds of silence after which the open segment
                                 is closed. None keeps segments open through silence.
        """
        self.resolver: ChordNameResolver = resolver if resolver is not None else Music21ChordResolver()
        self.silence_close_after = silence_close_after
        self._history: list[ChordSegment] = []
        self._open: ChordSegment | None = None
        self._silence_started: float | None = None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _label_for(self, note_names: Sequence[str]) -> str:
        if len(note_names) == 1:
            return note_names[0]
        pitch_classes = list(dict.fromkeys(pitch_class_of(name) for name in note_names))
        return resolve_chord_name(self.resolver, pitch_classes)

    def _close_open(self, timestamp: float) -> None:
        if self._open is None:
            return
        self._open.end_time = max(timestamp, self._open.start_time)
        logger.info(
            "Closed segment %s (%.3fs - %.3fs)",
            self._open.label,
            self._open.start_time,
            self._open.end_time,
        )
        self._open = None

    def _observe_silence(self, timestamp: float) -> None:
        if self.silence_close_after is None or self._open is None:
            return
        if self._silence_started is None:
            self._silence_started = timestamp
        elif timestamp - self._silence_started >= self.silence_close_after:
            self._close_open(self._silence_started)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def history(self) -> tuple[ChordSegment, ...]:
        """All segments of the session, oldest first."""
        return tuple(self._history)

    @property
    def open_segment(self) -> ChordSegment | None:
        return self._open

    @property
    def current_label(self) -> str | None:
        return self._open.label if self._open is not None else None

    def observe(self, note_names: Sequence[str], timestamp: float) -> ChordSegment | None:
        """
        Record the notes detected at *timestamp*.

        Args:
            note_names: Detected notes, in detection order. May be empty.
            timestamp:  Tick time in seconds.

        Returns:
            The newly opened segment when the label changed, otherwise None.
        """
        note_names = list(dict.fromkeys(note_names))
        if not note_names:
            self._observe_silence(timestamp)
            return None
        self._silence_started = None

        label = self._label_for(note_names)
        if self._open is not None and label == self._open.label:
            return None

        self._close_open(timestamp)
        segment = ChordSegment(
            note_names=tuple(note_names),
            start_time=timestamp,
            end_time=None,
            label=label,
        )
        self._history.append(segment)
        self._open = segment
        logger.info("Opened segment %s at %.3fs", label, timestamp)
        return segment

    def finalize(self, timestamp: float) -> None:
        """Close the open segment, if any, at *timestamp*."""
        self._close_open(timestamp)
        self._silence_started = None

    def reset(self) -> None:
        """Forget all segments; used at the start of a recognition session."""
        self._history.clear()
        self._open = None
        self._silence_started = None
