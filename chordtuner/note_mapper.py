"""FrequencyNoteMapper: converts between frequencies, MIDI numbers and note names."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum

from chordtuner.config import AnalysisConfig
from chordtuner.errors import MalformedNoteNameError

# Chromatic pitch class names (index 0 = C)
NOTE_NAMES: list[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

A4_FREQUENCY = 440.0
A4_MIDI = 69
SEMITONES_PER_OCTAVE = 12
CENTS_PER_OCTAVE = 1200

_PITCH_CLASS_RE = re.compile(r"^[A-G]#?$")
_NOTE_RE = re.compile(r"^([A-G]#?)(-?\d+)$")


class TuningStatus(Enum):
    """How a measured pitch sits relative to its equal-tempered target."""

    FLAT = "flat"
    IN_TUNE = "in tune"
    SHARP = "sharp"


@dataclass(frozen=True)
class Pitch:
    """
    A measured frequency snapped to the nearest equal-tempered note.

    Attributes:
        frequency_hz: The measured frequency.
        note_name:    Scientific pitch notation, e.g. "C#4".
        midi_number:  Nearest MIDI note number (A4 = 69).
        cents_offset: Deviation of the measurement from the note, in cents.
    """

    frequency_hz: float
    note_name: str
    midi_number: int
    cents_offset: float

    @property
    def pitch_class(self) -> str:
        """Note name without the octave, e.g. "C#"."""
        return NOTE_NAMES[self.midi_number % SEMITONES_PER_OCTAVE]

    @property
    def octave(self) -> int:
        return self.midi_number // SEMITONES_PER_OCTAVE - 1


def midi_to_note_name(midi: int) -> str:
    """Return the scientific pitch name of a MIDI number (60 -> "C4")."""
    octave = midi // SEMITONES_PER_OCTAVE - 1
    return f"{NOTE_NAMES[midi % SEMITONES_PER_OCTAVE]}{octave}"


def midi_to_frequency(midi: int) -> float:
    """Equal-tempered frequency of a MIDI number, tuned to A4 = 440 Hz."""
    return A4_FREQUENCY * 2 ** ((midi - A4_MIDI) / SEMITONES_PER_OCTAVE)


def split_note_name(note: str) -> tuple[str, int]:
    """
    Split "C#4" into ("C#", 4).

    Raises:
        MalformedNoteNameError: If *note* is not a pitch class followed by an octave.
    """
    match = _NOTE_RE.match(note)
    if match is None:
        raise MalformedNoteNameError(f"Malformed note name '{note}'. Expected e.g. 'A4' or 'C#3'.")
    return match.group(1), int(match.group(2))


class FrequencyNoteMapper:
    """
    Pure conversions between frequency, MIDI number, note name and cents.

    The only state is the in-tune tolerance used by :meth:`tuning_status`.
    """

    DEFAULT_IN_TUNE_TOLERANCE_CENTS = 5.0

    def __init__(self, in_tune_tolerance_cents: float = DEFAULT_IN_TUNE_TOLERANCE_CENTS) -> None:
        """
        Args:
            in_tune_tolerance_cents: Absolute cents deviation below which a pitch
                                     is reported as in tune.
        """
        self.in_tune_tolerance_cents = in_tune_tolerance_cents

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> FrequencyNoteMapper:
        return cls(in_tune_tolerance_cents=config.in_tune_tolerance_cents)

    def frequency_to_pitch(self, freq: float) -> Pitch | None:
        """
        Snap a frequency to the nearest note.

        Returns:
            The Pitch, or None when *freq* is not a positive finite number.
        """
        if not math.isfinite(freq) or freq <= 0:
            return None

        midi = round(SEMITONES_PER_OCTAVE * math.log2(freq / A4_FREQUENCY) + A4_MIDI)
        return Pitch(
            frequency_hz=freq,
            note_name=midi_to_note_name(midi),
            midi_number=midi,
            cents_offset=self.cents_offset(freq, midi_to_frequency(midi)),
        )

    def pitch_to_frequency(self, note_name: str, octave: int) -> float:
        """
        Equal-tempered frequency of a pitch class in a given octave.

        Raises:
            MalformedNoteNameError: If *note_name* is not ``[A-G]#?`` or *octave*
                                    is not an integer.
        """
        if not isinstance(note_name, str) or not _PITCH_CLASS_RE.match(note_name):
            raise MalformedNoteNameError(f"Malformed pitch class '{note_name}'.")
        if isinstance(octave, bool) or not isinstance(octave, int):
            raise MalformedNoteNameError(f"Octave must be an integer, got {octave!r}.")

        midi = NOTE_NAMES.index(note_name) + (octave + 1) * SEMITONES_PER_OCTAVE
        return midi_to_frequency(midi)

    def note_to_frequency(self, note: str) -> float:
        """Frequency of a combined note name such as "A4" or "C#-1"."""
        name, octave = split_note_name(note)
        return self.pitch_to_frequency(name, octave)

    def note_to_midi(self, note: str) -> int:
        name, octave = split_note_name(note)
        return NOTE_NAMES.index(name) + (octave + 1) * SEMITONES_PER_OCTAVE

    @staticmethod
    def cents_offset(freq: float, reference_freq: float) -> float:
        """Interval from *reference_freq* to *freq* in cents (1200 per octave)."""
        return CENTS_PER_OCTAVE * math.log2(freq / reference_freq)

    def tuning_status(self, cents: float) -> TuningStatus:
        if abs(cents) < self.in_tune_tolerance_cents:
            return TuningStatus.IN_TUNE
        if cents < 0:
            return TuningStatus.FLAT
        return TuningStatus.SHARP
