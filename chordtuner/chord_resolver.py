"""Chord-name resolution for sets of pitch classes."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

logger = logging.getLogger(__name__)

#: Label used when no chord name can be resolved.
UNKNOWN_CHORD = "Unknown"

# music21 returns this string instead of raising when nothing matches.
_MUSIC21_UNIDENTIFIED = "Chord Symbol Cannot Be Identified"


class ChordNameResolver(Protocol):
    """Anything that maps pitch classes (e.g. ["C", "E", "G"]) to a chord name."""

    def __call__(self, pitch_classes: Sequence[str]) -> str | None:
        """Return the best-guess chord name, or None when no name is found."""


class Music21ChordResolver:
    """
    Resolve chord symbols with music21's harmony module.

    The first pitch class is voiced as the bass, the rest above it, so
    ``["A", "C", "E"] -> "Am"`` while ``["C", "E", "A"]`` may come back as an
    inversion. music21's figure is taken as authoritative.
    """

    @staticmethod
    def _voice(pitch_classes: Sequence[str]) -> list[str]:
        return [f"{pitch_classes[0]}3"] + [f"{pc}4" for pc in pitch_classes[1:]]

    def __call__(self, pitch_classes: Sequence[str]) -> str | None:
        if not pitch_classes:
            return None

        from music21 import chord, harmony

        figure = harmony.chordSymbolFigureFromChord(chord.Chord(self._voice(pitch_classes)))
        if not figure or figure == _MUSIC21_UNIDENTIFIED:
            return None
        return str(figure)


def resolve_chord_name(resolver: ChordNameResolver, pitch_classes: Sequence[str]) -> str:
    """Call *resolver*, turning exceptions and empty answers into ``UNKNOWN_CHORD``."""
    try:
        name = resolver(pitch_classes)
    except Exception as exc:
        logger.warning("Chord resolver failed for %s: %s", list(pitch_classes), exc)
        return UNKNOWN_CHORD
    return name or UNKNOWN_CHORD
