"""Data models passed from the notation layout to the sheet renderers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class VexflowNote:
    """One chord or single note as VexFlow expects it (keys like "c#/4")."""

    keys: list[str]
    duration: str
    accidentals: list[str | None]
    label: str = ""


@dataclass(frozen=True)
class VexflowLine:
    """All notes drawn on one treble stave."""

    notes: list[VexflowNote]


@dataclass(frozen=True)
class ScoreDocument:
    """Renderer-neutral score built from notation lines."""

    title: str
    tempo_bpm: float
    lines: list[VexflowLine]
