"""SheetExporter: writes notation lines as HTML (verovio) or Markdown (VexFlow)."""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import Any, Final, Sequence

from chordtuner.notation_layout import NotationEntry, NotationLine
from chordtuner.note_mapper import FrequencyNoteMapper, split_note_name
from chordtuner.sheet_models import ScoreDocument, VexflowLine, VexflowNote
from chordtuner.sheet_renderers import (
    SheetRenderer,
    VerovioHtmlRenderer,
    VexflowMarkdownRenderer,
)

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: Final[set[str]] = {"html", "md-vexflow"}


class SheetExporter:
    """
    Convert notation lines into sheet output via a pluggable renderer.

    Supported formats:
    - ``html``: music21 score -> MusicXML -> verovio SVG inside an HTML page.
    - ``md-vexflow``: Markdown with an embedded VexFlow script, one stave per line.
    """

    # Largest denominator needed by the duration table (triplets -> thirds, sixteenths -> quarters).
    _MAX_DENOMINATOR = 12

    def __init__(self, title: str = "", output_format: str = "html", tempo_bpm: float = 120.0) -> None:
        self.title = title
        self.tempo_bpm = tempo_bpm
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        self.output_format = normalized
        self.renderer = self._build_renderer(normalized)
        self._mapper = FrequencyNoteMapper()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_renderer(self, output_format: str) -> SheetRenderer:
        if output_format == "html":
            return VerovioHtmlRenderer()
        return VexflowMarkdownRenderer()

    def _note_to_key(self, note_name: str) -> str:
        name, octave = split_note_name(note_name)
        return f"{name.lower()}/{octave}"

    def _extract_accidental(self, key: str) -> str | None:
        return "#" if "#" in key.split("/", maxsplit=1)[0] else None

    def _entry_to_note(self, entry: NotationEntry) -> VexflowNote:
        names = list(dict.fromkeys(entry.note_names))
        keys = [self._note_to_key(name) for name in names]
        return VexflowNote(
            keys=keys,
            duration=entry.duration.vexflow,
            accidentals=[self._extract_accidental(key) for key in keys],
            label=entry.segment.label if len(names) > 1 else "",
        )

    def _quarter_length(self, entry: NotationEntry) -> Fraction:
        return Fraction(entry.duration.beats).limit_denominator(self._MAX_DENOMINATOR)

    def _lines_to_score(self, lines: Sequence[NotationLine]) -> Any:
        from music21 import chord, expressions, layout, metadata, note, stream, tempo

        part = stream.Part()
        part.append(tempo.MetronomeMark(number=self.tempo_bpm))
        for line_index, line in enumerate(lines):
            if line_index > 0:
                part.append(layout.SystemLayout(isNew=True))
            for entry in line.entries:
                names = list(dict.fromkeys(entry.note_names))
                midi_numbers = [self._mapper.note_to_midi(name) for name in names]
                element = note.Note(midi_numbers[0]) if len(names) == 1 else chord.Chord(midi_numbers)
                element.duration.quarterLength = self._quarter_length(entry)
                if entry.segment.label and len(names) > 1:
                    element.expressions.append(expressions.TextExpression(entry.segment.label))
                part.append(element)

        score = stream.Score()
        score.metadata = metadata.Metadata(title=self.title)
        score.insert(0, part)
        return score

    def _score_to_musicxml_bytes(self, score: Any) -> bytes:
        from music21.musicxml.m21ToXml import GeneralObjectExporter

        return GeneralObjectExporter(score).parse()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_document(self, lines: Sequence[NotationLine]) -> ScoreDocument:
        """Convert notation lines into the renderer-neutral ScoreDocument."""
        return ScoreDocument(
            title=self.title,
            tempo_bpm=self.tempo_bpm,
            lines=[VexflowLine(notes=[self._entry_to_note(e) for e in line.entries]) for line in lines],
        )

    def render(self, lines: Sequence[NotationLine]) -> str:
        """
        Render notation lines in the selected format.

        Raises:
            ValueError: If there is nothing to render or the renderer fails.
        """
        if not lines:
            raise ValueError("No closed chord segments to render.")

        if self.output_format == "html":
            return self.renderer.render(
                title=self.title,
                musicxml_bytes=self._score_to_musicxml_bytes(self._lines_to_score(lines)),
            )
        return self.renderer.render(title=self.title, score_document=self.build_document(lines))

    def export(self, lines: Sequence[NotationLine], output_path: str) -> None:
        """
        Render notation lines and write them to disk.

        Raises:
            ValueError: If rendering fails or there is nothing to render.
            OSError: If the output file cannot be written.
        """
        content = self.render(lines)
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(content)
        logger.info("Wrote %s sheet with %d line(s) to %s", self.output_format, len(lines), output_path)
