"""Tests for MidiExporter."""

from chordtuner.chord_tracker import ChordSegment
from chordtuner.midi_exporter import MidiExporter


def test_export_writes_standard_midi_file(tmp_path) -> None:
    segments = [
        ChordSegment(note_names=("C4", "E4", "G4"), start_time=3.0, end_time=4.0, label="C"),
        ChordSegment(note_names=("A3",), start_time=4.0, end_time=5.0, label="A3"),
    ]
    out = tmp_path / "chords.mid"

    written = MidiExporter(tempo=90).export(segments, str(out))

    assert written == 2
    assert out.read_bytes().startswith(b"MThd")


def test_open_segments_are_skipped(tmp_path) -> None:
    segments = [
        ChordSegment(note_names=("C4",), start_time=0.0, end_time=1.0, label="C4"),
        ChordSegment(note_names=("D4",), start_time=1.0, label="D4"),
    ]
    out = tmp_path / "chords.mid"

    assert MidiExporter().export(segments, str(out)) == 1
    assert out.exists()


def test_zero_length_segments_are_not_counted(tmp_path) -> None:
    segments = [
        ChordSegment(note_names=("C4",), start_time=0.0, end_time=1.0, label="C4"),
        ChordSegment(note_names=("D4",), start_time=1.0, end_time=1.0, label="D4"),
        ChordSegment(note_names=("E4",), start_time=1.0, end_time=2.0, label="E4"),
    ]
    out = tmp_path / "chords.mid"

    assert MidiExporter().export(segments, str(out)) == 2
