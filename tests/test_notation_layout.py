"""Unit tests for NotationLineLayout."""

import pytest

from chordtuner.chord_tracker import ChordSegment
from chordtuner.notation_layout import NotationLineLayout, max_per_line_for_width


def _closed(count: int, length: float = 0.5) -> list[ChordSegment]:
    return [
        ChordSegment(note_names=(f"C{i}",), start_time=i * length, end_time=(i + 1) * length, label=f"C{i}")
        for i in range(count)
    ]


def test_seven_segments_three_per_line() -> None:
    segments = _closed(7)
    lines = NotationLineLayout().layout(segments, max_per_line=3)

    assert [len(line) for line in lines] == [3, 3, 1]
    flattened = [entry.segment for line in lines for entry in line.entries]
    assert flattened == segments


def test_durations_are_quantized_with_session_tempo() -> None:
    lines = NotationLineLayout().layout(_closed(1, length=1.0), max_per_line=4)
    assert lines[0].entries[0].duration_symbol == "half"
    assert lines[0].entries[0].note_names == ("C0",)


def test_open_segment_is_omitted_without_now() -> None:
    segments = _closed(2) + [ChordSegment(note_names=("G4",), start_time=1.0, label="G4")]
    lines = NotationLineLayout().layout(segments, max_per_line=5)
    assert sum(len(line) for line in lines) == 2


def test_open_segment_is_provisionally_closed_at_now() -> None:
    open_segment = ChordSegment(note_names=("G4",), start_time=1.0, label="G4")
    lines = NotationLineLayout().layout(_closed(2) + [open_segment], max_per_line=5, now=3.0)

    last = lines[-1].entries[-1]
    assert last.segment.end_time == 3.0
    assert last.duration_symbol == "whole"
    assert open_segment.end_time is None


def test_empty_history_has_no_lines() -> None:
    assert NotationLineLayout().layout([], max_per_line=3) == []


def test_max_per_line_must_be_positive() -> None:
    with pytest.raises(ValueError):
        NotationLineLayout().layout(_closed(2), max_per_line=0)


def test_max_per_line_for_width() -> None:
    assert max_per_line_for_width(800) == 9
    assert max_per_line_for_width(260) == 3
    assert max_per_line_for_width(50) == 1


def test_segment_ending_at_zero_is_laid_out() -> None:
    segment = ChordSegment(note_names=("C4",), start_time=0.0, end_time=0.0, label="C4")
    lines = NotationLineLayout().layout([segment], max_per_line=2)

    assert lines[0].entries[0].segment is segment
    assert lines[0].entries[0].duration_symbol == "sixteenth"


def test_now_before_open_segment_start_is_clamped() -> None:
    open_segment = ChordSegment(note_names=("G4",), start_time=2.0, label="G4")
    lines = NotationLineLayout().layout([open_segment], max_per_line=2, now=1.0)

    assert lines[0].entries[0].segment.end_time == 2.0
    assert lines[0].entries[0].duration_symbol == "sixteenth"
