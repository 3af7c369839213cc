"""Tests for the music21-backed chord resolver."""

import pytest

from chordtuner.chord_resolver import Music21ChordResolver

pytest.importorskip("music21")


def test_major_triad() -> None:
    assert Music21ChordResolver()(["C", "E", "G"]) == "C"


def test_minor_triad() -> None:
    assert Music21ChordResolver()(["A", "C", "E"]) == "Am"


def test_empty_input_has_no_name() -> None:
    assert Music21ChordResolver()([]) is None
