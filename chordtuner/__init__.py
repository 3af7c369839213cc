"""chordtuner: live pitch, tuning and chord-change detection for notation."""

__version__ = "0.1.0"
