"""civicpulse: decayed, confidence-weighted democracy index from political events."""

__version__ = "0.3.0"
