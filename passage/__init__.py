"""PASSAGE: hazard-aware voyage route optimization."""

__version__ = "1.0.0"
