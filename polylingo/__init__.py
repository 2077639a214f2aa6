"""PolyLingo multi-target translation service."""

__version__ = "1.0.0"
