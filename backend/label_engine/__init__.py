"""Label field alignment and verification engine."""

__version__ = "1.0.0"
