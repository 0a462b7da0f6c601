"""Command line client for the RRI protocol."""

__version__ = "0.1.0"
