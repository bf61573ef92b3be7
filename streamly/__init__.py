"""Command-line launcher for the Streamly catalog service."""

__version__ = "1.0.0"
