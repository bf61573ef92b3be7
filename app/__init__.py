"""Streamly catalog service package."""
