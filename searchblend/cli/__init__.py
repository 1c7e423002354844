"""Command-line interface for searchblend."""
