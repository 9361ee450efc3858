"""Command-line interface for the PLEVA diary."""
