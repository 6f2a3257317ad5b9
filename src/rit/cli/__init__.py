"""Command-line interface for Rit."""
