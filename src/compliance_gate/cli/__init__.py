"""Command line interface for the compliance gate."""
