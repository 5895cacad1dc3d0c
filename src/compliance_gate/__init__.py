"""Compliance gate: evaluates security-scanner artifacts against policy controls."""

__version__ = "1.0.0"
