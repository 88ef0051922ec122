"""Cinebook: cinema seat reservation and booking API."""

__version__ = "1.0.0"
