"""Keyed reconciliation of a baseline and a revision spreadsheet."""

__version__ = "0.1.0"
