"""Turni - deterministic shift scheduling and rest-day engine for team staffing."""

__version__ = "0.1.0"
