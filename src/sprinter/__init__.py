"""Sprinter: project, sprint and work-item tracking core."""

__version__ = "0.4.0"
