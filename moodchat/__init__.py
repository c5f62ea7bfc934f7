"""MoodChat - real-time presence & message routing service."""

__version__ = "1.0.0"
