"""Trainer presence and booking-request lifecycle core."""

__version__ = "0.1.0"
