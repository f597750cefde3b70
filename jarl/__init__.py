"""Sliding-window delay service."""

__version__ = "0.1.0"
