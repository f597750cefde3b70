"""Delay keeper adapters.

This package provides a small abstraction layer so the transports depend on
an interface while the sliding-window bookkeeping lives in one place.
"""
