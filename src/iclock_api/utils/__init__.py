"""Utility helpers for iClock API."""

from .logging import setup_logging

__all__ = ["setup_logging"]
