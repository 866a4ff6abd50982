"""iClock API - command broker for polling attendance terminals."""

__version__ = "1.0.0"
