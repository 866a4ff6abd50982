"""HTTP API for devices and operators."""
