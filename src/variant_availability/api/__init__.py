"""HTTP API for the availability engine."""
