"""HTTP API for Coffee."""
