"""HTTP API for the training analytics engine."""
