"""Application layer: wiring, use cases and command-line startup."""
