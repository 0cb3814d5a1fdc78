"""Application layer - configuration, run orchestration, and the CLI."""
