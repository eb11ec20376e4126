"""HTTP API for the game service."""
