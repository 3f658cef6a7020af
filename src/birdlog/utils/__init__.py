"""Shared helpers for birdlog."""
