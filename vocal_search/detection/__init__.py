"""Vocal range analysis and classification."""
