"""Pitch sources.

The microphone and wav sources need the optional ``audio`` extra; import
them from their modules directly.
"""

from .synthetic import SyntheticPitchSource

__all__ = ["SyntheticPitchSource"]
