"""Fuzzy song search and vocal range detection."""

__version__ = "0.1.0"
