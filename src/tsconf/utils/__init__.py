"""Miscellaneous helpers shared across the tsconf package."""
