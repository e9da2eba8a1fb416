"""
Slot availability and round-robin staff assignment for booking links.
"""

__version__ = "0.1.0"
