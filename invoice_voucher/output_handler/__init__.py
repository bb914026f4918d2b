"""
Output Handler Module.

Writes Tally XML files and JSON response documents.
"""

from .handler import OutputHandler

__all__ = ['OutputHandler']
