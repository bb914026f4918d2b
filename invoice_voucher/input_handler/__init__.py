"""
Input Handler Module.

Loads invoice documents (PDF or scanned image), detects their media type
and checks their integrity before extraction.
"""

from .handler import InputHandler, InputDocument
from .image_processor import ImageProcessor

__all__ = ['InputHandler', 'InputDocument', 'ImageProcessor']
