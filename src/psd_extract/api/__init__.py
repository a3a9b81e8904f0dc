"""
High-level user-facing API.
"""

from .psd_image import Layer as Layer
from .psd_image import PSDImage as PSDImage

__all__ = ["PSDImage", "Layer"]
