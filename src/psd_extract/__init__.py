"""
psd-extract: Python package for extracting layer images from Adobe Photoshop
PSD files.

Basic usage::

    from psd_extract import PSDImage

    psd = PSDImage.open('example.psd')

    for index, layer in enumerate(psd):
        image = layer.topil()
        if image is not None:
            image.save('layer%d.png' % index)

Architecture:

- :py:mod:`psd_extract.psd`: Low-level binary structure parsing
- :py:mod:`psd_extract.api`: High-level user-facing API (primary interface)
- :py:mod:`psd_extract.composite`: Channel compositing into RGBA rasters
- :py:mod:`psd_extract.compression`: Channel compression codecs (RLE)

Advanced users can access low-level structures via the ``_record`` attribute.
"""

from psd_extract.api.psd_image import PSDImage
from psd_extract.version import __version__

__all__ = ["PSDImage", "__version__"]
