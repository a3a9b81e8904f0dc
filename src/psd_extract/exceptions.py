"""
Exceptions raised while decoding a PSD document.

Every fatal condition is a subclass of :py:class:`PSDError`, so callers can
catch the whole family at once or discriminate on the concrete class.
Length mismatches between declared and consumed byte counts are not errors;
they are collected as :py:class:`~psd_extract.psd.document.Diagnostic`.
"""

from typing import Any, Optional


class PSDError(Exception):
    """
    Base class of decoding errors.

    .. py:attribute:: document

        The partially decoded :py:class:`~psd_extract.psd.document.PSD` when
        the failure happened after all layer images were recovered, otherwise
        ``None``.
    """

    def __init__(self, message: str = "", document: Optional[Any] = None):
        super().__init__(message)
        self.document = document


class Truncated(PSDError, EOFError):
    """The byte source ended in the middle of a field."""


class DeadlineExceeded(PSDError):
    """The decode deadline passed before the next read."""


class SignatureMismatch(PSDError):
    """The file header signature is not ``8BPS``."""


class UnsupportedVersion(PSDError):
    """The file version is not 1."""


class DecodeFailed(PSDError, ValueError):
    """RLE data is corrupt or decodes to the wrong size."""


class UnknownChannel(PSDError):
    """The compositor got a channel id it has no lane for."""


class PlaneSizeMismatch(PSDError):
    """A channel plane does not cover the layer raster exactly."""

    def __init__(
        self,
        message: str = "",
        expected: int = 0,
        actual: int = 0,
        document: Optional[Any] = None,
    ):
        super().__init__(message, document)
        self.expected = expected
        self.actual = actual


class UnsupportedCompression(PSDError):
    """Channel data uses a compression mode that is not decoded."""


class InvalidBlockSignature(PSDError):
    """An additional layer information block has a bad signature."""


class BudgetUnderrun(PSDError):
    """Additional layer information blocks overran their byte budget."""
