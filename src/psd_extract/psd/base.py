"""
Base data structures intended for inheritance.

All the data objects in :py:mod:`psd_extract.psd` inherit from
:py:class:`BaseElement` and get attrs_ decoration for their fields. Elements
are built once by reading forward through a
:py:class:`~psd_extract.psd.cursor.ByteCursor` and are frozen afterwards.

.. _attrs: https://www.attrs.org/en/stable/index.html
"""

import logging
from typing import Any, Iterator, TypeVar

from attrs import define, field, validate

from psd_extract.psd.cursor import ByteCursor

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseElement")


class BaseElement:
    """
    Base element of various PSD file structs.

    .. py:classmethod:: read(cls, cursor)

        Read the element from a :py:class:`~psd_extract.psd.cursor.ByteCursor`.

    .. py:classmethod:: frombytes(self, data, *args, **kwargs)

        Read the element from bytes.

    .. py:method:: validate(self)

        Validate the attribute.
    """

    @classmethod
    def read(cls: type[T], cursor: ByteCursor, **kwargs: Any) -> T:
        raise NotImplementedError()

    @classmethod
    def frombytes(cls: type[T], data: bytes, *args: Any, **kwargs: Any) -> T:
        return cls.read(ByteCursor.frombytes(data), *args, **kwargs)

    def validate(self) -> None:
        return validate(self)  # type: ignore[arg-type]


@define(repr=False, frozen=True)
class ListElement(BaseElement):
    """
    Read-only list-like element that has `items` list.
    """

    _items: list = field(factory=list, converter=list)

    def index(self, x: Any) -> int:
        return self._items.index(x)

    def __len__(self) -> int:
        return self._items.__len__()

    def __iter__(self) -> Iterator[Any]:
        return self._items.__iter__()

    def __getitem__(self, key: Any) -> Any:
        return self._items.__getitem__(key)

    def __repr__(self) -> str:
        return self._items.__repr__()
