# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Semantic property types and the native-to-semantic type mapping table.

The loader names column types with native type names (``"String"``,
``"Int32"``, ...). Discovery translates those names into the closed set of
:class:`SemanticType` values exposed to callers, and execution uses the same
pair to convert raw document text into Python scalars.
"""

from __future__ import annotations

import datetime as _dt
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

from ..common.constants import (
    INTEGRAL_NATIVE_TYPES,
    NATIVE_BOOLEAN,
    NATIVE_DATE,
    NATIVE_DATETIME,
    NATIVE_DECIMAL,
    NATIVE_DOUBLE,
    NATIVE_INT16,
    NATIVE_INT32,
    NATIVE_INT64,
    NATIVE_SINGLE,
    NATIVE_STRING,
)
from ..core._error_codes import VALIDATION_INVALID_TYPE_MAPPING
from ..core.errors import TypeCoercionError, UnmappedTypeError, ValidationError


class SemanticType(str, Enum):
    """Closed set of property data types exposed to callers."""

    NUMBER = "Number"
    TEXT = "Text"
    YES_NO = "YesNo"
    DATE_TIME = "DateTime"


class TypeMappings(Mapping[str, SemanticType]):
    """
    Immutable mapping from native type name to :class:`SemanticType`.

    The mapping is validated when it is built; lookups on a name that was
    never registered raise :class:`~ServiceBroker.Xml.core.errors.UnmappedTypeError`
    instead of falling back to a default.

    :param mappings: Native type name to semantic type pairs.
    :type mappings: Mapping[str, SemanticType]

    :raises ~ServiceBroker.Xml.core.errors.ValidationError: If a key is not a
        non-empty string or a value is not a :class:`SemanticType`.

    Example::

        mappings = TypeMappings({"Int32": SemanticType.NUMBER, "String": SemanticType.TEXT})
        mappings.lookup("Int32")    # SemanticType.NUMBER
        mappings.lookup("Byte[]")   # raises UnmappedTypeError
    """

    __slots__ = ("_mappings",)

    def __init__(self, mappings: Mapping[str, SemanticType]) -> None:
        validated: Dict[str, SemanticType] = {}
        for native_type, semantic_type in mappings.items():
            if not isinstance(native_type, str) or not native_type.strip():
                raise ValidationError(
                    f"Native type names must be non-empty strings, got {native_type!r}",
                    subcode=VALIDATION_INVALID_TYPE_MAPPING,
                )
            if not isinstance(semantic_type, SemanticType):
                raise ValidationError(
                    f"Native type '{native_type}' must map to a SemanticType, got {semantic_type!r}",
                    subcode=VALIDATION_INVALID_TYPE_MAPPING,
                    details={"native_type": native_type},
                )
            validated[native_type] = semantic_type
        self._mappings = MappingProxyType(validated)

    @classmethod
    def default(cls) -> "TypeMappings":
        """
        Return the standard mapping table.

        :return: Mapping covering every native type the document loader produces.
        :rtype: TypeMappings
        """
        return cls(DEFAULT_TYPE_MAPPINGS)

    def lookup(self, native_type: str) -> SemanticType:
        """
        Resolve a native type name.

        :param native_type: Native type name, e.g. ``"Int32"``.
        :type native_type: str
        :return: The mapped semantic type.
        :rtype: SemanticType
        :raises ~ServiceBroker.Xml.core.errors.UnmappedTypeError: If the name is not registered.
        """
        try:
            return self._mappings[native_type]
        except KeyError:
            raise UnmappedTypeError(native_type) from None

    def __getitem__(self, native_type: str) -> SemanticType:
        return self._mappings[native_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

    def __repr__(self) -> str:
        return f"TypeMappings({dict(self._mappings)!r})"

    def to_dict(self) -> Dict[str, str]:
        return {name: semantic.value for name, semantic in self._mappings.items()}


DEFAULT_TYPE_MAPPINGS: Mapping[str, SemanticType] = MappingProxyType(
    {
        NATIVE_INT32: SemanticType.NUMBER,
        NATIVE_STRING: SemanticType.TEXT,
        NATIVE_BOOLEAN: SemanticType.YES_NO,
        NATIVE_DATE: SemanticType.DATE_TIME,
        NATIVE_INT16: SemanticType.NUMBER,
        NATIVE_INT64: SemanticType.NUMBER,
        NATIVE_DECIMAL: SemanticType.NUMBER,
        NATIVE_DOUBLE: SemanticType.NUMBER,
        NATIVE_SINGLE: SemanticType.NUMBER,
        NATIVE_DATETIME: SemanticType.DATE_TIME,
    }
)

_TRUE_LITERALS = frozenset({"true", "1"})
_FALSE_LITERALS = frozenset({"false", "0"})


def _parse_datetime(text: str) -> _dt.datetime:
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return _dt.datetime.fromisoformat(text)


def coerce_value(value: Any, semantic_type: SemanticType, native_type: Optional[str] = None) -> Any:
    """
    Convert a raw document value to the Python scalar for ``semantic_type``.

    ``None`` (a field the record omitted) is returned unchanged. Values that
    already have the target Python type are accepted as-is.

    :param value: Raw value, normally the text of an XML element or attribute.
    :type value: Any
    :param semantic_type: Declared semantic type of the property.
    :type semantic_type: SemanticType
    :param native_type: Native type name of the column; selects ``int``,
        :class:`~decimal.Decimal` or ``float`` for numbers and ``date`` or
        ``datetime`` for date values.
    :type native_type: str or None
    :return: The coerced scalar.
    :raises ~ServiceBroker.Xml.core.errors.TypeCoercionError: If the value cannot be
        represented as ``semantic_type``.
    """
    if value is None:
        return None

    if semantic_type is SemanticType.TEXT:
        return value if isinstance(value, str) else str(value)

    if semantic_type is SemanticType.YES_NO:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_LITERALS:
            return True
        if text in _FALSE_LITERALS:
            return False
        raise TypeCoercionError(value, semantic_type.value)

    if semantic_type is SemanticType.NUMBER:
        if isinstance(value, bool):
            raise TypeCoercionError(value, semantic_type.value)
        if isinstance(value, (int, float, Decimal)):
            return value
        text = str(value).strip()
        try:
            if native_type is None or native_type in INTEGRAL_NATIVE_TYPES:
                return int(text)
            if native_type == NATIVE_DECIMAL:
                return Decimal(text)
            return float(text)
        except (ValueError, InvalidOperation):
            raise TypeCoercionError(value, semantic_type.value) from None

    if semantic_type is SemanticType.DATE_TIME:
        if isinstance(value, (_dt.date, _dt.datetime)):
            return value
        text = str(value).strip()
        try:
            if native_type == NATIVE_DATE:
                return _dt.date.fromisoformat(text)
            return _parse_datetime(text)
        except ValueError:
            raise TypeCoercionError(value, semantic_type.value) from None

    raise TypeCoercionError(value, str(semantic_type))


__all__ = ["SemanticType", "TypeMappings", "DEFAULT_TYPE_MAPPINGS", "coerce_value"]
