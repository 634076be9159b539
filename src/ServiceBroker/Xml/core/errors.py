# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured error types for the XML service broker.

Every failure surfaced by discovery or execution derives from
:class:`BrokerError` and carries enough context (table, column, entity,
property) to diagnose the problem without opening the source document.
None of these errors are transient; nothing is retried.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Optional

from ._error_codes import (
    EXECUTION_MISSING_REQUIRED_INPUT,
    EXECUTION_TYPE_COERCION,
    EXECUTION_UNKNOWN_ENTITY,
    SCHEMA_DISCOVERY_FAILED,
    SCHEMA_UNMAPPED_TYPE,
)


class BrokerError(Exception):
    """Base structured error for the XML service broker."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.details = details or {}
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "details": self.details,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class ValidationError(BrokerError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", subcode=subcode, details=details)


class ParseError(BrokerError):
    """The target document is missing, unreadable, malformed or empty."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        subcode: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if path is not None:
            d["path"] = path
        super().__init__(message, code="parse_error", subcode=subcode, details=d)
        self.path = path


class UnmappedTypeError(BrokerError):
    """A native column type has no semantic type mapping."""

    def __init__(
        self,
        native_type: str,
        *,
        table: Optional[str] = None,
        column: Optional[str] = None,
    ) -> None:
        message = f"No semantic type mapping registered for native type '{native_type}'"
        if table is not None and column is not None:
            message += f" (table '{table}', column '{column}')"
        details: Dict[str, Any] = {"native_type": native_type}
        if table is not None:
            details["table"] = table
        if column is not None:
            details["column"] = column
        super().__init__(message, code="unmapped_type_error", subcode=SCHEMA_UNMAPPED_TYPE, details=details)
        self.native_type = native_type
        self.table = table
        self.column = column


class SchemaDiscoveryError(BrokerError):
    """Discovery failed for a table or column; wraps the underlying cause."""

    def __init__(
        self,
        message: str,
        *,
        table: Optional[str] = None,
        column: Optional[str] = None,
        subcode: Optional[str] = SCHEMA_DISCOVERY_FAILED,
    ) -> None:
        details: Dict[str, Any] = {}
        if table is not None:
            details["table"] = table
        if column is not None:
            details["column"] = column
        super().__init__(message, code="schema_discovery_error", subcode=subcode, details=details)
        self.table = table
        self.column = column


class UnknownEntityError(BrokerError):
    """The requested entity, or one of its properties, has no counterpart in the freshly loaded document."""

    def __init__(self, entity: str, *, path: Optional[str] = None, property_name: Optional[str] = None) -> None:
        if property_name is None:
            subject = f"Entity '{entity}'"
        else:
            subject = f"Property '{property_name}' of entity '{entity}'"
        message = f"{subject} was not found in the document; the document may have changed since discovery"
        details: Dict[str, Any] = {"entity": entity}
        if property_name is not None:
            details["property"] = property_name
        if path is not None:
            details["path"] = path
        super().__init__(message, code="unknown_entity_error", subcode=EXECUTION_UNKNOWN_ENTITY, details=details)
        self.entity = entity
        self.property_name = property_name


class MissingRequiredInputError(BrokerError):
    """A required input property was not supplied."""

    def __init__(self, entity: str, property_name: Optional[str] = None) -> None:
        if property_name:
            message = f"Required property '{property_name}' was not supplied for entity '{entity}'"
        else:
            message = f"The key of entity '{entity}' was not supplied"
        super().__init__(
            message,
            code="missing_required_input_error",
            subcode=EXECUTION_MISSING_REQUIRED_INPUT,
            details={"entity": entity, "property": property_name},
        )
        self.entity = entity
        self.property_name = property_name


class TypeCoercionError(BrokerError):
    """A document value cannot be represented as its property's semantic type."""

    def __init__(
        self,
        value: Any,
        semantic_type: str,
        *,
        entity: Optional[str] = None,
        property_name: Optional[str] = None,
    ) -> None:
        message = f"Value {value!r} cannot be represented as {semantic_type}"
        if entity is not None and property_name is not None:
            message += f" (entity '{entity}', property '{property_name}')"
        details: Dict[str, Any] = {"value": value, "semantic_type": semantic_type}
        if entity is not None:
            details["entity"] = entity
        if property_name is not None:
            details["property"] = property_name
        super().__init__(message, code="type_coercion_error", subcode=EXECUTION_TYPE_COERCION, details=details)
        self.value = value
        self.semantic_type = semantic_type
        self.entity = entity
        self.property_name = property_name


__all__ = [
    "BrokerError",
    "ValidationError",
    "ParseError",
    "UnmappedTypeError",
    "SchemaDiscoveryError",
    "UnknownEntityError",
    "MissingRequiredInputError",
    "TypeCoercionError",
]
