# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Query executor: runs List and Read methods against a loaded document.

Execution is split in two so that request problems surface before any I/O:

1. :meth:`_QueryExecutor.plan` resolves the method, validates the return
   order and builds the predicate. A Read without a key fails here.
2. :meth:`_QueryExecutor.run` locates the table in a freshly loaded
   document, filters its rows in document order and binds each match into a
   record through the two-phase result binding of
   :class:`~ServiceBroker.Xml.models.service_object.PropertyCollection`.

Every call works on its own copy of the service object's properties, so
concurrent invocations never share value slots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..core._error_codes import (
    EXECUTION_UNKNOWN_METHOD,
    VALIDATION_DUPLICATE_PROPERTY,
    VALIDATION_INACTIVE_ENTITY,
    VALIDATION_INPUT_COUNT_MISMATCH,
    VALIDATION_UNKNOWN_PROPERTY,
)
from ..core.errors import TypeCoercionError, UnknownEntityError, ValidationError
from ..models.document import Document, Table
from ..models.predicate import Predicate, build_list_predicate, build_read_predicate
from ..models.record import Record, ResultSet
from ..models.service_object import Method, MethodType, ServiceObject, sanitize_name
from ..models.types import coerce_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _QueryPlan:
    entity: ServiceObject
    method: Method
    predicate: Predicate
    return_order: List[str]

    @property
    def single(self) -> bool:
        return self.method.type is MethodType.READ


def _resolve_method(entity: ServiceObject, method: Union[str, MethodType]) -> Method:
    if isinstance(method, MethodType):
        return entity.method_of_type(method)
    found = entity.methods.get(method)
    if found is not None:
        return found
    try:
        return entity.method_of_type(MethodType(method))
    except (ValueError, KeyError):
        raise ValidationError(
            f"Service object '{entity.name}' has no method '{method}'",
            subcode=EXECUTION_UNKNOWN_METHOD,
            details={"entity": entity.name, "method": str(method), "available": entity.methods.names()},
        ) from None


def _resolve_key_value(entity: ServiceObject, method: Method, inputs: Any) -> Any:
    key_name = method.required_properties[0] if method.required_properties else entity.key_property.name
    if isinstance(inputs, Mapping):
        unknown = [name for name in inputs if name not in method.input_properties]
        if unknown:
            raise ValidationError(
                f"Unknown input properties {unknown} for method '{method.name}'",
                subcode=VALIDATION_UNKNOWN_PROPERTY,
                details={"entity": entity.name, "properties": unknown},
            )
        return inputs.get(key_name)
    if isinstance(inputs, Sequence) and not isinstance(inputs, (str, bytes)):
        if len(inputs) > 1:
            raise ValidationError(
                f"Method '{method.name}' accepts 1 input value, got {len(inputs)}",
                subcode=VALIDATION_INPUT_COUNT_MISMATCH,
                details={"entity": entity.name, "expected": 1, "actual": len(inputs)},
            )
        return inputs[0] if inputs else None
    return inputs


class _QueryExecutor:
    """
    Executes List and Read methods.

    :param case_sensitive_prefix: Whether List prefix matching is case-sensitive.
    :type case_sensitive_prefix: bool
    """

    def __init__(self, *, case_sensitive_prefix: bool = True) -> None:
        self.case_sensitive_prefix = case_sensitive_prefix

    def plan(
        self,
        method: Union[str, MethodType],
        entity: ServiceObject,
        inputs: Any = None,
        return_order: Optional[Sequence[str]] = None,
    ) -> _QueryPlan:
        """
        Validate a request without touching the document.

        :raises ~ServiceBroker.Xml.core.errors.ValidationError: Inactive service object,
            unknown method, unknown or repeated return property, unknown input
            property, or too many input values.
        :raises ~ServiceBroker.Xml.core.errors.MissingRequiredInputError: Read without a key.
        """
        if not entity.active:
            raise ValidationError(
                f"Service object '{entity.name}' is not active",
                subcode=VALIDATION_INACTIVE_ENTITY,
                details={"entity": entity.name},
            )
        resolved = _resolve_method(entity, method)

        order = list(return_order) if return_order else list(resolved.return_properties)
        unknown = [name for name in order if name not in resolved.return_properties]
        if unknown:
            raise ValidationError(
                f"Unknown return properties {unknown} for method '{resolved.name}'",
                subcode=VALIDATION_UNKNOWN_PROPERTY,
                details={"entity": entity.name, "properties": unknown},
            )
        repeated = sorted({name for name in order if order.count(name) > 1})
        if repeated:
            raise ValidationError(
                f"Return properties {repeated} are listed more than once",
                subcode=VALIDATION_DUPLICATE_PROPERTY,
                details={"entity": entity.name, "properties": repeated},
            )

        if resolved.type is MethodType.READ:
            predicate = build_read_predicate(entity, _resolve_key_value(entity, resolved, inputs))
        else:
            predicate = build_list_predicate(entity, inputs, case_sensitive=self.case_sensitive_prefix)

        return _QueryPlan(entity=entity, method=resolved, predicate=predicate, return_order=order)

    def run(self, plan: _QueryPlan, document: Document) -> ResultSet:
        """
        Execute a validated plan against a freshly loaded document.

        :raises ~ServiceBroker.Xml.core.errors.UnknownEntityError: The table or one of its
            columns is no longer present in the document.
        :raises ~ServiceBroker.Xml.core.errors.TypeCoercionError: A returned value cannot be
            represented as its property's semantic type.
        """
        entity = plan.entity
        table = self._find_table(entity, document)
        positions = self._column_positions(entity, table, document.source)

        properties = entity.properties.copy()
        properties.init_result_table()

        for row in table:
            cells = {name: row[position] for name, position in positions.items()}
            if not plan.predicate.matches(cells):
                continue

            # Convert the whole record before touching any value slot
            converted: Dict[str, Any] = {}
            for name in plan.return_order:
                prop = properties[name]
                try:
                    converted[name] = coerce_value(cells[name], prop.semantic_type, prop.native_type)
                except TypeCoercionError as exc:
                    raise TypeCoercionError(
                        exc.value, exc.semantic_type, entity=entity.name, property_name=name
                    ) from exc

            for name, value in converted.items():
                properties[name].value = value
            properties.bind_properties_to_result_table(plan.return_order)

            if plan.single:
                break

        records = [Record(entity=entity.name, data=data) for data in properties.result_table]
        logger.debug(
            "%s on '%s' with filter [%s] returned %d records",
            plan.method.name,
            entity.name,
            plan.predicate.to_filter(),
            len(records),
        )
        return ResultSet(entity=entity.name, columns=list(plan.return_order), records=records)

    def execute(
        self,
        method: Union[str, MethodType],
        entity: ServiceObject,
        document: Document,
        inputs: Any = None,
        return_order: Optional[Sequence[str]] = None,
    ) -> ResultSet:
        """Plan and run one invocation against an already loaded document."""
        return self.run(self.plan(method, entity, inputs, return_order), document)

    @staticmethod
    def _find_table(entity: ServiceObject, document: Document) -> Table:
        for table in document:
            if sanitize_name(table.name) == entity.name:
                return table
        raise UnknownEntityError(entity.name, path=document.source)

    @staticmethod
    def _column_positions(entity: ServiceObject, table: Table, source: Optional[str]) -> Dict[str, int]:
        by_name = {sanitize_name(column.name): index for index, column in enumerate(table.columns)}
        positions: Dict[str, int] = {}
        for prop in entity.properties:
            if prop.name not in by_name:
                raise UnknownEntityError(entity.name, path=source, property_name=prop.name)
            positions[prop.name] = by_name[prop.name]
        return positions


__all__ = []
