# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""List and Read operations namespace."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence, Union

from ..common.constants import READ_METHOD_PREFIX
from ..core.errors import MissingRequiredInputError, UnknownEntityError
from ..core.results import OperationMetadata, OperationResult
from ..models.invocation import InvocationRequest
from ..models.predicate import InputValues
from ..models.record import ResultSet
from ..models.service_object import MethodType, ServiceObject

if TYPE_CHECKING:
    from ..client import XmlServiceBroker


__all__ = ["QueryOperations"]

_OPERATION_NAMES = {
    MethodType.LIST: "query.list",
    MethodType.READ: "query.read",
}


def _operation_name(method: Union[str, MethodType]) -> str:
    if isinstance(method, MethodType):
        return _OPERATION_NAMES[method]
    if str(method).startswith(READ_METHOD_PREFIX):
        return _OPERATION_NAMES[MethodType.READ]
    return _OPERATION_NAMES[MethodType.LIST]


def _key_is_missing(inputs: Any) -> bool:
    if isinstance(inputs, Mapping):
        values = list(inputs.values())
    elif isinstance(inputs, Sequence) and not isinstance(inputs, (str, bytes)):
        values = list(inputs)
    else:
        values = [inputs]
    return all(value is None or str(value).strip() == "" for value in values)


class QueryOperations:
    """
    Query operations for invoking List and Read methods.

    Accessed via ``broker.query``. Each call re-reads the document, so results
    always reflect its current contents.

    Example:
        List with a prefix filter::

            for record in broker.query.list("Customer", {"Name": "An"}):
                print(record["Name"], record["City"])

        Read by key::

            record = broker.query.read("Customer", "Ann").first()

        Projection and telemetry::

            response = broker.query.list("Customer", select=["City"]).with_response_details()
            print(response.telemetry["row_count"])

        As a DataFrame::

            df = broker.query.list("Customer").to_dataframe()
    """

    def __init__(self, broker: XmlServiceBroker) -> None:
        """
        Initialize QueryOperations.

        :param broker: Parent XmlServiceBroker instance.
        :type broker: XmlServiceBroker
        """
        self._broker = broker

    def list(
        self,
        entity: Union[str, ServiceObject],
        filters: InputValues = None,
        *,
        select: Optional[List[str]] = None,
    ) -> OperationResult[ResultSet]:
        """
        Invoke the List method of a service object.

        Every supplied non-empty value adds a prefix-match clause on its
        property; clauses are combined with AND. Without values every row is
        returned, in document order.

        :param entity: Service object name or instance.
        :type entity: str or ~ServiceBroker.Xml.models.service_object.ServiceObject
        :param filters: Values aligned to the List input properties, or a mapping
            of property name to prefix.
        :type filters: list or dict or None
        :param select: Return properties in output order; defaults to all properties.
        :type select: list[str] or None
        :return: Matching records.
        :rtype: ~ServiceBroker.Xml.core.results.OperationResult[ResultSet]
        """
        return self._invoke(MethodType.LIST, entity, filters, select)

    def read(
        self,
        entity: Union[str, ServiceObject],
        key: Any,
        *,
        select: Optional[List[str]] = None,
    ) -> OperationResult[ResultSet]:
        """
        Invoke the Read method of a service object.

        The key is trimmed and compared for exact equality with the first
        property. At most one record is returned; with duplicate keys it is
        the first in document order.

        :param entity: Service object name or instance.
        :type entity: str or ~ServiceBroker.Xml.models.service_object.ServiceObject
        :param key: Key value.
        :type key: Any
        :param select: Return properties in output order; defaults to all properties.
        :type select: list[str] or None
        :return: Zero or one record.
        :rtype: ~ServiceBroker.Xml.core.results.OperationResult[ResultSet]

        :raises ~ServiceBroker.Xml.core.errors.MissingRequiredInputError: If ``key`` is
            ``None``, empty or whitespace only. The document is not read.
        """
        return self._invoke(MethodType.READ, entity, key, select)

    def execute(self, request: InvocationRequest) -> OperationResult[ResultSet]:
        """
        Run an :class:`~ServiceBroker.Xml.models.invocation.InvocationRequest`.

        :param request: Method, service object, inputs and return order.
        :type request: ~ServiceBroker.Xml.models.invocation.InvocationRequest
        :return: Records in declared return order.
        :rtype: ~ServiceBroker.Xml.core.results.OperationResult[ResultSet]
        """
        return self._invoke(request.method, request.entity, request.inputs, request.return_properties)

    # ---------------------------------------------------------------- helpers

    def _resolve_entity(self, entity: Union[str, ServiceObject]) -> ServiceObject:
        if isinstance(entity, ServiceObject):
            return entity
        service_object = self._broker.schema.get(entity)
        if service_object is None:
            raise UnknownEntityError(entity, path=self._broker._document_path())
        return service_object

    def _known_key_name(self, entity: Union[str, ServiceObject]) -> Optional[str]:
        # only what is known without reading the document
        if not isinstance(entity, ServiceObject):
            catalog = self._broker._catalog
            entity = catalog.get(entity) if catalog is not None else None
        return entity.key_property.name if entity is not None and len(entity.properties) else None

    def _invoke(
        self,
        method: Union[str, MethodType],
        entity: Union[str, ServiceObject],
        inputs: Any,
        return_order: Optional[List[str]],
    ) -> OperationResult[ResultSet]:
        correlation_id = str(uuid.uuid4())
        entity_name = entity.name if isinstance(entity, ServiceObject) else entity
        executor = self._broker._executor()
        operation = _operation_name(method)

        with self._broker._telemetry.trace_operation(
            operation, correlation_id, document=self._broker._document_path(), entity=entity_name
        ) as ctx:
            if operation == _OPERATION_NAMES[MethodType.READ] and _key_is_missing(inputs):
                raise MissingRequiredInputError(entity_name, self._known_key_name(entity))
            service_object = self._resolve_entity(entity)
            plan = executor.plan(method, service_object, inputs, return_order)
            result = executor.run(plan, self._broker._load_document())
            outcome = self._broker._telemetry.record_outcome(ctx, row_count=len(result))

        return OperationResult(
            result,
            OperationMetadata(
                correlation_id=correlation_id,
                operation=operation,
                entity=service_object.name,
                row_count=len(result),
                timing_ms=outcome.duration_ms,
            ),
        )
