# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Schema discovery operations namespace."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

from ..core.results import OperationMetadata, OperationResult
from ..data._discovery import discover
from ..models.service_object import ServiceCatalog, ServiceObject

if TYPE_CHECKING:
    from ..client import XmlServiceBroker


__all__ = ["SchemaOperations"]


class SchemaOperations:
    """
    Namespace for schema discovery.

    Accessed via ``broker.schema``. Every :meth:`discover` call re-reads the
    document; the most recent catalog is handed to the broker, which uses it
    to resolve service object names for queries.

    :param broker: The parent :class:`~ServiceBroker.Xml.client.XmlServiceBroker` instance.
    :type broker: ~ServiceBroker.Xml.client.XmlServiceBroker

    Example::

        catalog = broker.schema.discover()
        for service_object in catalog:
            print(service_object.name, service_object.properties.names())

        customer = broker.schema.get("Customer")
    """

    def __init__(self, broker: XmlServiceBroker) -> None:
        self._broker = broker

    # --------------------------------------------------------------- discover

    def discover(self) -> OperationResult[ServiceCatalog]:
        """
        Load the configured document and discover its service objects.

        :return: The complete catalog, in document table order.
        :rtype: ~ServiceBroker.Xml.core.results.OperationResult[ServiceCatalog]

        :raises ~ServiceBroker.Xml.core.errors.ValidationError: If the document path is not configured.
        :raises ~ServiceBroker.Xml.core.errors.ParseError: If the document cannot be loaded.
        :raises ~ServiceBroker.Xml.core.errors.UnmappedTypeError: If a column type has no mapping.
        :raises ~ServiceBroker.Xml.core.errors.SchemaDiscoveryError: If a table cannot be discovered.
        """
        correlation_id = str(uuid.uuid4())
        path = self._broker._document_path()
        with self._broker._telemetry.trace_operation("schema.describe", correlation_id, document=path) as ctx:
            document = self._broker._load_document()
            catalog = discover(document, self._broker._registered_type_mappings())
            outcome = self._broker._telemetry.record_outcome(ctx, row_count=len(catalog))

        self._broker._catalog = catalog
        return OperationResult(
            catalog,
            OperationMetadata(
                correlation_id=correlation_id,
                operation="schema.describe",
                row_count=len(catalog),
                timing_ms=outcome.duration_ms,
            ),
        )

    # -------------------------------------------------------------------- get

    def get(self, name: str) -> Optional[ServiceObject]:
        """
        Return a discovered service object by name.

        Runs discovery first when no catalog is available yet.

        :param name: Service object name (sanitized table name).
        :type name: str
        :return: The service object, or ``None`` when the catalog has no such entry.
        :rtype: ~ServiceBroker.Xml.models.service_object.ServiceObject | None
        """
        catalog = self._broker._catalog
        if catalog is None:
            catalog = self.discover().value
        return catalog.get(name)
