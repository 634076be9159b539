# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Schema discovery: turns a loaded document into a service catalog.

One service object per table, one property per column, and exactly one List
and one Read method per service object. Discovery either returns a complete
catalog or raises; no partial catalog is ever surfaced.
"""

from __future__ import annotations

import logging
from typing import List

from ..common.constants import LIST_METHOD_PREFIX, READ_METHOD_PREFIX
from ..core._error_codes import SCHEMA_TABLE_HAS_NO_COLUMNS
from ..core.errors import BrokerError, SchemaDiscoveryError, UnmappedTypeError
from ..models.document import Document, Table
from ..models.service_object import (
    Method,
    MethodCollection,
    MethodType,
    Property,
    PropertyCollection,
    ServiceCatalog,
    ServiceObject,
    sanitize_name,
)
from ..models.types import TypeMappings

logger = logging.getLogger(__name__)


class _SchemaDiscoverer:
    """
    Builds service objects from document tables.

    :param type_mappings: Native-to-semantic type table used for every column.
    :type type_mappings: ~ServiceBroker.Xml.models.types.TypeMappings
    """

    def __init__(self, type_mappings: TypeMappings) -> None:
        self._type_mappings = type_mappings

    def discover(self, document: Document) -> ServiceCatalog:
        """
        Discover every table of ``document``.

        :param document: Freshly loaded document.
        :type document: ~ServiceBroker.Xml.models.document.Document
        :return: Catalog in document table order.
        :rtype: ~ServiceBroker.Xml.models.service_object.ServiceCatalog
        :raises ~ServiceBroker.Xml.core.errors.UnmappedTypeError: If a column type has no mapping.
        :raises ~ServiceBroker.Xml.core.errors.SchemaDiscoveryError: If any table cannot be
            turned into a service object.
        """
        service_objects: List[ServiceObject] = []
        for table in document:
            service_objects.append(self._build_service_object(table))

        try:
            catalog = ServiceCatalog(service_objects)
        except ValueError as exc:
            raise SchemaDiscoveryError(f"Document '{document.name}' cannot be discovered: {exc}") from exc

        logger.debug("Discovered %d service objects: %s", len(catalog), catalog.names())
        return catalog

    def _build_service_object(self, table: Table) -> ServiceObject:
        if not table.columns:
            raise SchemaDiscoveryError(
                f"Table '{table.name}' has no columns and cannot expose a Read key",
                table=table.name,
                subcode=SCHEMA_TABLE_HAS_NO_COLUMNS,
            )

        properties = PropertyCollection()
        for column in table.columns:
            try:
                semantic_type = self._type_mappings.lookup(column.native_type)
            except UnmappedTypeError:
                raise UnmappedTypeError(column.native_type, table=table.name, column=column.name) from None
            try:
                properties.create(
                    Property(
                        name=sanitize_name(column.name),
                        semantic_type=semantic_type,
                        display_name=column.name,
                        native_type=column.native_type,
                    )
                )
            except ValueError as exc:
                raise SchemaDiscoveryError(
                    f"Column '{column.name}' of table '{table.name}' cannot become a property: {exc}",
                    table=table.name,
                    column=column.name,
                ) from exc

        name = sanitize_name(table.name)
        if not name:
            raise SchemaDiscoveryError(f"Table '{table.name}' has an empty name", table=table.name)

        all_names = properties.names()
        key_name = all_names[0]
        methods = MethodCollection(
            [
                Method(
                    name=f"{LIST_METHOD_PREFIX}{name}",
                    type=MethodType.LIST,
                    display_name=f"{LIST_METHOD_PREFIX} {table.name}",
                    input_properties=list(all_names),
                    return_properties=list(all_names),
                ),
                Method(
                    name=f"{READ_METHOD_PREFIX}{name}",
                    type=MethodType.READ,
                    display_name=f"{READ_METHOD_PREFIX} {table.name}",
                    input_properties=[key_name],
                    return_properties=list(all_names),
                    required_properties=[key_name],
                ),
            ]
        )

        service_object = ServiceObject(
            name=name,
            display_name=table.name,
            properties=properties,
            methods=methods,
        )
        service_object.active = True
        return service_object


def discover(document: Document, type_mappings: TypeMappings) -> ServiceCatalog:
    """
    Discover the service catalog of a loaded document.

    :param document: Freshly loaded document.
    :type document: ~ServiceBroker.Xml.models.document.Document
    :param type_mappings: Native-to-semantic type table.
    :type type_mappings: ~ServiceBroker.Xml.models.types.TypeMappings
    :return: Complete catalog in table order.
    :rtype: ~ServiceBroker.Xml.models.service_object.ServiceCatalog
    """
    try:
        return _SchemaDiscoverer(type_mappings).discover(document)
    except BrokerError:
        raise
    except Exception as exc:
        raise SchemaDiscoveryError(f"Discovery of document '{document.name}' failed: {exc}") from exc


__all__ = ["discover"]
