# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

from typing import Optional, Union

from .common.constants import CONFIG_TYPE_MAPPINGS, CONFIG_XML_FILE_PATH
from .core.auth import ServiceAuthentication
from .core.config import BrokerConfig, ServiceConfiguration
from .core.results import OperationResult
from .core.telemetry import NoOpTelemetryManager, TelemetryManager, create_telemetry_manager
from .core.transactions import TransactionParticipant
from .data._executor import _QueryExecutor
from .data._loader import load_document
from .models.document import Document
from .models.invocation import InvocationRequest
from .models.record import ResultSet
from .models.service_object import ServiceCatalog
from .models.types import TypeMappings
from .operations.query import QueryOperations
from .operations.schema import SchemaOperations


class XmlServiceBroker:
    """
    Service broker exposing the record groups of an XML document as service objects.

    Each repeating element group under the document root becomes a service
    object with one property per field and two methods: ``List<Name>``
    (prefix filter on any properties) and ``Read<Name>`` (exact match on the
    first property). Every call re-reads the document in full; nothing is
    cached between calls except the last discovered catalog, which is used to
    resolve service object names.

    **Context Manager Support**::

        with XmlServiceBroker(BrokerConfig(xml_file_path="customers.xml")) as broker:
            catalog = broker.schema.discover()
            records = broker.query.list("Customer", {"Name": "An"})

    **Host lifecycle API**:
        The broker also exposes the calls a hosting platform makes when it
        registers a service instance::

            broker = XmlServiceBroker()
            settings = broker.get_config_section()
            settings["XMLFilePath"] = "/data/customers.xml"
            catalog = broker.describe_schema()
            result = broker.execute(InvocationRequest("ListCustomer", "Customer"))

    :param config: Optional broker configuration. Defaults to
        :meth:`BrokerConfig.from_env() <ServiceBroker.Xml.core.config.BrokerConfig.from_env>`.
    :type config: ~ServiceBroker.Xml.core.config.BrokerConfig or None
    :param authentication: Optional service instance credentials. They are kept
        for the host but never needed to read a local document.
    :type authentication: ~ServiceBroker.Xml.core.auth.ServiceAuthentication or None
    """

    def __init__(
        self,
        config: Optional[BrokerConfig] = None,
        authentication: Optional[ServiceAuthentication] = None,
    ) -> None:
        self._config = config or BrokerConfig.from_env()
        self.configuration = ServiceConfiguration()
        self.authentication = authentication or ServiceAuthentication()
        self.type_mappings = TypeMappings.default()

        self.name = self._config.service_name
        self.display_name = self._config.display_name
        self.description = self._config.description

        self._telemetry: Union[TelemetryManager, NoOpTelemetryManager] = create_telemetry_manager(
            self._config.telemetry
        )
        self._catalog: Optional[ServiceCatalog] = None

        if self._config.xml_file_path:
            self.get_config_section()
            self.configuration[CONFIG_XML_FILE_PATH] = self._config.xml_file_path

        # Initialize operation namespaces
        self.schema = SchemaOperations(self)
        self.query = QueryOperations(self)
        self.transactions = TransactionParticipant()

    def __enter__(self) -> "XmlServiceBroker":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Forget the last discovered catalog.

        The broker holds no open files between calls, so this only drops the
        catalog. Safe to call multiple times.
        """
        self._catalog = None

    @property
    def config(self) -> BrokerConfig:
        return self._config

    # ------------------------------------------------------------ host lifecycle

    def get_config_section(self) -> ServiceConfiguration:
        """
        Register the settings a service instance needs.

        :return: The configuration with the required ``XMLFilePath`` setting.
        :rtype: ~ServiceBroker.Xml.core.config.ServiceConfiguration
        """
        self.configuration.add(CONFIG_XML_FILE_PATH, True, "")
        return self.configuration

    def describe_schema(self) -> OperationResult[ServiceCatalog]:
        """
        Register the type mappings, discover the document and describe the service.

        :return: The discovered catalog.
        :rtype: ~ServiceBroker.Xml.core.results.OperationResult[ServiceCatalog]
        :raises ~ServiceBroker.Xml.core.errors.ValidationError: If a required setting is missing.
        """
        self.get_config_section()
        self.configuration.validate()
        self.configuration[CONFIG_TYPE_MAPPINGS] = self.type_mappings

        result = self.schema.discover()

        self.name = self._config.service_name
        self.display_name = self._config.display_name
        self.description = self._config.description
        return result

    def execute(self, request: InvocationRequest) -> OperationResult[ResultSet]:
        """
        Run one method invocation.

        :param request: Method, service object, inputs and return order.
        :type request: ~ServiceBroker.Xml.models.invocation.InvocationRequest
        :return: Records in declared return order.
        :rtype: ~ServiceBroker.Xml.core.results.OperationResult[ResultSet]
        """
        return self.query.execute(request)

    def extend(self) -> None:
        """Not supported: the broker exposes a discovered schema only."""
        raise NotImplementedError("XmlServiceBroker does not support extending the discovered schema")

    # ---------------------------------------------------------------- internals

    def _document_path(self) -> Optional[str]:
        path = self.configuration.get(CONFIG_XML_FILE_PATH)
        return str(path) if path else None

    def _load_document(self) -> Document:
        self.get_config_section()
        self.configuration.validate()
        return load_document(self._document_path(), infer_types=self._config.infer_types)

    def _registered_type_mappings(self) -> TypeMappings:
        mappings = self.configuration.get(CONFIG_TYPE_MAPPINGS)
        return mappings if isinstance(mappings, TypeMappings) else self.type_mappings

    def _executor(self) -> _QueryExecutor:
        return _QueryExecutor(case_sensitive_prefix=self._config.case_sensitive_prefix)


__all__ = ["XmlServiceBroker"]
