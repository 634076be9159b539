# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
XML service broker.

Discovers the repeating record groups of an XML document as typed service
objects and serves List and Read methods over them.

Example::

    from ServiceBroker.Xml import BrokerConfig, XmlServiceBroker

    with XmlServiceBroker(BrokerConfig(xml_file_path="customers.xml")) as broker:
        for record in broker.query.list("Customer", {"Name": "An"}):
            print(record["Name"], record["City"])
"""

from .__version__ import __version__
from .client import XmlServiceBroker
from .core.auth import ServiceAuthentication
from .core.config import BrokerConfig, ServiceConfiguration
from .core.errors import (
    BrokerError,
    MissingRequiredInputError,
    ParseError,
    SchemaDiscoveryError,
    TypeCoercionError,
    UnknownEntityError,
    UnmappedTypeError,
    ValidationError,
)
from .core.telemetry import TelemetryConfig
from .models.invocation import InvocationRequest
from .models.service_object import MethodType
from .models.types import SemanticType, TypeMappings

__all__ = [
    "__version__",
    "XmlServiceBroker",
    "BrokerConfig",
    "ServiceConfiguration",
    "ServiceAuthentication",
    "TelemetryConfig",
    "InvocationRequest",
    "MethodType",
    "SemanticType",
    "TypeMappings",
    "BrokerError",
    "ValidationError",
    "ParseError",
    "UnmappedTypeError",
    "SchemaDiscoveryError",
    "UnknownEntityError",
    "MissingRequiredInputError",
    "TypeCoercionError",
]
