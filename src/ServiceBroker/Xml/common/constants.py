# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants shared across the XML service broker.

Native type names are the names the document loader assigns to columns. They
are the keys of :class:`~ServiceBroker.Xml.models.types.TypeMappings`.
"""

# Service configuration keys
CONFIG_XML_FILE_PATH = "XMLFilePath"
CONFIG_TYPE_MAPPINGS = "Type Mappings"

# Default service instance metadata
DEFAULT_SERVICE_NAME = "XmlServiceBroker"
DEFAULT_SERVICE_DISPLAY_NAME = "XML Service Broker (Discovered Schema)"
DEFAULT_SERVICE_DESCRIPTION = "Discovers an XML file and returns the items in the XML file as Service Objects"

# Method name prefixes
LIST_METHOD_PREFIX = "List"
READ_METHOD_PREFIX = "Read"

# Native column type names
NATIVE_STRING = "String"
NATIVE_INT16 = "Int16"
NATIVE_INT32 = "Int32"
NATIVE_INT64 = "Int64"
NATIVE_DECIMAL = "Decimal"
NATIVE_DOUBLE = "Double"
NATIVE_SINGLE = "Single"
NATIVE_BOOLEAN = "Boolean"
NATIVE_DATE = "Date"
NATIVE_DATETIME = "DateTime"

INTEGRAL_NATIVE_TYPES = frozenset({NATIVE_INT16, NATIVE_INT32, NATIVE_INT64})

# Inline schema support
XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema"

XSD_NATIVE_TYPES = {
    "string": NATIVE_STRING,
    "short": NATIVE_INT16,
    "int": NATIVE_INT32,
    "long": NATIVE_INT64,
    "integer": NATIVE_INT64,
    "decimal": NATIVE_DECIMAL,
    "double": NATIVE_DOUBLE,
    "float": NATIVE_SINGLE,
    "boolean": NATIVE_BOOLEAN,
    "date": NATIVE_DATE,
    "dateTime": NATIVE_DATETIME,
}

# Filter operators
OPERATOR_STARTSWITH = "startswith"
OPERATOR_EQ = "eq"

# Environment variables read by BrokerConfig.from_env()
ENV_XML_FILE_PATH = "XML_BROKER_FILE_PATH"
ENV_CASE_SENSITIVE_PREFIX = "XML_BROKER_CASE_SENSITIVE_PREFIX"
ENV_INFER_TYPES = "XML_BROKER_INFER_TYPES"

# OpenTelemetry attribute names
OTEL_ATTR_DB_SYSTEM = "db.system"
OTEL_ATTR_DB_OPERATION = "db.operation"
OTEL_ATTR_BROKER_ENTITY = "xml_broker.entity"
OTEL_ATTR_BROKER_DOCUMENT = "xml_broker.document"
OTEL_ATTR_BROKER_CORRELATION_ID = "xml_broker.correlation_id"
OTEL_ATTR_BROKER_ROW_COUNT = "xml_broker.row_count"
