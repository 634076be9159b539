# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models and type definitions for the XML service broker.

- :mod:`~ServiceBroker.Xml.models.types`: Semantic types, type mappings and value coercion.
- :mod:`~ServiceBroker.Xml.models.document`: Tabular representation of a loaded document.
- :mod:`~ServiceBroker.Xml.models.service_object`: Discovered service objects, properties and methods.
- :mod:`~ServiceBroker.Xml.models.predicate`: List and Read filter predicates.
- :mod:`~ServiceBroker.Xml.models.record`: Result records and result sets.

Import directly from the specific module files.
"""

__all__ = []
