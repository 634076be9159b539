# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data access layer for the XML service broker.

This module contains the internal document loader, schema discoverer and
query executor. These are implementation details; use the operation
namespaces on :class:`~ServiceBroker.Xml.client.XmlServiceBroker` instead.
"""

__all__ = []
