# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for XML service broker tests.

This module provides helpers that write the sample documents from
:mod:`tests.fixtures.test_data` to a temporary directory, plus brokers
configured to read them.
"""

import pytest

from ServiceBroker.Xml.client import XmlServiceBroker
from ServiceBroker.Xml.core.config import BrokerConfig
from tests.fixtures.test_data import CUSTOMERS_XML, INVENTORY_XML, MULTI_TABLE_XML


@pytest.fixture
def write_xml(tmp_path):
    """Factory writing XML text to a file under ``tmp_path`` and returning its path."""

    def _write(text, name="document.xml"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def customers_path(write_xml):
    """Path of the three-row Customer document."""
    return write_xml(CUSTOMERS_XML, "customers.xml")


@pytest.fixture
def multi_table_path(write_xml):
    """Path of the Customer/Order document."""
    return write_xml(MULTI_TABLE_XML, "store.xml")


@pytest.fixture
def inventory_path(write_xml):
    """Path of the document carrying an inline schema."""
    return write_xml(INVENTORY_XML, "inventory.xml")


@pytest.fixture
def broker(customers_path):
    """Broker reading the Customer document with default settings."""
    with XmlServiceBroker(BrokerConfig(xml_file_path=str(customers_path))) as instance:
        yield instance


@pytest.fixture
def inventory_broker(inventory_path):
    """Broker reading the typed inventory document."""
    with XmlServiceBroker(BrokerConfig(xml_file_path=str(inventory_path))) as instance:
        yield instance
