# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for the QueryOperations namespace."""

import datetime
from unittest.mock import MagicMock, patch

import pytest

from ServiceBroker.Xml.client import XmlServiceBroker
from ServiceBroker.Xml.core.config import BrokerConfig
from ServiceBroker.Xml.core.errors import (
    MissingRequiredInputError,
    TypeCoercionError,
    UnknownEntityError,
    ValidationError,
)
from ServiceBroker.Xml.core.telemetry import TelemetryConfig
from ServiceBroker.Xml.models.invocation import InvocationRequest
from ServiceBroker.Xml.models.record import ResultSet
from tests.fixtures.test_data import BAD_NUMBER_XML, CUSTOMER_ROWS, DUPLICATE_KEYS_XML


class TestList:
    def test_list_all(self, broker):
        result = broker.query.list("Customer")
        assert isinstance(result.value, ResultSet)
        assert [tuple(record.values()) for record in result] == CUSTOMER_ROWS

    def test_list_with_prefix(self, broker):
        result = broker.query.list("Customer", {"Name": "An"})
        assert [record["Name"] for record in result] == ["Ann", "Anna"]

    def test_list_with_positional_filters_and_select(self, broker):
        result = broker.query.list("Customer", [None, "NY"], select=["Name"])
        assert [record.to_dict() for record in result] == [{"Name": "Ann"}, {"Name": "Bob"}]

    def test_list_case_insensitive_from_config(self, customers_path):
        config = BrokerConfig(xml_file_path=str(customers_path), case_sensitive_prefix=False)
        with XmlServiceBroker(config) as broker:
            assert len(broker.query.list("Customer", {"City": "ny"})) == 2

    def test_list_accepts_service_object(self, broker):
        customer = broker.schema.get("Customer")
        assert len(broker.query.list(customer, {"Name": "B"})) == 1

    def test_to_dataframe(self, broker):
        df = broker.query.list("Customer", select=["City", "Name"]).to_dataframe()
        assert list(df.columns) == ["City", "Name"]
        assert df["Name"].tolist() == ["Ann", "Anna", "Bob"]

    def test_response_details(self, broker):
        response = broker.query.list("Customer", {"Name": "An"}).with_response_details()
        telemetry = response.telemetry
        assert telemetry["operation"] == "query.list"
        assert telemetry["entity"] == "Customer"
        assert telemetry["row_count"] == 2
        assert telemetry["timing_ms"] >= 0
        assert telemetry["correlation_id"]


class TestRead:
    def test_read(self, broker):
        result = broker.query.read("Customer", "Anna")
        assert len(result) == 1
        assert result.first().to_dict() == {"Name": "Anna", "City": "LA"}

    def test_read_no_match(self, broker):
        assert len(broker.query.read("Customer", "Zed")) == 0

    def test_read_duplicate_keys(self, write_xml):
        path = write_xml(DUPLICATE_KEYS_XML)
        with XmlServiceBroker(BrokerConfig(xml_file_path=str(path))) as broker:
            assert broker.query.read("Customer", "Ann").first()["City"] == "NY"

    def test_read_typed_values(self, inventory_broker):
        record = inventory_broker.query.read("Product", "P-2", select=["Added", "InStock"]).first()
        assert record.to_dict() == {"Added": datetime.date(2024, 2, 29), "InStock": False}

    def test_missing_key_does_not_read_document(self, broker):
        broker.schema.discover()
        with patch.object(broker, "_load_document") as load:
            with pytest.raises(MissingRequiredInputError):
                broker.query.read("Customer", "  ")
        load.assert_not_called()

    @pytest.mark.parametrize("key", [None, "", "  ", [], {"Name": None}])
    def test_missing_key_on_fresh_broker_does_not_read_document(self, customers_path, key):
        with XmlServiceBroker(BrokerConfig(xml_file_path=str(customers_path))) as broker:
            with patch("ServiceBroker.Xml.client.load_document") as load:
                with pytest.raises(MissingRequiredInputError) as exc_info:
                    broker.query.read("Customer", key)
            load.assert_not_called()
            assert broker._catalog is None
        assert exc_info.value.entity == "Customer"
        assert exc_info.value.property_name is None

    def test_missing_key_is_reported_before_missing_document(self, tmp_path):
        with XmlServiceBroker(BrokerConfig(xml_file_path=str(tmp_path / "absent.xml"))) as broker:
            with pytest.raises(MissingRequiredInputError):
                broker.query.read("Customer", None)

    def test_missing_key_names_known_key_property(self, broker):
        broker.schema.discover()
        with pytest.raises(MissingRequiredInputError) as exc_info:
            broker.query.read("Customer", None)
        assert exc_info.value.property_name == "Name"


class TestExecute:
    def test_execute_request(self, broker):
        request = InvocationRequest("ReadCustomer", "Customer", {"Name": "Bob"}, ["City"])
        result = broker.query.execute(request)
        assert [record.to_dict() for record in result] == [{"City": "NY"}]
        assert result.metadata.operation == "query.read"

    def test_execute_read_without_key_does_not_read_document(self, customers_path):
        broker = XmlServiceBroker(BrokerConfig(xml_file_path=str(customers_path)))
        with patch.object(broker, "_load_document") as load:
            with pytest.raises(MissingRequiredInputError):
                broker.query.execute(InvocationRequest("ReadCustomer", "Customer"))
        load.assert_not_called()


class TestFailures:
    def test_unknown_entity(self, broker):
        with pytest.raises(UnknownEntityError) as exc_info:
            broker.query.list("Supplier")
        assert exc_info.value.entity == "Supplier"

    def test_unknown_return_property(self, broker):
        with pytest.raises(ValidationError):
            broker.query.list("Customer", select=["Zip"])

    def test_type_coercion(self, write_xml):
        path = write_xml(BAD_NUMBER_XML)
        with XmlServiceBroker(BrokerConfig(xml_file_path=str(path))) as broker:
            with pytest.raises(TypeCoercionError) as exc_info:
                broker.query.list("Product")
        assert exc_info.value.property_name == "Quantity"

    def test_hooks_see_failures(self, customers_path):
        hook = MagicMock()
        config = BrokerConfig(xml_file_path=str(customers_path), telemetry=TelemetryConfig(hooks=[hook]))
        with XmlServiceBroker(config) as broker:
            with pytest.raises(MissingRequiredInputError):
                broker.query.read("Customer", None)
        hook.on_operation_error.assert_called_once()
        context, error = hook.on_operation_error.call_args[0]
        assert context.operation == "query.read"
        assert context.entity == "Customer"
        assert isinstance(error, MissingRequiredInputError)
