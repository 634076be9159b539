# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for the query executor."""

import datetime
from decimal import Decimal

import pytest

from ServiceBroker.Xml.core._error_codes import (
    EXECUTION_UNKNOWN_METHOD,
    VALIDATION_DUPLICATE_PROPERTY,
    VALIDATION_INACTIVE_ENTITY,
    VALIDATION_INPUT_COUNT_MISMATCH,
    VALIDATION_UNKNOWN_PROPERTY,
)
from ServiceBroker.Xml.core.errors import (
    MissingRequiredInputError,
    TypeCoercionError,
    UnknownEntityError,
    ValidationError,
)
from ServiceBroker.Xml.data._discovery import discover
from ServiceBroker.Xml.data._executor import _QueryExecutor
from ServiceBroker.Xml.data._loader import load_document
from ServiceBroker.Xml.models.document import Column, Document, Table
from ServiceBroker.Xml.models.service_object import MethodType
from ServiceBroker.Xml.models.types import TypeMappings
from tests.fixtures.test_data import (
    BAD_NUMBER_XML,
    CUSTOMER_ROWS,
    DUPLICATE_KEYS_XML,
    MULTI_TABLE_XML,
)


def _discover(path, **kwargs):
    document = load_document(path, **kwargs)
    return document, discover(document, TypeMappings.default())


def _rows(result):
    return [tuple(record.values()) for record in result]


class TestList:
    """List method semantics."""

    def test_no_inputs_returns_every_row_in_order(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute(MethodType.LIST, catalog["Customer"], document)
        assert _rows(result) == CUSTOMER_ROWS

    def test_prefix_filter_on_first_property(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute(MethodType.LIST, catalog["Customer"], document, ["An"])
        assert _rows(result) == [("Ann", "NY"), ("Anna", "LA")]

    def test_filters_are_combined_with_and(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute(
            "ListCustomer", catalog["Customer"], document, {"Name": "An", "City": "N"}
        )
        assert _rows(result) == [("Ann", "NY")]

    def test_empty_and_none_inputs_are_ignored(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute(MethodType.LIST, catalog["Customer"], document, ["", None])
        assert len(result) == 3

    def test_prefix_match_is_case_sensitive_by_default(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute(MethodType.LIST, catalog["Customer"], document, ["an"])
        assert len(result) == 0

    def test_case_insensitive_prefix(self, customers_path):
        document, catalog = _discover(customers_path)
        executor = _QueryExecutor(case_sensitive_prefix=False)
        result = executor.execute(MethodType.LIST, catalog["Customer"], document, ["an"])
        assert _rows(result) == [("Ann", "NY"), ("Anna", "LA")]

    def test_missing_cell_never_matches_a_prefix(self, multi_table_path):
        document, catalog = _discover(multi_table_path)
        result = _QueryExecutor().execute(MethodType.LIST, catalog["Customer"], document, {"Phone": "5"})
        assert _rows(result) == [("Bob", "NY", "555-0100")]

    def test_round_trip_reproduces_source_rows(self, multi_table_path):
        document, catalog = _discover(multi_table_path)
        for table in document:
            service_object = catalog[table.name]
            result = _QueryExecutor().execute(
                MethodType.LIST, service_object, document, return_order=service_object.properties.names()
            )
            assert _rows(result) == table.rows

    def test_return_order_is_honored(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute(
            MethodType.LIST, catalog["Customer"], document, ["B"], return_order=["City", "Name"]
        )
        assert result.columns == ["City", "Name"]
        assert list(result[0].keys()) == ["City", "Name"]
        assert result[0].to_dict() == {"City": "NY", "Name": "Bob"}

    def test_partial_return_order(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute(
            MethodType.LIST, catalog["Customer"], document, return_order=["City"]
        )
        assert [record.to_dict() for record in result] == [{"City": "NY"}, {"City": "LA"}, {"City": "NY"}]


class TestRead:
    """Read method semantics."""

    def test_exact_match(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute(MethodType.READ, catalog["Customer"], document, "Ann")
        assert _rows(result) == [("Ann", "NY")]

    def test_key_is_trimmed(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute("ReadCustomer", catalog["Customer"], document, ["  Anna "])
        assert _rows(result) == [("Anna", "LA")]

    def test_no_prefix_semantics(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute(MethodType.READ, catalog["Customer"], document, "An")
        assert len(result) == 0

    def test_no_match_returns_empty_result(self, customers_path):
        document, catalog = _discover(customers_path)
        result = _QueryExecutor().execute(MethodType.READ, catalog["Customer"], document, {"Name": "Zed"})
        assert len(result) == 0
        assert result.first() is None

    def test_duplicate_keys_return_first_in_document_order(self, write_xml):
        document, catalog = _discover(write_xml(DUPLICATE_KEYS_XML))
        result = _QueryExecutor().execute(MethodType.READ, catalog["Customer"], document, "Ann")
        assert _rows(result) == [("Ann", "NY")]

    @pytest.mark.parametrize("key", [None, "", "   ", [], {"Name": None}])
    def test_missing_key(self, customers_path, key):
        document, catalog = _discover(customers_path)
        executor = _QueryExecutor()
        with pytest.raises(MissingRequiredInputError) as exc_info:
            executor.plan(MethodType.READ, catalog["Customer"], key)
        assert exc_info.value.entity == "Customer"
        assert exc_info.value.property_name == "Name"

    def test_too_many_key_values(self, customers_path):
        _, catalog = _discover(customers_path)
        with pytest.raises(ValidationError) as exc_info:
            _QueryExecutor().plan(MethodType.READ, catalog["Customer"], ["Ann", "NY"])
        assert exc_info.value.subcode == VALIDATION_INPUT_COUNT_MISMATCH

    def test_key_mapping_rejects_non_key_properties(self, customers_path):
        _, catalog = _discover(customers_path)
        with pytest.raises(ValidationError) as exc_info:
            _QueryExecutor().plan(MethodType.READ, catalog["Customer"], {"City": "NY"})
        assert exc_info.value.subcode == VALIDATION_UNKNOWN_PROPERTY


class TestRequestValidation:
    """Problems detected before any row is read."""

    def test_unknown_return_property(self, customers_path):
        _, catalog = _discover(customers_path)
        with pytest.raises(ValidationError) as exc_info:
            _QueryExecutor().plan(MethodType.LIST, catalog["Customer"], return_order=["Name", "Zip"])
        assert exc_info.value.subcode == VALIDATION_UNKNOWN_PROPERTY
        assert exc_info.value.details["properties"] == ["Zip"]

    def test_unknown_method(self, customers_path):
        _, catalog = _discover(customers_path)
        with pytest.raises(ValidationError) as exc_info:
            _QueryExecutor().plan("DeleteCustomer", catalog["Customer"])
        assert exc_info.value.subcode == EXECUTION_UNKNOWN_METHOD

    def test_method_kind_by_name(self, customers_path):
        _, catalog = _discover(customers_path)
        plan = _QueryExecutor().plan("Read", catalog["Customer"], "Ann")
        assert plan.method.name == "ReadCustomer"

    def test_repeated_return_property(self, customers_path):
        _, catalog = _discover(customers_path)
        with pytest.raises(ValidationError) as exc_info:
            _QueryExecutor().plan(MethodType.LIST, catalog["Customer"], return_order=["Name", "City", "Name"])
        assert exc_info.value.subcode == VALIDATION_DUPLICATE_PROPERTY
        assert exc_info.value.details["properties"] == ["Name"]

    def test_inactive_service_object_is_rejected(self, customers_path):
        document, catalog = _discover(customers_path)
        customer = catalog["Customer"]
        customer.active = False
        with pytest.raises(ValidationError) as exc_info:
            _QueryExecutor().execute(MethodType.LIST, customer, document)
        assert exc_info.value.subcode == VALIDATION_INACTIVE_ENTITY
        assert exc_info.value.details == {"entity": "Customer"}


class TestDrift:
    """Documents that changed since discovery."""

    def test_missing_table(self, customers_path, write_xml):
        _, catalog = _discover(customers_path)
        other = load_document(write_xml(MULTI_TABLE_XML.replace("Customer>", "Client>"), "other.xml"))
        with pytest.raises(UnknownEntityError) as exc_info:
            _QueryExecutor().execute(MethodType.LIST, catalog["Customer"], other)
        assert exc_info.value.entity == "Customer"
        assert exc_info.value.details["path"] == other.source

    def test_missing_column(self, customers_path):
        _, catalog = _discover(customers_path)
        shrunk = Document(name="Store", tables=[Table("Customer", [Column("Name", "String")], [("Ann",)])])
        with pytest.raises(UnknownEntityError) as exc_info:
            _QueryExecutor().execute(MethodType.LIST, catalog["Customer"], shrunk)
        assert exc_info.value.property_name == "City"


class TestCoercion:
    """Values converted to their semantic types."""

    def test_typed_values(self, inventory_path):
        document, catalog = _discover(inventory_path)
        result = _QueryExecutor().execute(MethodType.READ, catalog["Product"], document, "P-1")
        record = result.first()
        assert record["Quantity"] == 5
        assert record["InStock"] is True
        assert record["Added"] == datetime.date(2024, 1, 31)
        assert record["Price"] == Decimal("9.99")
        assert record["Notes"] is None

    def test_type_coercion_error(self, write_xml):
        document, catalog = _discover(write_xml(BAD_NUMBER_XML))
        with pytest.raises(TypeCoercionError) as exc_info:
            _QueryExecutor().execute(MethodType.LIST, catalog["Product"], document)
        error = exc_info.value
        assert error.value == "abc"
        assert error.entity == "Product"
        assert error.property_name == "Quantity"
        assert error.semantic_type == "Number"

    def test_coercion_only_for_returned_properties(self, write_xml):
        document, catalog = _discover(write_xml(BAD_NUMBER_XML))
        result = _QueryExecutor().execute(MethodType.LIST, catalog["Product"], document, return_order=["Sku"])
        assert [record["Sku"] for record in result] == ["P-1", "P-2"]

    def test_catalog_value_slots_are_untouched(self, customers_path):
        document, catalog = _discover(customers_path)
        _QueryExecutor().execute(MethodType.LIST, catalog["Customer"], document)
        assert all(prop.value is None for prop in catalog["Customer"].properties)
