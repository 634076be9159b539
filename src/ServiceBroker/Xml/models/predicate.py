# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Filter predicates built from method input values.

List methods filter with a conjunction of prefix matches, one per input
property that carries a value. Read methods filter with a single exact match
on the key property (the service object's first property).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from ..common.constants import OPERATOR_EQ, OPERATOR_STARTSWITH
from ..core._error_codes import VALIDATION_INPUT_COUNT_MISMATCH, VALIDATION_UNKNOWN_PROPERTY
from ..core.errors import MissingRequiredInputError, ValidationError
from .service_object import MethodType, ServiceObject

# Input values are either aligned to the method's input properties or keyed by property name
InputValues = Union[Sequence[Any], Mapping[str, Any], None]


def _has_value(value: Any) -> bool:
    return value is not None and str(value) != ""


@dataclass(frozen=True)
class Clause:
    """
    One comparison against a column.

    :param column: Property (column) name.
    :type column: str
    :param operator: ``"startswith"`` or ``"eq"``.
    :type operator: str
    :param value: Comparison text.
    :type value: str
    :param case_sensitive: Whether the comparison is case-sensitive.
    :type case_sensitive: bool
    """

    column: str
    operator: str
    value: str
    case_sensitive: bool = True

    def __post_init__(self) -> None:
        if self.operator not in (OPERATOR_STARTSWITH, OPERATOR_EQ):
            raise ValueError(f"Unsupported filter operator '{self.operator}'")

    def matches(self, cell: Optional[str]) -> bool:
        if cell is None:
            return False
        text = cell if isinstance(cell, str) else str(cell)
        expected = self.value
        if not self.case_sensitive:
            text = text.casefold()
            expected = expected.casefold()
        if self.operator == OPERATOR_STARTSWITH:
            return text.startswith(expected)
        return text == expected

    def to_filter(self) -> str:
        escaped = self.value.replace("'", "''")
        return f"{self.operator}({self.column}, '{escaped}')"


@dataclass(frozen=True)
class Predicate:
    """
    Ordered conjunction of clauses.

    An empty predicate matches every row. Clause order is deterministic
    (property declaration order) but has no effect on the outcome.

    Example::

        predicate = Predicate((Clause("Name", "startswith", "An"),))
        predicate.matches({"Name": "Anna", "City": "LA"})   # True
        predicate.to_filter()                               # "startswith(Name, 'An')"
    """

    clauses: Tuple[Clause, ...] = field(default_factory=tuple)

    def matches(self, row: Mapping[str, Optional[str]]) -> bool:
        """
        Evaluate the predicate against one row.

        :param row: Cell values keyed by property (column) name.
        :type row: Mapping[str, str | None]
        :return: ``True`` when every clause matches.
        :rtype: bool
        """
        return all(clause.matches(row.get(clause.column)) for clause in self.clauses)

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(clause.column for clause in self.clauses)

    def to_filter(self) -> str:
        return " and ".join(clause.to_filter() for clause in self.clauses)

    def __bool__(self) -> bool:
        return bool(self.clauses)

    def __len__(self) -> int:
        return len(self.clauses)


def _align_inputs(entity: ServiceObject, input_names: Sequence[str], inputs: InputValues) -> Mapping[str, Any]:
    if inputs is None:
        return {}
    if isinstance(inputs, Mapping):
        unknown = [name for name in inputs if name not in input_names]
        if unknown:
            raise ValidationError(
                f"Unknown input properties {unknown} for service object '{entity.name}'",
                subcode=VALIDATION_UNKNOWN_PROPERTY,
                details={"entity": entity.name, "properties": unknown},
            )
        return inputs
    if isinstance(inputs, Sequence) and not isinstance(inputs, (str, bytes)):
        values = list(inputs)
    else:
        values = [inputs]
    if len(values) > len(input_names):
        raise ValidationError(
            f"Service object '{entity.name}' accepts {len(input_names)} input values, got {len(values)}",
            subcode=VALIDATION_INPUT_COUNT_MISMATCH,
            details={"entity": entity.name, "expected": len(input_names), "actual": len(values)},
        )
    return dict(zip(input_names, values))


def build_list_predicate(
    entity: ServiceObject,
    inputs: InputValues = None,
    *,
    case_sensitive: bool = True,
) -> Predicate:
    """
    Build the filter for a List method.

    Every input property with a non-empty value contributes a prefix-match
    clause; properties without a value are ignored. With no values at all
    the predicate matches every row.

    :param entity: Service object being listed.
    :type entity: ServiceObject
    :param inputs: Values aligned to the List method's input properties, or a
        mapping of property name to value.
    :type inputs: Sequence | Mapping | None
    :param case_sensitive: Whether prefix matching is case-sensitive.
    :type case_sensitive: bool
    :return: Conjunctive predicate in property declaration order.
    :rtype: Predicate
    :raises ~ServiceBroker.Xml.core.errors.ValidationError: If ``inputs`` names an
        unknown property or has more values than there are input properties.
    """
    method = entity.method_of_type(MethodType.LIST)
    values = _align_inputs(entity, method.input_properties, inputs)
    clauses = [
        Clause(name, OPERATOR_STARTSWITH, str(values[name]), case_sensitive)
        for name in method.input_properties
        if name in values and _has_value(values[name])
    ]
    return Predicate(tuple(clauses))


def build_read_predicate(entity: ServiceObject, key_value: Any) -> Predicate:
    """
    Build the filter for a Read method.

    The supplied key is trimmed and compared for exact equality with the
    service object's first property.

    :param entity: Service object being read.
    :type entity: ServiceObject
    :param key_value: Value of the key property.
    :type key_value: Any
    :return: Single-clause predicate.
    :rtype: Predicate
    :raises ~ServiceBroker.Xml.core.errors.MissingRequiredInputError: If the key is
        ``None``, empty or whitespace only.
    """
    method = entity.method_of_type(MethodType.READ)
    key_name = method.required_properties[0] if method.required_properties else entity.key_property.name
    if key_value is None or str(key_value).strip() == "":
        raise MissingRequiredInputError(entity.name, key_name)
    return Predicate((Clause(key_name, OPERATOR_EQ, str(key_value).strip()),))


__all__ = ["Clause", "Predicate", "InputValues", "build_list_predicate", "build_read_predicate"]
