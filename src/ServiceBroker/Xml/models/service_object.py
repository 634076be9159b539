# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Service object models: the typed catalog produced by schema discovery.

A :class:`ServiceObject` (entity) is derived one-to-one from a document
table. It owns an ordered :class:`PropertyCollection` (one property per
column) and an ordered :class:`MethodCollection` holding exactly one List and
one Read method. Both collections are plain ordered containers with an
identifier index; lookups accept a position or a name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from .types import SemanticType

_WHITESPACE = re.compile(r"\s+")


def sanitize_name(name: str) -> str:
    """
    Remove all whitespace from a table or column name.

    :param name: Original name.
    :type name: str
    :return: Name usable as a service object or property identifier.
    :rtype: str

    Example::

        sanitize_name("Order Line")  # "OrderLine"
    """
    return _WHITESPACE.sub("", name)


class MethodType(str, Enum):
    """The two operations generated for every service object."""

    LIST = "List"
    READ = "Read"


@dataclass
class Property:
    """
    A typed attribute of a service object.

    :param name: Identifier (sanitized column name).
    :type name: str
    :param semantic_type: Semantic type resolved through the type mappings.
    :type semantic_type: SemanticType
    :param display_name: Original column name.
    :type display_name: str | None
    :param native_type: Native type name of the source column.
    :type native_type: str | None
    :param value: Current value slot, populated only while a method executes.
    :type value: Any
    """

    name: str
    semantic_type: SemanticType
    display_name: Optional[str] = None
    native_type: Optional[str] = None
    value: Any = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.display_name is None:
            self.display_name = self.name

    def copy(self) -> "Property":
        return Property(
            name=self.name,
            semantic_type=self.semantic_type,
            display_name=self.display_name,
            native_type=self.native_type,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "semantic_type": self.semantic_type.value,
            "native_type": self.native_type,
        }


class PropertyCollection:
    """
    Ordered property container with lookup by position or by name.

    Also implements the two-phase result binding used during execution:
    :meth:`init_result_table` prepares an empty buffer, and
    :meth:`bind_properties_to_result_table` commits the current value slots
    as one record.

    :param properties: Initial properties, in declaration order.
    :type properties: Iterable[Property] | None
    """

    def __init__(self, properties: Optional[Iterable[Property]] = None) -> None:
        self._items: List[Property] = []
        self._index: Dict[str, int] = {}
        self._result_table: Optional[List[Dict[str, Any]]] = None
        for prop in properties or ():
            self.create(prop)

    def create(self, prop: Property) -> Property:
        """
        Append a property.

        :param prop: Property to add.
        :type prop: Property
        :return: The added property.
        :rtype: Property
        :raises ValueError: If a property with the same name already exists.
        """
        if prop.name in self._index:
            raise ValueError(f"Duplicate property name '{prop.name}'")
        self._index[prop.name] = len(self._items)
        self._items.append(prop)
        return prop

    def __getitem__(self, key: Union[int, str]) -> Property:
        if isinstance(key, int):
            return self._items[key]
        return self._items[self._index[key]]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[Property]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, name: str) -> Optional[Property]:
        position = self._index.get(name)
        return None if position is None else self._items[position]

    def index_of(self, name: str) -> int:
        return self._index[name]

    def names(self) -> List[str]:
        return [prop.name for prop in self._items]

    def copy(self) -> "PropertyCollection":
        """Return a collection of fresh property instances with empty value slots."""
        return PropertyCollection(prop.copy() for prop in self._items)

    # ------------------------------------------------------------ binding

    def init_result_table(self) -> None:
        """Prepare an empty result buffer and clear every value slot."""
        self._result_table = []
        for prop in self._items:
            prop.value = None

    def bind_properties_to_result_table(self, names: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Commit the current value slots to the result buffer as one record.

        :param names: Property names to include, in output order. Defaults to
            every property in declaration order.
        :type names: Iterable[str] | None
        :return: The committed record.
        :rtype: dict[str, Any]
        :raises RuntimeError: If :meth:`init_result_table` was not called first.
        """
        if self._result_table is None:
            raise RuntimeError("init_result_table() must be called before binding results")
        selected = self.names() if names is None else list(names)
        record = {name: self[name].value for name in selected}
        self._result_table.append(record)
        return record

    @property
    def result_table(self) -> List[Dict[str, Any]]:
        return list(self._result_table or [])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyCollection):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"PropertyCollection({self.names()!r})"


@dataclass
class Method:
    """
    A named operation exposed on a service object.

    :param name: Identifier, e.g. ``"ListCustomer"``.
    :type name: str
    :param type: Method kind.
    :type type: MethodType
    :param display_name: Human-readable name, e.g. ``"List Customer"``.
    :type display_name: str | None
    :param input_properties: Input property names, in order.
    :type input_properties: list[str]
    :param return_properties: Return property names, in order.
    :type return_properties: list[str]
    :param required_properties: Input property names that must carry a value.
    :type required_properties: list[str]
    """

    name: str
    type: MethodType
    display_name: Optional[str] = None
    input_properties: List[str] = field(default_factory=list)
    return_properties: List[str] = field(default_factory=list)
    required_properties: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.display_name is None:
            self.display_name = self.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "type": self.type.value,
            "input_properties": list(self.input_properties),
            "return_properties": list(self.return_properties),
            "required_properties": list(self.required_properties),
        }


class MethodCollection:
    """Ordered method container with lookup by position or by name."""

    def __init__(self, methods: Optional[Iterable[Method]] = None) -> None:
        self._items: List[Method] = []
        self._index: Dict[str, int] = {}
        for method in methods or ():
            self.create(method)

    def create(self, method: Method) -> Method:
        if method.name in self._index:
            raise ValueError(f"Duplicate method name '{method.name}'")
        self._index[method.name] = len(self._items)
        self._items.append(method)
        return method

    def __getitem__(self, key: Union[int, str]) -> Method:
        if isinstance(key, int):
            return self._items[key]
        return self._items[self._index[key]]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[Method]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, name: str) -> Optional[Method]:
        position = self._index.get(name)
        return None if position is None else self._items[position]

    def of_type(self, method_type: MethodType) -> Optional[Method]:
        for method in self._items:
            if method.type is method_type:
                return method
        return None

    def names(self) -> List[str]:
        return [method.name for method in self._items]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MethodCollection):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"MethodCollection({self.names()!r})"


@dataclass
class ServiceObject:
    """
    A discovered, typed entity derived from one document table.

    :param name: Identifier (sanitized table name).
    :type name: str
    :param display_name: Original table name.
    :type display_name: str | None
    :param properties: Ordered properties, one per column.
    :type properties: PropertyCollection
    :param methods: The List and Read methods.
    :type methods: MethodCollection
    :param active: Whether the service object is usable; set by discovery.
    :type active: bool

    Example::

        customer = catalog["Customer"]
        print(customer.properties.names())        # ['Name', 'City']
        print(customer.method("ReadCustomer").required_properties)  # ['Name']
    """

    name: str
    display_name: Optional[str] = None
    properties: PropertyCollection = field(default_factory=PropertyCollection)
    methods: MethodCollection = field(default_factory=MethodCollection)
    active: bool = False

    def __post_init__(self) -> None:
        if self.display_name is None:
            self.display_name = self.name

    @property
    def key_property(self) -> Property:
        """The first property, which is always the Read key."""
        return self.properties[0]

    def method(self, name: str) -> Method:
        """
        Return a method by name.

        :raises KeyError: If the service object has no such method.
        """
        return self.methods[name]

    def method_of_type(self, method_type: MethodType) -> Method:
        """
        Return the method of the given kind.

        :raises KeyError: If the service object has no method of that kind.
        """
        method = self.methods.of_type(method_type)
        if method is None:
            raise KeyError(method_type.value)
        return method

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "active": self.active,
            "properties": [prop.to_dict() for prop in self.properties],
            "methods": [method.to_dict() for method in self.methods],
        }


class ServiceCatalog:
    """
    Ordered, complete set of service objects produced by one discovery call.

    Two catalogs compare equal when they are structurally identical (same
    names, types and method shapes), regardless of object identity.
    """

    def __init__(self, service_objects: Optional[Iterable[ServiceObject]] = None) -> None:
        self._items: List[ServiceObject] = []
        self._index: Dict[str, int] = {}
        for service_object in service_objects or ():
            self.create(service_object)

    def create(self, service_object: ServiceObject) -> ServiceObject:
        if service_object.name in self._index:
            raise ValueError(f"Duplicate service object name '{service_object.name}'")
        self._index[service_object.name] = len(self._items)
        self._items.append(service_object)
        return service_object

    def __getitem__(self, key: Union[int, str]) -> ServiceObject:
        if isinstance(key, int):
            return self._items[key]
        return self._items[self._index[key]]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[ServiceObject]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, name: str) -> Optional[ServiceObject]:
        position = self._index.get(name)
        return None if position is None else self._items[position]

    def names(self) -> List[str]:
        return [service_object.name for service_object in self._items]

    def to_dict(self) -> Dict[str, Any]:
        return {"service_objects": [service_object.to_dict() for service_object in self._items]}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ServiceCatalog):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"ServiceCatalog({self.names()!r})"


__all__ = [
    "sanitize_name",
    "MethodType",
    "Property",
    "PropertyCollection",
    "Method",
    "MethodCollection",
    "ServiceObject",
    "ServiceCatalog",
]
