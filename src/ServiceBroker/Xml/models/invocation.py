# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Invocation request model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from .predicate import InputValues
from .service_object import MethodType


@dataclass
class InvocationRequest:
    """
    One method invocation against a discovered service object.

    :param method: Method name (``"ListCustomer"``) or kind (:attr:`MethodType.LIST`).
    :type method: str | MethodType
    :param entity: Service object name.
    :type entity: str
    :param inputs: Input values aligned to the method's input properties, or a
        mapping of property name to value. For Read this is the key value
        (or a one-element sequence or mapping holding it).
    :type inputs: Sequence | Mapping | Any | None
    :param return_properties: Return property names in output order. Empty
        means the method's declared return properties.
    :type return_properties: list[str]

    Example::

        request = InvocationRequest(
            method="ListCustomer",
            entity="Customer",
            inputs={"Name": "An"},
            return_properties=["City", "Name"],
        )
        result = broker.execute(request)
    """

    method: Union[str, MethodType]
    entity: str
    inputs: Union[InputValues, Any] = None
    return_properties: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        method = self.method.value if isinstance(self.method, MethodType) else self.method
        return {
            "method": method,
            "entity": self.entity,
            "inputs": self.inputs,
            "return_properties": list(self.return_properties),
        }


__all__ = ["InvocationRequest"]
