# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Return values of broker operations.

Each schema or query call hands back an :class:`OperationResult`. It behaves
like the catalog or result set it wraps, so most callers never notice it. The
call's :class:`OperationMetadata` stays reachable through ``.metadata``, or as a
plain dictionary via ``.with_response_details()``::

    customers = broker.query.list("Customer", {"Name": "An"})
    customers[0]["Name"]

    details = broker.query.list("Customer").with_response_details()
    details.telemetry["row_count"]
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class OperationMetadata:
    """
    Metadata captured for one broker call.

    :param correlation_id: Identifier generated for the call.
    :type correlation_id: :class:`str` | None
    :param operation: Operation name, e.g. ``"query.list"``.
    :type operation: :class:`str` | None
    :param entity: Service object the call targeted, if any.
    :type entity: :class:`str` | None
    :param row_count: Number of records produced, if any.
    :type row_count: :class:`int` | None
    :param timing_ms: Call duration in milliseconds.
    :type timing_ms: :class:`float` | None
    """

    correlation_id: Optional[str] = None
    operation: Optional[str] = None
    entity: Optional[str] = None
    row_count: Optional[int] = None
    timing_ms: Optional[float] = None


@dataclass
class BrokerResponse(Generic[T]):
    """
    Response object combining an operation result with telemetry data.

    :param result: The operation result (catalog, result set, ...).
    :type result: T
    :param telemetry: Dictionary containing ``correlation_id``, ``operation``,
        ``entity``, ``row_count`` and ``timing_ms``.
    :type telemetry: :class:`dict`
    """

    result: T
    telemetry: Dict[str, Any] = field(default_factory=dict)


class OperationResult(Generic[T]):
    """
    Transparent wrapper around an operation's value.

    Iteration, indexing, ``len``, ``in``, equality and truthiness all go to the
    wrapped value, as do public attributes such as ``to_dataframe``.

    :param result: The operation result value.
    :type result: T
    :param metadata: Call metadata.
    :type metadata: :class:`OperationMetadata`
    """

    __slots__ = ("_result", "_metadata")

    def __init__(self, result: T, metadata: Optional[OperationMetadata] = None) -> None:
        self._result = result
        self._metadata = metadata or OperationMetadata()

    @property
    def value(self) -> T:
        """Direct access to the result value."""
        return self._result

    @property
    def metadata(self) -> OperationMetadata:
        return self._metadata

    def with_response_details(self) -> BrokerResponse[T]:
        """
        Return the result together with its telemetry.

        :return: A BrokerResponse containing result and telemetry.
        :rtype: :class:`BrokerResponse`
        """
        return BrokerResponse(result=self._result, telemetry=asdict(self._metadata))

    # container protocol forwarded to the wrapped value

    def __iter__(self) -> Iterator:
        if isinstance(self._result, (str, bytes, dict)):
            return iter([self._result])
        try:
            return iter(self._result)  # type: ignore[call-overload]
        except TypeError:
            return iter([self._result])

    def __getitem__(self, key: Any) -> Any:
        return self._result[key]  # type: ignore[index]

    def __len__(self) -> int:
        try:
            return len(self._result)  # type: ignore[arg-type]
        except TypeError:
            return 1

    def __str__(self) -> str:
        return str(self._result)

    def __repr__(self) -> str:
        return f"OperationResult({self._result!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OperationResult):
            return self._result == other._result
        return self._result == other

    def __bool__(self) -> bool:
        return bool(self._result)

    def __contains__(self, item: Any) -> bool:
        try:
            return item in self._result  # type: ignore[operator]
        except TypeError:
            return item == self._result

    def __hash__(self) -> int:
        return hash(self._result)

    def __getattr__(self, name: str) -> Any:
        # Delegate helpers such as to_dataframe() to the wrapped result
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._result, name)


__all__ = ["OperationMetadata", "BrokerResponse", "OperationResult"]
