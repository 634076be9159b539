# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Record data model for method results.

Provides an ordered, dict-like representation of one result row, plus the
ordered :class:`ResultSet` returned by an invocation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd

# Type alias for semantic clarity
EntityName = str  # e.g., "Customer", "OrderLine"


@dataclass
class Record:
    """
    One result row, with fields in the declared return order.

    :param entity: Name of the service object the record belongs to.
    :type entity: str
    :param data: Field values keyed by property name, in return order.
    :type data: dict[str, Any]

    Example::

        for record in broker.query.list("Customer"):
            print(record["Name"], record.get("City"))
    """

    entity: EntityName
    data: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def keys(self):
        return self.data.keys()

    def values(self):
        return self.data.values()

    def items(self):
        return self.data.items()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a plain dictionary (for serialization).

        :return: Field values keyed by property name, in return order.
        :rtype: dict[str, Any]
        """
        return dict(self.data)


@dataclass
class ResultSet:
    """
    Ordered records produced by one method invocation.

    :param entity: Name of the service object that was queried.
    :type entity: str
    :param columns: Return property names, in output order.
    :type columns: list[str]
    :param records: Records in document order.
    :type records: list[Record]
    """

    entity: EntityName
    columns: List[str] = field(default_factory=list)
    records: List[Record] = field(default_factory=list)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> Record:
        return self.records[index]

    def first(self) -> Optional[Record]:
        return self.records[0] if self.records else None

    def to_list(self) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self.records]

    def to_dataframe(self) -> pd.DataFrame:
        """
        Render the records as a pandas DataFrame.

        Columns follow the return order even when the result set is empty.

        :return: One row per record.
        :rtype: pandas.DataFrame
        """
        return pd.DataFrame(self.to_list(), columns=list(self.columns))


__all__ = ["Record", "ResultSet", "EntityName"]
