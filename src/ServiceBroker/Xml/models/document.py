# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
In-memory tabular representation of a loaded document.

A :class:`Document` is a fresh snapshot built by the document loader on
every discovery or execution call. Nothing here is cached or shared between
calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

# Type alias for semantic clarity
Row = Tuple[Optional[str], ...]


@dataclass(frozen=True)
class Column:
    """
    Column metadata.

    :param name: Column name as it appears in the document (may contain whitespace).
    :type name: str
    :param native_type: Native type name, e.g. ``"String"`` or ``"Int32"``.
    :type native_type: str
    """

    name: str
    native_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "native_type": self.native_type}


@dataclass
class Table:
    """
    A repeating record group: ordered columns and positionally aligned rows.

    :param name: Table name, unique within its document.
    :type name: str
    :param columns: Ordered column metadata.
    :type columns: list[Column]
    :param rows: Ordered rows; each has exactly ``len(columns)`` values.
    :type rows: list[Row]

    :raises ValueError: If a row does not have one value per column.
    """

    name: str
    columns: List[Column] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)

    def __post_init__(self) -> None:
        width = len(self.columns)
        for position, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {position} of table '{self.name}' has {len(row)} values, expected {width}"
                )

    def column_index(self, name: str) -> int:
        """
        Return the position of a column.

        :param name: Column name.
        :type name: str
        :return: Zero-based column position.
        :rtype: int
        :raises KeyError: If the table has no such column.
        """
        for index, column in enumerate(self.columns):
            if column.name == name:
                return index
        raise KeyError(name)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": [column.to_dict() for column in self.columns],
            "row_count": len(self.rows),
        }


@dataclass
class Document:
    """
    A loaded document: an ordered set of uniquely named tables.

    :param name: Name of the data-set container (the document's root element).
    :type name: str
    :param tables: Tables in document order.
    :type tables: list[Table]
    :param source: Path the document was loaded from, when known.
    :type source: str | None
    """

    name: str
    tables: List[Table] = field(default_factory=list)
    source: Optional[str] = None

    def __post_init__(self) -> None:
        seen = set()
        for table in self.tables:
            if table.name in seen:
                raise ValueError(f"Duplicate table name '{table.name}' in document '{self.name}'")
            seen.add(table.name)

    def get_table(self, name: str) -> Optional[Table]:
        """
        Find a table by name.

        :param name: Table name.
        :type name: str
        :return: The table, or ``None`` when the document has no such table.
        :rtype: Table | None
        """
        for table in self.tables:
            if table.name == name:
                return table
        return None

    @property
    def table_names(self) -> List[str]:
        return [table.name for table in self.tables]

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables)

    def __len__(self) -> int:
        return len(self.tables)


__all__ = ["Column", "Table", "Row", "Document"]
