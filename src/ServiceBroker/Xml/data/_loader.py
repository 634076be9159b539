# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
XML document loader.

Parses the target XML file into the tabular :class:`~ServiceBroker.Xml.models.document.Document`
model. The root element is the data-set container; every distinct child tag
of the root is a table and every occurrence of that tag is a row.

Column typing, in precedence order:

1. An inline ``xs:schema`` in the document declares the column types.
2. With ``infer_types`` enabled, the first non-empty value of a column fixes
   its type; later values are not reconciled (first-seen wins).
3. Otherwise every column is ``String``.

Row values are kept as raw text; conversion to semantic types happens when a
method executes. The loader keeps no state between calls.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Union
from xml.etree import ElementTree

from ..common.constants import (
    NATIVE_BOOLEAN,
    NATIVE_DATE,
    NATIVE_INT32,
    NATIVE_INT64,
    NATIVE_STRING,
    XSD_NAMESPACE,
    XSD_NATIVE_TYPES,
)
from ..core._error_codes import (
    PARSE_EMPTY_DOCUMENT,
    PARSE_FILE_NOT_FOUND,
    PARSE_FILE_UNREADABLE,
    PARSE_MALFORMED,
)
from ..core.errors import ParseError
from ..models.document import Column, Document, Table

logger = logging.getLogger(__name__)

_XSD = f"{{{XSD_NAMESPACE}}}"
_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1

PathLike = Union[str, Path]


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _xsd_native_type(type_name: Optional[str]) -> str:
    if not type_name:
        return NATIVE_STRING
    local = type_name.rsplit(":", 1)[-1]
    return XSD_NATIVE_TYPES.get(local, local)


def infer_native_type(text: str) -> str:
    """
    Guess the native type of a single value.

    :param text: Raw value text.
    :type text: str
    :return: ``"Boolean"``, ``"Int32"``, ``"Int64"``, ``"Date"`` or ``"String"``.
    :rtype: str
    """
    value = text.strip()
    if value in ("true", "false"):
        return NATIVE_BOOLEAN
    if _INT_PATTERN.match(value):
        return NATIVE_INT32 if _INT32_MIN <= int(value) <= _INT32_MAX else NATIVE_INT64
    if _DATE_PATTERN.match(value):
        return NATIVE_DATE
    return NATIVE_STRING


def _read_inline_schema(root: ElementTree.Element) -> Dict[str, Dict[str, str]]:
    """Return declared column types per table from an inline ``xs:schema``, in declaration order."""
    declared: Dict[str, Dict[str, str]] = {}
    for schema in root.findall(f"{_XSD}schema"):
        for element in schema.iter(f"{_XSD}element"):
            complex_type = element.find(f"{_XSD}complexType")
            name = element.get("name")
            if complex_type is None or not name:
                continue
            columns: Dict[str, str] = {}
            for attribute in complex_type.findall(f"{_XSD}attribute"):
                if attribute.get("name"):
                    columns[attribute.get("name")] = _xsd_native_type(attribute.get("type"))
            for compositor in ("sequence", "all", "choice"):
                for group in complex_type.findall(f"{_XSD}{compositor}"):
                    for field in group.findall(f"{_XSD}element"):
                        field_name = field.get("name")
                        if not field_name or field.find(f"{_XSD}complexType") is not None:
                            continue
                        type_name = field.get("type")
                        if type_name is None:
                            restriction = field.find(f"{_XSD}simpleType/{_XSD}restriction")
                            type_name = restriction.get("base") if restriction is not None else None
                        columns[field_name] = _xsd_native_type(type_name)
            if columns:
                declared[name] = columns
    return declared


class _TableBuilder:
    """Accumulates the records of one repeating group."""

    def __init__(self, name: str, declared: Optional[Dict[str, str]] = None) -> None:
        self.name = name
        self._types: Dict[str, Optional[str]] = dict(declared or {})
        self._declared = set(self._types)
        self._records: List[Dict[str, str]] = []
        self._skipped: set = set()

    def add_record(self, element: ElementTree.Element) -> None:
        values: Dict[str, str] = {}
        for attribute_name, attribute_value in element.attrib.items():
            column = _local_name(attribute_name)
            self._types.setdefault(column, None)
            values[column] = attribute_value
        for child in element:
            if not isinstance(child.tag, str):
                continue
            column = _local_name(child.tag)
            if len(child):
                self._skip(column, "nested record groups are not supported")
                continue
            if column in values:
                self._skip(column, "repeated fields within one record are not supported; keeping the first")
                continue
            self._types.setdefault(column, None)
            values[column] = child.text or ""
        self._records.append(values)

    def _skip(self, column: str, reason: str) -> None:
        if column not in self._skipped:
            self._skipped.add(column)
            logger.warning("Skipping field '%s' of table '%s': %s", column, self.name, reason)

    def _resolve_type(self, column: str, infer_types: bool) -> str:
        native_type = self._types[column]
        if native_type is not None:
            return native_type
        if infer_types:
            for record in self._records:
                text = record.get(column)
                if text is not None and text.strip() != "":
                    return infer_native_type(text)
        return NATIVE_STRING

    def build(self, infer_types: bool) -> Table:
        columns = [Column(name, self._resolve_type(name, infer_types)) for name in self._types]
        rows = [tuple(record.get(column.name) for column in columns) for record in self._records]
        return Table(name=self.name, columns=columns, rows=rows)


class _XmlDocumentLoader:
    """
    Loads XML documents into fresh :class:`~ServiceBroker.Xml.models.document.Document` snapshots.

    :param infer_types: Type undeclared columns from their first non-empty value.
    :type infer_types: bool
    """

    def __init__(self, *, infer_types: bool = False) -> None:
        self.infer_types = infer_types

    def load(self, path: PathLike) -> Document:
        """
        Parse the document at ``path``.

        :param path: Path of the XML file.
        :type path: str | pathlib.Path
        :return: A new document snapshot.
        :rtype: ~ServiceBroker.Xml.models.document.Document
        :raises ~ServiceBroker.Xml.core.errors.ParseError: If the file is missing,
            unreadable, not well-formed, or holds no record groups.
        """
        source = "" if path is None else str(path)
        if not source.strip():
            raise ParseError("No document path configured", path=source, subcode=PARSE_FILE_NOT_FOUND)
        file_path = Path(path)
        if not file_path.is_file():
            raise ParseError(f"Document '{source}' does not exist", path=source, subcode=PARSE_FILE_NOT_FOUND)

        try:
            if file_path.stat().st_size == 0:
                raise ParseError(f"Document '{source}' is empty", path=source, subcode=PARSE_EMPTY_DOCUMENT)
            tree = ElementTree.parse(file_path)
        except ElementTree.ParseError as exc:
            raise ParseError(
                f"Document '{source}' is not well-formed XML: {exc}", path=source, subcode=PARSE_MALFORMED
            ) from exc
        except OSError as exc:
            raise ParseError(
                f"Document '{source}' could not be read: {exc}", path=source, subcode=PARSE_FILE_UNREADABLE
            ) from exc

        document = self.load_element(tree.getroot(), source=source)
        logger.debug("Loaded document '%s' with tables %s", source, document.table_names)
        return document

    def loads(self, text: Union[str, bytes], *, source: Optional[str] = None) -> Document:
        """
        Parse a document held in memory.

        :param text: XML text.
        :type text: str | bytes
        :param source: Optional label used in error messages.
        :type source: str | None
        :return: A new document snapshot.
        :rtype: ~ServiceBroker.Xml.models.document.Document
        :raises ~ServiceBroker.Xml.core.errors.ParseError: If the text is not
            well-formed or holds no record groups.
        """
        try:
            root = ElementTree.fromstring(text)
        except ElementTree.ParseError as exc:
            raise ParseError(f"Document is not well-formed XML: {exc}", path=source, subcode=PARSE_MALFORMED) from exc
        return self.load_element(root, source=source)

    def load_element(self, root: ElementTree.Element, *, source: Optional[str] = None) -> Document:
        declared = _read_inline_schema(root)
        builders: Dict[str, _TableBuilder] = {
            name: _TableBuilder(name, columns) for name, columns in declared.items()
        }

        groups: Dict[str, List[ElementTree.Element]] = {}
        for child in root:
            if not isinstance(child.tag, str) or child.tag == f"{_XSD}schema":
                continue
            groups.setdefault(_local_name(child.tag), []).append(child)

        for name, records in groups.items():
            if name not in builders and all(len(record) == 0 and not record.attrib for record in records):
                logger.warning("Skipping top-level element '%s': it holds no fields", name)
                continue
            builder = builders.get(name)
            if builder is None:
                builder = builders[name] = _TableBuilder(name)
            for record in records:
                builder.add_record(record)

        if not builders:
            raise ParseError(
                f"Document '{source or _local_name(root.tag)}' contains no record groups",
                path=source,
                subcode=PARSE_EMPTY_DOCUMENT,
            )

        tables = [builder.build(self.infer_types) for builder in builders.values()]
        return Document(name=_local_name(root.tag), tables=tables, source=source)


def load_document(path: PathLike, *, infer_types: bool = False) -> Document:
    """Load the XML document at ``path`` into a fresh snapshot."""
    return _XmlDocumentLoader(infer_types=infer_types).load(path)


__all__ = ["load_document", "infer_native_type"]
