from __future__ import annotations

import re
from typing import Callable, Optional, Protocol

from .nodes import NodeType


# Count attribute for XML files
COUNT_ATT = "count"

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

_INT_RE = re.compile(r"\s*[+-]?[0-9]+\s*")


class XmlReaderLike(Protocol):
    @property
    def node_type(self) -> NodeType: ...

    @property
    def name(self) -> str: ...

    @property
    def has_attributes(self) -> bool: ...

    def get_attribute(self, name: str) -> Optional[str]: ...

    def read(self) -> bool: ...


class XmlWriterLike(Protocol):
    def write_start_element(self, name: str) -> None: ...

    def write_attribute_string(self, name: str, value: str) -> None: ...

    def write_end_element(self) -> None: ...


# Populates the contents of an element
ElementContents = Callable[[XmlWriterLike], None]

# Reads the data of the current element; True on success
XmlReadMethod = Callable[[XmlReaderLike], bool]


def write_element(writer: XmlWriterLike, element: str, contents: ElementContents) -> None:
    """
    Write <element>, let `contents` fill it using the same writer, close it.
    Whatever `contents` raises goes straight to the caller.
    """
    writer.write_start_element(element)
    contents(writer)
    writer.write_end_element()


def read_element(reader: XmlReaderLike, expected: str, method: XmlReadMethod) -> bool:
    """
    True only if the current node is an element named `expected` (case-insensitive)
    and `method(reader)` returns True.

    On a name mismatch `method` is not called and the reader does not move, so
    several read_element calls can be tried in a row on the same position.
    """
    result = reader.node_type == NodeType.ELEMENT and expected.casefold() == reader.name.casefold()
    if result:
        result = bool(method(reader))
    return result


def skip_to_next_element(reader: XmlReaderLike, element_name: Optional[str] = None) -> bool:
    """
    Advance node by node until an element node (or the end of the stream).

    Returns False only if reading raised; reaching the end is not an error.

    With `element_name` the loop also stops on any node whose name equals it,
    and still stops on the first element of any name. It does NOT skip ahead
    to a specific element.
    """
    try:
        if element_name is None:
            while reader.read() and reader.node_type != NodeType.ELEMENT:
                pass
        else:
            while (
                reader.read()
                and reader.node_type != NodeType.ELEMENT
                and reader.name != element_name
            ):
                pass
    except Exception:
        return False
    return True


def parse_count(raw: Optional[str]) -> int:
    if raw is None:
        raise ValueError(f"Missing '{COUNT_ATT}' attribute")
    if not _INT_RE.fullmatch(raw):
        raise ValueError(f"Invalid '{COUNT_ATT}' value: {raw!r}")
    value = int(raw)
    if not INT32_MIN <= value <= INT32_MAX:
        raise ValueError(f"'{COUNT_ATT}' value out of 32-bit range: {raw!r}")
    return value


def get_element_count(reader: XmlReaderLike) -> int:
    """
    Number stored in the count attribute of the current element.

    0 when the element has no attributes at all. If it has other attributes
    but no count, or the count is not a 32-bit integer, ValueError.
    """
    count = 0
    if reader.has_attributes:
        count = parse_count(reader.get_attribute(COUNT_ATT))
    return count


def set_element_count(writer: XmlWriterLike, count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int):
        raise TypeError(f"count must be int, got {type(count).__name__}")
    if not INT32_MIN <= count <= INT32_MAX:
        raise ValueError(f"count out of 32-bit range: {count}")
    writer.write_attribute_string(COUNT_ATT, str(count))
