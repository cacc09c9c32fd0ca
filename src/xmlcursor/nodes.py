from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from lxml import etree


class NodeType(Enum):
    NONE = "none"
    ELEMENT = "element"
    END_ELEMENT = "end_element"
    TEXT = "text"
    WHITESPACE = "whitespace"
    COMMENT = "comment"
    PROCESSING_INSTRUCTION = "processing_instruction"


@dataclass(frozen=True)
class XmlNode:
    node_type: NodeType
    name: str = ""
    value: str = ""
    depth: int = 0
    # solo para ELEMENT: se usa para leer atributos
    element: Optional[etree._Element] = None


EMPTY_NODE = XmlNode(NodeType.NONE)


def qualified_name(elem: etree._Element) -> str:
    # "{namespace}Tag" con prefijo "p" -> "p:Tag"
    local = etree.QName(elem).localname
    if elem.prefix:
        return f"{elem.prefix}:{local}"
    return local
