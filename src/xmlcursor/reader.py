from __future__ import annotations

from collections import deque
from io import BytesIO
from pathlib import Path
from typing import IO, Deque, Iterator, Optional, Tuple, Union
import os

from lxml import etree

from .nodes import EMPTY_NODE, NodeType, XmlNode, qualified_name


Source = Union[str, Path, IO[bytes]]


class XmlCursorReader:
    """
    Pull reader over a streaming XML document: one node per read().

    Built on lxml iterparse (start/end/comment/pi). Text between tags is not an
    iterparse event, so it is recovered from .text/.tail of the previous event
    once the next event shows up (at that point the parser has already seen it).
    Elements already passed are cleared so big files do not fill RAM.
    """

    def __init__(self, source: Source, *, recover: bool = False) -> None:
        if isinstance(source, (str, Path)):
            if not os.path.exists(source):
                raise FileNotFoundError(f"XML not found: {source}")
            source = str(source)

        self._events: Optional[Iterator[Tuple[str, etree._Element]]] = iter(
            etree.iterparse(
                source,
                events=("start", "end", "comment", "pi"),
                recover=recover,
                huge_tree=True,
            )
        )
        self._pending: Deque[XmlNode] = deque()
        self._last: Optional[Tuple[str, etree._Element]] = None
        self._open_depth = 0
        self._node = EMPTY_NODE
        self._eof = False

    @classmethod
    def from_string(cls, text: Union[str, bytes], **kwargs) -> "XmlCursorReader":
        data = text.encode("utf-8") if isinstance(text, str) else text
        return cls(BytesIO(data), **kwargs)

    # --- current node ---

    @property
    def node_type(self) -> NodeType:
        return self._node.node_type

    @property
    def name(self) -> str:
        return self._node.name

    @property
    def value(self) -> str:
        return self._node.value

    @property
    def depth(self) -> int:
        return self._node.depth

    @property
    def eof(self) -> bool:
        return self._eof

    @property
    def node(self) -> XmlNode:
        return self._node

    @property
    def has_attributes(self) -> bool:
        elem = self._node.element
        return self._node.node_type == NodeType.ELEMENT and elem is not None and len(elem.attrib) > 0

    def get_attribute(self, name: str) -> Optional[str]:
        if self._node.node_type != NodeType.ELEMENT or self._node.element is None:
            return None
        return self._node.element.get(name)

    # --- cursor ---

    def read(self) -> bool:
        """Advance to the next node. False once the stream is exhausted."""
        if not self._pending:
            self._fill()
        if not self._pending:
            self._eof = True
            self._node = EMPTY_NODE
            return False
        self._node = self._pending.popleft()
        return True

    def close(self) -> None:
        self._events = None
        self._pending.clear()
        self._last = None
        self._node = EMPTY_NODE
        self._eof = True

    def __enter__(self) -> "XmlCursorReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _fill(self) -> None:
        if self._events is None:
            return
        try:
            event, elem = next(self._events)
        except StopIteration:
            self._events = None
            return

        text = self._text_since_last()
        if text:
            kind = NodeType.WHITESPACE if not text.strip() else NodeType.TEXT
            self._pending.append(XmlNode(kind, value=text, depth=self._open_depth))

        self._release_last()
        self._pending.append(self._node_for(event, elem))
        self._last = (event, elem)

    def _node_for(self, event: str, elem: etree._Element) -> XmlNode:
        if event == "start":
            node = XmlNode(NodeType.ELEMENT, qualified_name(elem), depth=self._open_depth, element=elem)
            self._open_depth += 1
            return node
        if event == "end":
            self._open_depth -= 1
            return XmlNode(NodeType.END_ELEMENT, qualified_name(elem), depth=self._open_depth)
        if event == "comment":
            return XmlNode(NodeType.COMMENT, value=elem.text or "", depth=self._open_depth)
        # pi
        return XmlNode(NodeType.PROCESSING_INSTRUCTION, elem.target, elem.text or "", self._open_depth)

    def _text_since_last(self) -> str:
        if self._last is None:
            return ""
        event, elem = self._last
        if event == "start":
            return elem.text or ""
        # after an end tag, comment or pi the text is the tail
        if elem.getparent() is None:
            return ""
        return elem.tail or ""

    def _release_last(self) -> None:
        if self._last is None or self._last[0] != "end":
            return
        elem = self._last[1]
        # limpieza: el elemento ya se recorrió completo
        elem.clear()
        parent = elem.getparent()
        if parent is not None:
            while elem.getprevious() is not None:
                del parent[0]
