from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import IO, Any, Dict, List, Optional, Tuple, Union

from lxml import etree


Target = Union[str, Path, IO[bytes]]


class XmlCursorWriter:
    """
    Forward-only XML writer: start tag, attributes, text, end tag.

    Wraps lxml.etree.xmlfile (incremental serialization). xmlfile wants the
    attributes up front, so the start tag is held open until the first piece
    of content (child, text or end tag) arrives.
    """

    def __init__(
        self,
        target: Optional[Target] = None,
        *,
        encoding: str = "utf-8",
        xml_declaration: bool = True,
    ) -> None:
        self._buffer: Optional[BytesIO] = None
        if target is None:
            self._buffer = BytesIO()
            target = self._buffer
        elif isinstance(target, Path):
            target = str(target)

        self._encoding = encoding
        self._xmlfile = etree.xmlfile(target, encoding=encoding)
        self._xf = self._xmlfile.__enter__()
        if xml_declaration:
            self._xf.write_declaration()

        self._open: List[Any] = []
        self._start_tag: Optional[Tuple[str, Dict[str, str]]] = None
        self._closed = False

    def write_start_element(self, name: str) -> None:
        self._ensure_open()
        self._flush_start_tag()
        self._start_tag = (name, {})

    def write_attribute_string(self, name: str, value: str) -> None:
        self._ensure_open()
        if self._start_tag is None:
            raise RuntimeError(f"Cannot write attribute '{name}': no start tag is open")
        tag, attrib = self._start_tag
        if name in attrib:
            raise RuntimeError(f"Duplicate attribute '{name}' on <{tag}>")
        attrib[name] = value

    def write_string(self, text: str) -> None:
        self._ensure_open()
        self._flush_start_tag()
        self._xf.write(text)

    def write_element_string(self, name: str, text: str) -> None:
        self.write_start_element(name)
        if text:
            self.write_string(text)
        self.write_end_element()

    def write_end_element(self) -> None:
        self._ensure_open()
        self._flush_start_tag()
        if not self._open:
            raise RuntimeError("write_end_element() without an open element")
        ctx = self._open.pop()
        ctx.__exit__(None, None, None)

    def flush(self) -> None:
        self._xf.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._flush_start_tag()
        while self._open:
            self._open.pop().__exit__(None, None, None)
        self._xmlfile.__exit__(None, None, None)
        self._closed = True

    def to_string(self) -> str:
        """Document written so far (only for writers created without a target)."""
        if self._buffer is None:
            raise RuntimeError("to_string() is only available for in-memory writers")
        self.close()
        return self._buffer.getvalue().decode(self._encoding)

    def __enter__(self) -> "XmlCursorWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Writer is closed")

    def _flush_start_tag(self) -> None:
        if self._start_tag is None:
            return
        tag, attrib = self._start_tag
        self._start_tag = None
        ctx = self._xf.element(tag, attrib)
        ctx.__enter__()
        self._open.append(ctx)
