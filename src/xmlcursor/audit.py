from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .extensions import COUNT_ATT, get_element_count
from .nodes import NodeType
from .reader import XmlCursorReader


@dataclass
class CountIssue:
    path: str
    name: str
    declared: Optional[int]
    actual: int
    error: Optional[str] = None


@dataclass
class CountAudit:
    elements_total: int = 0
    counted_elements: int = 0
    issues: List[CountIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


@dataclass
class _Frame:
    name: str
    declared: Optional[int]
    error: Optional[str]
    children: int = 0


def audit_reader(reader: XmlCursorReader, *, max_issues: Optional[int] = None) -> CountAudit:
    """
    Walk the rest of the document and check every count attribute against the
    number of direct child elements.
    """
    audit = CountAudit()
    stack: List[_Frame] = []

    while reader.read():
        if reader.node_type == NodeType.ELEMENT:
            audit.elements_total += 1
            if stack:
                stack[-1].children += 1

            declared, error = None, None
            if reader.get_attribute(COUNT_ATT) is not None:
                audit.counted_elements += 1
                try:
                    declared = get_element_count(reader)
                except ValueError as e:
                    error = str(e)
            stack.append(_Frame(reader.name, declared, error))
            continue

        if reader.node_type != NodeType.END_ELEMENT or not stack:
            continue

        path = "/" + "/".join(f.name for f in stack)
        frame = stack.pop()
        if frame.error is not None or (frame.declared is not None and frame.declared != frame.children):
            audit.issues.append(
                CountIssue(
                    path=path,
                    name=frame.name,
                    declared=frame.declared,
                    actual=frame.children,
                    error=frame.error,
                )
            )
            if max_issues is not None and len(audit.issues) >= max_issues:
                break

    return audit


def audit_counts(xml_path: Union[str, Path], *, max_issues: Optional[int] = None) -> CountAudit:
    with XmlCursorReader(xml_path) as reader:
        return audit_reader(reader, max_issues=max_issues)
