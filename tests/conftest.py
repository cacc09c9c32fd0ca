from __future__ import annotations

from pathlib import Path

import pytest


COUNTED_XML = """<?xml version="1.0" encoding="utf-8"?>
<root>
  <list count="2"><i/><i/></list>
  <bad count="3"><i/></bad>
  <junk count="abc"/>
  <plain id="x"><i/></plain>
</root>
"""


@pytest.fixture
def counted_xml(tmp_path: Path) -> Path:
    path = tmp_path / "counted.xml"
    path.write_text(COUNTED_XML, encoding="utf-8")
    return path
