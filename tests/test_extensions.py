import pytest

from xmlcursor.extensions import (
    COUNT_ATT,
    get_element_count,
    read_element,
    set_element_count,
    skip_to_next_element,
    write_element,
)
from xmlcursor.nodes import NodeType
from xmlcursor.reader import XmlCursorReader
from xmlcursor.writer import XmlCursorWriter


def _reader_at_first_element(text: str) -> XmlCursorReader:
    reader = XmlCursorReader.from_string(text)
    assert skip_to_next_element(reader)
    assert reader.node_type == NodeType.ELEMENT
    return reader


# --- write_element / read_element ---

def test_write_element_round_trip():
    def contents(w):
        set_element_count(w, 2)
        w.write_element_string("Child", "one")
        w.write_element_string("Child", "two")

    writer = XmlCursorWriter()
    write_element(writer, "Item", contents)
    reader = _reader_at_first_element(writer.to_string())

    seen = {}

    def body(r):
        seen["count"] = get_element_count(r)
        children = []
        while r.read() and not (r.node_type == NodeType.END_ELEMENT and r.name == "Item"):
            if r.node_type == NodeType.TEXT:
                children.append(r.value)
        seen["children"] = children
        return True

    assert read_element(reader, "Item", body) is True
    assert seen == {"count": 2, "children": ["one", "two"]}
    assert skip_to_next_element(reader) is True
    assert reader.eof


def test_write_element_propagates_contents_error():
    def contents(w):
        raise KeyError("boom")

    writer = XmlCursorWriter()
    with pytest.raises(KeyError):
        write_element(writer, "Item", contents)


def test_read_element_is_case_insensitive():
    reader = _reader_at_first_element("<Item/>")
    assert read_element(reader, "item", lambda r: True)
    assert read_element(reader, "ITEM", lambda r: True)


def test_read_element_mismatch_does_not_call_or_move():
    reader = _reader_at_first_element("<Item><x/></Item>")
    before = reader.node
    calls = []

    def body(r):
        calls.append(r)
        return True

    assert read_element(reader, "Other", body) is False
    assert calls == []
    assert reader.node is before


def test_read_element_chain_of_alternatives():
    reader = _reader_at_first_element("<Square side='2'/>")
    got = []

    handled = (
        read_element(reader, "Circle", lambda r: got.append("circle") or True)
        or read_element(reader, "square", lambda r: got.append(r.get_attribute("side")) or True)
    )

    assert handled
    assert got == ["2"]


def test_read_element_requires_element_node():
    reader = XmlCursorReader.from_string("<a>a</a>")
    reader.read()
    reader.read()
    assert reader.node_type == NodeType.TEXT
    assert read_element(reader, "", lambda r: True) is False


def test_read_element_returns_body_result():
    reader = _reader_at_first_element("<a/>")
    assert read_element(reader, "a", lambda r: False) is False


def test_read_element_propagates_body_error():
    reader = _reader_at_first_element("<a/>")

    def body(r):
        raise ValueError("bad body")

    with pytest.raises(ValueError):
        read_element(reader, "a", body)


# --- count attribute ---

def test_count_is_zero_without_attributes():
    reader = _reader_at_first_element("<list><i/></list>")
    assert get_element_count(reader) == 0


def test_count_parses_value():
    reader = _reader_at_first_element('<list count=" 12 "/>')
    assert get_element_count(reader) == 12


@pytest.mark.parametrize("raw", ["abc", "", "1.5", "1_000", "2147483648", "-2147483649"])
def test_count_invalid_value_raises(raw):
    reader = _reader_at_first_element(f'<list count="{raw}"/>')
    with pytest.raises(ValueError):
        get_element_count(reader)


def test_count_missing_with_other_attributes_raises():
    reader = _reader_at_first_element('<list id="x"/>')
    with pytest.raises(ValueError):
        get_element_count(reader)


@pytest.mark.parametrize("value", [0, 1, 2147483647])
def test_set_then_get_count(value):
    writer = XmlCursorWriter()
    writer.write_start_element("list")
    set_element_count(writer, value)
    writer.write_end_element()

    text = writer.to_string()
    assert f'{COUNT_ATT}="{value}"' in text

    reader = _reader_at_first_element(text)
    assert get_element_count(reader) == value


def test_set_count_rejects_bad_values():
    writer = XmlCursorWriter()
    writer.write_start_element("list")
    with pytest.raises(TypeError):
        set_element_count(writer, "3")
    with pytest.raises(TypeError):
        set_element_count(writer, True)
    with pytest.raises(ValueError):
        set_element_count(writer, 2 ** 31)


# --- skip_to_next_element ---

def test_skip_stops_at_next_element():
    reader = XmlCursorReader.from_string("<root>text<!--c--><?p x?><child/></root>")
    reader.read()

    assert skip_to_next_element(reader) is True
    assert reader.node_type == NodeType.ELEMENT
    assert reader.name == "child"


def test_skip_on_exhausted_stream_returns_true():
    reader = XmlCursorReader.from_string("<a/>")
    while reader.read():
        pass

    assert skip_to_next_element(reader) is True
    assert skip_to_next_element(reader, "a") is True
    assert reader.eof


def test_skip_past_last_element_returns_true():
    reader = _reader_at_first_element("<a>tail</a>")
    assert skip_to_next_element(reader) is True
    assert reader.eof


def test_skip_named_stops_at_first_element():
    reader = XmlCursorReader.from_string("<root><A/><B/><target/><C/></root>")
    reader.read()

    assert skip_to_next_element(reader, "target") is True
    assert reader.node_type == NodeType.ELEMENT
    assert reader.name == "A"


def test_skip_named_also_stops_on_matching_end_tag():
    reader = _reader_at_first_element("<target>text</target>")

    assert skip_to_next_element(reader, "target") is True
    assert reader.node_type == NodeType.END_ELEMENT
    assert reader.name == "target"


def test_skip_returns_false_on_parse_error():
    reader = XmlCursorReader.from_string("<root><a></b></root>")
    results = [skip_to_next_element(reader) for _ in range(5)]
    assert False in results


def test_skip_returns_false_when_read_raises():
    class Broken:
        node_type = NodeType.NONE
        name = ""

        def read(self):
            raise OSError("disk gone")

    assert skip_to_next_element(Broken()) is False
    assert skip_to_next_element(Broken(), "x") is False
