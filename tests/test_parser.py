import json

import pytest

from src.mdb_local.errors import ParseError, ValidationError
from src.mdb_local.parser import (
    TableDescriptor,
    decode_line,
    encode_line,
    validate_name,
)


@pytest.mark.parametrize(
    "descriptor",
    [
        TableDescriptor("orders", "database/tables/orders", ("id", "total")),
        TableDescriptor("empty", "database/tables/empty", ()),
        TableDescriptor("odd", 'C:\\db\\"quoted", {braces}\tx', ("b", "a", "c")),
        TableDescriptor("unicode", "/srv/бд/tables/unicode", ("f1",)),
    ],
)
def test_decode_inverts_encode(descriptor):
    line = encode_line(descriptor)

    assert "\n" not in line and "\r" not in line
    assert decode_line(line) == descriptor


def test_encoded_line_shape():
    line = encode_line(TableDescriptor("t1", "./database/t1", ["f1", "f2"]))

    assert line == '{"name":"t1","folder":"./database/t1","fieldnames":["f1","f2"]}'


def test_fields_are_stored_as_tuple():
    descriptor = TableDescriptor("t", "folder", ["x", "y"])

    assert descriptor.fields == ("x", "y")
    assert hash(descriptor) == hash(TableDescriptor("t", "folder", ("x", "y")))


def test_decode_strips_line_terminator():
    descriptor = decode_line('{"name":"t","folder":"f","fieldnames":["a"]}\r\n')

    assert descriptor == TableDescriptor("t", "f", ("a",))


@pytest.mark.parametrize(
    "line",
    [
        "not json at all",
        '{"name":"t","folder":"f","fieldnames":["a"]',
        '["t","f",["a"]]',
        '{"folder":"f","fieldnames":[]}',
        '{"name":"","folder":"f","fieldnames":[]}',
        '{"name":"t","fieldnames":[]}',
        '{"name":"t","folder":"f","fieldnames":"a,b"}',
        '{"name":"t","folder":"f","fieldnames":["a",1]}',
    ],
)
def test_decode_rejects_malformed_line(line):
    with pytest.raises(ParseError) as excinfo:
        decode_line(line)

    assert excinfo.value.line == line


def test_parse_error_message_contains_line():
    with pytest.raises(ParseError, match="garbage"):
        decode_line("garbage")


def test_encode_keeps_field_order():
    fields = ["zeta", "alpha", "mid"]
    record = json.loads(encode_line(TableDescriptor("t", "f", fields)))

    assert record["fieldnames"] == fields


@pytest.mark.parametrize("name", ["orders", "Order_2", "_", "123"])
def test_validate_name_accepts(name):
    assert validate_name(name) == name


@pytest.mark.parametrize("name", ["", "bad name!", "a-b", "a.b", "ñame", None])
def test_validate_name_rejects(name):
    with pytest.raises(ValidationError):
        validate_name(name)


def test_validate_name_reports_kind_and_token():
    with pytest.raises(ValidationError, match="field name 'x y'"):
        validate_name("x y", kind="field")


def test_decode_rejects_undecodable_bytes():
    line = b'{"name":"t\xff","folder":"f","fieldnames":[]}'.decode(
        "utf-8", errors="surrogateescape"
    )

    with pytest.raises(ParseError, match="invalid UTF-8"):
        decode_line(line)
