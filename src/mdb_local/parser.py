"""Registry line format: one table descriptor per JSON line."""

import json
from dataclasses import dataclass, field

from src.mdb_local.constants import NAME_PATTERN
from src.mdb_local.errors import ParseError, ValidationError


@dataclass(frozen=True)
class TableDescriptor:
    """Name, storage folder and ordered field list of one table."""

    name: str
    folder: str
    fields: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any sequence, store a tuple so descriptors stay hashable.
        object.__setattr__(self, "fields", tuple(self.fields))


def validate_name(token: str, kind: str = "table") -> str:
    """Return token unchanged or raise ValidationError naming it."""
    if not isinstance(token, str) or not NAME_PATTERN.fullmatch(token):
        raise ValidationError(
            f"Invalid {kind} name {token!r}: use letters, digits and underscores."
        )
    return token


def encode_line(descriptor: TableDescriptor) -> str:
    """Serialize a descriptor to a single newline-free line."""
    record = {
        "name": descriptor.name,
        "folder": descriptor.folder,
        "fieldnames": list(descriptor.fields),
    }
    return json.dumps(record, ensure_ascii=False, separators=(",", ":"))


def decode_line(line: str) -> TableDescriptor:
    """Parse one registry line, raising ParseError if it is not a descriptor."""
    text = line.rstrip("\r\n")
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as error:
        raise ParseError(text, "invalid UTF-8") from error
    try:
        record = json.loads(text)
    except json.JSONDecodeError as error:
        raise ParseError(text, f"invalid JSON ({error.msg})") from error

    if not isinstance(record, dict):
        raise ParseError(text, "record is not an object")

    name = record.get("name")
    folder = record.get("folder")
    fieldnames = record.get("fieldnames")

    if not isinstance(name, str) or not name:
        raise ParseError(text, "missing table name")
    if not isinstance(folder, str) or not folder:
        raise ParseError(text, "missing table folder")
    if not isinstance(fieldnames, list) or not all(
        isinstance(fieldname, str) for fieldname in fieldnames
    ):
        raise ParseError(text, "fieldnames must be a list of strings")

    return TableDescriptor(name=name, folder=folder, fields=tuple(fieldnames))
