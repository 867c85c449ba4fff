"""Business logic for table registration and removal."""

import logging
import os
from pathlib import Path

from src.mdb_local.constants import ALLOW_EMPTY_FIELDS, REGISTRY_FILE
from src.mdb_local.errors import (
    ConflictError,
    IntegrityError,
    NotFoundError,
    ValidationError,
)
from src.mdb_local.parser import TableDescriptor, validate_name
from src.mdb_local.utils import (
    RegistryStore,
    create_table_folder,
    delete_table_folder,
    table_folder_path,
)

logger = logging.getLogger(__name__)


def _parse_fields(fields: list[str], allow_empty: bool) -> tuple[str, ...]:
    """Validate field names, keeping their order."""
    if not fields and not allow_empty:
        raise ValidationError("A table needs at least one field.")

    used_names: set[str] = set()
    for fieldname in fields:
        validate_name(fieldname, kind="field")
        if fieldname in used_names:
            raise ValidationError(f"Duplicate field name {fieldname!r}.")
        used_names.add(fieldname)
    return tuple(fields)


class TableCatalog:
    """Tables of one database root, kept in step with their folders.

    The registry is authoritative: a table exists exactly when its line is in
    `table.info`. Single writer only; a find followed by a rewrite is not
    protected against another process editing the registry in between.
    """

    def __init__(
        self,
        root: str | os.PathLike,
        allow_empty_fields: bool = ALLOW_EMPTY_FIELDS,
        store: RegistryStore | None = None,
    ):
        self.root = Path(root).resolve()
        self.allow_empty_fields = allow_empty_fields
        self.store = store or RegistryStore(self.root / REGISTRY_FILE)

    @property
    def warnings(self):
        return self.store.warnings

    def create_table(self, name: str, fields: list[str]) -> TableDescriptor:
        """Register a new table and create its folder."""
        validate_name(name)
        parsed_fields = _parse_fields(list(fields), self.allow_empty_fields)

        try:
            self.store.find_entry(name)
        except NotFoundError:
            pass
        else:
            raise ConflictError(f'Table "{name}" already exists.')

        folder = table_folder_path(self.root, name)
        descriptor = TableDescriptor(
            name=name, folder=str(folder), fields=parsed_fields
        )

        created = create_table_folder(folder)
        try:
            self.store.append_entry(descriptor)
        except OSError:
            if created:
                self._discard_folder(folder)
            raise

        logger.info("Created table %s with fields %s", name, list(parsed_fields))
        return descriptor

    def _discard_folder(self, folder: Path) -> None:
        """Best-effort removal of a folder whose entry was never written."""
        try:
            delete_table_folder(folder)
        except OSError as error:
            logger.warning("Could not remove orphaned folder %s: %s", folder, error)

    def delete_table(self, name: str) -> TableDescriptor:
        """Remove the table's registry line, then its folder."""
        line_index, descriptor = self.store.find_entry(name)
        folder = self._checked_folder(descriptor)
        self.store.remove_entry_at_line(line_index)
        delete_table_folder(folder)
        logger.info("Deleted table %s", name)
        return descriptor

    def _checked_folder(self, descriptor: TableDescriptor) -> Path:
        """Return the descriptor's folder if it is the one derived from its name.

        Relative folders are refused: they would resolve against the current
        working directory rather than the database root.
        """
        expected = table_folder_path(self.root, descriptor.name)
        folder = Path(descriptor.folder)
        if not folder.is_absolute() or folder.resolve() != expected.resolve():
            raise IntegrityError(
                f'Table "{descriptor.name}" is registered with folder '
                f'"{descriptor.folder}", expected "{expected}"; nothing was deleted.'
            )
        return folder

    def get_table(self, name: str) -> TableDescriptor:
        """Look a table up by name."""
        _, descriptor = self.store.find_entry(name)
        return descriptor

    def list_tables(self) -> list[TableDescriptor]:
        """Return every registered table in registry order."""
        return list(self.store.list_entries())

    def get_table_info(self, name: str) -> dict[str, object]:
        """Return human-readable table info."""
        descriptor = self.get_table(name)
        return {
            "table": descriptor.name,
            "folder": descriptor.folder,
            "fields": ", ".join(descriptor.fields),
            "fields_count": len(descriptor.fields),
        }
