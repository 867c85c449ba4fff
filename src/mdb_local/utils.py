"""File helpers for the table registry and table folders."""

import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path

from src.mdb_local.constants import TABLES_DIR
from src.mdb_local.errors import NotFoundError, ParseError
from src.mdb_local.parser import TableDescriptor, decode_line, encode_line

logger = logging.getLogger(__name__)

# Undecodable bytes survive a read-rewrite cycle unchanged.
ENCODING_ERRORS = "surrogateescape"


def _open_text(path: Path, mode: str):
    return path.open(mode, encoding="utf-8", errors=ENCODING_ERRORS, newline="")


class RegistryStore:
    """Line-oriented registry file, one table descriptor per line.

    The file is the single source of truth for which tables exist. Lines the
    store cannot decode are skipped when matching or listing, but are always
    written back verbatim when another line is removed.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self.warnings: list[ParseError] = []

    def read_lines(self) -> list[str]:
        """Return raw lines with their terminators, [] if the file is missing."""
        try:
            with _open_text(self.path, "r") as file:
                return file.readlines()
        except FileNotFoundError:
            return []

    def _scan(self) -> Iterator[tuple[int, TableDescriptor]]:
        """Yield (line_index, descriptor) for every well-formed line."""
        self.warnings = []
        for line_index, line in enumerate(self.read_lines()):
            if not line.strip():
                continue
            try:
                descriptor = decode_line(line)
            except ParseError as error:
                self._report(line_index, error)
                continue
            yield line_index, descriptor

    def _report(self, line_index: int, error: ParseError) -> None:
        self.warnings.append(error)
        logger.warning(
            "Skipping line %d of %s: %s", line_index + 1, self.path, error
        )

    def _ends_with_newline(self) -> bool:
        """True for a missing, empty or newline-terminated registry."""
        try:
            with self.path.open("rb") as file:
                if file.seek(0, os.SEEK_END) == 0:
                    return True
                file.seek(-1, os.SEEK_END)
                return file.read(1) == b"\n"
        except FileNotFoundError:
            return True

    def append_entry(self, descriptor: TableDescriptor) -> None:
        """Append one descriptor line, flushed to disk before returning."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        line = encode_line(descriptor) + "\n"
        if not self._ends_with_newline():
            # A hand-edited file may lack the final terminator.
            line = "\n" + line
        with self.path.open("a", encoding="utf-8", newline="") as file:
            file.write(line)
            file.flush()
            os.fsync(file.fileno())

    def find_entry(self, name: str) -> tuple[int, TableDescriptor]:
        """Return (line_index, descriptor) of the first entry named `name`."""
        for line_index, descriptor in self._scan():
            if descriptor.name == name:
                return line_index, descriptor
        raise NotFoundError(f'Table "{name}" does not exist.')

    def list_entries(self) -> Iterator[TableDescriptor]:
        """Lazily yield every well-formed descriptor in line order."""
        for _, descriptor in self._scan():
            yield descriptor

    def remove_entry_at_line(self, line_index: int) -> str:
        """Rewrite the registry without the line at `line_index`.

        Every other line keeps its exact content and order. The new content is
        written to a temporary file next to the registry and moved over it, so
        a failure before the move leaves the registry untouched. Returns the
        removed line.
        """
        lines = self.read_lines()
        if not 0 <= line_index < len(lines):
            raise NotFoundError(f"Registry has no line {line_index + 1}.")

        removed = lines.pop(line_index)
        content = "".join(lines)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(
                fd, "w", encoding="utf-8", errors=ENCODING_ERRORS, newline=""
            ) as tmp_file:
                tmp_file.write(content)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            shutil.copymode(self.path, tmp_path)
            _replace_file(tmp_path, self.path, content)
        finally:
            tmp_path.unlink(missing_ok=True)
        return removed


def _replace_file(tmp_path: Path, target: Path, content: str) -> None:
    """Move tmp_path over target, falling back to an in-place copy."""
    try:
        os.replace(tmp_path, target)
        return
    except OSError as error:
        logger.warning(
            "Atomic replace of %s failed (%s), copying contents instead.",
            target,
            error,
        )

    with _open_text(tmp_path, "r") as tmp_file:
        if tmp_file.read() != content:
            raise OSError(f"Temporary copy of {target} is incomplete.")

    with _open_text(target, "w") as file:
        file.write(content)
        file.flush()
        os.fsync(file.fileno())


def table_folder_path(root: str | os.PathLike, table_name: str) -> Path:
    """Folder that stores the table's data: <root>/tables/<name>."""
    return Path(root) / TABLES_DIR / table_name


def create_table_folder(path: str | os.PathLike) -> bool:
    """Create the table folder if absent; return True if this call made it."""
    path = Path(path)
    if path.is_dir():
        return False
    path.mkdir(parents=True, exist_ok=True)
    return True


def delete_table_folder(path: str | os.PathLike) -> None:
    """Recursively remove a table folder; a missing folder is only logged."""
    path = Path(path)
    if not path.exists():
        logger.warning("Table folder %s is already gone.", path)
        return
    shutil.rmtree(path)
