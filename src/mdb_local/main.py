import logging
import sys

from src.mdb_local import engine
from src.mdb_local.constants import ALLOW_EMPTY_FIELDS, DATABASE_DIR, LOG_LEVEL
from src.mdb_local.core import TableCatalog


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Send library log records to stderr."""
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _catalog() -> TableCatalog:
    return TableCatalog(DATABASE_DIR, allow_empty_fields=ALLOW_EMPTY_FIELDS)


def main() -> None:
    configure_logging()
    engine.run(_catalog())


def make_table() -> None:
    configure_logging()
    sys.exit(engine.make_table(_catalog()))


def delete_table() -> None:
    configure_logging()
    sys.exit(engine.delete_tables(_catalog()))


def setup() -> None:
    configure_logging()
    path = sys.argv[1] if len(sys.argv) > 1 else None
    sys.exit(engine.setup(path))


if __name__ == "__main__":
    main()
