import os
import shlex

import prompt
from prettytable import PrettyTable

from src.mdb_local.bootstrap import FernetCipher, setup_database, validate_setup
from src.mdb_local.constants import (
    DONE_TOKEN,
    NAME_PATTERN,
    QUIT_TOKEN,
    SECRET_KEY_ENV,
)
from src.mdb_local.core import TableCatalog
from src.mdb_local.decorators import confirm_action, handle_db_errors
from src.mdb_local.parser import TableDescriptor, validate_name


def print_help() -> None:
    """Print available commands for the table registry."""
    print("***Table registry***")
    print("Commands:")
    print(
        "<command> create_table <table_name> [<field1> <field2> ...] - create a "
        "table; without fields you are asked for them one by one."
    )
    print("<command> drop_table <table_name> - delete a table and its folder.")
    print("<command> list_tables - show all registered tables.")
    print("<command> info <table_name> - show table details.")
    print("<command> exit - quit the program.")
    print("<command> help - show this help.")


def _render_tables(descriptors: list[TableDescriptor]) -> None:
    """Render descriptors with PrettyTable."""
    table = PrettyTable()
    table.field_names = ["name", "folder", "fields"]
    table.align = "l"
    for descriptor in descriptors:
        table.add_row(
            [descriptor.name, descriptor.folder, ", ".join(descriptor.fields)]
        )
    print(table)


def _report_warnings(catalog: TableCatalog) -> None:
    if catalog.warnings:
        print(
            f"Warning: skipped {len(catalog.warnings)} malformed line(s) "
            "in the table registry."
        )


def read_fields() -> list[str] | None:
    """Ask for field names until the done token; None if the user quits."""
    print(f"Enter '{DONE_TOKEN}' to finish adding fields or '{QUIT_TOKEN}' to quit")

    fields: list[str] = []
    while True:
        fieldname = prompt.string("Enter field name: ").strip()
        if fieldname == QUIT_TOKEN:
            return None
        if fieldname == DONE_TOKEN:
            return fields
        if not NAME_PATTERN.fullmatch(fieldname):
            print("Field name must be alphanumeric")
            continue
        if fieldname in fields:
            print(f'Field "{fieldname}" is already in the table')
            continue
        fields.append(fieldname)


@handle_db_errors
def _check_name(table_name: str) -> str:
    return validate_name(table_name)


@handle_db_errors
def _create_table(
    catalog: TableCatalog, table_name: str, fields: list[str]
) -> TableDescriptor:
    return catalog.create_table(table_name, fields)


@handle_db_errors
def _delete_table(catalog: TableCatalog, table_name: str) -> TableDescriptor:
    return catalog.delete_table(table_name)


@handle_db_errors
@confirm_action("drop table")
def _drop_table(catalog: TableCatalog, table_name: str) -> TableDescriptor:
    return catalog.delete_table(table_name)


@handle_db_errors
def _list_tables(catalog: TableCatalog) -> list[TableDescriptor]:
    return catalog.list_tables()


@handle_db_errors
def _table_info(catalog: TableCatalog, table_name: str) -> dict[str, object]:
    return catalog.get_table_info(table_name)


def _announce_created(descriptor: TableDescriptor) -> None:
    fields = ", ".join(descriptor.fields) or "(none)"
    print(f'Table "{descriptor.name}" created with fields: {fields}')


def run(catalog: TableCatalog) -> None:
    """Run interactive table registry REPL."""
    print_help()

    while True:
        user_input = prompt.string("Enter command: ").strip()

        if not user_input:
            continue

        try:
            parts = shlex.split(user_input)
        except ValueError:
            print("Invalid input: could not parse the command. Try again.")
            continue

        command = parts[0]

        if command == "exit":
            break
        if command == "help":
            print_help()
            continue

        if command == "list_tables":
            tables = _list_tables(catalog)
            if tables is None:
                continue
            _report_warnings(catalog)
            if not tables:
                print("No tables registered.")
                continue
            _render_tables(tables)
            continue

        if command == "create_table":
            if len(parts) < 2:
                print("Invalid input: create_table <table_name>. Try again.")
                continue

            table_name = parts[1]
            if _check_name(table_name) is None:
                continue
            fields = parts[2:] or read_fields()
            if fields is None:
                print("Operation cancelled.")
                continue

            descriptor = _create_table(catalog, table_name, fields)
            if descriptor is not None:
                _announce_created(descriptor)
            continue

        if command == "drop_table":
            if len(parts) != 2:
                print("Invalid input: drop_table <table_name>. Try again.")
                continue

            descriptor = _drop_table(catalog, parts[1])
            if descriptor is not None:
                print(f'Table "{descriptor.name}" deleted.')
            continue

        if command == "info":
            if len(parts) != 2:
                print("Invalid input: info <table_name>. Try again.")
                continue

            info = _table_info(catalog, parts[1])
            if info is None:
                continue

            print(f'Table: {info["table"]}')
            print(f'Folder: {info["folder"]}')
            print(f'Fields ({info["fields_count"]}): {info["fields"]}')
            continue

        print(f"Unknown command {command}. Try again.")


def make_table(catalog: TableCatalog) -> int:
    """Create one table from interactive input; return an exit code."""
    table_name = prompt.string("Name your table: ").strip()
    if _check_name(table_name) is None:
        return 1

    fields = read_fields()
    if fields is None:
        print("Operation cancelled.")
        return 0

    descriptor = _create_table(catalog, table_name, fields)
    if descriptor is None:
        return 1
    _announce_created(descriptor)
    return 0


def delete_tables(catalog: TableCatalog) -> int:
    """Delete tables by name until the user stops; return an exit code."""
    exit_code = 0
    while True:
        table_name = prompt.string("Name of table to delete: ").strip()
        print(f'Deleting table "{table_name}" ...')
        if _delete_table(catalog, table_name) is None:
            exit_code = 1
        else:
            print("Done")

        answer = prompt.string("Delete another table? (y/n): ").strip().lower()
        if answer != "y":
            return exit_code


@handle_db_errors
def _setup(parent: str, database_name: str, username: str, password: str) -> str:
    key = os.environ.get(SECRET_KEY_ENV)
    if not key:
        key = FernetCipher.generate_key().decode("ascii")
        print(f"Generated a new credentials key, save it as {SECRET_KEY_ENV}:")
        print(key)
    database_dir = setup_database(
        parent, database_name, username, password, FernetCipher(key)
    )
    return str(database_dir)


def setup(path: str | None = None) -> int:
    """Interactively set up a database root; return an exit code."""
    if path is None:
        path = prompt.string("Where should the MDB Local database be setup? ")

    database_name = prompt.string(
        "Database name [press enter for default]: ", empty=True
    ) or ""
    print("Create a username and password for the database.")
    username = prompt.string("Username: ").strip()
    password = prompt.secret("Password: ")
    confirm_password = prompt.secret("Confirm password: ")

    checked = handle_db_errors(validate_setup)(
        database_name.strip(), username, password, confirm_password
    )
    if checked is None:
        return 1

    database_dir = _setup(path.strip(), checked, username, password)
    if database_dir is None:
        return 1
    print(f"Database created at {database_dir}")
    return 0
