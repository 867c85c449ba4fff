"""Database root setup: auth blobs, tables folder and the pointer file."""

import logging
import os
from pathlib import Path
from typing import Protocol

from cryptography.fernet import Fernet, InvalidToken

from src.mdb_local.constants import (
    AUTH_DIR,
    DATABASE_NAME_PATTERN,
    DEFAULT_DATABASE_NAME,
    MIN_PASSWORD_LENGTH,
    MIN_USERNAME_LENGTH,
    PASSWORD_FILE,
    POINTER_FILE,
    TABLES_DIR,
    USERNAME_FILE,
)
from src.mdb_local.errors import DatabaseError, ValidationError

logger = logging.getLogger(__name__)


class Cipher(Protocol):
    """Reversible transform applied to stored credentials."""

    def encode(self, value: str) -> bytes: ...

    def decode(self, blob: bytes) -> str: ...


class FernetCipher:
    """Credential cipher backed by Fernet (AES-CBC + HMAC)."""

    def __init__(self, key: bytes | str):
        try:
            self._fernet = Fernet(key)
        except ValueError as error:
            raise ValidationError(f"Invalid credentials key: {error}") from error

    @staticmethod
    def generate_key() -> bytes:
        return Fernet.generate_key()

    def encode(self, value: str) -> bytes:
        return self._fernet.encrypt(value.encode("utf-8"))

    def decode(self, blob: bytes) -> str:
        try:
            return self._fernet.decrypt(blob).decode("utf-8")
        except InvalidToken as error:
            raise DatabaseError("Credential blob does not match the key.") from error


def validate_setup(
    database_name: str, username: str, password: str, confirm_password: str
) -> str:
    """Check setup input and return the effective database name."""
    if not DATABASE_NAME_PATTERN.fullmatch(database_name):
        raise ValidationError("Database name must be alphanumeric.")
    if not DATABASE_NAME_PATTERN.fullmatch(username):
        raise ValidationError("Username must be alphanumeric.")
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError(
            f"Username must be at least {MIN_USERNAME_LENGTH} characters long."
        )
    if password != confirm_password:
        raise ValidationError("Passwords do not match.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )
    return database_name or DEFAULT_DATABASE_NAME


def setup_database(
    parent: str | os.PathLike,
    database_name: str,
    username: str,
    password: str,
    cipher: Cipher,
) -> Path:
    """Create <parent>/<database_name> with its auth, tables and pointer file."""
    parent = Path(parent)
    if not parent.is_dir():
        raise ValidationError(f"Given path must be a directory: {parent}")

    database_dir = parent / (database_name or DEFAULT_DATABASE_NAME)
    auth_dir = database_dir / AUTH_DIR
    auth_dir.mkdir(parents=True, exist_ok=True)
    (auth_dir / USERNAME_FILE).write_bytes(cipher.encode(username))
    (auth_dir / PASSWORD_FILE).write_bytes(cipher.encode(password))

    (database_dir / TABLES_DIR).mkdir(exist_ok=True)
    (database_dir / POINTER_FILE).write_text(str(auth_dir), encoding="utf-8")

    logger.info("Database set up at %s", database_dir)
    return database_dir


def locate_auth_dir(database_dir: str | os.PathLike) -> Path:
    """Read the auth folder location from the database pointer file."""
    pointer = Path(database_dir) / POINTER_FILE
    return Path(pointer.read_text(encoding="utf-8").strip())


def read_credentials(
    database_dir: str | os.PathLike, cipher: Cipher
) -> tuple[str, str]:
    """Decode the stored (username, password) pair."""
    auth_dir = locate_auth_dir(database_dir)
    username = cipher.decode((auth_dir / USERNAME_FILE).read_bytes())
    password = cipher.decode((auth_dir / PASSWORD_FILE).read_bytes())
    return username, password
