"""Project-wide constants."""

import os
import re
from pathlib import Path

DATABASE_DIR = Path(os.environ.get("MDBL_DATABASE_DIR", "database"))
DEFAULT_DATABASE_NAME = "MDBL"

REGISTRY_FILE = "table.info"
TABLES_DIR = "tables"
AUTH_DIR = "auth"
USERNAME_FILE = "username"
PASSWORD_FILE = "password"
POINTER_FILE = "database.mdb"

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
DATABASE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]*$")
MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 8

ALLOW_EMPTY_FIELDS = os.environ.get("MDBL_ALLOW_EMPTY_FIELDS", "0") == "1"
LOG_LEVEL = os.environ.get("MDBL_LOG_LEVEL", "WARNING").upper()
SECRET_KEY_ENV = "MDBL_SECRET_KEY"

DONE_TOKEN = ":d"
QUIT_TOKEN = ":q"
