"""Decorators shared by the command-line tools."""

from functools import wraps

import prompt

from src.mdb_local.errors import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)


def handle_db_errors(func):
    """Print expected registry errors in one place and return None."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValidationError as error:
            print(f"Validation error: {error}")
            return None
        except (ConflictError, NotFoundError) as error:
            print(f"Error: {error}")
            return None
        except DatabaseError as error:
            print(f"Database error: {error}")
            return None
        except OSError as error:
            print(f"File system error: {error}")
            return None
        except Exception as error:
            print(f"Unexpected error: {error}")
            return None

    return wrapper


def confirm_action(action_name):
    """Ask user confirmation before dangerous operation."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            answer = prompt.string(
                f'Are you sure you want to perform "{action_name}"? [y/n]: '
            ).strip().lower()
            if answer != "y":
                print("Operation cancelled.")
                return None
            return func(*args, **kwargs)

        return wrapper

    return decorator
