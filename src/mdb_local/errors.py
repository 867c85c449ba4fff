"""Exceptions raised by the table registry."""


class DatabaseError(Exception):
    """Base class for every registry error."""


class ValidationError(DatabaseError, ValueError):
    """Bad table/field name or a field list the policy rejects."""


class ConflictError(DatabaseError):
    """A table with this name is already registered."""


class NotFoundError(DatabaseError, KeyError):
    """No registry entry for the requested table."""

    def __str__(self) -> str:
        # KeyError.__str__ would quote the message.
        return str(self.args[0]) if self.args else ""


class ParseError(DatabaseError, ValueError):
    """A registry line that does not decode to a table descriptor."""

    def __init__(self, line: str, reason: str = "malformed registry line"):
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason


class IntegrityError(DatabaseError):
    """A registry entry points outside the folder derived from its name."""
