import prompt
import pytest

from src.mdb_local.core import TableCatalog


@pytest.fixture
def db_root(tmp_path):
    return tmp_path / "database"


@pytest.fixture
def catalog(db_root):
    return TableCatalog(db_root, allow_empty_fields=False)


@pytest.fixture
def answers(monkeypatch):
    """Replace interactive prompts with a fixed sequence of answers."""

    def feed(*values):
        queue = iter(values)

        def fake_prompt(*args, **kwargs):
            return next(queue)

        monkeypatch.setattr(prompt, "string", fake_prompt)
        monkeypatch.setattr(prompt, "secret", fake_prompt)

    return feed
