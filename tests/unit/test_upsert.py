"""Unit tests for the dialect-aware insert construct."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from learnpath.kernel.models import Learner
from learnpath.kernel.upsert import dialect_insert


def _session_on(dialect_name: str) -> MagicMock:
    session = MagicMock()
    session.get_bind.return_value.dialect.name = dialect_name
    return session


@pytest.mark.parametrize(
    "dialect_name,insert_cls",
    [("postgresql", postgresql.Insert), ("sqlite", sqlite.Insert)],
)
def test_picks_dialect_insert(dialect_name, insert_cls):
    stmt = dialect_insert(_session_on(dialect_name), Learner)
    assert isinstance(stmt, insert_cls)
    assert hasattr(stmt, "on_conflict_do_update")


def test_unsupported_backend_is_rejected():
    with pytest.raises(ValueError, match="Upserts are not supported on mysql"):
        dialect_insert(_session_on("mysql"), Learner)
