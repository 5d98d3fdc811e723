import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from roomwise.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda engine: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_schema_gaps_report_missing_tables_and_columns():
    engine = create_engine("sqlite+pysqlite://", poolclass=StaticPool)
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE departments (id INTEGER PRIMARY KEY, code VARCHAR(20))"))

    missing_tables, missing_columns = bootstrap.find_schema_gaps(engine)

    assert "classrooms" in missing_tables
    assert "departments" not in missing_tables
    assert missing_columns == {"departments": ["is_active", "name"]}


def test_bootstrap_creates_every_table():
    engine = create_engine("sqlite+pysqlite://", poolclass=StaticPool)

    bootstrap.ensure_runtime_schema_compatibility(engine)

    assert bootstrap.find_schema_gaps(engine) == ([], {})
