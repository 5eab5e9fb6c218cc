"""Shared pytest fixtures for tempchart tests."""

import pytest
import re
import sqlalchemy as sa
from sqlalchemy.pool import StaticPool

from service.tempchart.db import schema as ds


def pytest_addoption(parser):
    parser.addoption(
        "--test-postgres-url",
        action="store",
        default=None,
        help="Run DB tests against this Postgres URL (its current schema must contain 'test')",
    )


def _postgres_test_engine(url: str) -> sa.Engine:
    engine = sa.create_engine(url)
    with engine.connect() as conn:
        schema = conn.scalar(sa.text("select current_schema"))
    if re.search(r"(?<![a-z])test(?![a-z])", schema.lower()) is None:
        raise ValueError(f"Refusing to run DB tests in non-test schema {schema}")
    return engine.execution_options(schema_translate_map={None: schema})


@pytest.fixture
def db_engine(request):
    """Engine with all tempchart tables, dropped again after the test.

    Uses a shared in-memory SQLite DB unless --test-postgres-url is given.
    """
    postgres_url = request.config.getoption("--test-postgres-url")
    if postgres_url:
        engine = _postgres_test_engine(postgres_url)
    else:
        engine = sa.create_engine(
            "sqlite:///:memory:",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    ds.metadata.create_all(engine)
    yield engine
    ds.metadata.drop_all(engine)
    engine.dispose()
