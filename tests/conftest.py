"""
Shared pytest fixtures and configuration for dbexplorer tests.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from dbexplorer import DBExplorer
from dbexplorer.server import create_app

SCHEMA = [
    """
    CREATE TABLE items (
        id INTEGER NOT NULL PRIMARY KEY,
        title VARCHAR(255) NOT NULL,
        description TEXT NOT NULL,
        updated VARCHAR(255) DEFAULT NULL
    )
    """,
    """
    INSERT INTO items (id, title, description, updated) VALUES
        (1, 'database/sql', 'Tell us about databases', 'rvasily'),
        (2, 'memcache', 'Tell us about memcache with an example of use', NULL)
    """,
    """
    CREATE TABLE users (
        user_id INTEGER NOT NULL PRIMARY KEY,
        login VARCHAR(255) NOT NULL,
        password VARCHAR(255) NOT NULL,
        email VARCHAR(255) NOT NULL,
        info TEXT NOT NULL,
        updated VARCHAR(255) DEFAULT NULL
    )
    """,
    """
    INSERT INTO users (user_id, login, password, email, info, updated) VALUES
        (1, 'rvasily', 'love', 'rvasily@example.com', 'none', NULL)
    """,
]


def _sqlite_engine(*statements):
    """In-memory SQLite engine shared across threads, with the given DDL applied."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        for statement in statements:
            conn.execute(text(statement))
    return engine


@pytest.fixture
def engine():
    """Engine seeded with the items and users tables (fresh for every test)."""
    engine = _sqlite_engine(*SCHEMA)
    yield engine
    engine.dispose()


@pytest.fixture
def make_engine():
    """Factory for extra in-memory databases, disposed after the test."""
    engines = []

    def factory(*statements):
        engine = _sqlite_engine(*statements)
        engines.append(engine)
        return engine

    yield factory
    for engine in engines:
        engine.dispose()


@pytest.fixture
def explorer(engine):
    """DBExplorer over the seeded engine."""
    return DBExplorer(engine)


@pytest.fixture
def catalog(explorer):
    """Catalog introspected from the seeded engine."""
    return explorer.catalog


@pytest.fixture
def client(explorer):
    """HTTP client for the REST application."""
    with TestClient(create_app(explorer)) as client:
        yield client
