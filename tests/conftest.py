import sqlite3

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sqlite_mcp.config import Settings
from sqlite_mcp.main import create_app
from sqlite_mcp.modules.database import Database, QueryExecutor
from sqlite_mcp.modules.mcp_server import ToolDispatcher

SCHEMA = """
CREATE TABLE customers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT UNIQUE,
    country TEXT DEFAULT 'US'
);
CREATE TABLE orders (
    id INTEGER PRIMARY KEY,
    customer_id INTEGER NOT NULL REFERENCES customers(id),
    total REAL,
    receipt BLOB
);
CREATE INDEX idx_orders_customer ON orders(customer_id);
CREATE TABLE t (id INTEGER PRIMARY KEY, label TEXT);

INSERT INTO customers (name, email, country) VALUES ('Alfreds Futterkiste', 'alfreds@example.com', 'DE');
INSERT INTO customers (name, email, country) VALUES ('Ana Trujillo', 'ana@example.com', 'MX');
INSERT INTO customers (name, email) VALUES ('Around the Horn', NULL);
INSERT INTO orders (customer_id, total, receipt) VALUES (1, 12.5, x'CAFE');
INSERT INTO orders (customer_id, total, receipt) VALUES (1, 30.0, NULL);
INSERT INTO orders (customer_id, total, receipt) VALUES (2, 7.25, NULL);
INSERT INTO t (id, label) VALUES (1, 'one');
"""


# A fresh database file per test
@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "northwind.db"
    conn = sqlite3.connect(path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
    return path


@pytest.fixture
def database(db_path):
    db = Database(db_path)
    db.open()
    yield db
    db.close()


@pytest.fixture
def executor(database):
    return QueryExecutor(database)


@pytest.fixture
def dispatcher(database, executor):
    return ToolDispatcher(database, executor)


@pytest.fixture
def app(db_path):
    return create_app(Settings(db_path=db_path))


# Client with the lifespan running, so the database is open
@pytest_asyncio.fixture
async def client(app):
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
