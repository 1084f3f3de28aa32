"""
Fixtures for SQLite integration tests.
"""
import rowbind
import pytest

SCHEMA = [
    """
    CREATE TABLE customers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name VARCHAR(255),
        email VARCHAR(255),
        created DATETIME,
        updated DATETIME
    )
    """,
    """
    CREATE TABLE cars (
        vin VARCHAR(17) NOT NULL PRIMARY KEY,
        color VARCHAR(20),
        make VARCHAR(50),
        model VARCHAR(50)
    )
    """,
    """
    CREATE TABLE accounts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_name TEXT NOT NULL,
        active BOOLEAN,
        score REAL,
        avatar BLOB,
        status TEXT DEFAULT 'pending'
    )
    """,
    """
    CREATE TABLE products (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT,
        price INTEGER
    )
    """,
]


@pytest.fixture
def sl_conn():
    """In-memory SQLite database with the customers, cars, accounts and products tables"""
    conn = rowbind.connect({
        'drivername': 'sqlite',
        'database': ':memory:'
    })

    for ddl in SCHEMA:
        rowbind.write_only(conn, ddl)

    yield conn
    conn.close()
