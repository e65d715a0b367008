"""Pytest configuration and shared fixtures for database tests"""

import os
from pathlib import Path
from typing import Generator, Optional

import pytest
from dotenv import load_dotenv
from sqlalchemy.engine import make_url

from db_connector import Column, ColumnType, Database, LoginSpec, TableSpec
from db_connector.adapters import create_adapter
from db_connector.adapters.base import BaseAdapter
from db_connector.core import DatabaseConnection, StatementExecutor
from db_connector.models.config import DatabaseConfig

# Load environment variables
load_dotenv()


# ==================== Configuration Fixtures ====================


@pytest.fixture(scope="session")
def mysql_database_url() -> Optional[str]:
    """MySQL test database URL from environment"""
    return os.getenv("MYSQL_TEST_DATABASE_URL")


@pytest.fixture
def sqlite_path(tmp_path: Path) -> Path:
    """Path of a fresh SQLite database file"""
    return tmp_path / "test.db"


@pytest.fixture
def sqlite_config(sqlite_path: Path) -> DatabaseConfig:
    """Local-file database configuration"""
    return DatabaseConfig(file_path=str(sqlite_path))


@pytest.fixture
def mysql_login(mysql_database_url: Optional[str]) -> LoginSpec:
    """MySQL credentials parsed from the test database URL"""
    if not mysql_database_url:
        pytest.skip("MYSQL_TEST_DATABASE_URL not set in environment")
    url = make_url(mysql_database_url)
    return LoginSpec(
        host=url.host or "localhost",
        port=url.port or 3306,
        username=url.username or "",
        password=url.password or "",
        database=url.database or "",
    )


# ==================== SQLite Fixtures ====================


@pytest.fixture
def sqlite_adapter(sqlite_config: DatabaseConfig) -> BaseAdapter:
    """SQLite adapter instance"""
    return create_adapter(sqlite_config)


@pytest.fixture
def sqlite_connection(
    sqlite_config: DatabaseConfig, sqlite_adapter: BaseAdapter
) -> Generator[DatabaseConnection, None, None]:
    """Open SQLite connection with proper cleanup"""
    connection = DatabaseConnection(sqlite_config, sqlite_adapter)
    connection.connect()
    try:
        yield connection
    finally:
        connection.disconnect()


@pytest.fixture
def sqlite_executor(sqlite_connection: DatabaseConnection) -> StatementExecutor:
    """Statement executor over the SQLite connection"""
    return StatementExecutor(sqlite_connection)


@pytest.fixture
def db(sqlite_path: Path) -> Generator[Database, None, None]:
    """Connected facade over a fresh SQLite file"""
    database = Database.from_file(sqlite_path)
    database.connect()
    try:
        yield database
    finally:
        database.disconnect()


@pytest.fixture
def users_table() -> TableSpec:
    """Two-column users table keyed by id"""
    return (
        TableSpec(name="users", primary_key="id")
        .add_column(Column(type=ColumnType.INT, name="id", length=11))
        .add_column(ColumnType.VARCHAR, "name")
    )


@pytest.fixture
def users_db(db: Database, users_table: TableSpec) -> Database:
    """Facade with the users table created and two rows inserted"""
    db.create_table(users_table)
    db.insert("users", {"id": 1, "name": "Ann"})
    db.insert("users", {"id": 2, "name": "Bob"})
    return db


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Pure tests without a database")
    config.addinivalue_line("markers", "mysql: MySQL-specific tests")
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring database"
    )
