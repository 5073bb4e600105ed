"""Shared test fixtures."""

import pytest

from sqlweave import Context
from sqlweave.dialect.duckdb import DuckDBDialect
from sqlweave.dialect.mysql import MySQLDialect
from sqlweave.dialect.oracle import OracleDialect
from sqlweave.dialect.postgres import PostgresDialect
from sqlweave.dialect.sqlite import SQLiteDialect
from sqlweave.dialect.sqlserver import SQLServerDialect


@pytest.fixture
def pg():
    return Context(PostgresDialect())


@pytest.fixture
def mysql():
    return Context(MySQLDialect())


@pytest.fixture
def sqlite():
    return Context(SQLiteDialect())


@pytest.fixture
def mssql():
    return Context(SQLServerDialect())


@pytest.fixture
def oracle():
    return Context(OracleDialect())


@pytest.fixture
def duckdb():
    return Context(DuckDBDialect())

