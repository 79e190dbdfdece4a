"""Tests for the pooled PostgreSQL manager, using an in-memory stand-in for the pool."""

from contextlib import contextmanager

import pytest
from psycopg.pq import TransactionStatus

from duech import database_manager
from duech.config import DatabaseConfig
from duech.database_manager import DatabaseManager, close_database_manager


class FakeCursor:
    def __init__(self, log):
        self.log = log

    def execute(self, query, params=None, **kwargs):
        self.log.append((query, kwargs.get('prepare')))

    def fetchone(self):
        return (1,)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeInfo:
    transaction_status = TransactionStatus.IDLE


class FakeConnection:
    def __init__(self, log):
        self.log = log
        self.autocommit = False
        self.info = FakeInfo()
        self.commits = 0
        self.rollbacks = 0

    def execute(self, query, prepare=None):
        self.log.append((query, prepare))

    def cursor(self, **kwargs):
        return FakeCursor(self.log)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


class FakePool:
    def __init__(self, conninfo, **kwargs):
        self.conninfo = conninfo
        self.kwargs = kwargs
        self.log = []
        self.connections = []
        self.closed = False
        self.broken = False

    @contextmanager
    def connection(self):
        if self.broken:
            raise RuntimeError("connection refused")
        conn = FakeConnection(self.log)
        self.connections.append(conn)
        yield conn

    def close(self):
        self.closed = True


@pytest.fixture
def manager(monkeypatch):
    monkeypatch.setattr(database_manager, 'ConnectionPool', FakePool)
    config = DatabaseConfig(host='db', port=5432, database='duech', user='duech',
                            password='secreto', schema='lexico', pool_size=4)
    return DatabaseManager(config)


def test_pool_settings(manager):
    assert manager.pool.conninfo.startswith('postgresql://duech:secreto@db:5432/duech')
    assert manager.pool.kwargs['max_size'] == 4


def test_connection_check(manager):
    assert manager.test_connection()
    assert ('SET search_path TO "lexico"', False) in manager.pool.log
    assert ('SELECT 1', False) in manager.pool.log


def test_connection_check_failure(manager):
    manager.pool.broken = True
    assert not manager.test_connection()


def test_execute_script(manager):
    count = manager.execute_script("CREATE TABLE a (id int);\n\nCREATE TABLE b (id int);\n")
    assert count == 2
    assert ('CREATE TABLE b (id int)', False) in manager.pool.log
    assert manager.pool.connections[-1].commits == 1


def test_cursor_rolls_back_on_error(manager):
    with pytest.raises(ValueError):
        with manager.get_cursor() as cursor:
            cursor.execute("SELECT 1")
            raise ValueError("boom")
    assert manager.pool.connections[-1].rollbacks == 1
    assert manager.pool.connections[-1].commits == 0


class TestGlobalManager:

    def test_close_releases_pool(self, manager, monkeypatch):
        monkeypatch.setattr(database_manager, '_db_manager', manager)
        close_database_manager()
        assert manager.pool.closed
        assert database_manager._db_manager is None

    def test_close_without_pool_is_noop(self, monkeypatch):
        monkeypatch.setattr(database_manager, '_db_manager', None)
        close_database_manager()
        assert database_manager._db_manager is None
