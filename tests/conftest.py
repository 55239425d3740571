import os, sqlite3, pytest
from pathlib import Path
from kvdb import open_kvdb
from kvdb.sqlite_backend import BackendConfig

@pytest.fixture()
def kv():
    db = open_kvdb()
    yield db
    db.close()

@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / 'kv.sqlite3'

@pytest.fixture()
def file_kv(db_path):
    db = open_kvdb(db_path, config=BackendConfig())
    yield db
    db.close()

@pytest.fixture()
def seeded_file(db_path):
    """A store on disk with two rows, written by plain sqlite3."""
    conn = sqlite3.connect(db_path)
    try:
        with conn:
            conn.execute("CREATE TABLE data (key TEXT PRIMARY KEY, value TEXT NOT NULL)")
            conn.executemany("INSERT INTO data(key,value) VALUES(?,?)", [('b', '"two"'), ('a', '1')])
    finally:
        conn.close()
    return db_path
