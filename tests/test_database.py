import sqlite3

import pytest

from nodelistdb.database import Database, DatabaseError

_INSERT_MINIMAL = (
    "INSERT INTO nodes (zone, net, node, nodelist_date, day_number, system_name, "
    "location, sysop_name, phone, node_type, max_speed) "
    "VALUES (2, 28, 5, '1995-01-06', 6, 'Sys', 'Loc', 'Op', '-Unpublished-', 'Node', '9600')"
)


def _index_names(db):
    rows = db.connection.execute(
        "SELECT name FROM sqlite_master WHERE type = 'index' AND name LIKE 'idx_nodes_%'"
    ).fetchall()
    return {row[0] for row in rows}


def test_create_schema_creates_table_and_indexes():
    with Database(":memory:") as db:
        db.create_schema()
        tables = db.connection.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table'"
        ).fetchall()
        assert ("nodes",) in tables
        assert _index_names(db) == {
            "idx_nodes_date",
            "idx_nodes_location",
            "idx_nodes_system",
            "idx_nodes_type",
            "idx_nodes_flags",
        }


def test_create_schema_twice_is_harmless():
    with Database(":memory:") as db:
        db.create_schema()
        db.create_schema()
        assert len(_index_names(db)) == 5


def test_column_defaults():
    with Database(":memory:") as db:
        db.create_schema()
        db.connection.execute(_INSERT_MINIMAL)
        row = db.connection.execute(
            "SELECT is_active, is_cm, flags, conflict_sequence, has_conflict, region FROM nodes"
        ).fetchone()
        assert row == (1, 0, "[]", 0, 0, None)


def test_primary_key_rejects_duplicates():
    with Database(":memory:") as db:
        db.create_schema()
        db.connection.execute(_INSERT_MINIMAL)
        with pytest.raises(sqlite3.IntegrityError):
            db.connection.execute(_INSERT_MINIMAL)


def test_get_version_matches_engine():
    with Database(":memory:") as db:
        assert db.get_version() == sqlite3.sqlite_version


def test_closed_database_raises():
    db = Database(":memory:")
    db.close()
    db.close()
    with pytest.raises(DatabaseError):
        db.get_version()
    with pytest.raises(DatabaseError):
        db.create_schema()


def test_read_only_missing_file_raises(tmp_path):
    with pytest.raises(DatabaseError):
        Database(tmp_path / "missing.db", read_only=True)


def test_read_only_rejects_writes(tmp_path):
    path = tmp_path / "nodes.db"
    with Database(path) as db:
        db.create_schema()
    with Database(path, read_only=True) as ro:
        assert ro.read_only is True
        count = ro.connection.execute("SELECT COUNT(*) FROM nodes").fetchone()[0]
        assert count == 0
        with pytest.raises(sqlite3.OperationalError):
            ro.connection.execute(_INSERT_MINIMAL)


def test_read_only_schema_creation_fails_on_empty_file(tmp_path):
    path = tmp_path / "empty.db"
    Database(path).close()
    with Database(path, read_only=True) as ro:
        with pytest.raises(DatabaseError):
            ro.create_schema()


def test_data_persists_between_connections(tmp_path):
    path = tmp_path / "persist.db"
    with Database(path) as db:
        db.create_schema()
        db.connection.execute(_INSERT_MINIMAL)
        db.connection.commit()
    with Database(path, read_only=True) as ro:
        row = ro.connection.execute("SELECT zone, net, node FROM nodes").fetchone()
        assert row == (2, 28, 5)