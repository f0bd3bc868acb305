import sqlite3

import pytest

from dbshell.sqlite_meta import Filter, Index, SqliteMetadataReader

SCHEMA = """
CREATE TABLE actor (
  actor_id INTEGER PRIMARY KEY,
  last_name TEXT NOT NULL
);
CREATE INDEX idx_actor_last_name ON actor(last_name);
CREATE TABLE language (
  language_id INTEGER PRIMARY KEY,
  name TEXT
);
CREATE TABLE film (
  film_id INTEGER PRIMARY KEY,
  title TEXT NOT NULL,
  language_id INTEGER NOT NULL,
  rating TEXT DEFAULT 'G'
);
CREATE INDEX idx_fk_language_id ON film(language_id);
CREATE TABLE film_actor (
  actor_id INTEGER NOT NULL,
  film_id INTEGER NOT NULL,
  PRIMARY KEY (actor_id, film_id)
);
CREATE INDEX idx_fk_film_actor_film ON film_actor(film_id);
CREATE VIEW film_list AS SELECT film_id AS FID, title FROM film;
"""


@pytest.fixture
def conn():
    c = sqlite3.connect(":memory:")
    c.executescript(SCHEMA)
    yield c
    c.close()


@pytest.fixture
def reader(conn):
    return SqliteMetadataReader(conn)


def test_schemas(reader):
    names = [s.schema for s in reader.schemas(Filter())]
    assert ", ".join(names) == "main"


def test_schemas_filter(reader):
    assert [s.schema for s in reader.schemas(Filter(name="nope"))] == []


def test_tables(reader):
    result = reader.tables(Filter(types=["BASE TABLE", "TABLE", "VIEW"]))
    names = ", ".join(t.name for t in result)
    assert names == "actor, film, film_actor, language, film_list"
    assert result[-1].type == "VIEW"


def test_tables_name_filter(reader):
    result = reader.tables(Filter(name="film%", types=["TABLE"]))
    assert [t.name for t in result] == ["film", "film_actor"]


def test_tables_limit(conn):
    limited = SqliteMetadataReader(conn, limit=1)
    assert len(limited.tables(Filter(types=["TABLE", "VIEW"]))) == 1


def test_columns(reader):
    result = reader.columns(Filter(parent="film%"))
    names = ", ".join(c.name for c in result)
    assert names == (
        "film_id, language_id, rating, title, actor_id, film_id, FID, title"
    )
    title = next(c for c in result if c.table == "film" and c.name == "title")
    assert title.is_nullable == "NO"
    rating = next(c for c in result if c.name == "rating")
    assert rating.default == "'G'"
    assert rating.is_nullable == "YES"


def test_functions(reader):
    result = reader.functions(Filter(name="count"))
    assert result
    assert {f.name for f in result} == {"count"}
    assert all(f.specific_name == f.name for f in result)


def test_functions_all_sorted(reader):
    names = [f.name for f in reader.functions(Filter())]
    assert "abs" in names
    assert names == sorted(names)


def test_function_columns_empty(reader):
    assert reader.function_columns(Filter()) == []


def test_indexes(reader):
    result = reader.indexes(Filter())
    names = ", ".join(f"{i.table}.{i.name}" for i in result)
    assert names == (
        "actor.idx_actor_last_name, film.idx_fk_language_id, "
        "film_actor.idx_fk_film_actor_film, film_actor.sqlite_autoindex_film_actor_1"
    )
    assert result[-1] == Index(
        table="film_actor",
        name="sqlite_autoindex_film_actor_1",
        is_unique="YES",
        is_primary="YES",
    )
    assert result[0].is_primary == "NO"


def test_indexes_parent_filter(reader):
    result = reader.indexes(Filter(parent="film"))
    assert [i.name for i in result] == ["idx_fk_language_id"]


def test_index_columns(reader):
    result = reader.index_columns(Filter(name="idx%"))
    names = ", ".join(c.name for c in result)
    assert names == "last_name, language_id, film_id"
    assert result[1].index_name == "idx_fk_language_id"
    assert result[1].table == "film"


def test_index_columns_composite(reader):
    result = reader.index_columns(Filter(name="sqlite_autoindex%"))
    assert [(c.name, c.ordinal_position) for c in result] == [
        ("actor_id", 0),
        ("film_id", 1),
    ]