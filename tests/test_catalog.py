"""
Tests for schema introspection and the catalog.
"""

import dataclasses

import pytest

from dbexplorer import Catalog, NoTablesFoundError, UnknownTableError, classify_column


class TestClassifyColumn:
    """Test classification of introspected column attributes."""

    @pytest.mark.parametrize(
        "type_name",
        ["INTEGER", "int(11)", "INT", "BIGINT UNSIGNED", "tinyint(1)", "SMALLINT", "MEDIUMINT"],
    )
    def test_integer_types_are_numeric(self, type_name):
        """Test that integer-family types are classified as numeric."""
        assert classify_column("n", type_name, "", True).is_numeric_type

    @pytest.mark.parametrize("type_name", ["VARCHAR(255)", "TEXT", "POINT", "INTERVAL", "DATETIME", "NULL"])
    def test_other_types_are_text(self, type_name):
        """Test that types without an integer marker are classified as text."""
        assert not classify_column("n", type_name, "", True).is_numeric_type

    def test_auto_increment_from_extra(self):
        """Test that the increment marker in the extra attributes flags the key column."""
        column = classify_column("id", "int(11)", "auto_increment", False)
        assert column.is_auto_increment
        assert not column.is_nullable

    def test_plain_column(self):
        """Test a nullable text column without extra attributes."""
        column = classify_column("updated", "varchar(255)", "", True)
        assert column.is_nullable
        assert not column.is_auto_increment
        assert column.zero_value == ""


class TestCatalog:
    """Test the catalog built from a live database."""

    def test_table_names(self, catalog):
        """Test that every table is discovered."""
        assert catalog.table_names == ["items", "users"]
        assert len(catalog) == 2
        assert "items" in catalog
        assert list(catalog) == ["items", "users"]

    def test_columns_in_canonical_order(self, catalog):
        """Test that columns keep the order reported by introspection."""
        items = catalog.table("items")
        assert items.column_names == ("id", "title", "description", "updated")
        assert [col.field_name for col in items.columns] == list(items.column_names)

    def test_column_classification(self, catalog):
        """Test numeric, nullable and key flags of the seeded tables."""
        items = catalog.table("items")
        assert items.get_column("id").is_numeric_type
        assert items.get_column("id").is_auto_increment
        assert not items.get_column("title").is_numeric_type
        assert not items.get_column("title").is_nullable
        assert items.get_column("updated").is_nullable
        assert items.get_column("missing") is None

    def test_get_id_column(self, catalog):
        """Test that the auto-increment column is the id column."""
        assert catalog.get_id_column("items") == "id"
        assert catalog.get_id_column("users") == "user_id"

    def test_collect_writable_columns(self, catalog):
        """Test that writable columns exclude the key and keep canonical order."""
        assert catalog.collect_writable_columns("users") == ["login", "password", "email", "info", "updated"]

    def test_unknown_table(self, catalog):
        """Test error for a table that was not discovered."""
        with pytest.raises(UnknownTableError):
            catalog.table("unknown_table")
        with pytest.raises(UnknownTableError):
            catalog.get_id_column("unknown_table")

    def test_table_without_key(self, make_engine):
        """Test that a table without an integer primary key has no id column."""
        catalog = Catalog.build(make_engine("CREATE TABLE notes (body TEXT NOT NULL, priority INTEGER)"))
        assert catalog.get_id_column("notes") == ""
        assert catalog.collect_writable_columns("notes") == ["body", "priority"]

    def test_text_primary_key_is_not_auto_increment(self, make_engine):
        """Test that a non-integer primary key is never treated as server generated."""
        catalog = Catalog.build(make_engine("CREATE TABLE tags (code VARCHAR(16) NOT NULL PRIMARY KEY, label TEXT)"))
        assert catalog.get_id_column("tags") == ""

    @pytest.mark.parametrize("key_type", ["BIGINT", "INT", "SMALLINT"])
    def test_non_rowid_integer_key_is_not_auto_increment(self, make_engine, key_type):
        """Test that only a key declared exactly INTEGER is treated as the SQLite rowid."""
        catalog = Catalog.build(make_engine(f"CREATE TABLE t (id {key_type} NOT NULL PRIMARY KEY, name TEXT NOT NULL)"))
        assert not catalog.table("t").get_column("id").is_auto_increment
        assert catalog.get_id_column("t") == ""
        assert catalog.collect_writable_columns("t") == ["id", "name"]

    def test_empty_database(self, make_engine):
        """Test that building over a database without tables fails."""
        with pytest.raises(NoTablesFoundError):
            Catalog.build(make_engine())

    def test_catalog_is_read_only(self, catalog):
        """Test that metadata cannot be mutated after construction."""
        items = catalog.table("items")
        with pytest.raises(TypeError):
            items.lookup["id"] = None
        with pytest.raises(dataclasses.FrozenInstanceError):
            items.columns[0].is_nullable = True
