"""Unit Tests for SQL Synthesis

Tests statement text built from table, insert and where descriptions:
- CREATE TABLE clause layout and ordering
- Bound values for INSERT/SELECT/UPDATE/DELETE
- Identifier validation and literal quoting
- SQLite spellings and unsupported statements
"""

import pytest

from db_connector.core.synthesizer import (
    SQLiteSynthesizer,
    SQLSynthesizer,
    quote_identifier,
    quote_literal,
    render_default,
)
from db_connector.exceptions import (
    InvalidIdentifierError,
    InvalidSchemaError,
    UnsupportedOperationError,
)
from db_connector.models import Column, ColumnType, TableSpec

pytestmark = pytest.mark.unit


@pytest.fixture
def synthesizer() -> SQLSynthesizer:
    return SQLSynthesizer()


@pytest.fixture
def sqlite_synthesizer() -> SQLiteSynthesizer:
    return SQLiteSynthesizer()


class TestCreateTable:
    """Test CREATE TABLE synthesis."""

    def test_create_table_layout(self, synthesizer: SQLSynthesizer):
        """Test the full statement text for a keyed two-column table."""
        table = (
            TableSpec(name="users", primary_key="id")
            .add_column(Column(type=ColumnType.INT, name="id", length=11))
            .add_column(ColumnType.VARCHAR, "name")
        )

        statement = synthesizer.create_table(table)

        assert statement.sql == (
            "CREATE TABLE `users` (\n"
            "\t`id` INT(11) NOT NULL,\n"
            "\t`name` VARCHAR(255) NOT NULL,\n"
            "\tPRIMARY KEY (`id`)\n"
            ");"
        )
        assert statement.params == {}

    @pytest.mark.parametrize("column_count", [1, 2, 5])
    def test_one_clause_per_column_in_order(
        self, synthesizer: SQLSynthesizer, column_count: int
    ):
        """Test N columns give N clauses, comma after all but the last."""
        table = TableSpec(name="wide")
        for i in range(column_count):
            table.add_column(ColumnType.INT, f"c{i}")

        sql = synthesizer.create_table(table).sql
        body = sql[sql.index("(\n") + 2 : sql.rindex("\n)")]
        clauses = body.split("\n")

        assert len(clauses) == column_count
        for i, clause in enumerate(clauses):
            assert clause.startswith(f"\t`c{i}` INT(255)")
            assert clause.endswith(",") == (i < column_count - 1)

    def test_no_primary_key_clause_without_key(self, synthesizer: SQLSynthesizer):
        """Test the PRIMARY KEY clause only appears when a key is set."""
        table = TableSpec(name="log").add_column(ColumnType.VARCHAR, "line")

        sql = synthesizer.create_table(table).sql

        assert "PRIMARY KEY" not in sql
        assert sql.endswith("`line` VARCHAR(255) NOT NULL\n);")

    def test_nullable_column_has_no_not_null(self, synthesizer: SQLSynthesizer):
        """Test allow_null drops the NOT NULL constraint."""
        table = TableSpec(name="t").add_column(
            Column(type=ColumnType.DOUBLE, name="ratio", allow_null=True, length=8)
        )

        assert "`ratio` DOUBLE(8)\n" in synthesizer.create_table(table).sql

    def test_empty_table_rejected(self, synthesizer: SQLSynthesizer):
        """Test a table without columns raises before any SQL exists."""
        with pytest.raises(InvalidSchemaError, match="no columns for table empty"):
            synthesizer.create_table(TableSpec(name="empty"))

    def test_mysql_defaults_are_separate_statements(self, synthesizer: SQLSynthesizer):
        """Test MySQL leaves defaults out of CREATE and sets them afterwards."""
        table = (
            TableSpec(name="players")
            .add_column(ColumnType.VARCHAR, "name")
            .add_column(Column(type=ColumnType.INT, name="score", default_value="0"))
            .add_column(Column(type=ColumnType.VARCHAR, name="rank", default_value="bronze"))
        )

        assert "DEFAULT" not in synthesizer.create_table(table).sql

        defaults = [s.sql for s in synthesizer.default_statements(table)]
        assert defaults == [
            "ALTER TABLE `players` ALTER `score` SET DEFAULT 0;",
            "ALTER TABLE `players` ALTER `rank` SET DEFAULT 'bronze';",
        ]

    def test_sqlite_defaults_are_inline(self, sqlite_synthesizer: SQLiteSynthesizer):
        """Test SQLite embeds defaults in CREATE and needs no follow-up."""
        table = TableSpec(name="players").add_column(
            Column(type=ColumnType.VARCHAR, name="rank", default_value="bronze")
        )

        sql = sqlite_synthesizer.create_table(table).sql

        assert "`rank` VARCHAR(255) NOT NULL DEFAULT 'bronze'" in sql
        assert sqlite_synthesizer.default_statements(table) == []


class TestRowStatements:
    """Test statements that read or write rows."""

    def test_insert_binds_values_in_key_order(self, synthesizer: SQLSynthesizer):
        """Test INSERT lists columns and placeholders in the same order."""
        statement = synthesizer.insert_row("users", {"id": 1, "name": "Ann"})

        assert statement.sql == "INSERT INTO `users` (`id`, `name`) VALUES (:v0, :v1);"
        assert statement.params == {"v0": 1, "v1": "Ann"}

    def test_insert_without_values_rejected(self, synthesizer: SQLSynthesizer):
        """Test an empty value set raises InvalidSchemaError."""
        with pytest.raises(InvalidSchemaError):
            synthesizer.insert("users", [])

    def test_select_where_binds_value(self, synthesizer: SQLSynthesizer):
        """Test the compared value is a parameter, not part of the text."""
        statement = synthesizer.select_where("users", "name", "O'Brien")

        assert statement.sql == "SELECT * FROM `users` WHERE `name` = :value;"
        assert statement.params == {"value": "O'Brien"}

    def test_update_binds_both_values(self, synthesizer: SQLSynthesizer):
        """Test UPDATE binds the new value and the key value."""
        statement = synthesizer.update("users", "id", 1, "name", "Cid")

        assert statement.sql == (
            "UPDATE `users` SET `name` = :new_value WHERE `id` = :value;"
        )
        assert statement.params == {"new_value": "Cid", "value": 1}

    def test_delete(self, synthesizer: SQLSynthesizer):
        """Test DELETE compares the key column, not a string literal."""
        statement = synthesizer.delete("users", "id", 2)

        assert statement.sql == "DELETE FROM `users` WHERE `id` = :value;"
        assert statement.params == {"value": 2}

    def test_copy_and_count(self, synthesizer: SQLSynthesizer):
        """Test the copy and count statements."""
        assert synthesizer.copy_into("b", "a").sql == "INSERT INTO `b` SELECT * FROM `a`;"
        assert synthesizer.count_rows("a").sql == "SELECT COUNT(*) FROM `a`;"


class TestAlterStatements:
    """Test ALTER/DROP statements."""

    def test_add_column(self, synthesizer: SQLSynthesizer):
        """Test ADD uses the type keyword and length."""
        statement = synthesizer.alter_add_column("users", "age", "INT", 11)

        assert statement.sql == "ALTER TABLE `users` ADD `age` INT(11);"

    def test_add_column_rejects_unknown_type(self, synthesizer: SQLSynthesizer):
        """Test column types outside ColumnType are refused."""
        with pytest.raises(ValueError):
            synthesizer.alter_add_column("users", "age", "SERIAL")

    def test_drop_and_rename(self, synthesizer: SQLSynthesizer):
        """Test DROP COLUMN and RENAME COLUMN."""
        assert synthesizer.alter_drop_column("users", "age").sql == (
            "ALTER TABLE `users` DROP COLUMN `age`;"
        )
        assert synthesizer.rename_column("users", "name", "nick").sql == (
            "ALTER TABLE `users` RENAME COLUMN `name` TO `nick`;"
        )

    def test_drop_table_variants(self, synthesizer: SQLSynthesizer):
        """Test DROP TABLE with and without IF EXISTS."""
        assert synthesizer.drop_table("users").sql == "DROP TABLE `users`;"
        assert synthesizer.drop_table_if_exists("users").sql == (
            "DROP TABLE IF EXISTS `users`;"
        )

    def test_replace_primary_key(self, synthesizer: SQLSynthesizer):
        """Test the old key is dropped and the new one added in one statement."""
        assert synthesizer.replace_primary_key("users", "name").sql == (
            "ALTER TABLE `users` DROP PRIMARY KEY, ADD PRIMARY KEY (`name`);"
        )

    def test_load_data_quotes_path(self, synthesizer: SQLSynthesizer):
        """Test the bulk-load path is rendered as an escaped literal."""
        assert synthesizer.load_data("users", "/tmp/o'neil.csv").sql == (
            "LOAD DATA INFILE '/tmp/o''neil.csv' INTO TABLE `users`;"
        )


class TestSQLiteSynthesizer:
    """Test SQLite-specific statements."""

    def test_catalog_statements(self, sqlite_synthesizer: SQLiteSynthesizer):
        """Test describe and table listing use SQLite's catalog."""
        assert sqlite_synthesizer.describe("users").sql == (
            "SELECT * FROM pragma_table_info('users');"
        )
        column = sqlite_synthesizer.describe_column("users", "name")
        assert column.sql.endswith("WHERE name = :column;")
        assert column.params == {"column": "name"}
        assert "sqlite_master" in sqlite_synthesizer.show_tables().sql

    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.set_default("users", "name", "x"),
            lambda s: s.replace_primary_key("users", "name"),
            lambda s: s.load_data("users", "/tmp/users.csv"),
        ],
        ids=["set_default", "replace_primary_key", "load_data"],
    )
    def test_unsupported_statements(self, sqlite_synthesizer: SQLiteSynthesizer, call):
        """Test statements SQLite cannot run raise instead of emitting SQL."""
        with pytest.raises(UnsupportedOperationError, match="sqlite"):
            call(sqlite_synthesizer)


class TestQuoting:
    """Test identifier validation and literal rendering."""

    @pytest.mark.parametrize(
        "name", ["users; DROP TABLE users", "a`b", "1abc", "", "my table"]
    )
    def test_invalid_identifiers(self, name: str):
        """Test names outside the allow-list are rejected."""
        with pytest.raises(InvalidIdentifierError):
            quote_identifier(name)

    def test_invalid_identifier_reaches_no_statement(self, synthesizer: SQLSynthesizer):
        """Test synthesis fails on a bad table name before returning SQL."""
        with pytest.raises(InvalidSchemaError):
            synthesizer.select_all("users WHERE 1=1")

    def test_valid_identifier(self):
        """Test allowed names are wrapped in backticks."""
        assert quote_identifier("player_uuid") == "`player_uuid`"
        assert quote_identifier("_tmp$1") == "`_tmp$1`"

    def test_quote_literal(self):
        """Test quotes are doubled and colons escaped for bind parsing."""
        assert quote_literal("it's") == "'it''s'"
        assert quote_literal("12:30") == "'12\\:30'"
        assert quote_literal("a\\b") == "'a\\b'"
        assert quote_literal("a\\b", backslash_escapes=True) == "'a\\\\b'"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("0", "0"),
            (12, "12"),
            (1.5, "1.5"),
            (True, "TRUE"),
            ("CURRENT_TIMESTAMP", "CURRENT_TIMESTAMP"),
            ("null", "null"),
            ("bronze", "'bronze'"),
            ("'bronze'", "'bronze'"),
        ],
    )
    def test_render_default(self, value, expected: str):
        """Test numbers and keywords stay bare while text is quoted."""
        assert render_default(value) == expected
