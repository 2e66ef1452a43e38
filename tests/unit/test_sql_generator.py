from __future__ import annotations

import pytest

from adaptive_record.errors import NotConfiguredError
from adaptive_record.sql import SqlDialect, SqlGenerator, StatementKind
from adaptive_record.store import RecordStore

NULL = object()


def _record_type(schema):
    return RecordStore().create_type(schema, name="Person")


@pytest.fixture
def people_type(minimal_schema_json):
    return _record_type(minimal_schema_json)


@pytest.fixture
def generator(people_type):
    return SqlGenerator(people_type, "People")


class TestStatements:
    def test_create_table(self, generator):
        assert generator.generate_create_table_query() == (
            "CREATE TABLE IF NOT EXISTS People "
            "(Id INTEGER PRIMARY KEY AUTOINCREMENT, Username TEXT, Age INTEGER)"
        )

    def test_select(self, generator):
        assert generator.generate_select_query() == "SELECT * FROM People"

    def test_insert_skips_identity(self, generator):
        assert generator.generate_insert_query() == (
            "INSERT INTO People (Username, Age) VALUES (@Username, @Age)"
        )

    def test_update(self, generator):
        assert generator.generate_update_query() == (
            "UPDATE People SET Username = @Username, Age = @Age WHERE Id = @Id"
        )

    def test_delete(self, generator):
        assert generator.generate_delete_query() == "DELETE FROM People WHERE Id = @Id"

    def test_generation_is_deterministic(self, generator):
        assert generator.generate_update_query() == generator.generate_update_query()

    def test_column_types_follow_semantic_types(self):
        schema = [
            {"Name": "Id", "TypeName": "Int32", "ControlType": "TextBox"},
            {"Name": "Born", "TypeName": "DateTime", "ControlType": "DatePicker"},
            {"Name": "Seen", "TypeName": "DateTimeOffset", "ControlType": "DatePicker"},
            {"Name": "Active", "TypeName": "Boolean", "ControlType": "CheckBox"},
            {"Name": "Price", "TypeName": "Decimal", "ControlType": "TextBox"},
            {"Name": "Ratio", "TypeName": "Double", "ControlType": "TextBox"},
        ]
        generator = SqlGenerator(_record_type(schema), "Things")
        assert generator.generate_create_table_query() == (
            "CREATE TABLE IF NOT EXISTS Things (Id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "Born DATE, Seen DATE, Active BOOLEAN, Price NUMERIC, Ratio REAL)"
        )

    def test_identity_only_type(self):
        generator = SqlGenerator(
            _record_type([{"Name": "Id", "TypeName": "Int64", "ControlType": "TextBox"}]), "Ids"
        )
        assert generator.generate_insert_query() == "INSERT INTO Ids DEFAULT VALUES"

    def test_irregular_table_name_is_quoted(self, people_type):
        generator = SqlGenerator(people_type, "People Archive")
        assert generator.generate_select_query() == 'SELECT * FROM "People Archive"'


class TestPostgresDialect:
    def test_create_table(self, people_type):
        generator = SqlGenerator(people_type, "People", dialect=SqlDialect.POSTGRES)
        assert generator.generate_create_table_query() == (
            'CREATE TABLE IF NOT EXISTS "People" '
            '("Id" BIGSERIAL PRIMARY KEY, "Username" TEXT, "Age" BIGINT)'
        )

    def test_update_uses_quoted_identifiers(self, people_type):
        generator = SqlGenerator(people_type, "People", dialect="postgres")
        assert generator.generate_update_query() == (
            'UPDATE "People" SET "Username" = @Username, "Age" = @Age WHERE "Id" = @Id'
        )


class TestConfiguration:
    def test_missing_record_type(self):
        with pytest.raises(NotConfiguredError):
            SqlGenerator(table_name="People").generate_select_query()

    @pytest.mark.parametrize("table_name", [None, "", "   "])
    def test_missing_table_name(self, people_type, table_name):
        with pytest.raises(NotConfiguredError):
            SqlGenerator(people_type, table_name).generate_insert_query()

    def test_configuration_can_be_assigned_later(self, people_type):
        generator = SqlGenerator()
        generator.record_type = people_type
        generator.table_name = "People"
        assert generator.generate_delete_query() == "DELETE FROM People WHERE Id = @Id"


class TestParameters:
    def test_update_binds_identity_and_fields(self):
        schema = [
            {"Name": "Id", "TypeName": "Int64", "ControlType": "TextBox"},
            {"Name": "Username", "TypeName": "String", "ControlType": "TextBox"},
        ]
        generator = SqlGenerator(_record_type(schema), "People")

        parameters = generator.map_parameters({"Id": 5, "Username": "Bo"}, StatementKind.UPDATE)

        assert parameters == {"@Id": 5, "@Username": "Bo"}

    def test_insert_skips_identity(self, generator):
        parameters = generator.map_parameters({"Id": 5, "Username": "Bo", "Age": 41}, "insert")
        assert parameters == {"@Username": "Bo", "@Age": 41}

    def test_delete_binds_identity_only(self, generator):
        parameters = generator.map_parameters({"Id": 5, "Username": "Bo", "Age": 41}, StatementKind.DELETE)
        assert parameters == {"@Id": 5}

    def test_nulls_become_sentinel(self, people_type):
        generator = SqlGenerator(people_type, "People", null_value=NULL)
        parameters = generator.map_parameters({"Id": 5, "Username": None})
        assert parameters["@Username"] is NULL
        assert parameters["@Age"] is NULL
        assert parameters["@Id"] == 5

    def test_parameters_match_statement_placeholders(self, generator):
        sql = generator.generate_update_query()
        parameters = generator.map_parameters({"Id": 1, "Username": "Ann", "Age": 30})
        for name in parameters:
            assert name in sql
