"""
Unit tests for TableMetaData SQL rendering.

Column order follows the column definition map, so expected strings are
built by iterating the same map.
"""

import pytest

from db.errors import InvalidFieldError
from db.types import POSTGRES, PrimaryKeyType, WireType
from meta.filter import FilterCondition
from meta.table import TableMetaData


def _cols(columns, prefix=","):
    return prefix + ",".join(f"`{c}`" for c in columns)


class TestColumnDef:
    def test_get_column_def(self, soft_meta, column_def):
        assert soft_meta.column_def == column_def

    def test_column_def_is_copied_on_construction(self, column_def):
        meta = TableMetaData("t", column_def)
        column_def["extra"] = WireType.VARCHAR
        assert "extra" not in meta.column_def

    def test_column_def_is_copied_on_read(self, soft_meta):
        soft_meta.column_def["extra"] = WireType.VARCHAR
        assert "extra" not in soft_meta.column_def

    def test_column_type_unknown(self, soft_meta):
        with pytest.raises(InvalidFieldError) as exc:
            soft_meta.column_type("nope")
        assert "test_table" in str(exc.value)
        assert "nope" in str(exc.value)


class TestInsert:
    def test_insert_without_generated_key(self, soft_meta, column_def):
        expected = "INSERT INTO test_table (`id`" + _cols(column_def) + ") VALUES (?,?,?,?,?)"
        assert soft_meta.gen_insert_sql(column_def.keys(), False) == expected

    def test_insert_with_generated_key(self, soft_meta, column_def):
        expected = "INSERT INTO test_table (" + _cols(column_def, "") + ") VALUES (?,?,?,?)"
        assert soft_meta.gen_insert_sql(column_def.keys(), True) == expected

    @pytest.mark.parametrize("subset", [["empcode"], ["loginname", "password"], []])
    def test_placeholder_count_matches_columns(self, soft_meta, subset):
        sql = soft_meta.gen_insert_sql(subset)
        assert sql.count("?") == len(subset) + 1
        assert sql.count("`") == 2 * (len(subset) + 1)
        assert "`id`" in sql

        sql = soft_meta.gen_insert_sql(subset, auto_generated_key=True)
        assert sql.count("?") == len(subset)
        assert "`id`" not in sql

    def test_insert_invalid_field(self, soft_meta):
        with pytest.raises(InvalidFieldError) as exc:
            soft_meta.gen_insert_sql(["empcode", "salary"])
        assert exc.value.field == "salary"
        assert exc.value.table_name == "test_table"


class TestUpdate:
    def test_update_with_deactivated_flag(self, soft_meta, column_def):
        sets = ",".join(f"`{c}`=?" for c in column_def)
        expected = f"UPDATE test_table SET {sets} WHERE `id`=? AND `deactivated`=0"
        assert soft_meta.gen_update_sql(column_def.keys()) == expected

    def test_update_without_deactivated_flag(self, hard_meta, column_def):
        sets = ",".join(f"`{c}`=?" for c in column_def)
        expected = f"UPDATE test_table SET {sets} WHERE `id`=?"
        assert hard_meta.gen_update_sql(column_def.keys()) == expected

    def test_update_key_placeholder_is_last(self, hard_meta):
        sql = hard_meta.gen_update_sql(["password"])
        assert sql.endswith("WHERE `id`=?")
        assert sql.count("=?") == 2

    def test_update_invalid_field(self, soft_meta):
        with pytest.raises(InvalidFieldError):
            soft_meta.gen_update_sql(["loginname", "bogus"])

    def test_update_requires_columns(self, soft_meta):
        with pytest.raises(InvalidFieldError):
            soft_meta.gen_update_sql([])


class TestDelete:
    def test_delete_with_deactivated_flag(self, soft_meta):
        expected = "UPDATE test_table SET `deactivated`=1 WHERE `deactivated`=0 AND `id`=?"
        assert soft_meta.gen_delete_sql() == expected

    def test_soft_delete_text_is_stable(self, soft_meta):
        assert soft_meta.gen_delete_sql() == soft_meta.gen_delete_sql()

    def test_delete_without_deactivated_flag(self, hard_meta):
        assert hard_meta.gen_delete_sql() == "DELETE FROM test_table WHERE `id`=?"


class TestSelect:
    def test_select_one(self, soft_meta, column_def):
        expected = "SELECT `id`" + _cols(column_def) + " FROM test_table WHERE `deactivated`=0 AND `id`=?"
        sql = soft_meta.gen_select_sql(False, None, None)
        assert sql == expected
        assert sql.index("`deactivated`=0") < sql.index("`id`=?")

    def test_select_one_without_deactivated_flag(self, hard_meta, column_def):
        expected = "SELECT `id`" + _cols(column_def) + " FROM test_table WHERE `id`=?"
        assert hard_meta.gen_select_sql(False) == expected

    def test_select_all_unfiltered(self, hard_meta, column_def):
        assert hard_meta.gen_select_sql(True) == "SELECT `id`" + _cols(column_def) + " FROM test_table"

    def test_select_all_filtered(self, soft_meta, column_def):
        conditions = [
            FilterCondition("loginenabled", "=", "y", WireType.VARCHAR),
            FilterCondition("empcode", ">", 100, WireType.INTEGER),
        ]
        expected = (
            "SELECT `id`" + _cols(column_def) + " FROM test_table WHERE `deactivated`=0"
            " AND `loginenabled`=? AND `empcode`>?"
        )
        assert soft_meta.gen_select_sql(True, conditions, None) == expected

    def test_filter_clause_count_without_deactivated_flag(self, hard_meta):
        conditions = [
            FilterCondition("loginname", "=", "x", WireType.VARCHAR),
            FilterCondition("empcode", ">=", 1, WireType.INTEGER),
            FilterCondition("empcode", "<", 9, WireType.INTEGER),
        ]
        sql = hard_meta.gen_select_sql(True, conditions)
        assert " WHERE `loginname`=? AND `empcode`>=? AND `empcode`<?" in sql
        assert sql.count("?") == 3

    def test_identical_conditions_render_once(self, hard_meta):
        same = FilterCondition("loginname", "=", "x", WireType.VARCHAR)
        other_op = FilterCondition("loginname", "<>", "x", WireType.VARCHAR)
        sql = hard_meta.gen_select_sql(True, [same, same, other_op, same])
        assert sql.endswith(" WHERE `loginname`=? AND `loginname`<>?")
        assert sql.count("?") == 2

    def test_word_operator_is_spaced(self, hard_meta):
        sql = hard_meta.gen_select_sql(True, [FilterCondition("loginname", "LIKE", "a%", WireType.VARCHAR)])
        assert sql.endswith("WHERE `loginname` LIKE ?")

    def test_filter_invalid_field(self, soft_meta):
        with pytest.raises(InvalidFieldError):
            soft_meta.gen_select_sql(True, [FilterCondition("salary", "=", 1, WireType.INTEGER)])

    def test_select_ordered(self, soft_meta, column_def):
        conditions = [FilterCondition("loginenabled", "=", "y", WireType.VARCHAR)]
        expected = (
            "SELECT `id`" + _cols(column_def) + " FROM test_table WHERE `deactivated`=0"
            " AND `loginenabled`=? ORDER BY `loginname`,`empcode`"
        )
        actual = soft_meta.gen_select_sql(True, conditions, ["`loginname`", "`empcode`"])
        assert actual == expected

    def test_order_tokens_are_normalized(self, hard_meta):
        sql = hard_meta.gen_select_sql(True, None, ["loginname desc", "empcode"])
        assert sql.endswith(" ORDER BY `loginname` DESC,`empcode`")

    def test_order_by_only_for_all_rows(self, soft_meta):
        assert "ORDER BY" not in soft_meta.gen_select_sql(False, None, ["loginname"])
        assert "ORDER BY" not in soft_meta.gen_select_sql(True, None, [])
        assert "ORDER BY" not in soft_meta.gen_select_sql(True, None, None)

    @pytest.mark.parametrize("token", ["salary", "loginname; DROP TABLE x", "`loginname", "loginname SIDEWAYS"])
    def test_order_by_rejects_unknown_or_malformed(self, soft_meta, token):
        with pytest.raises(InvalidFieldError):
            soft_meta.gen_select_sql(True, None, [token])

    def test_paging(self, hard_meta):
        sql = hard_meta.gen_select_sql(True, None, ["empcode"], limit=10, offset=20)
        assert sql.endswith(" ORDER BY `empcode` LIMIT ? OFFSET ?")
        assert "LIMIT" not in hard_meta.gen_select_sql(False, limit=10)


class TestPostgresDialect:
    def test_quotes_and_placeholders(self, column_def):
        meta = TableMetaData("emp", column_def, PrimaryKeyType.VARCHAR, True, dialect=POSTGRES)
        assert meta.gen_delete_sql() == 'UPDATE emp SET "deactivated"=1 WHERE "deactivated"=0 AND "id"=%s'
        assert meta.gen_insert_sql(["empcode"]) == 'INSERT INTO emp ("id","empcode") VALUES (%s,%s)'
        assert meta.gen_select_sql(True, None, ['"empcode" ASC']).endswith('ORDER BY "empcode" ASC')
