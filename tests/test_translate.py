"""Tests for the translation engine: tokens, placeholders, values and errors."""

import enum
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

import sqlweave
from sqlweave import Expression, Literal, TranslationError
from sqlweave._translator import Translator


class TestLiteralText:
    def test_text_without_tokens_is_verbatim(self, pg):
        sql = "SELECT a + b FROM t WHERE x > 1 AND y <> 2"
        assert pg.translate(sql) == sql

    def test_fragments_joined_with_spaces(self, pg):
        assert pg.translate("SELECT *", "FROM t") == "SELECT * FROM t"

    def test_single_nested_list_is_unwrapped(self, pg):
        assert pg.translate(["SELECT ?", 1]) == "SELECT 1"

    def test_empty_arguments(self, pg):
        assert pg.translate() == ""


class TestIdentifierTokens:
    def test_backtick_and_bracket(self, pg):
        assert pg.translate("SELECT [a], `b.c` FROM [t]") == 'SELECT "a", "b"."c" FROM "t"'

    def test_star_segment_is_not_quoted(self, pg):
        assert pg.translate("SELECT [t.*]") == 'SELECT "t".*'

    def test_mysql_quoting(self, mysql):
        assert mysql.translate("SELECT [a] FROM [db.t]") == "SELECT `a` FROM `db`.`t`"


class TestStringTokens:
    def test_single_and_double_quoted(self, pg):
        result = pg.translate("WHERE a = 'it''s' AND b = \"x\"")
        assert result == "WHERE a = 'it''s' AND b = 'x'"

    def test_driver_escaping_applies(self, mysql):
        assert mysql.translate("WHERE a = 'it''s'") == "WHERE a = 'it\\'s'"

    def test_alone_quote(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("WHERE a = 'abc")
        assert str(exc_info.value) == "SQL translate error: Alone quote"
        assert exc_info.value.sql == "WHERE a = **Alone quote**abc"


class TestSubstitutions:
    def test_substitution_inside_identifier(self):
        ctx = sqlweave.Context(substitutions={"blog": "wp_"})
        assert ctx.translate("SELECT * FROM [:blog:posts]") == 'SELECT * FROM "wp_posts"'

    def test_substitution_with_flag_is_identifier_text(self):
        ctx = sqlweave.Context(substitutions={"blog": "wp_"})
        assert ctx.translate("SELECT * FROM :blog:posts") == "SELECT * FROM wp_posts"

    def test_substitution_without_flag_is_value(self):
        ctx = sqlweave.Context(substitutions={"status": "active"})
        assert ctx.translate("WHERE s = :status:") == "WHERE s = 'active'"

    def test_unknown_name_is_left_untouched(self, pg):
        assert pg.translate("SELECT x::int FROM t") == "SELECT x::int FROM t"

    def test_change_invalidates_cached_identifiers(self):
        ctx = sqlweave.Context(substitutions={"p": "a_"})
        assert ctx.translate("SELECT [:p:t]") == 'SELECT "a_t"'
        ctx.substitutions["p"] = "b_"
        assert ctx.translate("SELECT [:p:t]") == 'SELECT "b_t"'


class TestPlaceholders:
    def test_consumed_in_order(self, pg):
        result = pg.translate("SELECT * FROM t WHERE a = ? AND b = ?", 1, "x")
        assert result == "SELECT * FROM t WHERE a = 1 AND b = 'x'"

    def test_fewer_placeholders_than_arguments(self, pg):
        assert pg.translate("SELECT ?", 1, "FROM t") == "SELECT 1 FROM t"

    def test_extra_placeholder(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("a = ? AND b = ?", 1)
        assert exc_info.value.errors == ["Extra placeholder"]
        assert exc_info.value.sql == "a = 1 AND b = **Extra placeholder**"


class TestDefaultFormatting:
    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param("a'b", "'a''b'", id="str"),
            pytest.param(42, "42", id="int"),
            pytest.param(1.23, "1.23", id="float"),
            pytest.param(2.0, "2", id="float_integral"),
            pytest.param(Decimal("1.50"), "1.5", id="decimal"),
            pytest.param(True, "TRUE", id="bool"),
            pytest.param(None, "NULL", id="none"),
            pytest.param(date(2024, 1, 31), "'2024-01-31'", id="date"),
            pytest.param(
                datetime(2024, 1, 31, 12, 30, 5), "'2024-01-31 12:30:05.000000'", id="datetime"
            ),
            pytest.param(b"\x01\xab", "'\\x01AB'", id="bytes"),
            pytest.param(
                timedelta(days=1, seconds=30),
                "INTERVAL '1 days 30 seconds 0 microseconds'",
                id="timedelta",
            ),
            pytest.param(Literal("NOW()"), "NOW()", id="literal"),
        ],
    )
    def test_value(self, pg, value, expected):
        assert pg.translate("SELECT ?", value) == f"SELECT {expected}"

    def test_enum_uses_value(self, pg):
        class Color(enum.Enum):
            RED = "red"

        assert pg.translate("SELECT ?", Color.RED) == "SELECT 'red'"

    def test_expression_is_translated_in_place(self, pg):
        assert pg.translate("WHERE", Expression("a = %i", 1)) == "WHERE a = 1"

    def test_unexpected_type(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("SELECT ?", object())
        assert exc_info.value.sql == "SELECT **Unexpected object**"

    def test_object_translator(self, pg):
        class Point:
            def __init__(self, x, y):
                self.x = x
                self.y = y

        pg.register_object_translator(Point, lambda p: Expression("POINT(%f, %f)", p.x, p.y))
        assert pg.translate("SELECT ?", Point(1.5, 2.0)) == "SELECT POINT(1.5, 2)"


class TestScalarModifiers:
    @pytest.mark.parametrize(
        "template, value, expected",
        [
            pytest.param("%s", "a'b", "'a''b'", id="s"),
            pytest.param("%s", None, "NULL", id="s_null"),
            pytest.param("%s", 5, "'5'", id="s_int"),
            pytest.param("%bin", b"\xff", "'\\xFF'", id="bin"),
            pytest.param("%b", 0, "FALSE", id="b"),
            pytest.param("%i", "123456789012345678901234567890", "123456789012345678901234567890", id="i_long"),
            pytest.param("%i", 3.7, "3", id="i_float"),
            pytest.param("%u", 7, "7", id="u"),
            pytest.param("%iN", 0, "NULL", id="iN_zero"),
            pytest.param("%iN", "", "NULL", id="iN_empty"),
            pytest.param("%iN", 5, "5", id="iN_value"),
            pytest.param("%sN", "", "NULL", id="sN_empty"),
            pytest.param("%sn", "x", "'x'", id="sn_value"),
            pytest.param("%f", 1.23, "1.23", id="f"),
            pytest.param("%f", "1.5", "1.5", id="f_numeric_string"),
            pytest.param("%d", date(2024, 1, 31), "'2024-01-31'", id="d"),
            pytest.param("%d", datetime(2024, 1, 31, 8, 0), "'2024-01-31'", id="d_datetime"),
            pytest.param("%d", "2024-01-31", "'2024-01-31'", id="d_string"),
            pytest.param("%dt", date(2024, 1, 31), "'2024-01-31 00:00:00.000000'", id="dt_date"),
            pytest.param("%t", "2024-01-31 12:30", "'2024-01-31 12:30:00.000000'", id="t_string"),
            pytest.param("%n", "table.col", '"table"."col"', id="n"),
            pytest.param("%N", "a.b", '"a.b"', id="N"),
            pytest.param("%SQL", "NOW()", "NOW()", id="SQL"),
            pytest.param("%sql", "[col] = 'x' AND y%2", "\"col\" = 'x' AND y%2", id="sql"),
            pytest.param("%like", "a_b", "'a\\_b'", id="like"),
            pytest.param("%like~", "a_b%", "'a\\_b\\%%'", id="like_prefix"),
            pytest.param("%~like", "x", "'%x'", id="like_suffix"),
            pytest.param("%~like~", "x", "'%x%'", id="like_contains"),
        ],
    )
    def test_modifier(self, pg, template, value, expected):
        assert pg.translate(template, value) == expected

    def test_int_rejects_text(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("%i", "abc")
        assert exc_info.value.errors == ["Expected number, 'abc' given."]

    def test_float_rejects_text(self, pg):
        with pytest.raises(TranslationError, match="Expected number"):
            pg.translate("%f", "1.5x")

    def test_invalid_date(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("%d", "not a date")
        assert exc_info.value.errors == ["Invalid date/time value 'not a date'."]

    def test_invalid_combination(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("%and", 5)
        assert exc_info.value.errors == ["Invalid combination of type int and modifier %and"]

    def test_object_with_scalar_modifier(self, pg):
        with pytest.raises(TranslationError, match="Invalid combination of type object"):
            pg.translate("%i", object())

    def test_unknown_modifier(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("a = %zz", 1)
        assert exc_info.value.errors == ["Unknown or unexpected modifier %zz"]

    def test_extra_modifier(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("a = %i")
        assert exc_info.value.sql == "a = **Extra modifier %i**"


class TestArrayModifiers:
    def test_and(self, pg):
        result = pg.translate("WHERE %and", {"status": "ok", "deleted": None})
        assert result == "WHERE (\"status\" = 'ok') AND (\"deleted\" IS NULL)"

    def test_or_empty_is_tautology(self, pg):
        assert pg.translate("WHERE %or", {}) == "WHERE 1=1"

    def test_and_with_key_modifiers(self, pg):
        result = pg.format_value({"id%in": [1, 2], "name%~like~": "jo", "age%i": "30"}, "and")
        assert result == "(\"id\" IN (1, 2)) AND (\"name\" LIKE '%jo%') AND (\"age\" = 30)"

    def test_and_with_plain_conditions(self, pg):
        assert pg.format_value(["a > 1", "b < 2"], "and") == "(a > 1) AND (b < 2)"

    def test_and_with_expression_key(self, pg):
        assert pg.format_value({"x%ex": ["> %i", 5]}, "and") == '("x" > 5)'

    def test_assign(self, pg):
        assert pg.format_value({"a": 1, "b": "x"}, "a") == "\"a\"=1, \"b\"='x'"

    def test_assign_nested_list_warns(self, pg):
        with pytest.warns(UserWarning, match="Use Expression instead of array"):
            result = pg.format_value({"a": ["NOW() + %i", 1]}, "a")
        assert result == '"a"=NOW() + 1'

    def test_in_and_list(self, pg):
        assert pg.format_value([1, 2, 3], "in") == "(1, 2, 3)"
        assert pg.format_value([], "in") == "(NULL)"
        assert pg.format_value([], "l") == "()"

    def test_values(self, pg):
        assert pg.format_value({"a": 1, "b": None}, "v") == '("a", "b") VALUES (1, NULL)'

    def test_identifier_aliases(self, pg):
        assert pg.format_value({"name": "n", "id": None}, "n") == '"name" AS "n", "id"'

    def test_order(self, pg):
        result = pg.format_value({"name": "desc", "id": 1, "age": -1}, "by")
        assert result == '"name" DESC, "id" ASC, "age" DESC'
        assert pg.format_value(["a", "b"], "by") == '"a", "b"'

    def test_scalar_modifier_applies_to_each_item(self, pg):
        assert pg.format_value(["1", "2"], "i") == "1, 2"


class TestMultiInsert:
    def test_rows(self, pg):
        rows = [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]
        assert pg.format_value(rows, "m") == "(\"a\", \"b\") VALUES (1, 'x'), (2, 'y')"

    def test_columns(self, pg):
        columns = {"a": [1, 2], "b": ["x", "y"]}
        assert pg.format_value(columns, "m") == "(\"a\", \"b\") VALUES (1, 'x'), (2, 'y')"

    def test_row_shape_mismatch(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("INSERT INTO t %m", [{"a": 1, "b": 2}, {"a": 1}])
        assert exc_info.value.errors == ['Multi-insert array "1" is different']

    def test_column_shape_mismatch(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("INSERT INTO t %m", {"a": [1, 2], "b": [1]})
        assert exc_info.value.errors == ['Multi-insert array "b" is different']


class TestAutoArrays:
    def test_insert_uses_values_shape(self, pg):
        result = pg.translate("INSERT INTO [t]", {"a": 1, "b": "x"})
        assert result == "INSERT INTO \"t\" (\"a\", \"b\") VALUES (1, 'x')"

    def test_consecutive_inserts_are_comma_joined(self, pg):
        result = pg.translate("INSERT INTO [t]", {"a": 1}, {"a": 2})
        assert result == 'INSERT INTO "t" ("a") VALUES (1) , (2)'

    def test_update_uses_assign_shape(self, pg):
        result = pg.translate("UPDATE [t] SET", {"a": 1}, "WHERE id = %i", 3)
        assert result == 'UPDATE "t" SET "a"=1 WHERE id = 3'


class TestExpressionSplice:
    def test_ex_splices_list(self, pg):
        assert pg.translate("SELECT * FROM t WHERE", "%ex", ["a = %i", 5]) == (
            "SELECT * FROM t WHERE a = 5"
        )

    def test_ex_with_expression_value(self, pg):
        assert pg.translate("SELECT", "%ex", Expression("1 + %i", 2)) == "SELECT 1 + 2"


class TestLimitOffset:
    def test_limit_and_offset(self, pg):
        assert pg.translate("SELECT * FROM t %lmt %ofs", 10, 20) == (
            "SELECT * FROM t LIMIT 10 OFFSET 20"
        )

    def test_none_means_no_override(self, pg):
        assert pg.translate("SELECT * FROM t %lmt", None) == "SELECT * FROM t"

    def test_non_numeric_limit(self, pg):
        with pytest.raises(TranslationError, match="Expected number, 'abc' given."):
            pg.translate("SELECT * FROM t %lmt", "abc")

    def test_limit_beyond_64_bits(self, pg):
        with pytest.raises(TranslationError, match="is greater than integer"):
            pg.translate("SELECT * FROM t %lmt", "99999999999999999999")

    def test_negative_limit(self, pg):
        with pytest.raises(sqlweave.InvalidLimitError):
            pg.translate("SELECT * FROM t %lmt", -1)

    def test_dialect_paging_syntax(self, mssql):
        assert mssql.translate("SELECT * FROM t ORDER BY id %lmt", 5) == (
            "SELECT * FROM t ORDER BY id OFFSET 0 ROWS FETCH NEXT 5 ROWS ONLY"
        )


class TestConditionals:
    def test_false_branch_is_commented(self, pg):
        result = pg.translate("SELECT * FROM t %if", False, "WHERE a = %i", 1, "%end")
        assert result == "SELECT * FROM t /* ... */"

    def test_true_branch_is_rendered(self, pg):
        result = pg.translate("SELECT * FROM t", "%if", True, "WHERE a = %i", 1, "%end")
        assert result == "SELECT * FROM t WHERE a = 1"

    def test_else_after_false(self, pg):
        assert pg.translate("SELECT %if", False, "a %else b %end") == "SELECT /* ... */ b"

    def test_else_after_true(self, pg):
        assert pg.translate("SELECT", "%if", True, "a %else b %end") == "SELECT a /* ... */"

    def test_nested_true_inside_false(self, pg):
        result = pg.translate(
            "SELECT * FROM t %if", False, "WHERE a = 1 %if", True, "AND b = 2 %end %end"
        )
        assert result == "SELECT * FROM t /* ... */"

    def test_cursor_stays_correct_inside_comment(self, pg):
        result = pg.translate("a %if", False, "b = ? %end AND c = ?", 5, 6)
        assert result == "a /* ... */ AND c = 6"

    def test_limit_hidden_in_false_branch(self, pg):
        result = pg.translate("SELECT * FROM t %if", False, "%lmt", 10, "%end")
        assert result == "SELECT * FROM t /* ... */"

    def test_unclosed_comment_is_closed(self, pg):
        assert pg.translate("SELECT 1 %if", False, "AND x") == "SELECT 1 /* ... */"


class TestErrors:
    def test_first_error_is_reported_all_are_kept(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("a = %zz", 1, "AND b = ?")
        err = exc_info.value
        assert str(err) == "SQL translate error: Unknown or unexpected modifier %zz"
        assert err.errors == ["Unknown or unexpected modifier %zz", "Extra placeholder"]

    def test_nested_expression_errors_are_kept_with_outer_errors(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("WHERE %sql", Expression("a = %zz", 1), "AND b = ?")
        err = exc_info.value
        assert err.errors == ["Unknown or unexpected modifier %zz", "Extra placeholder"]
        assert err.sql == (
            "WHERE a = **Unknown or unexpected modifier %zz** AND b = **Extra placeholder**"
        )

    @pytest.mark.parametrize(
        "modifier",
        [
            pytest.param("s", id="s"),
            pytest.param("sN", id="sN"),
            pytest.param("i", id="i"),
            pytest.param("f", id="f"),
            pytest.param("n", id="n"),
            pytest.param("like", id="like"),
            pytest.param("SQL", id="SQL"),
            pytest.param("d", id="d"),
        ],
    )
    def test_undecodable_bytes_are_recorded(self, pg, modifier):
        with pytest.raises(TranslationError) as exc_info:
            pg.format_value(b"\xff\xfe", modifier)
        assert exc_info.value.errors == [
            f"Invalid combination of type bytes and modifier %{modifier}"
        ]

    def test_undecodable_bytes_in_template(self, pg):
        with pytest.raises(TranslationError) as exc_info:
            pg.translate("SELECT %s", b"\xff\xfe")
        assert exc_info.value.errors == ["Invalid combination of type bytes and modifier %s"]

    def test_undecodable_bytes_in_order_list(self, pg):
        with pytest.raises(TranslationError):
            pg.format_value([b"\xff"], "by")

    def test_decodable_bytes_are_text(self, pg):
        assert pg.format_value(b"abc", "s") == "'abc'"
        assert pg.format_value(b"12", "i") == "12"
        assert pg.format_value(b"\xff", "bin") == "'\\xFF'"


class TestTranslatorLifecycle:
    def test_translator_is_single_use(self, pg):
        translator = Translator(pg)
        assert translator.translate(["SELECT 1"]) == "SELECT 1"
        with pytest.raises(RuntimeError):
            translator.translate(["SELECT 2"])


class TestIdentifierCache:
    def test_stable_output(self, pg):
        first = pg.identifier("schema.table.col")
        assert pg.identifier("schema.table.col") == first == '"schema"."table"."col"'
        assert len(pg.identifier_cache) == 1


class TestModuleFunctions:
    def test_translate_with_dialect_name(self):
        assert sqlweave.translate("SELECT %n", "a", dialect="mysql") == "SELECT `a`"

    def test_format_value(self):
        assert sqlweave.format_value("a'b") == "'a''b'"
        assert sqlweave.format_value([1, 2], "in", dialect="sqlite") == "(1, 2)"

    def test_format_value_unknown_modifier(self):
        with pytest.raises(TranslationError):
            sqlweave.format_value(1, "zz")

    def test_unknown_dialect_name(self):
        with pytest.raises(sqlweave.ConfigurationError):
            sqlweave.Context("nosuchdb")


class TestDialectRendering:
    def test_sqlite_offset_only(self, sqlite):
        assert sqlite.translate("SELECT * FROM [t] %lmt %ofs", None, 5) == (
            "SELECT * FROM [t] LIMIT -1 OFFSET 5"
        )

    def test_oracle_fetch_first(self, oracle):
        assert oracle.translate("SELECT * FROM [t] %lmt", 3) == (
            'SELECT * FROM "t" FETCH FIRST 3 ROWS ONLY'
        )

    def test_duckdb_date(self, duckdb):
        assert duckdb.translate("SELECT ?", date(2024, 1, 2)) == "SELECT DATE '2024-01-02'"

    def test_sqlserver_text_literal(self, mssql):
        assert mssql.translate("WHERE [a] = %s", "x") == "WHERE [a] = N'x'"
