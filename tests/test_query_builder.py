"""
Tests for the SQL fragment builders.

Run:
    pytest tests/test_query_builder.py -v
"""

import re
import pytest

from sql_db.exceptions import InvalidArgumentError
from sql_db.query_builder import (
    CompanyFilter,
    JobFilter,
    ParamCollector,
    ParameterizedFragment,
    QueryBuilder,
    quote_identifier,
    sql_for_partial_update,
)

PLACEHOLDER = re.compile(r"\$(\d+)")


def placeholder_numbers(sql: str):
    return [int(n) for n in PLACEHOLDER.findall(sql)]


# ============================================================================
# PARTIAL UPDATE
# ============================================================================

class TestPartialUpdate:
    """Test the SET clause builder."""

    def test_maps_js_names_to_columns(self):
        """Mapped fields use the column name; unmapped ones keep their own."""
        result = sql_for_partial_update(
            {"firstName": "Aliya", "age": 32},
            {"firstName": "first_name"},
        )
        assert result.sql == '"first_name"=$1, "age"=$2'
        assert result.params == ("Aliya", 32)

    def test_identity_fallback_with_empty_mapping(self):
        """An empty mapping quotes every field name verbatim."""
        result = sql_for_partial_update({"city": "New York", "country": "USA"}, {})
        assert result.sql == '"city"=$1, "country"=$2'
        assert result.params == ("New York", "USA")

    def test_mapping_is_optional(self):
        """Leaving out the mapping behaves like an empty one."""
        assert sql_for_partial_update({"city": "Oslo"}) == ('"city"=$1', ("Oslo",))

    def test_empty_fields_rejected(self):
        """Nothing to update is a usage error."""
        with pytest.raises(InvalidArgumentError):
            sql_for_partial_update({}, {"firstName": "first_name"})

    def test_empty_pair_sequence_rejected(self):
        """An empty sequence of pairs is rejected the same way."""
        with pytest.raises(InvalidArgumentError):
            sql_for_partial_update([], {})

    def test_invalid_argument_is_value_error(self):
        """Callers that catch ValueError also see the builder's error."""
        with pytest.raises(ValueError):
            sql_for_partial_update({})

    def test_pair_sequence_keeps_given_order(self):
        """Explicit pairs are emitted in exactly the order supplied."""
        result = sql_for_partial_update(
            [("salary", 10), ("equity", "0.5"), ("title", "Dev")],
            {},
        )
        assert result.sql == '"salary"=$1, "equity"=$2, "title"=$3'
        assert result.params == (10, "0.5", "Dev")

    def test_duplicate_pair_names_rejected(self):
        """A field named twice is not merged silently."""
        with pytest.raises(InvalidArgumentError, match="salary"):
            sql_for_partial_update([("salary", 1), ("salary", 2)], {})

    def test_values_passed_through_untouched(self):
        """None and other values reach the params without coercion."""
        marker = object()
        result = sql_for_partial_update({"salary": None, "equity": marker}, {})
        assert result.params[0] is None
        assert result.params[1] is marker

    def test_placeholders_align_with_params(self):
        """Placeholder i refers to the i-th field in iteration order."""
        fields = {f"field_{i}": i * 10 for i in range(1, 8)}
        result = sql_for_partial_update(fields, {"field_3": "third"})
        assert placeholder_numbers(result.sql) == list(range(1, 8))
        assert result.params == tuple(fields.values())
        assert '"third"=$3' in result.sql

    def test_caller_appends_next_placeholder(self):
        """The key placeholder for the WHERE clause is len(params) + 1."""
        result = sql_for_partial_update({"salary": 10, "equity": "0.5"}, {})
        assert len(result.params) + 1 == 3

    def test_values_never_in_sql_text(self):
        """Malicious values stay in the parameter list."""
        payload = "x'; DROP TABLE jobs; --"
        result = sql_for_partial_update({"title": payload}, {})
        assert payload not in result.sql
        assert result.params == (payload,)

    def test_column_quotes_are_escaped(self):
        """Embedded double quotes in a column name are doubled."""
        result = sql_for_partial_update({"odd": 1}, {"odd": 'we"ird'})
        assert result.sql == '"we""ird"=$1'

    def test_mapping_not_mutated(self):
        """The mapping is read-only lookup metadata."""
        mapping = {"numEmployees": "num_employees"}
        sql_for_partial_update({"numEmployees": 5, "name": "x"}, mapping)
        assert mapping == {"numEmployees": "num_employees"}

    def test_idempotent(self):
        """Identical inputs produce identical output."""
        fields = {"numEmployees": 5, "logoUrl": "http://a"}
        mapping = {"numEmployees": "num_employees", "logoUrl": "logo_url"}
        assert sql_for_partial_update(fields, mapping) == sql_for_partial_update(fields, mapping)


# ============================================================================
# COMPANY FILTERS
# ============================================================================

class TestCompanyFilter:
    """Test the company WHERE clause builder."""

    def test_no_filters(self):
        """No filters means an empty fragment and no params."""
        result = QueryBuilder.build_company_where(CompanyFilter())
        assert result.sql == ""
        assert result.params == ()
        assert result.is_empty
        assert result.as_where() == ""

    def test_name_like(self):
        """nameLike becomes a case-insensitive contains match."""
        result = QueryBuilder.build_company_where(CompanyFilter(name_like="net"))
        assert result.sql == "name ILIKE $1"
        assert result.params == ("%net%",)

    def test_empty_name_ignored(self):
        """An empty name string does not filter."""
        result = QueryBuilder.build_company_where(CompanyFilter(name_like=""))
        assert result.is_empty

    def test_all_filters_in_fixed_order(self):
        """Predicates appear as name, min, max regardless of how they were given."""
        result = QueryBuilder.build_company_where(
            CompanyFilter(max_employees=300, min_employees=10, name_like="c")
        )
        assert result.sql == "name ILIKE $1 AND num_employees >= $2 AND num_employees <= $3"
        assert result.params == ("%c%", 10, 300)
        assert result.as_where() == " WHERE " + result.sql

    def test_zero_minimum_is_applied(self):
        """A bound of 0 is a real bound, not an absent one."""
        result = QueryBuilder.build_company_where(CompanyFilter(min_employees=0))
        assert result.sql == "num_employees >= $1"
        assert result.params == (0,)

    def test_max_only(self):
        result = QueryBuilder.build_company_where(CompanyFilter(max_employees=2))
        assert result.sql == "num_employees <= $1"
        assert result.params == (2,)

    def test_inverted_range_not_revalidated(self):
        """min > max is rejected upstream; the builder just emits both predicates."""
        result = QueryBuilder.build_company_where(CompanyFilter(min_employees=5, max_employees=1))
        assert result.params == (5, 1)

    def test_start_offset(self):
        """Numbering can continue after parameters the caller already holds."""
        result = QueryBuilder.build_company_where(
            CompanyFilter(name_like="a", min_employees=1), start=4
        )
        assert result.sql == "name ILIKE $4 AND num_employees >= $5"
        assert result.params == ("%a%", 1)


# ============================================================================
# JOB FILTERS
# ============================================================================

class TestJobFilter:
    """Test the job WHERE clause builder."""

    def test_no_filters(self):
        result = QueryBuilder.build_job_where(JobFilter())
        assert result == ParameterizedFragment("", ())

    def test_title_and_min_salary(self):
        """title and minSalary combine with AND in fixed order."""
        result = QueryBuilder.build_job_where(JobFilter(title="en", min_salary=2))
        assert result.sql == "title ILIKE $1 AND salary >= $2"
        assert result.params == ("%en%", 2)

    def test_has_equity_true(self):
        """hasEquity=true adds a parameterless predicate."""
        result = QueryBuilder.build_job_where(JobFilter(has_equity=True))
        assert result.sql == "equity > 0"
        assert result.params == ()

    def test_has_equity_false_ignored(self):
        """hasEquity=false is the same as leaving it out."""
        assert QueryBuilder.build_job_where(JobFilter(has_equity=False)) == \
            QueryBuilder.build_job_where(JobFilter())

    def test_has_equity_does_not_consume_placeholder(self):
        """The equity predicate leaves numbering untouched for later predicates."""
        result = QueryBuilder.build_job_where(
            JobFilter(title="dev", min_salary=100, has_equity=True)
        )
        assert result.sql == "title ILIKE $1 AND salary >= $2 AND equity > 0"
        assert result.params == ("%dev%", 100)
        assert len(placeholder_numbers(result.sql)) == len(result.params)

    def test_min_salary_only(self):
        result = QueryBuilder.build_job_where(JobFilter(min_salary=0))
        assert result.sql == "salary >= $1"
        assert result.params == (0,)

    def test_start_offset(self):
        result = QueryBuilder.build_job_where(JobFilter(min_salary=3, has_equity=True), start=2)
        assert result.sql == "salary >= $2 AND equity > 0"

    def test_title_value_never_in_sql_text(self):
        payload = "%' OR 1=1 --"
        result = QueryBuilder.build_job_where(JobFilter(title=payload))
        assert payload not in result.sql
        assert result.params == (f"%{payload}%",)

    def test_idempotent(self):
        filters = JobFilter(title="en", min_salary=2, has_equity=True)
        first = QueryBuilder.build_job_where(filters)
        second = QueryBuilder.build_job_where(filters)
        assert first == second


# ============================================================================
# SHARED HELPERS
# ============================================================================

class TestHelpers:
    """Test placeholder bookkeeping and identifier quoting."""

    def test_collector_numbers_from_start(self):
        collector = ParamCollector(start=3)
        assert collector.add("a") == "$3"
        assert collector.add("b") == "$4"
        assert collector.fragment("x").params == ("a", "b")

    def test_collector_rejects_start_below_one(self):
        with pytest.raises(InvalidArgumentError):
            ParamCollector(start=0)

    def test_fragment_is_immutable(self):
        fragment = ParameterizedFragment("a = $1", (1,))
        with pytest.raises(AttributeError):
            fragment.sql = "b"

    def test_quote_identifier(self):
        assert quote_identifier("num_employees") == '"num_employees"'
