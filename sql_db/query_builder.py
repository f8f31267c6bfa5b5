"""
SQL fragment builders for partial updates and filtered listings.

Every builder returns a ParameterizedFragment: SQL text using PostgreSQL
positional placeholders ($1, $2, ...) plus the parameter values in matching
order. Values never reach the SQL text; only column names do, and those are
quoted.
"""
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union
from logging_config.logger import get_logger
from sql_db.exceptions import InvalidArgumentError

logger = get_logger(__name__)

FieldSet = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


class ParameterizedFragment(NamedTuple):
    """SQL text with $n placeholders and the values bound to them."""
    sql: str
    params: Tuple[Any, ...]

    @property
    def is_empty(self) -> bool:
        return not self.sql

    def as_where(self) -> str:
        """Render as a WHERE clause, or nothing when no predicate applies."""
        return f" WHERE {self.sql}" if self.sql else ""


class ParamCollector:
    """
    Accumulates positional parameters and hands out matching placeholders.

    Placeholders are numbered contiguously from `start`, so a fragment built
    with start=n can follow n - 1 parameters the caller already holds.
    """

    def __init__(self, start: int = 1):
        if start < 1:
            raise InvalidArgumentError(f"Placeholder numbering must start at 1 or above, got {start}")
        self.start = start
        self.params: List[Any] = []

    def add(self, value: Any) -> str:
        """Record a value and return the placeholder that refers to it."""
        self.params.append(value)
        return f"${self.start + len(self.params) - 1}"

    def fragment(self, sql: str) -> ParameterizedFragment:
        return ParameterizedFragment(sql, tuple(self.params))


def quote_identifier(name: str) -> str:
    """Double-quote a column name, doubling any embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


def _field_pairs(fields: FieldSet) -> List[Tuple[str, Any]]:
    if isinstance(fields, Mapping):
        return list(fields.items())

    pairs = [(name, value) for name, value in fields]
    seen = set()
    for name, _ in pairs:
        if name in seen:
            raise InvalidArgumentError(f"Field supplied more than once: {name}")
        seen.add(name)
    return pairs


def sql_for_partial_update(
    fields: FieldSet,
    column_map: Optional[Mapping[str, str]] = None
) -> ParameterizedFragment:
    """
    Build the SET portion of an UPDATE statement for the supplied fields only.

    Args:
        fields: Field name -> new value, either a mapping (insertion order)
            or a sequence of (name, value) pairs
        column_map: Field name -> column name; unmapped fields use their own name

    Returns:
        ParameterizedFragment such as ('"first_name"=$1, "age"=$2', ('Aliya', 32)).
        Further placeholders for the caller start at len(params) + 1.

    Raises:
        InvalidArgumentError: If there is nothing to update

    Example:
        >>> sql_for_partial_update({"firstName": "Aliya", "age": 32}, {"firstName": "first_name"})
        ParameterizedFragment(sql='"first_name"=$1, "age"=$2', params=('Aliya', 32))
    """
    pairs = _field_pairs(fields)
    if not pairs:
        raise InvalidArgumentError("No data")

    column_map = column_map or {}
    collector = ParamCollector()
    assignments = []

    for name, value in pairs:
        column = column_map.get(name, name)
        assignments.append(f"{quote_identifier(column)}={collector.add(value)}")

    fragment = collector.fragment(", ".join(assignments))
    logger.debug(f"Partial update SET clause: {fragment.sql}")
    return fragment


# ---------- Filter records ----------

@dataclass(frozen=True)
class CompanyFilter:
    """Validated company search criteria. None means the filter is not applied."""
    name_like: Optional[str] = None
    min_employees: Optional[int] = None
    max_employees: Optional[int] = None


@dataclass(frozen=True)
class JobFilter:
    """
    Validated job search criteria.

    has_equity only narrows the search when it is exactly True; False behaves
    the same as leaving it out.
    """
    title: Optional[str] = None
    min_salary: Optional[int] = None
    has_equity: Optional[bool] = None


def _contains_pattern(value: str) -> str:
    return f"%{value}%"


class QueryBuilder:
    """Helper for building WHERE clauses for listing queries."""

    @staticmethod
    def build_company_where(filters: CompanyFilter, start: int = 1) -> ParameterizedFragment:
        """
        Build the company listing predicate.

        Checked in order: name_like, min_employees, max_employees. The
        min <= max rule is enforced before this point.

        Returns:
            ParameterizedFragment, empty when no filter applies
        """
        collector = ParamCollector(start)
        conditions = []

        if filters.name_like:
            conditions.append(f"name ILIKE {collector.add(_contains_pattern(filters.name_like))}")

        if filters.min_employees is not None:
            conditions.append(f"num_employees >= {collector.add(filters.min_employees)}")

        if filters.max_employees is not None:
            conditions.append(f"num_employees <= {collector.add(filters.max_employees)}")

        fragment = collector.fragment(" AND ".join(conditions))
        logger.debug(f"Company filter: {fragment.sql or '<none>'} params={len(fragment.params)}")
        return fragment

    @staticmethod
    def build_job_where(filters: JobFilter, start: int = 1) -> ParameterizedFragment:
        """
        Build the job listing predicate.

        Checked in order: title, min_salary, has_equity.

        Returns:
            ParameterizedFragment, empty when no filter applies
        """
        collector = ParamCollector(start)
        conditions = []

        if filters.title:
            conditions.append(f"title ILIKE {collector.add(_contains_pattern(filters.title))}")

        if filters.min_salary is not None:
            conditions.append(f"salary >= {collector.add(filters.min_salary)}")

        # No parameter: the predicate is fixed
        if filters.has_equity is True:
            conditions.append("equity > 0")

        fragment = collector.fragment(" AND ".join(conditions))
        logger.debug(f"Job filter: {fragment.sql or '<none>'} params={len(fragment.params)}")
        return fragment
