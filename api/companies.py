"""
Company data access.

Each function takes an acquired connection (see api.db_postgres.get_db) and
returns plain dicts keyed by the API's camelCase field names.
"""

import asyncpg
from typing import Any, Dict, List
from api.errors import BadRequestError, ConflictError, NotFoundError
from sql_db.query_builder import CompanyFilter, QueryBuilder, sql_for_partial_update
from logging_config.logger import get_logger

logger = get_logger(__name__)

COMPANY_FIELDS = """handle,
                    name,
                    description,
                    num_employees AS "numEmployees",
                    logo_url AS "logoUrl\""""

# API field name -> column name, for partial updates
COMPANY_COLUMN_MAP = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}


async def create_company(db: asyncpg.Connection, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a company.

    Args:
        db: Database connection
        data: { handle, name, description, numEmployees, logoUrl }

    Returns:
        dict: { handle, name, description, numEmployees, logoUrl }

    Raises:
        BadRequestError: If the handle is already taken
        ConflictError: If another company already has this name
    """
    handle = data["handle"]
    duplicate = await db.fetchrow(
        "SELECT handle FROM companies WHERE handle = $1",
        handle
    )
    if duplicate:
        raise BadRequestError(f"Duplicate company: {handle}")

    try:
        row = await db.fetchrow(
            f"""INSERT INTO companies
                (handle, name, description, num_employees, logo_url)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {COMPANY_FIELDS}""",
            handle,
            data["name"],
            data["description"],
            data.get("numEmployees"),
            data.get("logoUrl"),
        )
    except asyncpg.UniqueViolationError as e:
        logger.error(f"Company creation failed for {handle} - unique violation: {e}")
        raise ConflictError(f"Company name already in use: {data['name']}") from e

    logger.info(f"Created company: {handle}")
    return dict(row)


async def find_all_companies(db: asyncpg.Connection, filters: CompanyFilter) -> List[Dict[str, Any]]:
    """
    List companies matching the filters, ordered by name.

    Args:
        db: Database connection
        filters: Validated CompanyFilter (min_employees <= max_employees already checked)
    """
    where = QueryBuilder.build_company_where(filters)
    rows = await db.fetch(
        f"""SELECT {COMPANY_FIELDS}
            FROM companies{where.as_where()}
            ORDER BY name""",
        *where.params
    )
    logger.debug(f"Found {len(rows)} companies")
    return [dict(row) for row in rows]


async def get_company(db: asyncpg.Connection, handle: str) -> Dict[str, Any]:
    """
    Get a company along with its jobs.

    Returns:
        dict: { handle, name, description, numEmployees, logoUrl, jobs }
            where jobs is [{ id, title, salary, equity }, ...]

    Raises:
        NotFoundError: If no company has this handle
    """
    row = await db.fetchrow(
        f"""SELECT {COMPANY_FIELDS}
            FROM companies
            WHERE handle = $1""",
        handle
    )
    if not row:
        logger.debug(f"Company not found: {handle}")
        raise NotFoundError(f"No company: {handle}")

    company = dict(row)
    job_rows = await db.fetch(
        """SELECT id, title, salary, equity
           FROM jobs
           WHERE company_handle = $1
           ORDER BY id""",
        handle
    )
    company["jobs"] = [dict(job) for job in job_rows]
    return company


async def update_company(db: asyncpg.Connection, handle: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Partially update a company; only the supplied fields change.

    Args:
        data: any of { name, description, numEmployees, logoUrl }

    Raises:
        InvalidArgumentError: If data is empty
        NotFoundError: If no company has this handle
        ConflictError: If the new name belongs to another company
    """
    set_clause = sql_for_partial_update(data, COMPANY_COLUMN_MAP)
    handle_idx = len(set_clause.params) + 1

    try:
        row = await db.fetchrow(
            f"""UPDATE companies
                SET {set_clause.sql}
                WHERE handle = ${handle_idx}
                RETURNING {COMPANY_FIELDS}""",
            *set_clause.params,
            handle
        )
    except asyncpg.UniqueViolationError as e:
        logger.error(f"Company update failed for {handle} - unique violation: {e}")
        raise ConflictError(f"Company name already in use: {data.get('name')}") from e

    if not row:
        raise NotFoundError(f"No company: {handle}")

    logger.info(f"Updated company {handle}: {', '.join(data)}")
    return dict(row)


async def remove_company(db: asyncpg.Connection, handle: str) -> List[str]:
    """
    Delete a company (its jobs cascade).

    Returns:
        list: Titles of the jobs removed along with the company

    Raises:
        NotFoundError: If no company has this handle
    """
    async with db.transaction():
        # Locking the company row blocks job inserts for it until the delete commits.
        job_rows = await db.fetch(
            """SELECT j.title
               FROM companies AS c
               LEFT JOIN jobs AS j ON j.company_handle = c.handle
               WHERE c.handle = $1
               FOR UPDATE OF c""",
            handle
        )
        row = await db.fetchrow(
            """DELETE
               FROM companies
               WHERE handle = $1
               RETURNING handle""",
            handle
        )
    if not row:
        raise NotFoundError(f"No company: {handle}")

    titles = [job["title"] for job in job_rows if job["title"] is not None]
    logger.info(f"Removed company {handle} with {len(titles)} jobs")
    return titles
