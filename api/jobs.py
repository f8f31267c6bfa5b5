"""
Job data access.

Jobs are addressed by title. Functions take an acquired connection and
return dicts keyed by camelCase field names.
"""

import asyncpg
from typing import Any, Dict, List
from api.errors import BadRequestError, NotFoundError
from sql_db.query_builder import JobFilter, QueryBuilder, sql_for_partial_update
from logging_config.logger import get_logger

logger = get_logger(__name__)

JOB_FIELDS = """title,
                salary,
                equity,
                company_handle AS "companyHandle\""""

JOB_COLUMN_MAP = {
    "companyHandle": "company_handle",
}


async def create_job(db: asyncpg.Connection, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a job.

    Args:
        data: { title, salary, equity, companyHandle }

    Returns:
        dict: { title, salary, equity, companyHandle }

    Raises:
        BadRequestError: If the company already lists a job with this title,
            or the company does not exist
    """
    title = data["title"]
    company_handle = data["companyHandle"]

    duplicate = await db.fetchrow(
        """SELECT title, company_handle
           FROM jobs
           WHERE title = $1 AND company_handle = $2""",
        title,
        company_handle
    )
    if duplicate:
        raise BadRequestError(f"Duplicate job: {title} at {company_handle}")

    try:
        row = await db.fetchrow(
            f"""INSERT INTO jobs
                (title, salary, equity, company_handle)
                VALUES ($1, $2, $3, $4)
                RETURNING {JOB_FIELDS}""",
            title,
            data.get("salary"),
            data.get("equity"),
            company_handle,
        )
    except asyncpg.ForeignKeyViolationError as e:
        logger.error(f"Job creation failed - unknown company {company_handle}: {e}")
        raise BadRequestError(f"No company: {company_handle}") from e

    logger.info(f"Created job {title} at {company_handle}")
    return dict(row)


async def find_all_jobs(db: asyncpg.Connection, filters: JobFilter) -> List[Dict[str, Any]]:
    """
    List jobs matching the filters, ordered by title.

    Args:
        db: Database connection
        filters: Validated JobFilter
    """
    where = QueryBuilder.build_job_where(filters)
    rows = await db.fetch(
        f"""SELECT {JOB_FIELDS}
            FROM jobs{where.as_where()}
            ORDER BY title""",
        *where.params
    )
    logger.debug(f"Found {len(rows)} jobs")
    return [dict(row) for row in rows]


async def get_job(db: asyncpg.Connection, title: str) -> Dict[str, Any]:
    """
    Get a job by title.

    Raises:
        NotFoundError: If no job has this title
    """
    row = await db.fetchrow(
        f"""SELECT {JOB_FIELDS}
            FROM jobs
            WHERE title = $1""",
        title
    )
    if not row:
        logger.debug(f"Job not found: {title}")
        raise NotFoundError(f"No job: {title}")
    return dict(row)


async def update_job(db: asyncpg.Connection, title: str, data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Partially update the jobs with this title; only the supplied fields change.

    Titles are unique per company, not globally, so several rows can match.

    Returns:
        list: Every updated job, ordered by company handle

    Raises:
        InvalidArgumentError: If data is empty
        NotFoundError: If no job has this title
    """
    set_clause = sql_for_partial_update(data, JOB_COLUMN_MAP)
    title_idx = len(set_clause.params) + 1

    rows = await db.fetch(
        f"""UPDATE jobs
            SET {set_clause.sql}
            WHERE title = ${title_idx}
            RETURNING {JOB_FIELDS}""",
        *set_clause.params,
        title
    )
    if not rows:
        raise NotFoundError(f"No job: {title}")

    logger.info(f"Updated {len(rows)} job(s) titled {title}: {', '.join(data)}")
    return sorted((dict(row) for row in rows), key=lambda job: job["companyHandle"])


async def remove_job(db: asyncpg.Connection, title: str) -> List[Dict[str, Any]]:
    """
    Delete every job with this title.

    Returns:
        list: { title, companyHandle } of each deleted job

    Raises:
        NotFoundError: If no job has this title
    """
    rows = await db.fetch(
        """DELETE
           FROM jobs
           WHERE title = $1
           RETURNING title, company_handle AS "companyHandle\"""",
        title
    )
    if not rows:
        raise NotFoundError(f"No job: {title}")

    logger.info(f"Removed {len(rows)} job(s) titled {title}")
    return [dict(row) for row in rows]
