"""Database helpers for the report and business tables."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

import psycopg2
from psycopg2 import extras, pool

from brand_equity.core.config import get_settings
from brand_equity.core.errors import MergeDepthError
from brand_equity.etl.merge import deep_merge

logger = logging.getLogger(__name__)

# What the helpers below raise: driver failures, missing rows, an unset
# DATABASE_URL and merge inputs nested too deep.
PERSISTENCE_ERRORS = (psycopg2.Error, LookupError, RuntimeError, MergeDepthError)

_connection_pool: Optional[pool.SimpleConnectionPool] = None


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


_SELECT_ANALYSIS = "SELECT analysis_data FROM brand_reports WHERE id = %(report_id)s;"

_UPDATE_ANALYSIS = """
UPDATE brand_reports
SET analysis_data = %(analysis_data)s,
    updated_at = NOW()
WHERE id = %(report_id)s;
"""

_UPDATE_PROPERTY_ID = """
UPDATE businesses
SET google_analytics_property_id = %(property_id)s,
    updated_at = NOW()
WHERE id = %(business_id)s;
"""


def _read_analysis(cur, report_id: str) -> Dict[str, Any]:
    cur.execute(_SELECT_ANALYSIS, {"report_id": report_id})
    row = cur.fetchone()
    if row is None:
        raise LookupError(f"brand report {report_id} not found")
    return row[0] or {}


def fetch_report_analysis(report_id: str) -> Dict[str, Any]:
    """Return the ``analysis_data`` blob of a report (empty dict when unset)."""
    with get_connection() as conn:
        with conn.cursor() as cur:
            return _read_analysis(cur, report_id)


def save_report_analysis(report_id: str, analysis_data: Dict[str, Any]) -> None:
    """Overwrite ``analysis_data`` for a report."""
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(_UPDATE_ANALYSIS, {"report_id": report_id, "analysis_data": extras.Json(analysis_data)})
        conn.commit()


def merge_report_analysis(report_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``patch`` into a report's ``analysis_data`` and persist the result.

    Read, merge and write happen on one connection without row locking, so two
    concurrent merges on the same report can lose one side's update.
    """
    with get_connection() as conn:
        try:
            with conn.cursor() as cur:
                existing = _read_analysis(cur, report_id)
                merged = deep_merge(existing, patch)
                cur.execute(_UPDATE_ANALYSIS, {"report_id": report_id, "analysis_data": extras.Json(merged)})
            conn.commit()
        except (psycopg2.Error, LookupError, MergeDepthError):
            conn.rollback()
            raise
    logger.debug("Merged keys %s into report %s", sorted(patch), report_id)
    return merged


def set_business_analytics_property(business_id: str, property_id: str) -> None:
    """Persist a discovered GA4 property id on the business row."""
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(_UPDATE_PROPERTY_ID, {"business_id": business_id, "property_id": property_id})
            updated = cur.rowcount
        conn.commit()
    if updated == 0:
        raise LookupError(f"business {business_id} not found")
    logger.info("Stored GA4 property %s for business %s", property_id, business_id)
