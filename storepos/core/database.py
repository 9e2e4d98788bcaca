"""
PostgreSQL connection helpers

All repositories get their connections from here so that timeouts and
retry behaviour are configured in a single place.

Author: TM3
Updated: 2026-10-12
"""
import time
import logging

import psycopg2
from psycopg2.extras import RealDictCursor

from .config import settings

logger = logging.getLogger(__name__)

# Seconds psycopg2 waits for the server before giving up on a connect
CONNECTION_TIMEOUT = settings.DB_CONNECT_TIMEOUT


def _database_url() -> str:
    database_url = settings.DATABASE_URL
    if not database_url:
        raise Exception("DATABASE_URL not configured")
    return database_url


def _connect_with_retry(max_retries: int, retry_delay: float, **connect_kwargs):
    database_url = _database_url()
    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            conn = psycopg2.connect(
                database_url,
                connect_timeout=CONNECTION_TIMEOUT,
                **connect_kwargs
            )

            # Test connection with a simple query
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()

            logger.debug(f"Database connection successful on attempt {attempt}")
            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {e}")

            if attempt < max_retries:
                # Exponential backoff
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")
                raise

    raise last_error if last_error else Exception("Connection failed after all retries")


def get_db_connection_with_retry(max_retries=None, retry_delay=None):
    """
    Get a psycopg2 connection with automatic retry on connection failures

    Args:
        max_retries: Maximum number of connection attempts (default: DB_MAX_RETRIES)
        retry_delay: Initial delay between retries in seconds (default: DB_RETRY_DELAY)

    Returns:
        psycopg2 connection object

    Raises:
        psycopg2.OperationalError: If all retry attempts fail
    """
    return _connect_with_retry(
        max_retries or settings.DB_MAX_RETRIES,
        retry_delay if retry_delay is not None else settings.DB_RETRY_DELAY,
    )


def get_db_connection_dict_with_retry(max_retries=None, retry_delay=None):
    """
    Same as get_db_connection_with_retry but returns dicts instead of tuples.
    """
    return _connect_with_retry(
        max_retries or settings.DB_MAX_RETRIES,
        retry_delay if retry_delay is not None else settings.DB_RETRY_DELAY,
        cursor_factory=RealDictCursor,
    )
