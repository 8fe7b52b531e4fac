import logging
import random
import time
from pathlib import Path
from typing import Optional

import duckdb
import pandas as pd

logger = logging.getLogger(__name__)


def connect_with_retry(
    db_path: str, read_only: bool = True, max_retries: int = 3
) -> duckdb.DuckDBPyConnection:
    """
    Open a DuckDB connection, backing off while another process holds the lock.

    Args:
        db_path: Path to DuckDB file, or ':memory:'
        read_only: Open read-only when the file already exists
        max_retries: Maximum number of connection attempts

    Returns:
        DuckDB connection
    """
    for attempt in range(max_retries):
        try:
            if read_only and db_path != ":memory:" and Path(db_path).exists():
                conn = duckdb.connect(db_path, read_only=True)
                logger.debug(f"Opened read-only connection to {db_path}")
            else:
                conn = duckdb.connect(db_path)
                logger.debug(f"Opened read-write connection to {db_path}")
            return conn
        except duckdb.IOException as e:
            if "Conflicting lock" in str(e) and attempt < max_retries - 1:
                wait_time = (2**attempt) + random.uniform(0, 1)  # nosec B311
                logger.warning(
                    f"Database locked, retrying in {wait_time:.2f}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(wait_time)
                continue
            logger.error(
                f"Failed to connect to database after {attempt + 1} attempts: {e}"
            )
            raise

    raise duckdb.IOException(
        f"Could not establish database connection after {max_retries} attempts"
    )


class BallotDatabase:
    """
    DuckDB store holding the normalized ballot tables.

    Expects a `candidates` table (candidate_id, candidate_name) and a
    `ballots_long` table with one row per ranked choice
    (BallotID, candidate_name, rank_position).
    """

    def __init__(self, db_path: Optional[str] = None, read_only: bool = True):
        """
        Args:
            db_path: Path to DuckDB file. If None, uses an in-memory database.
            read_only: Whether to open existing files read-only
        """
        self.db_path = db_path or ":memory:"
        self.read_only = read_only
        self._conn = None

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        """Get or create the connection on demand."""
        if self._conn is None:
            self._conn = connect_with_retry(self.db_path, self.read_only)
        return self._conn

    def query(self, sql: str, params: Optional[list] = None) -> pd.DataFrame:
        """Execute a SQL query and return the results as a DataFrame."""
        if params:
            return self.conn.execute(sql, params).fetchdf()
        return self.conn.execute(sql).fetchdf()

    def table_exists(self, table_name: str) -> bool:
        result = self.conn.execute(
            "SELECT COUNT(*) FROM information_schema.tables WHERE table_name = ?",
            [table_name],
        ).fetchone()
        return result[0] > 0

    def create_ballot_tables(self):
        """Create empty candidates and ballots_long tables."""
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS candidates (
                candidate_id INTEGER,
                candidate_name TEXT
            )
        """
        )
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS ballots_long (
                BallotID TEXT,
                candidate_id INTEGER,
                candidate_name TEXT,
                rank_position INTEGER
            )
        """
        )
        logger.info("Created ballot tables")

    def close(self):
        """Close database connection."""
        if self._conn:
            try:
                self._conn.close()
                logger.debug(f"Closed database connection to {self.db_path}")
            except Exception as e:
                logger.warning(f"Error closing database connection: {e}")
            finally:
                self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
