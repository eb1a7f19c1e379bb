"""
SQLite access for the finance tracker.

A DatabaseManager owns one connection. Repositories read through
get_connection() and write inside transaction(); initialize() brings a
new database file up to the bundled schema.
"""
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import structlog

logger = structlog.get_logger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"
DEFAULT_DB_PATH = "data/finance.db"


class DatabaseConfig:
    """Location of the database file"""

    def __init__(self, db_path: Path | str = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "DatabaseConfig":
        """Build from settings.json, falling back to data/finance.db"""
        return cls(settings.get("database_path", DEFAULT_DB_PATH))


def schema_version(conn: sqlite3.Connection) -> Optional[int]:
    """Latest applied schema version, or None if the schema was never applied"""
    try:
        row = conn.execute("SELECT MAX(version) AS version FROM schema_version").fetchone()
    except sqlite3.OperationalError:
        return None
    return row["version"] if row else None


class DatabaseManager:
    """
    Owns the SQLite connection for one database file.

    Usage:
        with DatabaseManager(DatabaseConfig("data/finance.db")) as db:
            db.initialize()
            with db.transaction() as conn:
                conn.execute("INSERT INTO ...")
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._connection: Optional[sqlite3.Connection] = None

    def get_connection(self) -> sqlite3.Connection:
        """Open the database on first use, creating its directory if needed"""
        if self._connection is None:
            self.config.db_path.parent.mkdir(parents=True, exist_ok=True)
            # Dates and amounts are stored as text and parsed by the repositories
            conn = sqlite3.connect(str(self.config.db_path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            self._connection = conn
        return self._connection

    def initialize(self, schema_path: Path = SCHEMA_PATH) -> int:
        """
        Apply the schema if this database has none yet.

        A database that already carries a schema version is left untouched.

        Returns:
            The schema version now in effect
        """
        conn = self.get_connection()
        version = schema_version(conn)
        if version is not None:
            return version

        conn.executescript(schema_path.read_text())
        conn.commit()
        version = schema_version(conn)
        logger.info("database_initialized", path=str(self.config.db_path), schema_version=version)
        return version

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit what the block does, or roll all of it back if it raises"""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
