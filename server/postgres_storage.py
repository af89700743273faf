"""PostgreSQL storage implementation."""

import json
import logging
import os

import psycopg2
from psycopg2.extras import RealDictCursor

from core.config import SNAPSHOT_SENTINEL_KEY
from core.interfaces import Storage

logger = logging.getLogger(__name__)


class PostgresStorage(Storage):
    """PostgreSQL-based storage implementation."""

    def __init__(self, config_file: str = None, db_url: str = None):
        self.config_file = config_file or os.path.expanduser('~/.config/deutschweg/config.json')
        self.db_url = db_url or os.environ.get(
            'DATABASE_URL',
            'postgresql://localhost:5432/deutschweg'
        )
        self._conn = None
        self._initialized = False

    @property
    def conn(self):
        """Lazy connection initialization."""
        if self._conn is None or self._conn.closed:
            self._conn = psycopg2.connect(self.db_url)
            if not self._initialized:
                self._init_db()
                self._initialized = True
        return self._conn

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS kv_state (
                    namespace VARCHAR(255) PRIMARY KEY,
                    state JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS vocabulary_snapshot (
                    key VARCHAR(64) PRIMARY KEY,
                    data JSONB NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
        self._conn.commit()

    def close(self):
        """Close the database connection."""
        if self._conn and not self._conn.closed:
            self._conn.close()

    def load_config(self) -> dict:
        if not os.path.exists(self.config_file):
            return {}
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read config {self.config_file}: {e}")
            return {}
        return config if isinstance(config, dict) else {}

    def load_state(self, namespace: str) -> dict | None:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    "SELECT state FROM kv_state WHERE namespace = %s",
                    (namespace,)
                )
                row = cur.fetchone()
                if row:
                    return row['state']
                return None
        except psycopg2.Error as e:
            logger.error(f"Error loading state: {e}")
            return None

    def save_state(self, state: dict, namespace: str) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO kv_state (namespace, state, updated_at)
                    VALUES (%s, %s, CURRENT_TIMESTAMP)
                    ON CONFLICT (namespace)
                    DO UPDATE SET state = EXCLUDED.state, updated_at = CURRENT_TIMESTAMP
                """, (namespace, json.dumps(state)))
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error saving state: {e}")
            self.conn.rollback()
            raise

    def has_vocabulary_snapshot(self) -> bool:
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    "SELECT 1 FROM vocabulary_snapshot WHERE key = %s",
                    (SNAPSHOT_SENTINEL_KEY,)
                )
                return cur.fetchone() is not None
        except psycopg2.Error as e:
            logger.error(f"Error checking vocabulary snapshot: {e}")
            return False

    def save_vocabulary_snapshot(self, snapshot: dict) -> None:
        """Write every record in one transaction so the sentinel never
        exists without the data."""
        try:
            with self.conn.cursor() as cur:
                for key, data in snapshot.items():
                    cur.execute("""
                        INSERT INTO vocabulary_snapshot (key, data)
                        VALUES (%s, %s)
                        ON CONFLICT (key) DO UPDATE SET data = EXCLUDED.data
                    """, (key, json.dumps(data)))
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error saving vocabulary snapshot: {e}")
            self.conn.rollback()
            raise
