"""Database module for SQLite operations."""

import sqlite3
import logging

from fitness_connect.config import Config

logger = logging.getLogger(__name__)


def get_connection():
    """Get a database connection with WAL mode enabled."""
    Config.ensure_directories()
    Config.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(Config.DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def init_db():
    """Initialize the database with required tables."""
    with get_connection() as conn:
        cursor = conn.cursor()

        # One stored login per username
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS accounts (
                username TEXT PRIMARY KEY,
                password_encrypted TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS download_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                identifier TEXT NOT NULL,
                activity_id TEXT NOT NULL,
                data_type TEXT NOT NULL,
                file_path TEXT,
                downloaded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_download_history_identifier
            ON download_history(identifier)
        """)

        conn.commit()
        logger.debug("Database initialized successfully")


# Account operations
def save_account(username, password_encrypted):
    """Save or update the stored password of a username."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """INSERT INTO accounts (username, password_encrypted)
               VALUES (?, ?)
               ON CONFLICT(username) DO UPDATE SET
               password_encrypted=excluded.password_encrypted,
               updated_at=CURRENT_TIMESTAMP""",
            (username, password_encrypted)
        )
        conn.commit()


def get_account(username):
    """Get account by username."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM accounts WHERE username = ?", (username,))
        row = cursor.fetchone()
        return dict(row) if row else None


def list_accounts():
    """List all configured accounts."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM accounts ORDER BY username")
        return [dict(row) for row in cursor.fetchall()]


def delete_account(username):
    """Delete the account of a username."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM accounts WHERE username = ?", (username,))
        conn.commit()
        return cursor.rowcount > 0


def has_account(username):
    """Check if a username has a stored account."""
    return get_account(username) is not None


# Download history operations
def add_download_history(identifier, activity_id, data_type, file_path):
    """Add a download history record."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """INSERT INTO download_history
               (identifier, activity_id, data_type, file_path)
               VALUES (?, ?, ?, ?)""",
            (identifier, str(activity_id), data_type, file_path)
        )
        conn.commit()


def get_download_history(identifier=None):
    """Get download history, optionally filtered by session identifier."""
    with get_connection() as conn:
        cursor = conn.cursor()
        if identifier:
            cursor.execute(
                "SELECT * FROM download_history WHERE identifier = ? ORDER BY id DESC",
                (identifier,)
            )
        else:
            cursor.execute("SELECT * FROM download_history ORDER BY id DESC")
        return [dict(row) for row in cursor.fetchall()]
