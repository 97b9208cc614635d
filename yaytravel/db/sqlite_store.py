# yaytravel/db/sqlite_store.py

import sqlite3
import json
import time
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional, Dict, Any, List
from uuid import uuid4

from yaytravel.core.config_loader import settings
from yaytravel.core.logger import logger


# Retry configuration
MAX_RETRIES = 5
RETRY_DELAY = 0.1  # 100ms

PLAN_DETAIL_KEYS = ("flights", "companions", "hotels", "restaurants")


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class SQLiteStore:
    def __init__(self, db_path: Optional[str] = None):
        path = Path(db_path or settings.DB_PATH)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = path

        self.conn = sqlite3.connect(
            str(path),
            check_same_thread=False,
            timeout=30.0
        )
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA synchronous=NORMAL")
        self.conn.execute("PRAGMA busy_timeout=30000")
        self.conn.execute("PRAGMA foreign_keys=ON")
        self._init_tables()

    def close(self):
        self.conn.close()

    def _execute_with_retry(self, operation, *args, **kwargs):
        """Execute a write with retries while another writer holds the lock."""
        for attempt in range(MAX_RETRIES):
            try:
                return operation(*args, **kwargs)
            except sqlite3.OperationalError as e:
                if "locked" in str(e).lower() and attempt < MAX_RETRIES - 1:
                    logger.warning(f"Database locked, retry {attempt + 1}/{MAX_RETRIES}")
                    time.sleep(RETRY_DELAY * (attempt + 1))
                    continue
                raise

    # ----------------------------------------------------------------------
    # CREATE TABLES
    # ----------------------------------------------------------------------
    def _init_tables(self):
        cur = self.conn.cursor()

        cur.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT UNIQUE NOT NULL,
            first_name TEXT,
            last_name TEXT,
            phone_number TEXT,
            country TEXT,
            city TEXT,
            hashed_password TEXT NOT NULL,
            created_at TEXT NOT NULL
        );
        """)

        cur.execute("""
        CREATE TABLE IF NOT EXISTS conversations (
            id TEXT PRIMARY KEY,
            user_id INTEGER NOT NULL,
            title TEXT,
            status TEXT NOT NULL DEFAULT 'active',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
        );
        """)

        cur.execute("""
        CREATE TABLE IF NOT EXISTS messages (
            id TEXT PRIMARY KEY,
            conversation_id TEXT NOT NULL,
            role TEXT NOT NULL,
            content TEXT NOT NULL,
            created_at TEXT NOT NULL,
            FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
        );
        """)

        # Not tied to conversations by a foreign key: agents may report
        # against ids this backend has never seen.
        cur.execute("""
        CREATE TABLE IF NOT EXISTS status_updates (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT UNIQUE NOT NULL,
            agent_id TEXT,
            agent_type TEXT,
            conversation_id TEXT NOT NULL,
            update_text TEXT NOT NULL,
            timestamp TEXT NOT NULL
        );
        """)

        cur.execute("""
        CREATE TABLE IF NOT EXISTS trip_plans (
            id TEXT PRIMARY KEY,
            conversation_id TEXT UNIQUE NOT NULL,
            destination TEXT,
            date_start TEXT,
            date_end TEXT,
            participants_json TEXT,
            tasks_json TEXT,
            details_json TEXT,
            status TEXT NOT NULL DEFAULT 'draft',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
        );
        """)

        cur.execute("CREATE INDEX IF NOT EXISTS idx_conv_user ON conversations(user_id);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_msg_conv ON messages(conversation_id);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_status_conv ON status_updates(conversation_id);")

        self.conn.commit()

    # ----------------------------------------------------------------------
    # USERS
    # ----------------------------------------------------------------------
    def create_user(
        self, email: str, hashed_password: str,
        first_name: str = "", last_name: str = "",
        phone_number: str = "",
        country: Optional[str] = None, city: Optional[str] = None
    ) -> int:
        def _create_user():
            cur = self.conn.cursor()
            cur.execute("""
            INSERT INTO users (email, first_name, last_name, phone_number,
                               country, city, hashed_password, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                email, first_name, last_name, phone_number,
                country, city, hashed_password, utcnow_iso()
            ))
            self.conn.commit()
            return cur.lastrowid

        return self._execute_with_retry(_create_user)

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM users WHERE email = ?", (email,))
        row = cur.fetchone()
        return dict(row) if row else None

    def get_user_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
        row = cur.fetchone()
        return dict(row) if row else None

    # ----------------------------------------------------------------------
    # CONVERSATIONS
    # ----------------------------------------------------------------------
    def create_conversation(self, user_id: int, title: str, conversation_id: Optional[str] = None) -> str:
        cid = conversation_id or str(uuid4())

        def _create_conversation():
            now = utcnow_iso()
            cur = self.conn.cursor()
            cur.execute("""
            INSERT INTO conversations (id, user_id, title, status, created_at, updated_at)
            VALUES (?, ?, ?, 'active', ?, ?)
            """, (cid, user_id, title, now, now))
            self.conn.commit()

        self._execute_with_retry(_create_conversation)
        return cid

    def get_conversation(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM conversations WHERE id = ?", (conversation_id,))
        row = cur.fetchone()
        return dict(row) if row else None

    def list_conversations(self, user_id: int, status: Optional[str] = None) -> List[Dict[str, Any]]:
        query = "SELECT * FROM conversations WHERE user_id = ?"
        params: List[Any] = [user_id]
        if status:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY updated_at DESC, created_at DESC, rowid DESC"

        cur = self.conn.cursor()
        cur.execute(query, params)
        return [dict(r) for r in cur.fetchall()]

    def update_conversation(
        self, conversation_id: str,
        title: Optional[str] = None, status: Optional[str] = None
    ):
        def _update_conversation():
            cur = self.conn.cursor()
            cur.execute("""
            UPDATE conversations
            SET title = COALESCE(?, title),
                status = COALESCE(?, status),
                updated_at = ?
            WHERE id = ?
            """, (title, status, utcnow_iso(), conversation_id))
            self.conn.commit()

        self._execute_with_retry(_update_conversation)

    def touch_conversation(self, conversation_id: str, commit: bool = True):
        """Bump updated_at.

        Args:
            conversation_id: The conversation to update
            commit: Set to False when called inside a larger transaction
        """
        cur = self.conn.cursor()
        cur.execute(
            "UPDATE conversations SET updated_at = ? WHERE id = ?",
            (utcnow_iso(), conversation_id),
        )
        if commit:
            self.conn.commit()

    def delete_conversation(self, conversation_id: str):
        def _delete_conversation():
            cur = self.conn.cursor()
            cur.execute("DELETE FROM status_updates WHERE conversation_id = ?", (conversation_id,))
            cur.execute("DELETE FROM conversations WHERE id = ?", (conversation_id,))
            self.conn.commit()

        self._execute_with_retry(_delete_conversation)

    # ----------------------------------------------------------------------
    # MESSAGES
    # ----------------------------------------------------------------------
    def add_message(self, conversation_id: str, role: str, content: str) -> Dict[str, Any]:
        message = {
            "id": str(uuid4()),
            "conversation_id": conversation_id,
            "role": role,
            "content": content,
            "created_at": utcnow_iso(),
        }

        def _add_message():
            cur = self.conn.cursor()
            cur.execute("""
            INSERT INTO messages (id, conversation_id, role, content, created_at)
            VALUES (:id, :conversation_id, :role, :content, :created_at)
            """, message)
            self.touch_conversation(conversation_id, commit=False)
            self.conn.commit()

        self._execute_with_retry(_add_message)
        return message

    def get_messages(self, conversation_id: str) -> List[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute("""
        SELECT * FROM messages
        WHERE conversation_id = ?
        ORDER BY created_at ASC, rowid ASC
        """, (conversation_id,))
        return [dict(r) for r in cur.fetchall()]

    # ----------------------------------------------------------------------
    # STATUS UPDATES
    # ----------------------------------------------------------------------
    def add_status_update(
        self, conversation_id: str, update: str,
        agent_id: str = "", agent_type: str = ""
    ) -> Dict[str, Any]:
        record = {
            "id": uuid4().hex,
            "agent_id": agent_id,
            "agent_type": agent_type,
            "conversation_id": conversation_id,
            "update_text": update,
            "timestamp": utcnow_iso(),
        }

        def _add_status_update():
            cur = self.conn.cursor()
            cur.execute("""
            INSERT INTO status_updates (id, agent_id, agent_type, conversation_id, update_text, timestamp)
            VALUES (:id, :agent_id, :agent_type, :conversation_id, :update_text, :timestamp)
            """, record)
            self.conn.commit()

        self._execute_with_retry(_add_status_update)
        return record

    def get_status_updates(self, conversation_id: str) -> List[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute("""
        SELECT id, agent_id, agent_type, conversation_id, update_text, timestamp
        FROM status_updates
        WHERE conversation_id = ?
        ORDER BY seq ASC
        """, (conversation_id,))
        return [dict(r) for r in cur.fetchall()]

    # ----------------------------------------------------------------------
    # TRIP PLANS
    # ----------------------------------------------------------------------
    def _plan_from_row(self, row: sqlite3.Row) -> Dict[str, Any]:
        plan = {
            "id": row["id"],
            "conversation_id": row["conversation_id"],
            "destination": row["destination"],
            "date_start": row["date_start"],
            "date_end": row["date_end"],
            "participants": json.loads(row["participants_json"] or "[]"),
            "tasks": json.loads(row["tasks_json"] or "[]"),
            "status": row["status"],
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
        details = json.loads(row["details_json"] or "{}")
        for key in PLAN_DETAIL_KEYS:
            plan[key] = details.get(key, [])
        return plan

    def save_trip_plan(self, conversation_id: str, plan: Dict[str, Any]) -> Dict[str, Any]:
        """Insert the plan for a conversation, replacing any previous one."""
        plan_id = str(uuid4())
        details = {key: plan.get(key) or [] for key in PLAN_DETAIL_KEYS}

        def _save_trip_plan():
            now = utcnow_iso()
            cur = self.conn.cursor()
            cur.execute("DELETE FROM trip_plans WHERE conversation_id = ?", (conversation_id,))
            cur.execute("""
            INSERT INTO trip_plans (id, conversation_id, destination, date_start, date_end,
                                    participants_json, tasks_json, details_json,
                                    status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                plan_id,
                conversation_id,
                plan.get("destination", ""),
                plan.get("date_start"),
                plan.get("date_end"),
                json.dumps(plan.get("participants") or []),
                json.dumps(plan.get("tasks") or []),
                json.dumps(details),
                plan.get("status") or "draft",
                now,
                now,
            ))
            self.touch_conversation(conversation_id, commit=False)
            self.conn.commit()

        self._execute_with_retry(_save_trip_plan)
        return self.get_trip_plan(plan_id)

    def get_trip_plan(self, plan_id: str) -> Optional[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM trip_plans WHERE id = ?", (plan_id,))
        row = cur.fetchone()
        return self._plan_from_row(row) if row else None

    def get_trip_plan_for_conversation(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM trip_plans WHERE conversation_id = ?", (conversation_id,))
        row = cur.fetchone()
        return self._plan_from_row(row) if row else None

    def update_trip_plan(self, plan_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        current = self.get_trip_plan(plan_id)
        if not current:
            return None

        merged = {**current, **updates}
        details = {key: merged.get(key) or [] for key in PLAN_DETAIL_KEYS}

        def _update_trip_plan():
            cur = self.conn.cursor()
            cur.execute("""
            UPDATE trip_plans
            SET destination = ?, date_start = ?, date_end = ?,
                participants_json = ?, tasks_json = ?, details_json = ?,
                status = ?, updated_at = ?
            WHERE id = ?
            """, (
                merged["destination"],
                merged["date_start"],
                merged["date_end"],
                json.dumps(merged["participants"]),
                json.dumps(merged["tasks"]),
                json.dumps(details),
                merged["status"],
                utcnow_iso(),
                plan_id,
            ))
            self.touch_conversation(merged["conversation_id"], commit=False)
            self.conn.commit()

        self._execute_with_retry(_update_trip_plan)
        return self.get_trip_plan(plan_id)


@lru_cache()
def get_db() -> SQLiteStore:
    return SQLiteStore()
