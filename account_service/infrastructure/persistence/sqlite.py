import logging
import sqlite3
import threading
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ...domain.errors import DuplicateError, ServerError
from ...domain.models import User, UserRole, UserStatus
from ...domain.ports.persistence import UserRepository

logger = logging.getLogger(__name__)

_UPDATABLE_COLUMNS = frozenset(
    {
        "password_hash",
        "first_name",
        "last_name",
        "phone",
        "date_of_birth",
        "profile_image_url",
        "role",
        "status",
        "is_email_verified",
        "email_verification_token",
        "email_verification_expires",
        "password_reset_token",
        "password_reset_expires",
        "last_login_at",
    }
)


class SQLiteUserRepository(UserRepository):
    """SQLite-backed implementation of the user repository."""

    def __init__(self, path: Path) -> None:
        if str(path) != ":memory:":
            path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._lock, self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    first_name TEXT NOT NULL,
                    last_name TEXT NOT NULL,
                    phone TEXT,
                    date_of_birth TEXT,
                    profile_image_url TEXT,
                    role TEXT NOT NULL DEFAULT 'CLIENT',
                    status TEXT NOT NULL DEFAULT 'ACTIVE',
                    is_email_verified INTEGER NOT NULL DEFAULT 0,
                    email_verification_token TEXT,
                    email_verification_expires TEXT,
                    password_reset_token TEXT,
                    password_reset_expires TEXT,
                    last_login_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_users_email_verification_token
                    ON users(email_verification_token);

                CREATE INDEX IF NOT EXISTS idx_users_password_reset_token
                    ON users(password_reset_token);
                """
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # Queries ----------------------------------------------------------------
    def find_by_email(self, email: str) -> Optional[User]:
        return self._fetch_one("SELECT * FROM users WHERE email = ?", (email,))

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))

    def find_by_verification_token(self, token: str, now: datetime) -> Optional[User]:
        return self._fetch_one(
            """
            SELECT * FROM users
            WHERE email_verification_token = ? AND email_verification_expires > ?
            """,
            (token, self._format_datetime(now)),
        )

    def find_by_reset_token(self, token: str, now: datetime) -> Optional[User]:
        return self._fetch_one(
            """
            SELECT * FROM users
            WHERE password_reset_token = ? AND password_reset_expires > ?
            """,
            (token, self._format_datetime(now)),
        )

    # Mutations --------------------------------------------------------------
    def create(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        date_of_birth: Optional[date] = None,
        profile_image_url: Optional[str] = None,
        role: UserRole = UserRole.CLIENT,
        status: UserStatus = UserStatus.ACTIVE,
        is_email_verified: bool = False,
        email_verification_token: Optional[str] = None,
        email_verification_expires: Optional[datetime] = None,
    ) -> User:
        user_id = uuid.uuid4().hex
        now = self._now()
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    """
                    INSERT INTO users (
                        id, email, password_hash, first_name, last_name, phone,
                        date_of_birth, profile_image_url, role, status,
                        is_email_verified, email_verification_token,
                        email_verification_expires, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user_id,
                        email,
                        password_hash,
                        first_name,
                        last_name,
                        phone,
                        self._to_db(date_of_birth),
                        profile_image_url,
                        role.value,
                        status.value,
                        int(is_email_verified),
                        email_verification_token,
                        self._to_db(email_verification_expires),
                        now,
                        now,
                    ),
                )
                row = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        except sqlite3.IntegrityError as exc:
            raise DuplicateError() from exc
        except sqlite3.Error as exc:
            logger.exception("Failed to persist user.")
            raise ServerError() from exc
        if not row:
            raise ServerError("Failed to persist user.")
        return self._row_to_user(row)

    def update(
        self,
        user_id: str,
        changes: Dict[str, Any],
        *,
        expected: Optional[Dict[str, Any]] = None,
    ) -> Optional[User]:
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if expected:
            unknown |= set(expected) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown user columns: {', '.join(sorted(unknown))}")

        assignments = [f"{column} = ?" for column in changes]
        params = [self._to_db(value) for value in changes.values()]
        assignments.append("updated_at = ?")
        params.append(self._now())

        conditions = ["id = ?"]
        params.append(user_id)
        for column, value in (expected or {}).items():
            if value is None:
                conditions.append(f"{column} IS NULL")
            else:
                conditions.append(f"{column} = ?")
                params.append(self._to_db(value))

        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    f"UPDATE users SET {', '.join(assignments)} WHERE {' AND '.join(conditions)}",
                    params,
                )
                if cur.rowcount == 0:
                    return None
                row = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        except sqlite3.Error as exc:
            logger.exception("Failed to update user %s.", user_id)
            raise ServerError() from exc
        return self._row_to_user(row) if row else None

    # Helpers ----------------------------------------------------------------
    def _fetch_one(self, query: str, params: tuple) -> Optional[User]:
        try:
            with self._lock:
                row = self._conn.execute(query, params).fetchone()
        except sqlite3.Error as exc:
            logger.exception("User lookup failed.")
            raise ServerError() from exc
        return self._row_to_user(row) if row else None

    @classmethod
    def _now(cls) -> str:
        return cls._format_datetime(datetime.now(timezone.utc))

    @staticmethod
    def _format_datetime(value: datetime) -> str:
        # Fixed-width UTC text so expiry filters compare lexically in SQL.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="microseconds")

    @classmethod
    def _to_db(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return cls._format_datetime(value)
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, (UserRole, UserStatus)):
            return value.value
        if isinstance(value, bool):
            return int(value)
        return value

    @staticmethod
    def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        result = datetime.fromisoformat(value)
        if result.tzinfo is None:
            return result.replace(tzinfo=timezone.utc)
        return result.astimezone(timezone.utc)

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            phone=row["phone"],
            date_of_birth=date.fromisoformat(row["date_of_birth"]) if row["date_of_birth"] else None,
            profile_image_url=row["profile_image_url"],
            role=UserRole(row["role"]),
            status=UserStatus(row["status"]),
            is_email_verified=bool(row["is_email_verified"]),
            email_verification_token=row["email_verification_token"],
            email_verification_expires=self._parse_datetime(row["email_verification_expires"]),
            password_reset_token=row["password_reset_token"],
            password_reset_expires=self._parse_datetime(row["password_reset_expires"]),
            last_login_at=self._parse_datetime(row["last_login_at"]),
            created_at=self._parse_datetime(row["created_at"]),
            updated_at=self._parse_datetime(row["updated_at"]),
        )
