"""
User directory clients.

The directory owns user records; this service only reads a user by username
and inserts new users. Two backends share one contract:

- ``RestUserDirectory`` talks to a hosted PostgREST data API (Supabase)
- ``SqlUserDirectory`` talks to a database directly through SQLAlchemy

Username uniqueness is enforced by the store. Insert reports a violation as
``UsernameTaken`` so callers never need a separate existence check.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Union
import logging

import httpx
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .models import User

logger = logging.getLogger(__name__)

# PostgREST: singular response requested but zero rows matched
NO_ROWS_CODE = "PGRST116"
# Postgres: unique_violation
UNIQUE_VIOLATION_CODE = "23505"

SINGLE_OBJECT = "application/vnd.pgrst.object+json"


class DirectoryError(Exception):
    """Failure reported by (or while reaching) the user directory."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class UserNotFound(DirectoryError):
    def __init__(self, username: str):
        super().__init__(f"No user named {username!r}", code=NO_ROWS_CODE)
        self.username = username


class UsernameTaken(DirectoryError):
    def __init__(self, username: str, code: Optional[str] = UNIQUE_VIOLATION_CODE):
        super().__init__(f"Username {username!r} already exists", code=code)
        self.username = username


@dataclass(frozen=True)
class UserRecord:
    id: Union[int, str]
    username: str
    password: str
    created_at: Optional[Union[datetime, str]] = None


class UserDirectory:
    """Contract shared by all directory backends."""

    def find_by_username(self, username: str) -> UserRecord:
        raise NotImplementedError

    def insert(self, username: str, password_hash: str) -> UserRecord:
        raise NotImplementedError

    def close(self) -> None:
        pass


class RestUserDirectory(UserDirectory):
    """Directory backed by a PostgREST endpoint, e.g. ``{SUPABASE_URL}/rest/v1``."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "users",
        timeout: Optional[float] = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        if not base_url or not api_key:
            raise ValueError("base_url and api_key are required for the REST directory")
        self.table_url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self.client = client or httpx.Client(timeout=timeout)
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": SINGLE_OBJECT,
        }

    def find_by_username(self, username: str) -> UserRecord:
        params = {
            "select": "id,username,password,created_at",
            "username": f"eq.{username}",
        }
        response = self._send("GET", params=params)
        if response.is_success:
            return self._record(response)

        error = self._error_from(response)
        if error.code == NO_ROWS_CODE:
            raise UserNotFound(username)
        raise error

    def insert(self, username: str, password_hash: str) -> UserRecord:
        params = {"select": "id,username,password,created_at"}
        headers = {"Prefer": "return=representation"}
        body = {"username": username, "password": password_hash}
        response = self._send("POST", params=params, json=body, headers=headers)
        if response.is_success:
            return self._record(response)

        error = self._error_from(response)
        if error.code == UNIQUE_VIOLATION_CODE:
            raise UsernameTaken(username)
        raise error

    def close(self) -> None:
        self.client.close()

    def _send(self, method: str, headers: Optional[dict] = None, **kwargs: Any) -> httpx.Response:
        try:
            return self.client.request(
                method,
                self.table_url,
                headers={**self.headers, **(headers or {})},
                **kwargs,
            )
        except httpx.TimeoutException as e:
            logger.error("User directory timeout: %s", e)
            raise DirectoryError("User directory timeout") from e
        except httpx.RequestError as e:
            logger.error("User directory request error: %s", e)
            raise DirectoryError(f"User directory unavailable: {e}") from e

    @staticmethod
    def _error_from(response: httpx.Response) -> DirectoryError:
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        message = payload.get("message") or f"User directory returned HTTP {response.status_code}"
        return DirectoryError(message, code=payload.get("code"))

    @staticmethod
    def _record(response: httpx.Response) -> UserRecord:
        try:
            row = response.json()
            if isinstance(row, list):
                # Some proxies drop the singular Accept header and return an array
                row = row[0]
            return UserRecord(
                id=row["id"],
                username=row["username"],
                password=row["password"],
                created_at=row.get("created_at"),
            )
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise DirectoryError(f"Malformed user directory response: {e}") from e


class SqlUserDirectory(UserDirectory):
    """Directory stored in a SQL database through SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def find_by_username(self, username: str) -> UserRecord:
        try:
            with self.session_factory() as db:
                user = db.query(User).filter(User.username == username).first()
        except SQLAlchemyError as e:
            raise DirectoryError(str(e)) from e
        if user is None:
            raise UserNotFound(username)
        return self._record(user)

    def insert(self, username: str, password_hash: str) -> UserRecord:
        with self.session_factory() as db:
            try:
                user = User(username=username, password=password_hash)
                db.add(user)
                db.commit()
                db.refresh(user)
            except IntegrityError as e:
                db.rollback()
                raise UsernameTaken(username) from e
            except SQLAlchemyError as e:
                db.rollback()
                raise DirectoryError(str(e)) from e
            return self._record(user)

    def close(self) -> None:
        bind = self.session_factory.kw.get("bind")
        if bind is not None:
            bind.dispose()

    @staticmethod
    def _record(user: User) -> UserRecord:
        created_at = user.created_at
        # SQLite drops the offset; stored values are always UTC
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return UserRecord(
            id=user.id,
            username=user.username,
            password=user.password,
            created_at=created_at,
        )
