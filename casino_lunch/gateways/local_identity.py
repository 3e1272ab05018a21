"""
Local identity gateway
Email/password accounts stored in DuckDB, sessions carried as JWT tokens

One instance represents one client session: it remembers the current session
and notifies its listeners on every sign-in, sign-out or session restore.
"""

import asyncio
import inspect
import json
import logging
import uuid
from typing import Any, Dict, List, Optional

import duckdb

from ..core.database import DatabaseManager, db_manager
from ..core.exceptions import AuthError, PersistenceError
from ..core.security import (
    SecurityManager,
    generate_password_hash,
    security_manager,
    verify_password,
)
from ..models import Session, SessionUser
from .base import SessionListener, Unsubscribe

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"
ALREADY_REGISTERED = "User already registered"


class LocalIdentityGateway:
    """IdentityGateway backed by the auth_users table"""

    def __init__(self, db: DatabaseManager = None, security: SecurityManager = None):
        self.db = db or db_manager
        self.security = security or security_manager
        self._session: Optional[Session] = None
        self._listeners: List[SessionListener] = []

    async def get_current_session(self) -> Optional[Session]:
        return self._session

    def on_session_change(self, callback: SessionListener) -> Unsubscribe:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _notify(self):
        for listener in list(self._listeners):
            result = listener(self._session)
            if inspect.isawaitable(result):
                await result

    async def _set_session(self, session: Optional[Session]):
        self._session = session
        await self._notify()

    async def sign_in(self, email: str, password: str) -> Session:
        row = await asyncio.to_thread(self._find_user, email.strip().lower())
        if not row or not verify_password(password, row[2]):
            raise AuthError(INVALID_CREDENTIALS, "INVALID_CREDENTIALS")
        session = self._issue_session(row[0], row[1], row[3])
        await self._set_session(session)
        logger.info("User %s signed in", row[0])
        return session

    async def sign_up(self, email: str, password: str,
                      profile_attributes: Dict[str, Any]) -> Session:
        email = email.strip().lower()
        user_id = str(uuid.uuid4())
        metadata = dict(profile_attributes or {})
        await asyncio.to_thread(
            self._insert_user, user_id, email, generate_password_hash(password), metadata)
        session = self._issue_session(user_id, email, metadata)
        await self._set_session(session)
        logger.info("User %s registered", user_id)
        return session

    async def sign_out(self) -> None:
        if self._session is not None:
            logger.info("User %s signed out", self._session.owner_id)
        await self._set_session(None)

    async def restore_session(self, token: str) -> Session:
        """Revive a session from a previously issued access token"""
        user_id = self.security.get_user_id_from_token(token)
        row = await asyncio.to_thread(self._find_user_by_id, user_id)
        if not row:
            raise AuthError("User not found", "INVALID_TOKEN")
        payload = self.security.decode_jwt_token(token)
        session = Session(
            access_token=token,
            expires_at=payload["exp"],
            user=SessionUser(id=row[0], email=row[1], metadata=_load_metadata(row[3])),
        )
        await self._set_session(session)
        return session

    def _issue_session(self, user_id: str, email: str, metadata: Any) -> Session:
        token, expires_at = self.security.create_jwt_token(user_id, {"email": email})
        return Session(
            access_token=token,
            expires_at=expires_at,
            user=SessionUser(id=user_id, email=email, metadata=_load_metadata(metadata)),
        )

    def _find_user(self, email: str) -> Optional[tuple]:
        return self.db.execute_one(
            "SELECT id, email, password_hash, metadata_json FROM auth_users WHERE email = ?",
            [email],
        )

    def _find_user_by_id(self, user_id: str) -> Optional[tuple]:
        return self.db.execute_one(
            "SELECT id, email, password_hash, metadata_json FROM auth_users WHERE id = ?",
            [user_id],
        )

    def _insert_user(self, user_id: str, email: str, password_hash: str,
                     metadata: Dict[str, Any]) -> None:
        with self.db.lock:
            try:
                self.db.get_connection().execute(
                    "INSERT INTO auth_users(id, email, password_hash, metadata_json) VALUES (?,?,?,?)",
                    [user_id, email, password_hash, json.dumps(metadata)],
                )
            except duckdb.ConstraintException:
                raise AuthError(ALREADY_REGISTERED, "USER_ALREADY_REGISTERED")
            except duckdb.Error as e:
                raise PersistenceError(f"Failed to create user: {e}")


def _load_metadata(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    if isinstance(value, str) and value:
        return json.loads(value)
    return {}
