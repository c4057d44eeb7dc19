"""Local user identity and session handling."""
from __future__ import annotations

import logging
import threading
import uuid
from datetime import timezone

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from balance.models.database_models import UserRecord
from balance.models.schemas import User, utcnow


logger = logging.getLogger(__name__)


class UserSessionManager:
    """Owns the installation's single user and the current session id."""

    def __init__(self, session_factory: sessionmaker, test_mode: bool = True) -> None:
        self._session_factory = session_factory
        self.is_test_mode = test_mode
        self.session_id = str(uuid.uuid4())
        self._lock = threading.Lock()
        self._current: User | None = None
        self._loaded = False

    def load_or_create_user(self) -> User:
        """Return the stored user, creating and persisting one if absent."""

        with self._lock:
            user = self._load()
            if user is None:
                user = User(
                    id=str(uuid.uuid4()),
                    name="Test User" if self.is_test_mode else "User",
                    created_at=utcnow(),
                    is_test_mode=self.is_test_mode,
                )
                self._persist(user)
                logger.info("Created new user %s", user.id)
            self._current = user
            self._loaded = True
            return user

    def current_user(self) -> User | None:
        if not self._loaded:
            with self._lock:
                self._current = self._load()
                self._loaded = True
        return self._current

    def save_user(self, user: User) -> None:
        with self._lock:
            self._persist(user)
            self._current = user
            self._loaded = True

    def reset_session(self) -> str:
        self.session_id = str(uuid.uuid4())
        logger.info("Session reset")
        return self.session_id

    def clear_user(self) -> None:
        with self._lock:
            with self._session_factory() as session:
                session.execute(delete(UserRecord))
                session.commit()
            self._current = None
            self._loaded = True
        logger.info("User cleared")

    def _load(self) -> User | None:
        with self._session_factory() as session:
            record = session.scalars(select(UserRecord).order_by(UserRecord.created_at.desc())).first()
            if record is None:
                return None
            created_at = record.created_at
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            return User(
                id=record.id,
                name=record.name,
                created_at=created_at,
                is_test_mode=record.is_test_mode,
            )

    def _persist(self, user: User) -> None:
        with self._session_factory() as session:
            # Only one user is kept per installation
            session.execute(delete(UserRecord).where(UserRecord.id != user.id))
            session.merge(
                UserRecord(
                    id=user.id,
                    name=user.name,
                    created_at=user.created_at,
                    is_test_mode=user.is_test_mode,
                )
            )
            session.commit()
