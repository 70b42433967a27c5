from __future__ import annotations

from pathlib import Path
from typing import Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, SQLModel, create_engine, select
from sqlmodel import Session as DbSession

from tomatl.domain.interfaces import ISessionStore
from tomatl.domain.models import Session
from tomatl.errors import SessionStoreError


class SessionRecord(SQLModel, table=True):
    __tablename__ = "sessions"  # type: ignore[assignment]
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    start_iso: str = Field(nullable=False)
    minutes: float = Field(nullable=False)


class SessionStore(ISessionStore):
    """Append-only SQLite log of completed sessions."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._engine: Engine | None = None

    @property
    def path(self) -> Path:
        return self._path

    def initialize(self) -> SessionStore:
        """Open (or create) the database and ensure the sessions table exists.

        Safe to call repeatedly; existing rows are never touched.
        """
        engine = self._engine
        try:
            if engine is None:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                engine = create_engine(f"sqlite:///{self._path}", echo=False)
            SQLModel.metadata.create_all(engine, tables=[SessionRecord.__table__])
        except (OSError, SQLAlchemyError) as exc:
            if engine is not None and self._engine is None:
                engine.dispose()
            raise SessionStoreError(
                f"Cannot open session store at {self._path}: {exc}"
            ) from exc
        self._engine = engine
        return self

    def append(self, session: Session) -> None:
        engine = self._require_engine()
        record = SessionRecord(
            start_iso=session.start_iso,
            minutes=float(session.duration_minutes),
        )
        try:
            # one row per transaction; an error before commit rolls back on close
            with DbSession(engine) as db:
                db.add(record)
                db.commit()
        except SQLAlchemyError as exc:
            raise SessionStoreError(
                f"Cannot write session to {self._path}: {exc}"
            ) from exc

    def recent(self, limit: int = 20) -> list[SessionRecord]:
        engine = self._require_engine()
        statement = select(SessionRecord).order_by(SessionRecord.id.desc()).limit(max(0, limit))
        try:
            with DbSession(engine) as db:
                return list(db.exec(statement).all())
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"Cannot read sessions from {self._path}: {exc}") from exc

    def count(self) -> int:
        engine = self._require_engine()
        try:
            with DbSession(engine) as db:
                return int(db.exec(select(func.count()).select_from(SessionRecord)).one())
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"Cannot read sessions from {self._path}: {exc}") from exc

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> SessionStore:
        return self.initialize()

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _require_engine(self) -> Engine:
        if self._engine is None:
            raise SessionStoreError("Session store is not initialized.")
        return self._engine
