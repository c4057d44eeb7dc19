"""Capacity-bounded persistence of focus analyses."""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, sessionmaker

from balance.models.database_models import FocusAnalysisRecord
from balance.models.schemas import FocusAnalysis


logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


def _to_epoch(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


class HistoryStore:
    """Append-only analysis history holding at most ``capacity`` records.

    Writers are serialised with a lock; when an insert overflows the
    capacity, the earliest *inserted* rows are evicted regardless of their
    timestamps. The newest-first view is rebuilt after every mutation.
    """

    def __init__(self, session_factory: sessionmaker, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._session_factory = session_factory
        self.capacity = capacity
        self._write_lock = threading.Lock()
        self._recent: list[FocusAnalysis] | None = None

    def insert(self, analysis: FocusAnalysis) -> None:
        with self._write_lock:
            with self._session_factory() as session:
                session.add(
                    FocusAnalysisRecord(
                        record_id=analysis.id,
                        summary=analysis.summary,
                        focus_score=analysis.focus_score,
                        recommendations=list(analysis.recommendations),
                        timestamp=_to_epoch(analysis.timestamp),
                        user_id=analysis.user_id,
                    )
                )
                session.flush()
                evicted = self._evict_overflow(session)
                session.commit()
            self._refresh()
        logger.info("Stored analysis %s (score=%.0f)", analysis.id, analysis.focus_score)
        if evicted:
            logger.debug("History over capacity, evicted %d oldest record(s)", evicted)

    def list(self) -> list[FocusAnalysis]:
        """All readable records, newest timestamp first."""

        recent = self._recent
        if recent is None:
            with self._write_lock:
                recent = self._refresh()
        return list(recent)

    def list_for_user(self, user_id: str) -> list[FocusAnalysis]:
        return [analysis for analysis in self.list() if analysis.user_id == user_id]

    def get(self, analysis_id: str) -> FocusAnalysis | None:
        return next((analysis for analysis in self.list() if analysis.id == analysis_id), None)

    def delete_by_id(self, analysis_id: str) -> bool:
        """Remove a record; returns whether anything was deleted."""

        with self._write_lock:
            with self._session_factory() as session:
                result = session.execute(
                    delete(FocusAnalysisRecord).where(FocusAnalysisRecord.record_id == analysis_id)
                )
                session.commit()
            self._refresh()
        deleted = bool(result.rowcount)
        if deleted:
            logger.info("Deleted analysis %s", analysis_id)
        return deleted

    def clear(self) -> None:
        with self._write_lock:
            with self._session_factory() as session:
                session.execute(delete(FocusAnalysisRecord))
                session.commit()
            self._refresh()
        logger.info("Analysis history cleared")

    def __len__(self) -> int:
        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(FocusAnalysisRecord)) or 0

    def _evict_overflow(self, session: Session) -> int:
        total = session.scalar(select(func.count()).select_from(FocusAnalysisRecord)) or 0
        overflow = total - self.capacity
        if overflow <= 0:
            return 0
        oldest = session.scalars(
            select(FocusAnalysisRecord.seq).order_by(FocusAnalysisRecord.seq.asc()).limit(overflow)
        ).all()
        session.execute(delete(FocusAnalysisRecord).where(FocusAnalysisRecord.seq.in_(oldest)))
        return overflow

    def _refresh(self) -> list[FocusAnalysis]:
        """Re-read the full collection. Callers hold the write lock."""

        with self._session_factory() as session:
            rows = session.scalars(
                select(FocusAnalysisRecord).order_by(FocusAnalysisRecord.seq.asc())
            ).all()
            decoded = [analysis for analysis in map(self._decode, rows) if analysis is not None]

        # Stable sort keeps insertion order among equal timestamps, newest insert first.
        decoded.reverse()
        decoded.sort(key=lambda analysis: analysis.timestamp, reverse=True)
        self._recent = decoded
        return decoded

    @staticmethod
    def _decode(row: FocusAnalysisRecord) -> FocusAnalysis | None:
        required = (row.record_id, row.summary, row.focus_score, row.recommendations, row.timestamp)
        if any(value is None for value in required):
            logger.debug("Skipping unreadable history row seq=%s", row.seq)
            return None
        try:
            return FocusAnalysis(
                id=row.record_id,
                summary=row.summary,
                focus_score=row.focus_score,
                recommendations=row.recommendations,
                timestamp=datetime.fromtimestamp(row.timestamp, tz=timezone.utc),
                user_id=row.user_id,
            )
        except ValidationError:
            logger.debug("Skipping invalid history row seq=%s", row.seq, exc_info=True)
            return None
