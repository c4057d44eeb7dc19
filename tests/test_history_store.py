"""Tests for the capacity-bounded analysis history."""
from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import event

from balance.models.database_models import FocusAnalysisRecord
from balance.models.schemas import FocusAnalysis
from balance.services.history_store import HistoryStore

BASE_TIME = datetime(2025, 11, 10, 8, 0, tzinfo=timezone.utc)


def make_analysis(index: int, user_id: str | None = "user-1", offset_minutes: int | None = None) -> FocusAnalysis:
    minutes = index if offset_minutes is None else offset_minutes
    return FocusAnalysis(
        id=f"analysis-{index}",
        summary=f"Summary {index}",
        focus_score=float(index % 101),
        recommendations=[f"Recommendation for entry {index}"],
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        user_id=user_id,
    )


@pytest.fixture()
def store(session_factory) -> HistoryStore:
    return HistoryStore(session_factory)


def test_round_trip_preserves_fields(store):
    original = FocusAnalysis(
        summary="Focus Score: 82\n1. Keep it up with short breaks",
        focus_score=82.5,
        recommendations=["Keep it up with short breaks", "Sleep before midnight tonight"],
        timestamp=datetime.now(timezone.utc),
        user_id="user-1",
    )

    store.insert(original)
    (loaded,) = store.list()

    assert loaded.id == original.id
    assert loaded.summary == original.summary
    assert loaded.focus_score == original.focus_score
    assert loaded.recommendations == original.recommendations
    assert loaded.user_id == original.user_id
    assert abs((loaded.timestamp - original.timestamp).total_seconds()) <= 1


def test_naive_timestamps_are_treated_as_utc(store):
    naive = FocusAnalysis(summary="s", focus_score=1, timestamp=datetime(2025, 1, 1, 12, 0, 0))

    store.insert(naive)

    assert store.list()[0].timestamp == datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_capacity_evicts_oldest_inserted(store):
    for index in range(55):
        store.insert(make_analysis(index))

    records = store.list()

    assert len(store) == 50
    assert len(records) == 50
    assert {r.id for r in records} == {f"analysis-{i}" for i in range(5, 55)}


def test_eviction_follows_insertion_order_not_timestamp(session_factory):
    store = HistoryStore(session_factory, capacity=3)
    # Inserted first but carries the newest timestamp
    store.insert(make_analysis(0, offset_minutes=1000))
    for index in range(1, 4):
        store.insert(make_analysis(index))

    ids = [r.id for r in store.list()]

    assert "analysis-0" not in ids
    assert ids == ["analysis-3", "analysis-2", "analysis-1"]


def test_eviction_deletes_by_explicit_seq_list(session_factory):
    # MySQL rejects LIMIT inside an IN subquery, so the DELETE must not nest a SELECT
    store = HistoryStore(session_factory, capacity=2)
    deletes: list[str] = []

    def capture(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("DELETE"):
            deletes.append(statement.upper())

    engine = session_factory.kw["bind"]
    event.listen(engine, "before_cursor_execute", capture)
    try:
        for index in range(4):
            store.insert(make_analysis(index))
    finally:
        event.remove(engine, "before_cursor_execute", capture)

    assert len(deletes) == 2
    assert all("SELECT" not in statement for statement in deletes)
    assert [r.id for r in store.list()] == ["analysis-3", "analysis-2"]


def test_list_is_sorted_newest_first(store):
    store.insert(make_analysis(1, offset_minutes=30))
    store.insert(make_analysis(2, offset_minutes=10))
    store.insert(make_analysis(3, offset_minutes=20))

    assert [r.id for r in store.list()] == ["analysis-1", "analysis-3", "analysis-2"]


def test_list_for_user_filters_and_preserves_order(store):
    store.insert(make_analysis(1, user_id="alice"))
    store.insert(make_analysis(2, user_id="bob"))
    store.insert(make_analysis(3, user_id="alice"))
    store.insert(make_analysis(4, user_id=None))

    everything = store.list()
    alice = store.list_for_user("alice")

    assert [r.id for r in alice] == ["analysis-3", "analysis-1"]
    assert alice == [r for r in everything if r.user_id == "alice"]


def test_delete_by_id(store):
    store.insert(make_analysis(1))
    store.insert(make_analysis(2))

    assert store.delete_by_id("analysis-1") is True
    assert store.delete_by_id("analysis-1") is False
    assert [r.id for r in store.list()] == ["analysis-2"]
    assert store.get("analysis-2") is not None
    assert store.get("analysis-1") is None


def test_clear(store):
    for index in range(3):
        store.insert(make_analysis(index))

    store.clear()

    assert store.list() == []
    assert len(store) == 0


def test_unreadable_rows_are_skipped(store, session_factory):
    store.insert(make_analysis(1))
    with session_factory() as session:
        # Legacy rows: one without an id, one without a user id
        session.add(
            FocusAnalysisRecord(summary="legacy", focus_score=40.0, recommendations=[], timestamp=1_700_000_000)
        )
        session.add(
            FocusAnalysisRecord(
                record_id="legacy-2",
                summary="legacy",
                focus_score=40.0,
                recommendations=["Keep a regular schedule"],
                timestamp=1_700_000_000,
            )
        )
        session.add(FocusAnalysisRecord(record_id="broken", summary="bad score", focus_score=400.0,
                                        recommendations=[], timestamp=1_700_000_000))
        session.commit()

    fresh = HistoryStore(session_factory)
    ids = [r.id for r in fresh.list()]

    assert ids == ["analysis-1", "legacy-2"]
    assert fresh.get("legacy-2").user_id is None


def test_new_store_reads_persisted_records(store, session_factory):
    store.insert(make_analysis(7))

    assert [r.id for r in HistoryStore(session_factory).list()] == ["analysis-7"]


def test_concurrent_inserts_respect_capacity(session_factory):
    store = HistoryStore(session_factory, capacity=10)

    def worker(offset: int) -> None:
        for index in range(offset, offset + 10):
            store.insert(make_analysis(index))

    threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(store) == 10
    assert len(store.list()) == 10


def test_capacity_must_be_positive(session_factory):
    with pytest.raises(ValueError):
        HistoryStore(session_factory, capacity=0)
