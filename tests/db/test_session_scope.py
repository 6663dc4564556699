"""
session_scope(): commit on success, rollback and re-raise on failure.

Uses the suite engine directly (no per-test ``session`` fixture) and
cleans up whatever it commits.
"""

import pytest
from sqlalchemy import select

from rental_kernel.db.engine import get_engine, session_scope
from rental_kernel.models.sequence import SequenceCounter

COUNTER = "session_scope_check"


def _counter_value() -> int | None:
    with session_scope() as session:
        return session.execute(
            select(SequenceCounter.current_value).where(SequenceCounter.name == COUNTER)
        ).scalar_one_or_none()


@pytest.fixture
def clean_counter(db_tables):
    yield
    with session_scope() as session:
        row = session.execute(
            select(SequenceCounter).where(SequenceCounter.name == COUNTER)
        ).scalar_one_or_none()
        if row is not None:
            session.delete(row)


class TestSessionScope:

    def test_engine_initialised(self, db_engine):
        assert get_engine() is db_engine

    def test_commits_on_success(self, clean_counter):
        with session_scope() as session:
            session.add(SequenceCounter(name=COUNTER, current_value=7))

        assert _counter_value() == 7

    def test_rolls_back_and_reraises(self, clean_counter, captured_logs):
        with pytest.raises(RuntimeError, match="abort"):
            with session_scope() as session:
                session.add(SequenceCounter(name=COUNTER, current_value=9))
                session.flush()
                raise RuntimeError("abort")

        assert _counter_value() is None
        messages = [r["message"] for r in captured_logs()]
        assert "transaction_rolled_back" in messages
