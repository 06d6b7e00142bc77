import logging

from sqlalchemy import select, text

from chatrelay.db import create_db_engine, create_session_factory, init_db
from chatrelay.models import FileChunk, StoredMessage, UserActivity
from chatrelay.protocol import TextMessage
from chatrelay.protocol.messages import now_ms
from chatrelay.services import PersistenceDispatcher
from tests.utils import build_persistence


def test_persist_message_writes_row_and_touches_both_parties(tmp_path):
    engine, dispatcher = build_persistence(tmp_path)
    try:
        message = TextMessage(sender="alice", recipient="bob", seq=0, payload="hello")
        future = dispatcher.persist_message(message)
        assert dispatcher.drain(timeout=5)
        assert future.result() is True

        with dispatcher.session_factory() as db:
            rows = db.execute(select(StoredMessage)).scalars().all()
            assert [(r.sender, r.receiver, r.seq, r.content, r.type) for r in rows] == [
                ("alice", "bob", 0, "hello", "text")
            ]
            names = db.execute(select(UserActivity.username)).scalars().all()
            assert sorted(names) == ["alice", "bob"]
    finally:
        dispatcher.shutdown()
        engine.dispose()


def test_retransmitted_chunk_replaces_stored_payload(tmp_path):
    engine, dispatcher = build_persistence(tmp_path)
    try:
        common = dict(sender="alice", recipient="bob", file_name="f.bin", total_chunks=2)
        assert dispatcher.persist_chunk(chunk_index=1, data="second", **common)
        assert dispatcher.persist_chunk(chunk_index=0, data="first-old", **common)
        assert dispatcher.persist_chunk(chunk_index=0, data="first", **common)

        assert dispatcher.query_chunks("f.bin", "bob") == ["first", "second"]
        with dispatcher.session_factory() as db:
            assert len(db.execute(select(FileChunk)).scalars().all()) == 2
    finally:
        dispatcher.shutdown()
        engine.dispose()


def test_active_identities_respect_window(tmp_path):
    engine, dispatcher = build_persistence(tmp_path)
    try:
        dispatcher.touch_activity("carol")
        dispatcher.touch_activity("alice")
        assert dispatcher.drain(timeout=5)

        assert dispatcher.query_active_identities(now_ms() - 60_000) == ["alice", "carol"]
        assert dispatcher.query_active_identities(now_ms() + 60_000) == []
    finally:
        dispatcher.shutdown()
        engine.dispose()


def test_failed_write_is_logged_and_contained(tmp_path, caplog):
    engine, dispatcher = build_persistence(tmp_path)
    try:
        with engine.begin() as conn:
            conn.execute(text("DROP TABLE messages"))

        caplog.set_level(logging.ERROR, logger="chatrelay")
        future = dispatcher.persist_message(
            TextMessage(sender="alice", recipient="bob", seq=0, payload="lost")
        )
        assert dispatcher.drain(timeout=5)

        assert future.result() is False
        assert any("Failed to persist message seq=0 to bob" in r.getMessage() for r in caplog.records)
    finally:
        dispatcher.shutdown()
        engine.dispose()


def test_in_memory_engine_shares_one_database_across_threads():
    engine = create_db_engine("sqlite+pysqlite:///:memory:")
    init_db(engine)
    dispatcher = PersistenceDispatcher(create_session_factory(engine), workers=1)
    try:
        dispatcher.touch_activity("carol")
        assert dispatcher.drain(timeout=5)

        assert dispatcher.query_active_identities(now_ms() - 60_000) == ["carol"]
    finally:
        dispatcher.shutdown()
        engine.dispose()
