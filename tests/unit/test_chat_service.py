"""Unit tests for ChatService fallback tiers.

Primary-store outages are simulated with a session bound to an unreachable
SQLite path, provider outages with a chat model that always raises.
"""

import pytest
import pytest_check as check
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from models import ChatThread
from models.chats import MessageSender
from services.chat import ChatService, fallback_counters
from services.fallback_replies import GENERIC_REPLY, PASSPORT_REPLY
from services.memory_store import MemoryChatStore


def _fail_queries_from(session: Session, failing_query: int) -> None:
    """Make ORM queries on ``session`` fail from the given query onwards."""
    calls = {"count": 0}

    @event.listens_for(session, "do_orm_execute")
    def fail(orm_execute_state):
        calls["count"] += 1
        if calls["count"] >= failing_query:
            raise OperationalError("SELECT", {}, Exception("connection lost"))


def _flaky_commit(session: Session, monkeypatch: pytest.MonkeyPatch, fail_from_call: int) -> None:
    """Make ``session.commit`` fail from the given call onwards."""
    real_commit = session.commit
    calls = {"count": 0}

    def commit():
        calls["count"] += 1
        if calls["count"] >= fail_from_call:
            raise OperationalError("COMMIT", {}, Exception("connection lost"))
        return real_commit()

    monkeypatch.setattr(session, "commit", commit)


class TestHealthyStores:
    """Tests with a reachable primary store."""

    async def test_exchange_is_saved_to_primary_store(
        self, db_session: Session, memory_store: MemoryChatStore, working_reply_graph
    ) -> None:
        """User message and reply are saved in order; memory is untouched."""
        reply = await ChatService.send_message(
            db_session, memory_store, working_reply_graph, "user-1", "How do I upload?"
        )

        messages = ChatService.get_history(db_session, "user-1")
        check.equal(reply, "Model reply about documents.")
        check.equal([(m.sender, m.content) for m in messages], [
            (MessageSender.USER, "How do I upload?"),
            (MessageSender.SYSTEM, "Model reply about documents."),
        ])
        check.equal(memory_store.thread_count(), 0)

    async def test_second_exchange_appends_to_same_thread(
        self, db_session: Session, memory_store: MemoryChatStore, working_reply_graph
    ) -> None:
        await ChatService.send_message(db_session, memory_store, working_reply_graph, "user-1", "one")
        await ChatService.send_message(db_session, memory_store, working_reply_graph, "user-1", "two")

        check.equal(db_session.query(ChatThread).count(), 1)
        check.equal(
            [m.content for m in ChatService.get_history(db_session, "user-1")][::2],
            ["one", "two"],
        )

    async def test_provider_failure_reply_is_saved(
        self, db_session: Session, memory_store: MemoryChatStore, failing_reply_graph
    ) -> None:
        reply = await ChatService.send_message(
            db_session, memory_store, failing_reply_graph, "user-1", "passport renewal"
        )

        check.equal(reply, PASSPORT_REPLY)
        check.equal(ChatService.get_history(db_session, "user-1")[-1].content, PASSPORT_REPLY)

    def test_history_for_unknown_user_is_empty(self, db_session: Session) -> None:
        assert ChatService.get_history(db_session, "nobody") == []


class TestPrimaryStoreOutage:
    """Tests with an unreachable primary store."""

    async def test_total_failure_still_replies(
        self, broken_session: Session, memory_store: MemoryChatStore, failing_reply_graph
    ) -> None:
        """Store and provider both down: a keyword reply is returned and kept in memory."""
        before = fallback_counters["store_fallbacks"]

        reply = await ChatService.send_message(
            broken_session, memory_store, failing_reply_graph, "user-1", "Tell me a joke"
        )

        thread = memory_store.get_thread("user-1")
        check.equal(reply, GENERIC_REPLY)
        check.equal([(m.sender, m.content) for m in thread.messages], [
            (MessageSender.USER, "Tell me a joke"),
            (MessageSender.SYSTEM, GENERIC_REPLY),
        ])
        check.equal(fallback_counters["store_fallbacks"], before + 1)

    async def test_repeated_calls_accumulate_in_memory(
        self, broken_session: Session, memory_store: MemoryChatStore, failing_reply_graph
    ) -> None:
        """A subsequent call for the same user still replies and appends to memory."""
        await ChatService.send_message(broken_session, memory_store, failing_reply_graph, "user-1", "hello")
        reply = await ChatService.send_message(
            broken_session, memory_store, failing_reply_graph, "user-1", "passport"
        )

        contents = [m.content for m in memory_store.get_thread("user-1").messages]
        check.equal(reply, PASSPORT_REPLY)
        check.equal(len(contents), 4)
        check.is_in("passport", contents)
        check.is_in(PASSPORT_REPLY, contents)


class TestReplySaveFailure:
    """Tests for a store that accepts the user message but fails on the reply."""

    async def test_exchange_recorded_in_memory(
        self,
        db_session: Session,
        memory_store: MemoryChatStore,
        failing_reply_graph,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """The pair lands in a fresh in-memory thread; the user message stays in the primary store."""
        _flaky_commit(db_session, monkeypatch, fail_from_call=2)
        before = fallback_counters["reply_persist_fallbacks"]

        reply = await ChatService.send_message(
            db_session, memory_store, failing_reply_graph, "user-1", "passport"
        )

        thread = memory_store.get_thread("user-1")
        check.equal(reply, PASSPORT_REPLY)
        check.equal([m.content for m in thread.messages], ["passport", PASSPORT_REPLY])
        check.equal(fallback_counters["reply_persist_fallbacks"], before + 1)
        check.equal([m.content for m in ChatService.get_history(db_session, "user-1")], ["passport"])

    async def test_existing_memory_thread_not_merged(
        self,
        db_session: Session,
        memory_store: MemoryChatStore,
        failing_reply_graph,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        memory_store.append_message("user-1", MessageSender.USER, "from an earlier outage")
        _flaky_commit(db_session, monkeypatch, fail_from_call=2)

        await ChatService.send_message(db_session, memory_store, failing_reply_graph, "user-1", "passport")

        contents = [m.content for m in memory_store.get_thread("user-1").messages]
        assert contents == ["from an earlier outage"]


class TestStoreFailureDuringThreadLoad:
    """Tests for a store that drops while an existing thread is being loaded."""

    async def test_failed_message_load_falls_back_to_memory(
        self, db_session: Session, memory_store: MemoryChatStore, failing_reply_graph
    ) -> None:
        """The thread row loads but its messages do not: the reply still comes back."""
        await ChatService.send_message(db_session, memory_store, failing_reply_graph, "user-1", "hello")
        db_session.expunge_all()
        _fail_queries_from(db_session, failing_query=2)

        reply = await ChatService.send_message(
            db_session, memory_store, failing_reply_graph, "user-1", "passport"
        )

        thread = memory_store.get_thread("user-1")
        check.equal(reply, PASSPORT_REPLY)
        check.equal([(m.sender, m.content) for m in thread.messages], [
            (MessageSender.USER, "passport"),
            (MessageSender.SYSTEM, PASSPORT_REPLY),
        ])
