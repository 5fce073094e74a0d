from datetime import datetime, timedelta, timezone

import pytest

from utils.queries import (
    RecordNotFound,
    build_message,
    create_user,
    delete_documents_by_id_after_timestamp,
    delete_messages_by_chat_id_after_timestamp,
    get_chat_by_id,
    get_document_by_id,
    get_documents_by_id,
    get_messages_by_chat_id,
    get_user,
    save_chat,
    save_document,
    save_messages,
    update_chat_visibility_by_id,
    vote_message,
)


async def test_create_user_hashes_password(db):
    user = await create_user(db, "erin@example.com", "secret123")

    found = await get_user(db, "erin@example.com")

    assert [u.id for u in found] == [user.id]
    assert found[0].password != "secret123"
    assert found[0].password.startswith("$2")


async def test_get_chat_by_id_not_found(db):
    with pytest.raises(RecordNotFound):
        await get_chat_by_id(db, "missing")

    assert await get_chat_by_id(db, "missing", throw_if_not_found=False) is None


async def test_saved_chat_is_private(db):
    await save_chat(db, id="chat-1", user_id="u1", title="Hello")

    chat = await get_chat_by_id(db, "chat-1")

    assert chat.visibility == "private"


async def test_visibility_must_be_known(db):
    await save_chat(db, id="chat-1", user_id="u1", title="Hello")

    with pytest.raises(ValueError):
        await update_chat_visibility_by_id(db, "chat-1", "friends")


async def test_vote_type_must_be_up_or_down(db):
    with pytest.raises(ValueError):
        await vote_message(db, chat_id="chat-1", message_id="msg-1", type="sideways")


async def test_vote_upsert(db):
    await vote_message(db, chat_id="chat-1", message_id="msg-1", type="up")
    vote = await vote_message(db, chat_id="chat-1", message_id="msg-1", type="down")

    assert vote.is_upvoted is False


async def test_messages_sorted_by_creation(db):
    start = datetime(2026, 1, 1, 12, 0, 0)
    await save_messages(db, [
        build_message("chat-1", "assistant", "later", id="b", created_at=start + timedelta(minutes=1)),
        build_message("chat-1", "user", "earlier", id="a", created_at=start),
        build_message("chat-2", "user", "elsewhere", id="c", created_at=start),
    ])

    messages = await get_messages_by_chat_id(db, "chat-1")

    assert [m.id for m in messages] == ["a", "b"]


async def test_document_by_id_is_first_version(db):
    await save_document(db, id="doc-1", title="T", kind="text", content="v1", user_id="u1")
    await save_document(db, id="doc-1", title="T", kind="text", content="v2", user_id="u1")

    document = await get_document_by_id(db, "doc-1")

    assert document.content == "v1"
    with pytest.raises(RecordNotFound):
        await get_document_by_id(db, "doc-2")


async def test_delete_documents_after_timestamp_keeps_boundary(db):
    first = await save_document(db, id="doc-1", title="T", kind="text", content="v1", user_id="u1")
    await save_document(db, id="doc-1", title="T", kind="text", content="v2", user_id="u1")

    deleted = await delete_documents_by_id_after_timestamp(db, "doc-1", first.created_at)

    assert deleted == 1
    assert (await get_document_by_id(db, "doc-1")).content == "v1"


async def test_delete_messages_after_aware_timestamp(db):
    start = datetime(2026, 1, 1, 12, 0, 0)
    await save_messages(db, [
        build_message("chat-1", "user", "first", id="a", created_at=start),
        build_message("chat-1", "assistant", "second", id="b", created_at=start + timedelta(seconds=1)),
    ])
    await get_messages_by_chat_id(db, "chat-1")

    deleted = await delete_messages_by_chat_id_after_timestamp(
        db, "chat-1", (start + timedelta(seconds=1)).replace(tzinfo=timezone.utc)
    )

    assert deleted == 1
    assert [m.id for m in await get_messages_by_chat_id(db, "chat-1")] == ["a"]


async def test_delete_documents_after_timestamp_in_another_zone(db):
    first = await save_document(db, id="doc-1", title="T", kind="text", content="v1", user_id="u1")
    await save_document(db, id="doc-1", title="T", kind="text", content="v2", user_id="u1")
    await get_documents_by_id(db, "doc-1")

    timestamp = first.created_at.astimezone(timezone(timedelta(hours=-5)))
    deleted = await delete_documents_by_id_after_timestamp(db, "doc-1", timestamp)

    assert deleted == 1
    assert [d.content for d in await get_documents_by_id(db, "doc-1")] == ["v1"]
