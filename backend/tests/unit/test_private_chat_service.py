import pytest

from app.domain.common.errors import NotFoundError, NotMutualFollowError, ValidationError


async def _befriend(follows, a, b):
    await follows.follow(a, b)
    await follows.follow(b, a)


@pytest.mark.asyncio
async def test_start_chat_requires_mutual_follow(follows, chats):
    with pytest.raises(NotMutualFollowError):
        await chats.start_private_chat("alice", "bob")

    await follows.follow("alice", "bob")
    with pytest.raises(NotMutualFollowError) as exc:
        await chats.start_private_chat("alice", "bob")
    assert exc.value.code == "NOT_MUTUAL_FOLLOW"


@pytest.mark.asyncio
async def test_start_chat_rejects_self_and_unknown(chats):
    with pytest.raises(ValidationError):
        await chats.start_private_chat("alice", "alice")
    with pytest.raises(NotFoundError):
        await chats.start_private_chat("alice", "ghost")


@pytest.mark.asyncio
async def test_start_chat_is_idempotent_in_either_order(follows, chats):
    await _befriend(follows, "alice", "bob")

    first, created = await chats.start_private_chat("alice", "bob")
    again, created_again = await chats.start_private_chat("alice", "bob")
    reverse, created_reverse = await chats.start_private_chat("bob", "alice")

    assert created is True
    assert created_again is False and created_reverse is False
    assert first.chat.id == again.chat.id == reverse.chat.id
    assert (first.chat.user_a, first.chat.user_b) == ("alice", "bob")


@pytest.mark.asyncio
async def test_send_and_page_messages(follows, chats):
    await _befriend(follows, "alice", "bob")
    summary, _ = await chats.start_private_chat("alice", "bob")
    chat_id = summary.chat.id

    for i in range(5):
        await chats.send_message("alice" if i % 2 == 0 else "bob", chat_id, f"  msg {i}  ")

    newest = await chats.list_messages("alice", chat_id, page=1, limit=2)
    oldest = await chats.list_messages("bob", chat_id, page=3, limit=2)

    assert [m.text for m in newest.messages] == ["msg 3", "msg 4"]
    assert [m.text for m in oldest.messages] == ["msg 0"]
    assert newest.total_messages == 5
    assert newest.total_pages == 3

    refreshed = await chats.get_chat("bob", chat_id)
    assert refreshed.last_message.text == "msg 4"


@pytest.mark.asyncio
async def test_send_message_validation(follows, chats, monkeypatch):
    await _befriend(follows, "alice", "bob")
    summary, _ = await chats.start_private_chat("alice", "bob")

    with pytest.raises(ValidationError):
        await chats.send_message("alice", summary.chat.id, "   ")
    with pytest.raises(ValidationError):
        await chats.send_message("alice", summary.chat.id, "x" * 4001)
    with pytest.raises(NotFoundError):
        await chats.send_message("carol", summary.chat.id, "hi")
    with pytest.raises(NotFoundError):
        await chats.send_message("alice", "missing", "hi")


@pytest.mark.asyncio
async def test_unfollow_revokes_messaging(follows, chats):
    await _befriend(follows, "alice", "bob")
    summary, _ = await chats.start_private_chat("alice", "bob")
    await chats.send_message("bob", summary.chat.id, "hello")

    await follows.unfollow("alice", "bob")

    with pytest.raises(NotMutualFollowError):
        await chats.send_message("bob", summary.chat.id, "still there?")
    with pytest.raises(NotMutualFollowError):
        await chats.start_private_chat("bob", "alice")
    # History stays readable for participants
    page = await chats.list_messages("alice", summary.chat.id)
    assert [m.text for m in page.messages] == ["hello"]


@pytest.mark.asyncio
async def test_unread_counts_and_mark_read(follows, chats):
    await _befriend(follows, "alice", "bob")
    summary, _ = await chats.start_private_chat("alice", "bob")
    chat_id = summary.chat.id
    await chats.send_message("bob", chat_id, "one")
    await chats.send_message("bob", chat_id, "two")
    await chats.send_message("alice", chat_id, "three")

    listed = await chats.list_chats("alice")
    assert [(s.chat.id, s.unread_count) for s in listed] == [(chat_id, 2)]
    reopened, is_new = await chats.start_private_chat("alice", "bob")
    assert not is_new and reopened.unread_count == 2

    assert await chats.mark_read("alice", chat_id) == 2
    assert await chats.mark_read("alice", chat_id) == 0
    assert (await chats.get_chat("alice", chat_id)).unread_count == 0
    assert (await chats.get_chat("bob", chat_id)).unread_count == 1


@pytest.mark.asyncio
async def test_list_chats_orders_by_recent_activity(follows, chats):
    await _befriend(follows, "alice", "bob")
    await _befriend(follows, "alice", "carol")
    with_bob, _ = await chats.start_private_chat("alice", "bob")
    with_carol, _ = await chats.start_private_chat("alice", "carol")
    await chats.send_message("bob", with_bob.chat.id, "latest")

    listed = await chats.list_chats("alice")
    assert [s.chat.id for s in listed] == [with_bob.chat.id, with_carol.chat.id]
    assert listed[0].chat.other_participant("alice") == "bob"


@pytest.mark.asyncio
async def test_delete_chat(follows, chats):
    await _befriend(follows, "alice", "bob")
    summary, _ = await chats.start_private_chat("alice", "bob")
    await chats.send_message("alice", summary.chat.id, "bye")

    with pytest.raises(NotFoundError):
        await chats.delete_chat("carol", summary.chat.id)
    await chats.delete_chat("bob", summary.chat.id)

    with pytest.raises(NotFoundError):
        await chats.get_chat("alice", summary.chat.id)
    fresh, is_new = await chats.start_private_chat("alice", "bob")
    assert is_new and fresh.chat.id != summary.chat.id


@pytest.mark.asyncio
async def test_list_messages_rejects_bad_paging(follows, chats):
    await _befriend(follows, "alice", "bob")
    summary, _ = await chats.start_private_chat("alice", "bob")
    with pytest.raises(ValidationError):
        await chats.list_messages("alice", summary.chat.id, page=0)
    with pytest.raises(ValidationError):
        await chats.list_messages("alice", summary.chat.id, limit=0)
