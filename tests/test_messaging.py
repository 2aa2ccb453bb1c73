"""Tests for notifications and team chat."""

import pytest

from crm.exceptions import NotFoundError
from crm.services import chat_service, notification_service

ALICE = "alice@example.com"
BOB = "bob@example.com"
CAROL = "carol@example.com"


async def _notify(db, user_email, title="Ping"):
    notification = await notification_service.create_notification(db, user_email=user_email, type="info", title=title)
    await db.commit()
    return notification


@pytest.mark.asyncio
async def test_notifications_are_scoped_to_user(db_session):
    mine = await _notify(db_session, ALICE, "mine")
    mine_id = mine.id
    await _notify(db_session, BOB, "theirs")

    listed = await notification_service.list_notifications(db_session, ALICE)
    assert [n.title for n in listed] == ["mine"]

    with pytest.raises(NotFoundError):
        await notification_service.mark_as_read(db_session, mine_id, BOB)
    with pytest.raises(NotFoundError):
        await notification_service.delete_notification(db_session, mine_id, BOB)


@pytest.mark.asyncio
async def test_mark_read_and_counts(db_session):
    first = await _notify(db_session, ALICE, "one")
    await _notify(db_session, ALICE, "two")
    await _notify(db_session, ALICE, "three")
    assert await notification_service.unread_count(db_session, ALICE) == 3

    read = await notification_service.mark_as_read(db_session, first.id, ALICE)
    assert read.is_read is True
    assert read.read_at is not None
    assert await notification_service.unread_count(db_session, ALICE) == 2

    assert await notification_service.mark_all_as_read(db_session, ALICE) == 2
    assert await notification_service.unread_count(db_session, ALICE) == 0


@pytest.mark.asyncio
async def test_notification_list_is_capped(db_session):
    for i in range(notification_service.NOTIFICATION_LIST_LIMIT + 5):
        await notification_service.create_notification(db_session, user_email=ALICE, type="info", title=f"n{i}")
    await db_session.commit()

    listed = await notification_service.list_notifications(db_session, ALICE)
    assert len(listed) == notification_service.NOTIFICATION_LIST_LIMIT
    assert listed[0].title == f"n{notification_service.NOTIFICATION_LIST_LIMIT + 4}"


@pytest.mark.asyncio
async def test_conversation_in_both_directions(db_session):
    await chat_service.send_message(db_session, ALICE, BOB, "hi bob")
    await chat_service.send_message(db_session, BOB, ALICE, "hi alice")
    await chat_service.send_message(db_session, ALICE, CAROL, "hi carol")

    conversation = await chat_service.get_conversation(db_session, ALICE, BOB)
    assert [m.message for m in conversation] == ["hi bob", "hi alice"]


@pytest.mark.asyncio
async def test_conversation_summaries(db_session):
    await chat_service.send_message(db_session, BOB, ALICE, "first")
    await chat_service.send_message(db_session, BOB, ALICE, "second")
    await chat_service.send_message(db_session, ALICE, CAROL, "hello carol")

    summaries = await chat_service.list_conversations(db_session, ALICE)

    assert [s.other_user_email for s in summaries] == [CAROL, BOB]
    bob = summaries[1]
    assert bob.last_message == "second"
    assert bob.last_message_sender == BOB
    assert bob.unread_count == 2
    assert summaries[0].unread_count == 0


@pytest.mark.asyncio
async def test_mark_conversation_read(db_session):
    await chat_service.send_message(db_session, BOB, ALICE, "one")
    await chat_service.send_message(db_session, CAROL, ALICE, "two")
    assert await chat_service.unread_message_count(db_session, ALICE) == 2

    assert await chat_service.mark_conversation_read(db_session, ALICE, BOB) == 1
    assert await chat_service.unread_message_count(db_session, ALICE) == 1
