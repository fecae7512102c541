"""Test conversation session resolution"""

import pytest

from app.exceptions import ConversationNotFoundException, InvalidIdException, ValidationException
from app.models.user import User
from app.services.conversation_store import NewMessage
from app.services.session_resolver import ConversationSessionResolver

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


async def test_without_id_always_creates(store, make_user, db):
    user = make_user()
    resolver = ConversationSessionResolver(store)

    first = await resolver.resolve(user.id, "stress-relief")
    second = await resolver.resolve(user.id, "stress-relief")

    assert first.created and second.created
    assert first.conversation.id != second.conversation.id
    db.expire_all()
    assert db.get(User, user.id).conversation_count == 2


async def test_with_id_loads_existing(store, make_user, db):
    user = make_user()
    resolver = ConversationSessionResolver(store)
    created = await resolver.resolve(user.id, "stress-relief")

    loaded = await resolver.resolve(user.id, "emotional-support", created.conversation.id.upper())

    assert not loaded.created
    assert loaded.conversation.id == created.conversation.id
    assert loaded.conversation.goal == "stress-relief"
    db.expire_all()
    assert db.get(User, user.id).conversation_count == 1


async def test_bad_id_is_rejected_before_lookup(store, make_user):
    user = make_user()
    with pytest.raises(InvalidIdException):
        await ConversationSessionResolver(store).resolve(user.id, "stress-relief", "not-an-id")


async def test_foreign_id_is_not_found(store, make_user):
    owner = make_user("owner@example.com")
    other = make_user("other@example.com")
    resolver = ConversationSessionResolver(store)
    created = await resolver.resolve(owner.id, "stress-relief")

    with pytest.raises(ConversationNotFoundException):
        await resolver.resolve(other.id, "stress-relief", created.conversation.id)


async def test_invalid_goal_on_creation(store, make_user):
    user = make_user()
    with pytest.raises(ValidationException):
        await ConversationSessionResolver(store).resolve(user.id, "")


async def test_new_thread_is_stored_with_its_opening_messages(store, make_user):
    user = make_user()
    opening = [
        NewMessage(role="user", content="hello"),
        NewMessage(role="assistant", content="Hi, how are you feeling?"),
    ]

    session = await ConversationSessionResolver(store).resolve(
        user.id, "polite-greetings", initial_messages=opening
    )

    assert session.created
    assert [m.content for m in session.conversation.messages] == ["hello", "Hi, how are you feeling?"]
