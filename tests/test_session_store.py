import pytest

from childcare_qa.messages import Message, Role
from childcare_qa.state import ChatSession, SessionStore


def _assistant(text):
    return Message(role=Role.ASSISTANT, content=text)


def test_pending_then_resolve_appends_in_order():
    store = SessionStore()
    turn = store.append_pending(Message.from_user("hello"))
    assert [m.content for m in store.messages] == ["hello"]
    assert store.pending == 1
    store.resolve(turn, _assistant("hi"))
    assert [m.role for m in store.messages] == [Role.USER, Role.ASSISTANT]
    assert store.pending == 0
    assert store.latest.content == "hi"


def test_overlapping_turns_resolve_in_arrival_order():
    store = SessionStore()
    first = store.append_pending(Message.from_user("q1"))
    second = store.append_pending(Message.from_user("q2"))
    store.resolve(second, _assistant("a2"))
    store.resolve(first, _assistant("a1"))
    assert [m.content for m in store] == ["q1", "q2", "a2", "a1"]


def test_turn_resolves_once():
    store = SessionStore()
    turn = store.append_pending(Message.from_user("q"))
    store.resolve(turn, _assistant("a"))
    with pytest.raises(ValueError):
        store.resolve(turn, _assistant("again"))
    assert len(store) == 2


def test_only_user_messages_can_be_pending():
    with pytest.raises(ValueError):
        SessionStore().append_pending(_assistant("nope"))


def test_messages_snapshot_is_immutable():
    store = SessionStore()
    store.append_pending(Message.from_user("q"))
    snapshot = store.messages
    assert isinstance(snapshot, tuple)
    with pytest.raises(AttributeError):
        snapshot[0].content = "edited"


def test_chat_session_defaults():
    sess = ChatSession(session_id="abc")
    assert sess.loading is False
    assert sess.messages == ()
    assert sess.form.region == "PA"
