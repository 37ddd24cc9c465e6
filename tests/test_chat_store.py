"""Chat store: lazy chats, active cursor, ordinal lookup and unread counts."""
import itertools

from voicechat.core.chat_store import DEMO_SEED, ChatStore
from voicechat.core.config import SELF_SENDER


def fake_clock(values):
    it = iter(values)
    return lambda: next(it)


def unread_invariant_holds(store: ChatStore) -> bool:
    return all(
        chat.unread_count
        == sum(1 for m in chat.messages if not m.read and m.sender != SELF_SENDER)
        for chat in store.chats()
    )


def test_ensure_chat_is_case_insensitive():
    store = ChatStore()
    a = store.ensure_chat("Sam")
    b = store.ensure_chat("sam")
    assert a is b
    assert a.contact.display_name == "Sam"
    assert len(store.chats()) == 1


def test_unknown_contact_gets_empty_chat():
    store = ChatStore()
    chat = store.set_active_chat("John")
    assert store.get_active_chat() is chat
    assert chat.last_message is None
    assert chat.unread_count == 0


def test_clear_active_chat():
    store = ChatStore()
    store.set_active_chat("Sam")
    assert store.set_active_chat(None) is None
    assert store.get_active_chat() is None
    assert store.get_chat("sam") is not None


def test_append_message_sets_read_by_sender():
    store = ChatStore()
    theirs = store.append_message("Sam", "Sam", "hi")
    mine = store.append_message("sam", SELF_SENDER, "hello")
    chat = store.get_chat("SAM")
    assert theirs.read is False
    assert mine.read is True
    assert chat.last_message is mine
    assert chat.unread_count == 1


def test_message_ids_unique_across_store():
    store = ChatStore()
    ids = [
        store.append_message(name, name, f"msg {i}").id
        for name, i in itertools.product(["a", "b", "c"], range(20))
    ]
    assert len(set(ids)) == len(ids)


def test_timestamps_never_go_backwards():
    store = ChatStore(clock=fake_clock([10.0, 5.0, 12.0]))
    ts = [store.append_message("a", "a", str(i)).timestamp for i in range(3)]
    assert ts == [10.0, 10.0, 12.0]


def test_find_by_ordinal_excludes_self():
    store = ChatStore()
    first = store.append_message("Sam", "Sam", "one")
    second = store.append_message("Sam", "Sam", "two")
    store.append_message("Sam", SELF_SENDER, "mine")

    assert store.find_message_by_ordinal_from_end("sam", 1) is second
    assert store.find_message_by_ordinal_from_end("sam", 2) is first
    assert store.find_message_by_ordinal_from_end("sam", 3) is None
    assert store.find_message_by_ordinal_from_end("sam", 0) is None
    assert store.find_message_by_ordinal_from_end("sam", 1, exclude_self=False).content == "mine"
    assert store.find_message_by_ordinal_from_end("nobody", 1) is None


def test_mark_read_and_missing_ids():
    store = ChatStore()
    msg = store.append_message("Sam", "Sam", "hi")
    store.mark_read("sam", "no-such-id")
    store.mark_read("nobody", msg.id)
    assert store.get_chat("sam").unread_count == 1
    store.mark_read("Sam", msg.id)
    assert msg.read is True
    assert store.get_chat("sam").unread_count == 0


def test_seed_and_unread_messages():
    store = ChatStore()
    store.seed(DEMO_SEED)
    store.seed({"Ann": [{"sender": "Ann", "content": "seen", "read": True}]})

    names = [c.contact.display_name for c in store.chats()]
    assert names == ["Sam", "John", "Ann"]
    assert store.get_chat("sam").unread_count == 2
    assert store.get_chat("ann").unread_count == 0
    assert [m.content for m in store.unread_messages()] == [
        "Hey, are you free tonight?",
        "We could grab dinner somewhere",
        "The meeting is at 3 PM",
    ]


def test_unread_count_invariant_after_mixed_operations():
    store = ChatStore()
    store.seed(DEMO_SEED)
    assert unread_invariant_holds(store)

    store.append_message("Sam", SELF_SENDER, "sure")
    assert unread_invariant_holds(store)
    store.append_message("Zoe", "Zoe", "new here")
    assert unread_invariant_holds(store)
    target = store.find_message_by_ordinal_from_end("sam", 2)
    store.mark_read("sam", target.id)
    assert unread_invariant_holds(store)
    store.set_active_chat("Bob")
    store.set_active_chat(None)
    assert unread_invariant_holds(store)
    assert store.get_chat("sam").unread_count == 1
