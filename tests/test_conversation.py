"""Unit tests for the conversation store."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from codexchat.conversation import ConversationStore, Message, Role
from codexchat.errors import InvalidStateError, UnknownMessageError


def _build(roles: list[Role]) -> ConversationStore:
    store = ConversationStore()
    for role in roles:
        store.append(Message.user("hello") if role is Role.USER else Message.system())
    return store


class TestMessage:
    """Tests for Message constructors."""

    def test_user_message_is_completed(self):
        """Test that user text is final on creation."""
        message = Message.user("hello")

        assert message.role == Role.USER
        assert message.content == "hello"
        assert message.completed is True
        assert message.is_user

    def test_system_message_starts_pending(self):
        """Test that a reply starts empty and incomplete."""
        message = Message.system()

        assert message.role == Role.SYSTEM
        assert message.content == ""
        assert message.completed is False
        assert not message.upvoted and not message.downvoted

    def test_ids_are_unique(self):
        """Test that generated ids do not collide."""
        ids = {Message.system().id for _ in range(100)}
        assert len(ids) == 100


class TestPartition:
    """Tests for ConversationStore.partition()."""

    def test_empty_log_has_no_sections(self, store):
        """Test that an empty log yields no sections."""
        assert store.partition() == []
        assert store.active_section is None

    def test_first_user_message_does_not_open_empty_section(self, store):
        """Test that no empty leading section is created."""
        store.append(Message.user("hello"))
        store.append(Message.system())

        sections = store.partition()

        assert len(sections) == 1
        assert len(sections[0]) == 2
        assert sections[0].is_new_section is False
        assert sections[0].is_active is True
        assert sections[0].id == "section-0"

    def test_each_new_prompt_opens_a_section(self, store):
        """Test that every later user message starts a new section."""
        for prompt in ("one", "two", "three"):
            store.append(Message.user(prompt))
            store.append(Message.system())

        sections = store.partition()

        assert [len(section) for section in sections] == [2, 2, 2]
        assert [section.messages[0].content for section in sections] == ["one", "two", "three"]
        assert [section.is_active for section in sections] == [False, False, True]
        assert [section.is_new_section for section in sections] == [False, True, True]

    def test_sections_share_message_objects(self, store):
        """Test that sections reference the stored messages, not copies."""
        reply = store.append(Message.system())
        assert store.partition()[0].messages[0] is reply

    @given(st.lists(st.sampled_from([Role.USER, Role.SYSTEM]), max_size=30))
    def test_partition_covers_log_in_order(self, roles: list[Role]):
        """Property test: sections concatenate back to the log."""
        store = _build(roles)

        sections = store.partition()

        flattened = [message for section in sections for message in section.messages]
        assert flattened == list(store.messages)
        assert all(len(section) > 0 for section in sections)

    @given(st.lists(st.sampled_from([Role.USER, Role.SYSTEM]), min_size=1, max_size=30))
    def test_sections_start_at_user_messages(self, roles: list[Role]):
        """Property test: one section per later user message, plus the first."""
        store = _build(roles)

        sections = store.partition()

        later_prompts = sum(1 for role in roles[1:] if role is Role.USER)
        assert len(sections) == 1 + later_prompts
        for section in sections[1:]:
            assert section.messages[0].role == Role.USER
        assert [section.is_active for section in sections].count(True) == 1
        assert sections[-1].is_active
        assert [section.index for section in sections] == list(range(len(sections)))


class TestLookups:
    """Tests for message lookups."""

    def test_get_unknown_id_raises(self, store):
        """Test that an unknown id raises UnknownMessageError."""
        with pytest.raises(UnknownMessageError, match="Unknown message: nope"):
            store.get("nope")

    def test_unknown_message_error_is_key_error(self, store):
        """Test that lookups can also be caught as KeyError."""
        with pytest.raises(KeyError):
            store.set_content("nope", "x")

    def test_duplicate_id_rejected(self, store):
        """Test that appending the same id twice fails."""
        message = store.append(Message.system())
        with pytest.raises(ValueError, match="Duplicate"):
            store.append(Message(role=Role.SYSTEM, id=message.id))

    def test_membership_by_id(self, store):
        """Test that `in` checks message ids."""
        reply = store.append(Message.system())

        assert reply.id in store
        assert "missing" not in store

    def test_last_reply(self, store):
        """Test that last_reply returns the latest system message."""
        assert store.last_reply() is None
        store.append(Message.user("one"))
        first = store.append(Message.system())
        store.append(Message.user("two"))

        assert store.last_reply() is first

    def test_prompt_for_finds_nearest_user_message(self, store):
        """Test that a reply's prompt is the user message before it."""
        store.append(Message.user("one"))
        store.append(Message.system())
        second = store.append(Message.user("two"))
        reply = store.append(Message.system())

        assert store.prompt_for(reply.id) is second

    def test_prompt_for_without_prompt(self, store):
        """Test that a reply with no prompt before it has none."""
        reply = store.append(Message.system())
        assert store.prompt_for(reply.id) is None


class TestMutations:
    """Tests for content and state changes."""

    def test_append_content_and_notify(self, store, record_contents):
        """Test that writes notify listeners with the new content."""
        reply = store.append(Message.system())
        seen = record_contents(reply.id)

        store.append_content(reply.id, "hi ")
        store.append_content(reply.id, "there ")

        assert seen == ["hi ", "hi there "]

    def test_removed_listener_is_not_called(self, store):
        """Test that remove_listener stops notifications."""
        calls = []
        store.add_listener(calls.append)
        store.remove_listener(calls.append)

        store.append(Message.system())

        assert calls == []

    def test_write_to_completed_message_fails(self, store):
        """Test that completed messages are read-only."""
        reply = store.append(Message.system())
        store.mark_completed(reply.id, "done")

        with pytest.raises(InvalidStateError):
            store.append_content(reply.id, "more")
        with pytest.raises(InvalidStateError):
            store.set_content(reply.id, "other")

    def test_mark_completed_is_idempotent(self, store):
        """Test that completing twice with the same text is a no-op."""
        reply = store.append(Message.system())
        store.mark_completed(reply.id, "done")
        store.mark_completed(reply.id, "done")

        assert reply.content == "done"
        assert reply.completed

    def test_mark_completed_with_other_text_fails(self, store):
        """Test that a completed message cannot be completed differently."""
        reply = store.append(Message.system())
        store.mark_completed(reply.id, "done")

        with pytest.raises(InvalidStateError):
            store.mark_completed(reply.id, "changed")
        assert reply.content == "done"

    def test_reopen_clears_message(self, store):
        """Test that reopen resets content and completion."""
        reply = store.append(Message.system())
        store.mark_completed(reply.id, "done")

        store.reopen(reply.id)

        assert reply.content == ""
        assert reply.completed is False
        store.append_content(reply.id, "again ")
        assert reply.content == "again "

    def test_votes_are_mutually_exclusive(self, store):
        """Test that up and down votes clear each other."""
        reply = store.append(Message.system())

        store.toggle_upvote(reply.id)
        assert reply.upvoted and not reply.downvoted

        store.toggle_downvote(reply.id)
        assert reply.downvoted and not reply.upvoted

        store.toggle_downvote(reply.id)
        assert not reply.downvoted and not reply.upvoted

    def test_clear(self, store):
        """Test that clear empties the log."""
        reply = store.append(Message.system())
        store.clear()

        assert len(store) == 0
        assert reply.id not in store
        assert store.partition() == []
