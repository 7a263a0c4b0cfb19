"""Unit tests for the exchange controller."""
import asyncio

import pytest

from clinscribe.conversations import Message, Role
from clinscribe.errors import GenerationError, MessageTooLongError, MissingCredentialError
from clinscribe.exchange import (
    CancellationToken,
    Credentials,
    ExchangeController,
    ExchangeState,
    build_request_messages,
    build_system_prompt,
    office_visit_message,
    sanitize_response,
)
from clinscribe.llm import FALLBACK_MODEL
from clinscribe.sections import extract_sections


class TestSend:
    """Tests for ExchangeController.send."""

    async def test_end_to_end(self, store, credentials, make_llm):
        """Test that a transcript produces a recorded note."""
        llm = make_llm()
        controller = ExchangeController(store, llm, credentials)

        conversation = await controller.send("chest pain 2 hours")

        assert [m.role for m in conversation.messages] == [Role.USER, Role.ASSISTANT]
        assert conversation.messages[0].content == "chest pain 2 hours"
        assert extract_sections(conversation.messages[1].content).document == "HPI: chest pain x2h"
        assert store.selected is conversation
        assert controller.has_output
        assert not controller.loading
        assert controller.state == ExchangeState.IDLE

    async def test_request_shape(self, store, credentials, make_llm):
        """Test that the system instruction precedes the full history."""
        llm = make_llm()
        controller = ExchangeController(store, llm, credentials, sign_off="Dr. Smith")
        conversation = await store.create_conversation(prompt="ED Triage Note", temperature=0.4)

        await controller.send("first")

        request = llm.requests[0]
        roles = [m.role for m in request["messages"]]
        assert roles == ["system", "user"]
        assert "Dr. Smith" in request["messages"][0].content
        assert "ED Triage Note" in request["messages"][0].content
        assert request["model"] == conversation.model.id
        assert request["temperature"] == 0.4

    async def test_missing_credential_changes_nothing(self, store, make_llm):
        """Test that sending without a key is rejected before any mutation."""
        conversation = await store.create_conversation()
        llm = make_llm()
        controller = ExchangeController(store, llm, Credentials())

        with pytest.raises(MissingCredentialError):
            await controller.send("chest pain")

        assert store.selected is conversation
        assert store.selected.messages == ()
        assert llm.requests == []

    async def test_message_too_long(self, store, credentials, make_llm):
        """Test that an oversized message is rejected before any mutation."""
        await store.create_conversation()
        controller = ExchangeController(store, make_llm(), credentials)

        with pytest.raises(MessageTooLongError) as exc_info:
            await controller.send("x" * (FALLBACK_MODEL.max_length + 1))

        assert exc_info.value.max_length == FALLBACK_MODEL.max_length
        assert store.selected.messages == ()

    async def test_failure_keeps_user_message(self, store, credentials, make_llm):
        """Test that a failed call leaves the user message and clears loading."""
        llm = make_llm([ConnectionError("network down")])
        controller = ExchangeController(store, llm, credentials)

        with pytest.raises(GenerationError) as exc_info:
            await controller.send("chest pain")

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert [m.content for m in store.selected.messages] == ["chest pain"]
        assert exc_info.value.conversation_id == store.selected.id
        assert not controller.loading
        assert not controller.has_output

    async def test_failure_is_not_retried(self, store, credentials, make_llm):
        llm = make_llm([ConnectionError("network down")])
        controller = ExchangeController(store, llm, credentials)

        with pytest.raises(GenerationError):
            await controller.send("chest pain")

        assert len(llm.requests) == 1

    async def test_response_is_sanitized(self, store, credentials, make_llm):
        """Test that annotations and emphasis are stripped from the reply."""
        llm = make_llm(["**Clinical Document:**\nHPI [verify]: pain"])
        controller = ExchangeController(store, llm, credentials)

        conversation = await controller.send("pain")

        assert conversation.messages[-1].content == "Clinical Document:\nHPI : pain"

    async def test_state_transitions(self, store, credentials, make_llm):
        """Test that every phase is reported in order."""
        states: list[ExchangeState] = []
        controller = ExchangeController(
            store, make_llm(), credentials, on_state_change=states.append
        )

        await controller.send("pain")

        assert states == [
            ExchangeState.SENDING,
            ExchangeState.AWAITING_RESPONSE,
            ExchangeState.COMPLETED,
            ExchangeState.IDLE,
        ]

    async def test_failed_state_transitions(self, store, credentials, make_llm):
        states: list[ExchangeState] = []
        controller = ExchangeController(
            store,
            make_llm([RuntimeError("boom")]),
            credentials,
            on_state_change=states.append,
        )

        with pytest.raises(GenerationError):
            await controller.send("pain")

        assert states[-2:] == [ExchangeState.FAILED, ExchangeState.IDLE]

    async def test_plugin_is_accepted(self, store, credentials, make_llm):
        """Test that a plugin id does not change the request."""
        llm = make_llm()
        controller = ExchangeController(store, llm, credentials)

        await controller.send("pain", plugin="google-search")

        assert [m.role for m in llm.requests[0]["messages"]] == ["system", "user"]


class TestRegenerate:
    """Tests for ExchangeController.regenerate."""

    async def test_regenerate_replaces_last_exchange(self, store, credentials, make_llm):
        """Test that regenerating keeps a single user/assistant pair."""
        llm = make_llm(["first note", "second note"])
        controller = ExchangeController(store, llm, credentials)
        await controller.send("chest pain")

        conversation = await controller.regenerate()

        assert [m.content for m in conversation.messages] == ["chest pain", "second note"]
        assert [m.role for m in llm.requests[1]["messages"]] == ["system", "user"]

    async def test_regenerate_keeps_earlier_history(self, store, credentials, make_llm):
        llm = make_llm(["A1", "A2", "A2 again"])
        controller = ExchangeController(store, llm, credentials)
        await controller.send("U1")
        await controller.send("U2")

        conversation = await controller.regenerate()

        assert [m.content for m in conversation.messages] == ["U1", "A1", "U2", "A2 again"]

    async def test_regenerate_without_messages(self, store, credentials, make_llm):
        """Test that there is nothing to regenerate in an empty conversation."""
        conversation = await store.create_conversation()
        llm = make_llm()
        controller = ExchangeController(store, llm, credentials)

        assert await controller.regenerate() is conversation
        assert llm.requests == []


class TestCancellation:
    """Tests for CancellationToken."""

    async def test_cancelled_response_is_discarded(self, store, credentials, make_llm):
        """Test that a reply arriving after cancel is not recorded."""
        token = CancellationToken()
        llm = make_llm()
        controller = ExchangeController(store, llm, credentials, cancellation=token)
        token.cancel()

        conversation = await controller.send("chest pain")

        assert [m.content for m in conversation.messages] == ["chest pain"]
        assert not controller.has_output
        assert not controller.loading

    async def test_explicit_reset(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancelled

        token.reset()
        assert not token.cancelled

    async def test_auto_reset(self):
        """Test that the flag clears itself after the configured delay."""
        token = CancellationToken(auto_reset_after=0.01)
        token.cancel()
        assert token.cancelled

        await asyncio.sleep(0.05)

        assert not token.cancelled

    def test_cancel_outside_event_loop(self):
        """Test that auto reset is skipped when no loop is running."""
        token = CancellationToken(auto_reset_after=0.01)

        token.cancel()

        assert token.cancelled
        token.reset()
        assert not token.cancelled


class TestRequest:
    """Tests for request assembly helpers."""

    def test_credentials_host_key_wins(self):
        assert Credentials(host_key="host", user_key="user").resolve() == "host"
        assert Credentials(user_key="user").resolve() == "user"
        assert Credentials(host_key="", user_key="").resolve() is None
        assert not Credentials().available

    async def test_system_prompt_placeholder_sign_off(self, store):
        """Test that a blank sign-off is replaced by a visible placeholder."""
        conversation = await store.create_conversation(prompt="transcript text")

        prompt = build_system_prompt(conversation, sign_off="   ")

        assert "[Provider sign-off here]" in prompt
        assert "transcript text" in prompt
        assert "Potential Transcription Errors" in prompt

    async def test_request_messages_include_history(self, store):
        conversation = await store.append_message(None, Message.user("U1"))
        conversation = await store.append_message(conversation, Message.assistant("A1"))

        messages = build_request_messages(conversation)

        assert [m.role for m in messages] == ["system", "user", "assistant"]
        assert [m.content for m in messages[1:]] == ["U1", "A1"]

    def test_office_visit_message(self):
        """Test wrapping a transcription as a progress note request."""
        message = office_visit_message("  patient reports cough  ")

        assert message.role == Role.USER
        assert "progress note" in message.content
        assert message.content.endswith("patient reports cough")

    def test_sanitize_response(self):
        assert sanitize_response("a [note] *b*") == "a  b"
        assert sanitize_response(None) == ""
