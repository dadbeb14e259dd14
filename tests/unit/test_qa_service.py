"""Tests for docubuddy.services.qa_service."""

import json

import pytest

from docubuddy.api.middleware.error_handler import LLMError, RecordNotFoundError, RepositoryNotFoundError
from docubuddy.models.schemas import ChatStyle, ProposalStatus, ProposalType, ViewMode


@pytest.fixture
def function(store, repository):
    return store.create_function_analysis(
        repository.id,
        file_path="src/auth.ts",
        function_name="validateToken",
        function_signature="validateToken(token: string): boolean",
        description="Checks a session token",
        complexity_level="simple",
    )


@pytest.fixture
def conversation(store, repository):
    return store.create_conversation(repository.id, "developer", title="Tokens")


# ── Questions and answers ────────────────────────────────────────────────────


class TestQuestions:
    @pytest.mark.asyncio
    async def test_generate_questions(self, qa_service, store, repository, fake_llm, knowledge_service):
        fake_llm.replies = [json.dumps({"questions": [
            {"question": "Who buys widgets?", "question_type": "business"},
        ]})]
        items = await qa_service.generate_questions(repository.id, ViewMode.BUSINESS)

        assert [item.question for item in items] == ["Who buys widgets?"]
        assert items[0].view_mode == ViewMode.BUSINESS
        assert store.list_qa_items(repository.id, view_mode="business") == items
        assert await knowledge_service.vector_store.count() == 1

    @pytest.mark.asyncio
    async def test_generate_questions_unknown_repository(self, qa_service):
        with pytest.raises(RepositoryNotFoundError):
            await qa_service.generate_questions("missing", ViewMode.DEV)

    @pytest.mark.asyncio
    async def test_function_questions(self, qa_service, function):
        items = await qa_service.generate_function_questions(function.id)
        assert len(items) == 5
        assert all(item.function_id == function.id for item in items)
        assert all(item.repository_id == function.repository_id for item in items)
        assert items[1].question_type == "business"

    @pytest.mark.asyncio
    async def test_function_questions_unknown(self, qa_service):
        with pytest.raises(RecordNotFoundError):
            await qa_service.generate_function_questions("missing")

    @pytest.mark.asyncio
    async def test_ask_business(self, qa_service, repository, fake_llm, knowledge_service):
        fake_llm.replies = ["Widgets cut reporting time.", "Like a pre-built kitchen."]
        item = await qa_service.ask(repository.id, "Why adopt widgets?", ViewMode.BUSINESS)

        assert item.answer == "Widgets cut reporting time."
        assert item.analogy_content == "Like a pre-built kitchen."
        assert item.question_type == "business"
        assert [link.title for link in item.external_links] == [
            "widgets Repository",
            "TypeScript Documentation",
        ]
        hits = await knowledge_service.search(repository.id, "reporting time widgets")
        assert hits[0].metadata["source_id"] == item.id

    @pytest.mark.asyncio
    async def test_ask_propagates_llm_errors(self, qa_service, repository, fake_llm):
        fake_llm.replies = [LLMError("No content generated")]
        with pytest.raises(LLMError):
            await qa_service.ask(repository.id, "Why?")


# ── Proposals ────────────────────────────────────────────────────────────────


class TestProposals:
    @pytest.mark.asyncio
    async def test_propose(self, qa_service, function, fake_llm):
        fake_llm.replies = ["describe('validateToken', ...)"]
        proposal = await qa_service.propose(function.id, ProposalType.TEST)

        assert proposal.proposal_type == ProposalType.TEST
        assert proposal.status == ProposalStatus.PENDING
        assert proposal.ai_generated_content == "describe('validateToken', ...)"
        assert proposal.function_name == "validateToken"
        assert "unit tests" in fake_llm.calls[0]["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_propose_unknown_function(self, qa_service):
        with pytest.raises(RecordNotFoundError):
            await qa_service.propose("missing", ProposalType.DOCUMENTATION)


# ── Chat ─────────────────────────────────────────────────────────────────────


class TestChat:
    @pytest.mark.asyncio
    async def test_send_message(self, qa_service, store, conversation, function, fake_llm):
        fake_llm.replies = ["First reply", "Second reply"]
        reply, stored = await qa_service.send_message(conversation.id, "How are tokens checked?")

        assert reply.response == "First reply"
        assert reply.response_style == ChatStyle.DEVELOPER
        assert [(m.role, m.content) for m in stored] == [
            ("user", "How are tokens checked?"),
            ("assistant", "First reply"),
        ]
        assert "validateToken: simple" in fake_llm.calls[0]["messages"][0]["content"]

        await qa_service.send_message(conversation.id, "And expiry?", ChatStyle.BUSINESS)
        second_call = fake_llm.calls[1]
        assert [m["role"] for m in second_call["messages"]] == ["system", "user", "assistant", "user"]
        assert second_call["temperature"] == 0.7
        assert len(store.list_messages(conversation.id)) == 4

    @pytest.mark.asyncio
    async def test_send_message_unknown_conversation(self, qa_service):
        with pytest.raises(RecordNotFoundError):
            await qa_service.send_message("missing", "hi")

    @pytest.mark.asyncio
    async def test_qa_from_chat(self, qa_service, store, repository, conversation, fake_llm):
        store.add_messages(conversation.id, [("user", "how do tokens expire"), ("assistant", "hourly")])
        fake_llm.replies = [
            '{"question": "How do tokens expire?", "questionType": "architecture", "viewMode": "dev"}',
            "Tokens expire after one hour.",
        ]
        result = await qa_service.qa_from_chat(conversation.id)

        assert result.question == "How do tokens expire?"
        assert result.answer == "Tokens expire after one hour."
        assert result.question_type == "architecture"
        assert result.view_mode == ViewMode.DEV
        assert result.qa_item is not None
        assert store.get_qa_item(result.qa_item.id).answer == "Tokens expire after one hour."

    @pytest.mark.asyncio
    async def test_qa_from_chat_falls_back(self, qa_service, store, repository, conversation, fake_llm):
        store.add_messages(conversation.id, [("user", "what does it cost")])
        fake_llm.replies = [
            '{"question": "What does it cost?", "questionType": "business", "viewMode": "business"}',
            LLMError("No content generated"),
            "Cheap answer",
        ]
        result = await qa_service.qa_from_chat(conversation.id)

        assert result.answer == "Cheap answer"
        assert result.qa_item is None
        assert result.view_mode == ViewMode.BUSINESS
        assert store.list_qa_items(repository.id) == []

    @pytest.mark.asyncio
    async def test_qa_from_chat_without_messages(self, qa_service, conversation):
        with pytest.raises(RecordNotFoundError):
            await qa_service.qa_from_chat(conversation.id)
