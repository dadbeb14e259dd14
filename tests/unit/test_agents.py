"""Tests for the generator agents in docubuddy.agents."""

import json
from datetime import datetime, timezone

import pytest

from docubuddy.agents import (
    ArchitectureWriter,
    BusinessExplainer,
    ChatAssistant,
    ChatQAExtractor,
    DocumentationWriter,
    QAResponder,
    QuestionGenerator,
)
from docubuddy.agents.base import is_openrewrite, repository_context
from docubuddy.agents.chat_assistant import build_context, reply_metrics
from docubuddy.agents.chat_qa_extractor import last_user_message
from docubuddy.agents.qa_responder import external_links
from docubuddy.agents.question_generator import fallback_questions, function_questions
from docubuddy.models.schemas import (
    ChatMessage,
    ChatStyle,
    FunctionAnalysis,
    ProposalType,
    RepositoryRecord,
    ViewMode,
)

from tests.fakes import FakeLLM

NOW = datetime.now(timezone.utc)


def make_repo(owner="acme", name="widgets", language="TypeScript", description="Widget toolkit"):
    return RepositoryRecord(
        id="repo-1",
        github_url=f"https://github.com/{owner}/{name}",
        owner=owner,
        name=name,
        description=description,
        language=language,
        stars=120,
        created_at=NOW,
        updated_at=NOW,
    )


def make_function(name="validateToken", **fields):
    values = dict(
        id="fn-1",
        repository_id="repo-1",
        file_path="src/auth/token.ts",
        function_name=name,
        function_signature=f"{name}(token: string): boolean",
        description="Checks a session token",
        parameters=[{"name": "token", "type": "string"}],
        complexity_level="simple",
        created_at=NOW,
    )
    values.update(fields)
    return FunctionAnalysis(**values)


def make_message(role, content):
    return ChatMessage(id=content, conversation_id="c1", role=role, content=content, created_at=NOW)


# ── Shared helpers ───────────────────────────────────────────────────────────


class TestBaseHelpers:
    def test_repository_context(self):
        context = repository_context(make_repo(description=None, language=None))
        assert "- Name: widgets" in context
        assert "- Description: No description available" in context
        assert "- Language: Not specified" in context
        assert "- URL: https://github.com/acme/widgets" in context

    def test_is_openrewrite(self):
        assert is_openrewrite(make_repo(owner="OpenRewrite", name="rewrite"))
        assert not is_openrewrite(make_repo(owner="openrewrite", name="rewrite-spring"))


# ── QuestionGenerator ────────────────────────────────────────────────────────


class TestQuestionGenerator:
    @pytest.mark.asyncio
    async def test_uses_llm_questions(self):
        reply = json.dumps({"questions": [
            {"question": "How do I build widgets?", "question_type": "setup", "priority": 1},
            {"question": "  ", "question_type": "setup"},
            {"question": "Where is state kept?", "question_type": "architecture"},
        ]})
        llm = FakeLLM([reply])
        questions = await QuestionGenerator(llm).generate(make_repo(), ViewMode.DEV)

        assert [q["question"] for q in questions] == ["How do I build widgets?", "Where is state kept?"]
        assert questions[1]["question_type"] == "architecture"
        assert llm.calls[0]["temperature"] == 0.7
        assert llm.calls[0]["max_tokens"] == 1000
        assert llm.calls[0]["model"] == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_caps_at_five(self):
        reply = json.dumps({"questions": [{"question": f"Q{i}?"} for i in range(8)]})
        questions = await QuestionGenerator(FakeLLM([reply])).generate(make_repo(), ViewMode.BUSINESS)
        assert len(questions) == 5
        assert questions[0]["question_type"] == "benefits"

    @pytest.mark.asyncio
    async def test_unparseable_reply_falls_back(self):
        questions = await QuestionGenerator(FakeLLM(["not json"])).generate(make_repo(), ViewMode.DEV)
        assert questions == fallback_questions(make_repo(), ViewMode.DEV)

    @pytest.mark.asyncio
    async def test_empty_list_falls_back(self):
        llm = FakeLLM(['{"questions": []}'])
        questions = await QuestionGenerator(llm).generate(make_repo(), ViewMode.BUSINESS)
        assert questions[0]["question"] == "What are the main business benefits and key USPs of widgets?"

    @pytest.mark.asyncio
    async def test_prompt_mentions_focus(self):
        llm = FakeLLM()
        await QuestionGenerator(llm).generate(make_repo(owner="openrewrite", name="rewrite"), ViewMode.DEV)
        system = llm.calls[0]["messages"][0]["content"]
        assert "Recipe Development" in system

    def test_fallback_sets(self):
        dev = fallback_questions(make_repo(), ViewMode.DEV)
        assert [q["priority"] for q in dev] == [1, 2, 3, 4, 5]
        assert dev[0] == {
            "question": "How do I set up the development environment for widgets?",
            "question_type": "setup",
            "priority": 1,
        }

        openrewrite = fallback_questions(make_repo(owner="openrewrite", name="rewrite"), ViewMode.BUSINESS)
        assert "ROI" in openrewrite[0]["question"]
        assert {q["question_type"] for q in openrewrite} == {
            "benefits", "business", "workflow", "compliance", "requirements",
        }

    def test_function_questions(self):
        questions = function_questions(make_function())
        assert len(questions) == 5
        assert [q["question_type"] for q in questions] == [
            "developer", "business", "developer", "developer", "business",
        ]
        assert questions[0]["question"] == "How would you test the edge cases for validateToken?"
        assert all(q["function_id"] == "fn-1" for q in questions)


# ── DocumentationWriter ──────────────────────────────────────────────────────


class TestDocumentationWriter:
    def test_prompts_per_type(self):
        writer = DocumentationWriter(FakeLLM())
        function = make_function(usage_example=None)
        assert "comprehensive documentation" in writer.build_prompt(function, ProposalType.DOCUMENTATION)
        assert "unit tests" in writer.build_prompt(function, ProposalType.TEST)
        business = writer.build_prompt(function, "business_logic")
        assert "non-technical stakeholders" in business
        assert "Usage Example: Not provided" in business

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            DocumentationWriter(FakeLLM()).build_prompt(make_function(), "poem")

    @pytest.mark.asyncio
    async def test_write(self):
        llm = FakeLLM(["/** Validates a token. */"])
        content = await DocumentationWriter(llm).write(make_function(), ProposalType.DOCUMENTATION)
        assert content == "/** Validates a token. */"
        call = llm.calls[0]
        assert call["model"] == "gpt-4"
        assert call["temperature"] == 0.3
        assert call["messages"][0]["role"] == "system"
        assert '"token"' in call["messages"][1]["content"]


# ── QAResponder ──────────────────────────────────────────────────────────────


class TestQAResponder:
    def test_external_links(self):
        links = external_links(make_repo(language="Python"))
        assert links[0] == {"title": "widgets Repository", "url": "https://github.com/acme/widgets"}
        assert links[1]["url"] == "https://docs.python.org/3/"

    def test_unknown_language_has_only_repository_link(self):
        assert len(external_links(make_repo(language="Brainfuck"))) == 1
        assert len(external_links(make_repo(language=None))) == 1

    @pytest.mark.asyncio
    async def test_dev_answer(self):
        llm = FakeLLM(["## Implementation\nUse the CLI."])
        item = await QAResponder(llm).answer(make_repo(), "How do I build it?", ViewMode.DEV)

        assert len(llm.calls) == 1
        assert item["answer"] == "## Implementation\nUse the CLI."
        assert item["question_type"] == "development"
        assert item["view_mode"] == "dev"
        assert item["function_id"] == "general"
        assert item["analogy_content"] is None
        assert "software architect" in llm.calls[0]["messages"][0]["content"]
        assert llm.calls[0]["model"] == "gpt-4o"

    @pytest.mark.asyncio
    async def test_business_answer_adds_analogy(self):
        llm = FakeLLM(["Executive summary", "Like a shop with a ledger."])
        item = await QAResponder(llm).answer(make_repo(), "Why use it?", "business", "benefits")

        assert item["answer"] == "Executive summary"
        assert item["analogy_content"] == "Like a shop with a ledger."
        assert item["question_type"] == "benefits"
        assert item["view_mode"] == "business"
        analogy_call = llm.calls[1]
        assert analogy_call["temperature"] == 0.7
        assert analogy_call["max_tokens"] == 150
        assert analogy_call["model"] == "gpt-4o-mini"
        assert [m["role"] for m in analogy_call["messages"]] == ["user"]


# ── ChatAssistant ────────────────────────────────────────────────────────────


class TestChatAssistant:
    def test_build_context_limits_functions(self):
        functions = [make_function(name=f"f{i}", id=f"fn-{i}") for i in range(12)]
        context = build_context(make_repo(), functions)
        assert "- 10 functions analyzed" in context
        assert "f9: simple" in context
        assert "f10" not in context

    def test_build_context_without_functions(self):
        context = build_context(make_repo(language=None), [])
        assert "Repository: widgets (Mixed)" in context
        assert "- File Structure: Not analyzed" in context

    def test_reply_metrics(self):
        assert reply_metrics("```ts\nx\n```", ChatStyle.DEVELOPER)["code_examples"] == "Yes"
        business = reply_metrics("plain", ChatStyle.BUSINESS)
        assert set(business) == {"business_impact", "risk_level", "code_examples"}
        assert business["code_examples"] == "Patterns Included"

    @pytest.mark.asyncio
    async def test_reply_sends_history(self):
        llm = FakeLLM(["Here is how."])
        history = [make_message("user", "hi"), make_message("assistant", "hello")]
        reply = await ChatAssistant(llm).reply(make_repo(), [], history, "How?", ChatStyle.DEVELOPER)

        assert reply.response == "Here is how."
        assert reply.response_style == ChatStyle.DEVELOPER
        call = llm.calls[0]
        assert [m["role"] for m in call["messages"]] == ["system", "user", "assistant", "user"]
        assert call["messages"][-1]["content"] == "How?"
        assert "Technical Context:" in call["messages"][0]["content"]
        assert call["temperature"] == 0.6
        assert call["max_tokens"] == 1200

    @pytest.mark.asyncio
    async def test_business_style(self):
        llm = FakeLLM()
        reply = await ChatAssistant(llm).reply(make_repo(), [], [], "Cost?", "business")
        assert reply.response_style == ChatStyle.BUSINESS
        assert llm.calls[0]["temperature"] == 0.7
        assert "Business Context:" in llm.calls[0]["messages"][0]["content"]


# ── ChatQAExtractor ──────────────────────────────────────────────────────────


class TestChatQAExtractor:
    messages = [
        make_message("user", "How do tokens expire?"),
        make_message("assistant", "After an hour."),
    ]

    def test_last_user_message(self):
        assert last_user_message(self.messages) == "How do tokens expire?"
        assert last_user_message([make_message("assistant", "only me")]) == "only me"
        assert last_user_message([]) == ""

    @pytest.mark.asyncio
    async def test_extract(self):
        llm = FakeLLM(['{"question": "When do tokens expire?", "questionType": "architecture", "viewMode": "dev"}'])
        extracted = await ChatQAExtractor(llm).extract(make_repo(), self.messages)
        assert extracted.question == "When do tokens expire?"
        assert extracted.question_type == "architecture"
        assert extracted.view_mode == ViewMode.DEV
        assert "user: How do tokens expire?" in llm.calls[0]["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_invalid_view_mode_defaults_to_dev(self):
        llm = FakeLLM(['{"question": "Why?", "viewMode": "executive"}'])
        extracted = await ChatQAExtractor(llm).extract(make_repo(), self.messages)
        assert extracted.view_mode == ViewMode.DEV
        assert extracted.question_type == "general"

    @pytest.mark.asyncio
    async def test_unparseable_uses_last_user_message(self):
        extracted = await ChatQAExtractor(FakeLLM(["nope"])).extract(make_repo(), self.messages, function_id="fn-1")
        assert extracted.question == "How do tokens expire?"
        assert extracted.question_type == "development"
        assert extracted.view_mode == ViewMode.DEV

    @pytest.mark.asyncio
    async def test_fallback_answer(self):
        llm = FakeLLM(["Short answer"])
        assert await ChatQAExtractor(llm).fallback_answer(make_repo(), self.messages) == "Short answer"
        assert llm.calls[0]["temperature"] == 0.5
        assert llm.calls[0]["max_tokens"] == 1000


# ── ArchitectureWriter and BusinessExplainer ─────────────────────────────────


class TestArchitectureWriter:
    @pytest.mark.asyncio
    async def test_one_call_per_section(self):
        llm = FakeLLM(["overview text", "flow text"])
        sections = await ArchitectureWriter(llm).write(make_repo(), [make_function()])

        assert [s["section_type"] for s in sections] == ["overview", "data_flow"]
        assert [s["title"] for s in sections] == ["Architecture Overview", "Data Flow"]
        assert [s["content"] for s in sections] == ["overview text", "flow text"]
        assert [s["order_index"] for s in sections] == [1, 2]
        assert "validateToken (src/auth/token.ts)" in llm.calls[0]["messages"][1]["content"]


class TestBusinessExplainer:
    @pytest.mark.asyncio
    async def test_parses_explanations(self):
        reply = json.dumps({"explanations": [
            {"category": "value", "question": "Why?", "answer": "Saves time"},
            {"category": "risk", "question": "Empty"},
            {"question": "Who?", "answer": "Product teams"},
        ]})
        explanations = await BusinessExplainer(FakeLLM([reply])).explain(make_repo())
        assert explanations == [
            {"category": "value", "question": "Why?", "answer": "Saves time", "order_index": 1},
            {"category": "general", "question": "Who?", "answer": "Product teams", "order_index": 2},
        ]

    @pytest.mark.asyncio
    async def test_unusable_reply(self):
        assert await BusinessExplainer(FakeLLM(["prose only"])).explain(make_repo()) == []
        assert await BusinessExplainer(FakeLLM(['{"explanations": "none"}'])).explain(make_repo()) == []
