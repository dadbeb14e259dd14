"""Tests for docubuddy.services.store: sqlite persistence."""

import sqlite3

import pytest

from docubuddy.models.schemas import (
    AnalysisStatus,
    ChatStyle,
    ComplexityLevel,
    ProposalStatus,
    ProposalType,
    ViewMode,
)

from tests.fakes import REPO_URL


def add_function(store, repository_id, name="validateToken", **fields):
    values = {
        "file_path": "src/auth.ts",
        "function_name": name,
        "description": f"{name} does things",
    }
    values.update(fields)
    return store.create_function_analysis(repository_id, **values)


# ── Repositories ─────────────────────────────────────────────────────────────


class TestRepositories:
    def test_create_defaults(self, store):
        record = store.create_repository(REPO_URL, "acme", "widgets")
        assert record.status == AnalysisStatus.PENDING
        assert record.stars == 0
        assert record.analyzed_at is None
        assert store.get_repository_by_url(REPO_URL).id == record.id

    def test_url_is_unique(self, store):
        store.create_repository(REPO_URL, "acme", "widgets")
        with pytest.raises(sqlite3.IntegrityError):
            store.create_repository(REPO_URL, "acme", "widgets")

    def test_missing(self, store):
        assert store.get_repository("nope") is None
        assert store.get_repository_by_url("https://github.com/x/y") is None

    def test_completed_sets_analyzed_at(self, store):
        record = store.create_repository(REPO_URL, "acme", "widgets")
        analyzing = store.set_repository_status(record.id, AnalysisStatus.ANALYZING)
        assert analyzing.analyzed_at is None
        completed = store.set_repository_status(record.id, AnalysisStatus.COMPLETED)
        assert completed.status == AnalysisStatus.COMPLETED
        assert completed.analyzed_at is not None

    def test_list_newest_first_with_filter(self, store):
        first = store.create_repository("https://github.com/a/one", "a", "one")
        second = store.create_repository("https://github.com/a/two", "a", "two")
        store.set_repository_status(first.id, AnalysisStatus.COMPLETED)

        assert [r.id for r in store.list_repositories()] == [second.id, first.id]
        assert [r.id for r in store.list_repositories(status=AnalysisStatus.COMPLETED)] == [first.id]
        assert len(store.list_repositories(limit=1)) == 1

    def test_delete_cascades(self, store, repository):
        function = add_function(store, repository.id)
        store.insert_qa_items(repository.id, [{"question": "Q?", "question_type": "setup"}])
        store.create_proposal(repository.id, function.id, function.function_name, "test", "draft")
        conversation = store.create_conversation(repository.id, "developer")
        store.add_messages(conversation.id, [("user", "hi")])
        store.replace_architecture_docs(repository.id, [
            {"section_type": "overview", "title": "Overview", "content": "..."},
        ])

        assert store.delete_repository(repository.id) is True
        assert store.get_repository(repository.id) is None
        assert store.get_function_analysis(function.id) is None
        assert store.list_qa_items(repository.id) == []
        assert store.get_conversation(conversation.id) is None
        assert store.list_messages(conversation.id) == []
        assert store.list_architecture_docs(repository.id) == []

    def test_delete_missing(self, store):
        assert store.delete_repository("nope") is False


# ── Function analyses ────────────────────────────────────────────────────────


class TestFunctionAnalyses:
    def test_round_trip_json_columns(self, store, repository):
        function = add_function(
            store,
            repository.id,
            parameters=[{"name": "token", "type": "string"}],
            tags=["auth", "security"],
            complexity_level="moderate",
        )
        loaded = store.get_function_analysis(function.id)
        assert loaded.parameters == [{"name": "token", "type": "string"}]
        assert loaded.tags == ["auth", "security"]
        assert loaded.complexity_level == ComplexityLevel.MODERATE

    def test_missing_tags_default_to_empty(self, store, repository):
        assert add_function(store, repository.id).tags == []

    def test_list_in_insertion_order_with_limit(self, store, repository):
        for name in ["a", "b", "c"]:
            add_function(store, repository.id, name=name)
        assert [f.function_name for f in store.list_function_analyses(repository.id)] == ["a", "b", "c"]
        assert len(store.list_function_analyses(repository.id, limit=2)) == 2


# ── Q&A items ────────────────────────────────────────────────────────────────


class TestQAItems:
    def test_defaults(self, store, repository):
        item = store.insert_qa_items(repository.id, [{"question": "Q?", "question_type": "setup"}])[0]
        assert item.function_id == "general"
        assert item.function_name == "General"
        assert item.answer is None
        assert item.view_mode is None
        assert item.external_links == []
        assert item.is_approved is False

    def test_filters(self, store, repository):
        store.insert_qa_items(repository.id, [
            {"question": "Dev?", "question_type": "setup", "view_mode": "dev"},
            {"question": "Biz?", "question_type": "benefits", "view_mode": "business"},
            {"question": "Fn?", "question_type": "developer", "function_id": "f1", "function_name": "f"},
        ])
        assert [i.question for i in store.list_qa_items(repository.id, view_mode="business")] == ["Biz?"]
        assert [i.question for i in store.list_qa_items(repository.id, function_id="f1")] == ["Fn?"]
        assert len(store.list_qa_items(repository.id)) == 3

    def test_external_links_round_trip(self, store, repository):
        item = store.insert_qa_items(repository.id, [{
            "question": "Q?",
            "question_type": "business",
            "view_mode": ViewMode.BUSINESS.value,
            "external_links": [{"title": "widgets Repository", "url": REPO_URL}],
            "analogy_content": "Like a toolbox.",
        }])[0]
        assert item.external_links[0].url == REPO_URL
        assert item.analogy_content == "Like a toolbox."

    def test_approve(self, store, repository):
        item = store.insert_qa_items(repository.id, [{"question": "Q?", "question_type": "setup"}])[0]
        assert store.approve_qa_item(item.id).is_approved is True
        assert store.approve_qa_item("missing") is None

    def test_delete_starter_questions(self, store, repository):
        starter, answered, approved, function_q = store.insert_qa_items(repository.id, [
            {"question": "Starter?", "question_type": "setup", "view_mode": "dev"},
            {"question": "Answered?", "answer": "Yes", "question_type": "setup"},
            {"question": "Approved?", "question_type": "setup"},
            {"question": "Fn?", "question_type": "developer", "function_id": "f1", "function_name": "f"},
        ])
        store.approve_qa_item(approved.id)

        assert store.delete_starter_questions(repository.id) == [starter.id]
        remaining = {i.id for i in store.list_qa_items(repository.id)}
        assert remaining == {answered.id, approved.id, function_q.id}
        assert store.delete_starter_questions(repository.id) == []

    def test_count_rows(self, store, repository):
        store.insert_qa_items(repository.id, [
            {"question": "1?", "question_type": "setup"},
            {"question": "2?", "question_type": "setup"},
        ])
        assert store.count_rows("function_qa", repository.id) == 2
        assert store.count_rows("function_analyses", repository.id) == 0

    def test_count_rows_rejects_unknown_table(self, store, repository):
        with pytest.raises(ValueError):
            store.count_rows("repositories; DROP TABLE x", repository.id)


# ── Proposals ────────────────────────────────────────────────────────────────


class TestProposals:
    def test_create_and_update(self, store, repository):
        function = add_function(store, repository.id)
        proposal = store.create_proposal(
            repository.id, function.id, function.function_name, "documentation", "/** docs */"
        )
        assert proposal.status == ProposalStatus.PENDING
        assert proposal.proposal_type == ProposalType.DOCUMENTATION

        updated = store.update_proposal(proposal.id, status=ProposalStatus.APPROVED, user_content="edited")
        assert updated.status == ProposalStatus.APPROVED
        assert updated.user_content == "edited"
        assert updated.ai_generated_content == "/** docs */"

    def test_list_by_function(self, store, repository):
        one = add_function(store, repository.id, name="one")
        two = add_function(store, repository.id, name="two")
        store.create_proposal(repository.id, one.id, "one", "test", "t1")
        store.create_proposal(repository.id, two.id, "two", "test", "t2")
        assert [p.function_name for p in store.list_proposals(repository.id, function_id=two.id)] == ["two"]
        assert len(store.list_proposals(repository.id)) == 2


# ── Chat ─────────────────────────────────────────────────────────────────────


class TestChat:
    def test_messages_keep_order(self, store, repository):
        conversation = store.create_conversation(repository.id, "business", title="Pricing")
        assert conversation.conversation_type == ChatStyle.BUSINESS

        stored = store.add_messages(conversation.id, [("user", "first"), ("assistant", "second")])
        assert [m.role for m in stored] == ["user", "assistant"]
        store.add_messages(conversation.id, [("user", "third")])
        assert [m.content for m in store.list_messages(conversation.id)] == ["first", "second", "third"]

    def test_list_conversations(self, store, repository):
        store.create_conversation(repository.id, "developer")
        store.create_conversation(repository.id, "business")
        assert len(store.list_conversations(repository.id)) == 2
        assert store.list_conversations("other") == []


# ── Architecture docs and business explanations ──────────────────────────────


class TestDocuments:
    def test_replace_architecture_docs(self, store, repository):
        store.replace_architecture_docs(repository.id, [
            {"section_type": "overview", "title": "Old", "content": "old"},
        ])
        docs = store.replace_architecture_docs(repository.id, [
            {"section_type": "data_flow", "title": "Flow", "content": "b", "order_index": 2},
            {"section_type": "overview", "title": "Overview", "content": "a", "order_index": 1},
        ])
        assert [d.title for d in docs] == ["Overview", "Flow"]

    def test_replace_business_explanations(self, store, repository):
        items = store.replace_business_explanations(repository.id, [
            {"category": "value", "question": "Why?", "answer": "Saves time"},
            {"category": "risk", "answer": "Low"},
        ])
        assert [i.order_index for i in items] == [1, 2]
        assert items[1].question is None
