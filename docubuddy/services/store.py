"""
Store - Relational persistence for everything Docu Buddy generates.

Plain SQL over sqlite3. Each call opens its own short-lived connection, so
one Store instance can be shared by request handlers and background tasks.
Rows come back as the pydantic models in ``docubuddy.models.schemas``.
"""

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from docubuddy.models.schemas import (
    AnalysisStatus,
    ArchitectureDoc,
    BusinessExplanation,
    ChatConversation,
    ChatMessage,
    DocumentationProposal,
    FunctionAnalysis,
    ProposalStatus,
    QAItem,
    RepoMetadata,
    RepositoryRecord,
)

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS repositories (
    id TEXT PRIMARY KEY,
    github_url TEXT NOT NULL UNIQUE,
    owner TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    language TEXT,
    stars INTEGER NOT NULL DEFAULT 0,
    forks INTEGER NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'pending',
    analyzed_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS function_analyses (
    id TEXT PRIMARY KEY,
    repository_id TEXT NOT NULL,
    file_path TEXT NOT NULL,
    function_name TEXT NOT NULL,
    function_signature TEXT,
    description TEXT NOT NULL,
    parameters TEXT,
    return_value TEXT,
    usage_example TEXT,
    complexity_level TEXT,
    tags TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS function_qa (
    id TEXT PRIMARY KEY,
    repository_id TEXT NOT NULL,
    function_id TEXT NOT NULL DEFAULT 'general',
    function_name TEXT NOT NULL DEFAULT 'General',
    question TEXT NOT NULL,
    answer TEXT,
    question_type TEXT NOT NULL,
    view_mode TEXT,
    content_format TEXT NOT NULL DEFAULT 'markdown',
    external_links TEXT,
    analogy_content TEXT,
    is_approved INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS documentation_proposals (
    id TEXT PRIMARY KEY,
    repository_id TEXT NOT NULL,
    function_id TEXT NOT NULL,
    function_name TEXT NOT NULL,
    proposal_type TEXT NOT NULL,
    ai_generated_content TEXT,
    user_content TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS chat_conversations (
    id TEXT PRIMARY KEY,
    repository_id TEXT NOT NULL,
    function_id TEXT,
    conversation_type TEXT NOT NULL,
    title TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS chat_messages (
    id TEXT PRIMARY KEY,
    conversation_id TEXT NOT NULL,
    role TEXT NOT NULL,
    content TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS architecture_docs (
    id TEXT PRIMARY KEY,
    repository_id TEXT NOT NULL,
    section_type TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    order_index INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS business_explanations (
    id TEXT PRIMARY KEY,
    repository_id TEXT NOT NULL,
    category TEXT NOT NULL,
    question TEXT,
    answer TEXT NOT NULL,
    order_index INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_function_analyses_repo ON function_analyses(repository_id);
CREATE INDEX IF NOT EXISTS idx_function_qa_repo ON function_qa(repository_id, function_id);
CREATE INDEX IF NOT EXISTS idx_chat_messages_conversation ON chat_messages(conversation_id);
"""

# Tables keyed by repository_id, removed together with their repository
_REPOSITORY_CHILDREN = [
    "function_analyses",
    "function_qa",
    "documentation_proposals",
    "architecture_docs",
    "business_explanations",
]

_JSON_COLUMNS = {"parameters", "tags", "external_links"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def _decode(row: sqlite3.Row) -> Dict[str, Any]:
    data = dict(row)
    for key in data.keys() & _JSON_COLUMNS:
        value = data[key]
        data[key] = json.loads(value) if value is not None else None
    if data.get("tags") is None and "tags" in data:
        data["tags"] = []
    if data.get("external_links") is None and "external_links" in data:
        data["external_links"] = []
    if "is_approved" in data:
        data["is_approved"] = bool(data["is_approved"])
    return data


@dataclass
class StoreConfig:
    """Configuration for the store."""
    database_path: str = "./data/docubuddy.db"


class Store:
    """
    Repository-centric data access.

    Usage:
        store = Store(StoreConfig(database_path="./data/app.db"))
        store.initialize()
        repo = store.create_repository(url, owner, name)
    """

    def __init__(self, config: Optional[StoreConfig] = None):
        self.config = config or StoreConfig()
        self.database_path = Path(self.config.database_path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the database file and tables if missing."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA)
        logger.info(f"Store ready at {self.database_path}")

    def _insert(self, conn: sqlite3.Connection, table: str, values: Dict[str, Any]) -> None:
        encoded = {
            key: json.dumps(value) if key in _JSON_COLUMNS and value is not None else value
            for key, value in values.items()
        }
        columns = ", ".join(encoded)
        placeholders = ", ".join("?" for _ in encoded)
        conn.execute(
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
            list(encoded.values())
        )

    def _fetch_one(self, sql: str, params: Iterable[Any] = ()) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(sql, list(params)).fetchone()
        return _decode(row) if row else None

    def _fetch_all(self, sql: str, params: Iterable[Any] = ()) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            rows = conn.execute(sql, list(params)).fetchall()
        return [_decode(row) for row in rows]

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    def create_repository(
        self,
        github_url: str,
        owner: str,
        name: str,
        status: AnalysisStatus = AnalysisStatus.PENDING
    ) -> RepositoryRecord:
        now = _now()
        values = {
            "id": _new_id(),
            "github_url": github_url,
            "owner": owner,
            "name": name,
            "status": AnalysisStatus(status).value,
            "created_at": now,
            "updated_at": now,
        }
        with self._connect() as conn:
            self._insert(conn, "repositories", values)
        return self.get_repository(values["id"])

    def get_repository(self, repository_id: str) -> Optional[RepositoryRecord]:
        row = self._fetch_one("SELECT * FROM repositories WHERE id = ?", [repository_id])
        return RepositoryRecord(**row) if row else None

    def get_repository_by_url(self, github_url: str) -> Optional[RepositoryRecord]:
        row = self._fetch_one("SELECT * FROM repositories WHERE github_url = ?", [github_url])
        return RepositoryRecord(**row) if row else None

    def list_repositories(
        self,
        limit: int = 20,
        status: Optional[AnalysisStatus] = None
    ) -> List[RepositoryRecord]:
        sql = "SELECT * FROM repositories"
        params: List[Any] = []
        if status:
            sql += " WHERE status = ?"
            params.append(AnalysisStatus(status).value)
        sql += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)
        return [RepositoryRecord(**row) for row in self._fetch_all(sql, params)]

    def set_repository_status(
        self,
        repository_id: str,
        status: AnalysisStatus
    ) -> Optional[RepositoryRecord]:
        now = _now()
        status = AnalysisStatus(status)
        with self._connect() as conn:
            if status == AnalysisStatus.COMPLETED:
                conn.execute(
                    "UPDATE repositories SET status = ?, analyzed_at = ?, updated_at = ? WHERE id = ?",
                    [status.value, now, now, repository_id]
                )
            else:
                conn.execute(
                    "UPDATE repositories SET status = ?, updated_at = ? WHERE id = ?",
                    [status.value, now, repository_id]
                )
        return self.get_repository(repository_id)

    def apply_metadata(self, repository_id: str, metadata: RepoMetadata) -> Optional[RepositoryRecord]:
        """Copy GitHub metadata onto the repository record."""
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE repositories
                SET description = ?, language = ?, stars = ?, forks = ?, updated_at = ?
                WHERE id = ?
                """,
                [
                    metadata.description,
                    metadata.language,
                    metadata.stars,
                    metadata.forks,
                    _now(),
                    repository_id,
                ]
            )
        return self.get_repository(repository_id)

    def delete_repository(self, repository_id: str) -> bool:
        """Delete a repository with its dependent rows."""
        with self._connect() as conn:
            conversation_ids = [
                row["id"] for row in conn.execute(
                    "SELECT id FROM chat_conversations WHERE repository_id = ?",
                    [repository_id]
                )
            ]
            for conversation_id in conversation_ids:
                conn.execute("DELETE FROM chat_messages WHERE conversation_id = ?", [conversation_id])
            conn.execute("DELETE FROM chat_conversations WHERE repository_id = ?", [repository_id])
            for table in _REPOSITORY_CHILDREN:
                conn.execute(f"DELETE FROM {table} WHERE repository_id = ?", [repository_id])
            cursor = conn.execute("DELETE FROM repositories WHERE id = ?", [repository_id])
            return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Function analyses
    # ------------------------------------------------------------------

    def create_function_analysis(self, repository_id: str, **fields: Any) -> FunctionAnalysis:
        values = {
            "id": _new_id(),
            "repository_id": repository_id,
            "file_path": fields["file_path"],
            "function_name": fields["function_name"],
            "function_signature": fields.get("function_signature"),
            "description": fields["description"],
            "parameters": fields.get("parameters"),
            "return_value": fields.get("return_value"),
            "usage_example": fields.get("usage_example"),
            "complexity_level": fields.get("complexity_level"),
            "tags": fields.get("tags") or [],
            "created_at": _now(),
        }
        with self._connect() as conn:
            self._insert(conn, "function_analyses", values)
        return self.get_function_analysis(values["id"])

    def get_function_analysis(self, function_id: str) -> Optional[FunctionAnalysis]:
        row = self._fetch_one("SELECT * FROM function_analyses WHERE id = ?", [function_id])
        return FunctionAnalysis(**row) if row else None

    def list_function_analyses(
        self,
        repository_id: str,
        limit: Optional[int] = None
    ) -> List[FunctionAnalysis]:
        sql = "SELECT * FROM function_analyses WHERE repository_id = ? ORDER BY created_at, rowid"
        params: List[Any] = [repository_id]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [FunctionAnalysis(**row) for row in self._fetch_all(sql, params)]

    # ------------------------------------------------------------------
    # Q&A items
    # ------------------------------------------------------------------

    def insert_qa_items(self, repository_id: str, items: List[Dict[str, Any]]) -> List[QAItem]:
        """Insert Q&A items; each dict needs ``question`` and ``question_type``."""
        ids = []
        with self._connect() as conn:
            for item in items:
                now = _now()
                values = {
                    "id": _new_id(),
                    "repository_id": repository_id,
                    "function_id": item.get("function_id") or "general",
                    "function_name": item.get("function_name") or "General",
                    "question": item["question"],
                    "answer": item.get("answer"),
                    "question_type": item["question_type"],
                    "view_mode": item.get("view_mode"),
                    "content_format": item.get("content_format") or "markdown",
                    "external_links": item.get("external_links") or [],
                    "analogy_content": item.get("analogy_content"),
                    "is_approved": 0,
                    "created_at": now,
                    "updated_at": now,
                }
                self._insert(conn, "function_qa", values)
                ids.append(values["id"])
        return [self.get_qa_item(qa_id) for qa_id in ids]

    def get_qa_item(self, qa_id: str) -> Optional[QAItem]:
        row = self._fetch_one("SELECT * FROM function_qa WHERE id = ?", [qa_id])
        return QAItem(**row) if row else None

    def list_qa_items(
        self,
        repository_id: str,
        function_id: Optional[str] = None,
        view_mode: Optional[str] = None
    ) -> List[QAItem]:
        sql = "SELECT * FROM function_qa WHERE repository_id = ?"
        params: List[Any] = [repository_id]
        if function_id:
            sql += " AND function_id = ?"
            params.append(function_id)
        if view_mode:
            sql += " AND view_mode = ?"
            params.append(view_mode)
        sql += " ORDER BY created_at DESC, rowid DESC"
        return [QAItem(**row) for row in self._fetch_all(sql, params)]

    def approve_qa_item(self, qa_id: str) -> Optional[QAItem]:
        with self._connect() as conn:
            conn.execute(
                "UPDATE function_qa SET is_approved = 1, updated_at = ? WHERE id = ?",
                [_now(), qa_id]
            )
        return self.get_qa_item(qa_id)

    def delete_starter_questions(self, repository_id: str) -> List[str]:
        """Delete unanswered, unapproved repository-level questions; returns their ids."""
        where = (
            "repository_id = ? AND function_id = 'general' "
            "AND answer IS NULL AND is_approved = 0"
        )
        with self._connect() as conn:
            ids = [row["id"] for row in conn.execute(f"SELECT id FROM function_qa WHERE {where}", [repository_id])]
            conn.execute(f"DELETE FROM function_qa WHERE {where}", [repository_id])
        return ids

    def count_rows(self, table: str, repository_id: str) -> int:
        if table not in _REPOSITORY_CHILDREN:
            raise ValueError(f"Unknown table: {table}")
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) AS n FROM {table} WHERE repository_id = ?",
                [repository_id]
            ).fetchone()
        return row["n"]

    # ------------------------------------------------------------------
    # Documentation proposals
    # ------------------------------------------------------------------

    def create_proposal(
        self,
        repository_id: str,
        function_id: str,
        function_name: str,
        proposal_type: str,
        ai_generated_content: str
    ) -> DocumentationProposal:
        now = _now()
        values = {
            "id": _new_id(),
            "repository_id": repository_id,
            "function_id": function_id,
            "function_name": function_name,
            "proposal_type": proposal_type,
            "ai_generated_content": ai_generated_content,
            "status": ProposalStatus.PENDING.value,
            "created_at": now,
            "updated_at": now,
        }
        with self._connect() as conn:
            self._insert(conn, "documentation_proposals", values)
        return self.get_proposal(values["id"])

    def get_proposal(self, proposal_id: str) -> Optional[DocumentationProposal]:
        row = self._fetch_one("SELECT * FROM documentation_proposals WHERE id = ?", [proposal_id])
        return DocumentationProposal(**row) if row else None

    def list_proposals(
        self,
        repository_id: str,
        function_id: Optional[str] = None
    ) -> List[DocumentationProposal]:
        sql = "SELECT * FROM documentation_proposals WHERE repository_id = ?"
        params: List[Any] = [repository_id]
        if function_id:
            sql += " AND function_id = ?"
            params.append(function_id)
        sql += " ORDER BY created_at DESC, rowid DESC"
        return [DocumentationProposal(**row) for row in self._fetch_all(sql, params)]

    def update_proposal(
        self,
        proposal_id: str,
        status: Optional[ProposalStatus] = None,
        user_content: Optional[str] = None
    ) -> Optional[DocumentationProposal]:
        assignments = ["updated_at = ?"]
        params: List[Any] = [_now()]
        if status is not None:
            assignments.append("status = ?")
            params.append(ProposalStatus(status).value)
        if user_content is not None:
            assignments.append("user_content = ?")
            params.append(user_content)
        params.append(proposal_id)
        with self._connect() as conn:
            conn.execute(
                f"UPDATE documentation_proposals SET {', '.join(assignments)} WHERE id = ?",
                params
            )
        return self.get_proposal(proposal_id)

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    def create_conversation(
        self,
        repository_id: str,
        conversation_type: str,
        function_id: Optional[str] = None,
        title: Optional[str] = None
    ) -> ChatConversation:
        now = _now()
        values = {
            "id": _new_id(),
            "repository_id": repository_id,
            "function_id": function_id,
            "conversation_type": conversation_type,
            "title": title,
            "created_at": now,
            "updated_at": now,
        }
        with self._connect() as conn:
            self._insert(conn, "chat_conversations", values)
        return self.get_conversation(values["id"])

    def get_conversation(self, conversation_id: str) -> Optional[ChatConversation]:
        row = self._fetch_one("SELECT * FROM chat_conversations WHERE id = ?", [conversation_id])
        return ChatConversation(**row) if row else None

    def list_conversations(self, repository_id: str) -> List[ChatConversation]:
        rows = self._fetch_all(
            "SELECT * FROM chat_conversations WHERE repository_id = ? "
            "ORDER BY updated_at DESC, rowid DESC",
            [repository_id]
        )
        return [ChatConversation(**row) for row in rows]

    def add_messages(
        self,
        conversation_id: str,
        messages: List[Tuple[str, str]]
    ) -> List[ChatMessage]:
        """Append ``(role, content)`` pairs in order."""
        ids = []
        with self._connect() as conn:
            for role, content in messages:
                values = {
                    "id": _new_id(),
                    "conversation_id": conversation_id,
                    "role": role,
                    "content": content,
                    "created_at": _now(),
                }
                self._insert(conn, "chat_messages", values)
                ids.append(values["id"])
            conn.execute(
                "UPDATE chat_conversations SET updated_at = ? WHERE id = ?",
                [_now(), conversation_id]
            )
        by_id = {message.id: message for message in self.list_messages(conversation_id)}
        return [by_id[message_id] for message_id in ids]

    def list_messages(self, conversation_id: str) -> List[ChatMessage]:
        rows = self._fetch_all(
            "SELECT * FROM chat_messages WHERE conversation_id = ? ORDER BY created_at, rowid",
            [conversation_id]
        )
        return [ChatMessage(**row) for row in rows]

    # ------------------------------------------------------------------
    # Architecture docs and business explanations
    # ------------------------------------------------------------------

    def replace_architecture_docs(
        self,
        repository_id: str,
        sections: List[Dict[str, Any]]
    ) -> List[ArchitectureDoc]:
        with self._connect() as conn:
            conn.execute("DELETE FROM architecture_docs WHERE repository_id = ?", [repository_id])
            for index, section in enumerate(sections, start=1):
                self._insert(conn, "architecture_docs", {
                    "id": _new_id(),
                    "repository_id": repository_id,
                    "section_type": section["section_type"],
                    "title": section["title"],
                    "content": section["content"],
                    "order_index": section.get("order_index", index),
                    "created_at": _now(),
                })
        return self.list_architecture_docs(repository_id)

    def list_architecture_docs(self, repository_id: str) -> List[ArchitectureDoc]:
        rows = self._fetch_all(
            "SELECT * FROM architecture_docs WHERE repository_id = ? ORDER BY order_index, rowid",
            [repository_id]
        )
        return [ArchitectureDoc(**row) for row in rows]

    def replace_business_explanations(
        self,
        repository_id: str,
        explanations: List[Dict[str, Any]]
    ) -> List[BusinessExplanation]:
        with self._connect() as conn:
            conn.execute("DELETE FROM business_explanations WHERE repository_id = ?", [repository_id])
            for index, item in enumerate(explanations, start=1):
                self._insert(conn, "business_explanations", {
                    "id": _new_id(),
                    "repository_id": repository_id,
                    "category": item["category"],
                    "question": item.get("question"),
                    "answer": item["answer"],
                    "order_index": item.get("order_index", index),
                    "created_at": _now(),
                })
        return self.list_business_explanations(repository_id)

    def list_business_explanations(self, repository_id: str) -> List[BusinessExplanation]:
        rows = self._fetch_all(
            "SELECT * FROM business_explanations WHERE repository_id = ? ORDER BY order_index, rowid",
            [repository_id]
        )
        return [BusinessExplanation(**row) for row in rows]
