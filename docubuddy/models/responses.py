"""
API Response Models - Pydantic models for API responses.

Stored rows are returned as the schema models directly; the models here
wrap them where an endpoint adds something of its own.
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime

from docubuddy.models.schemas import (
    AnalysisStatus,
    ArchitectureDoc,
    BusinessExplanation,
    ChatMessage,
    ChatStyle,
    KnowledgeHit,
    QAItem,
    RepositoryRecord,
    ViewMode,
)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    environment: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class SubmitRepositoryResponse(BaseModel):
    """
    Response to a repository submission.

    Example:
        {
            "success": true,
            "repository": {...},
            "started": true,
            "message": "Analysis started"
        }
    """
    success: bool = True
    repository: RepositoryRecord
    started: bool
    message: str


class RepositoryListResponse(BaseModel):
    repositories: List[RepositoryRecord] = Field(default_factory=list)
    total: int = 0


class AnalysisProgressResponse(BaseModel):
    """Status of a repository and counts of generated content."""
    repository_id: str
    status: AnalysisStatus
    analyzed_at: Optional[datetime] = None
    qa_items: int = 0
    functions: int = 0
    architecture_sections: int = 0


class DeleteResponse(BaseModel):
    success: bool = True
    id: str


class ChatReplyResponse(BaseModel):
    """
    Assistant reply to a chat message.

    Example:
        {
            "response": "## Implementation Overview ...",
            "response_style": "developer",
            "metrics": {"code_examples": "Yes"},
            "messages": [...]
        }
    """
    response: str
    response_style: ChatStyle
    metrics: Dict[str, str] = Field(default_factory=dict)
    messages: List[ChatMessage] = Field(
        default_factory=list,
        description="The stored user and assistant messages"
    )


class ChatQAResponse(BaseModel):
    """Q&A distilled from a conversation; ``qa_item`` is set when it was stored."""
    question: str
    answer: str
    question_type: str
    view_mode: ViewMode
    qa_item: Optional[QAItem] = None


class DocumentsResponse(BaseModel):
    architecture_docs: List[ArchitectureDoc] = Field(default_factory=list)
    business_explanations: List[BusinessExplanation] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """
    Response from search operation.

    Example:
        {
            "success": true,
            "query": "authentication",
            "results": [...],
            "total_results": 5
        }
    """
    success: bool = True
    query: str
    results: List[KnowledgeHit] = Field(default_factory=list)
    total_results: int = 0


class ErrorResponse(BaseModel):
    """
    Standard error response.

    Example:
        {
            "success": false,
            "error": "Repository not found",
            "error_code": "REPO_NOT_FOUND",
            "details": {...}
        }
    """
    success: bool = False
    error: str
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
