"""
Core Domain Schemas - Shared data models used across the application.

These mirror the stored rows one-to-one; the store returns them and the
API serializes them directly.
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum


class AnalysisStatus(str, Enum):
    """Lifecycle of a submitted repository."""
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


class ViewMode(str, Enum):
    """Audience a Q&A item is written for."""
    DEV = "dev"
    BUSINESS = "business"


class ComplexityLevel(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class ProposalType(str, Enum):
    """Kinds of documentation a proposal can carry."""
    DOCUMENTATION = "documentation"
    TEST = "test"
    BUSINESS_LOGIC = "business_logic"


class ProposalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ChatStyle(str, Enum):
    """Voice the chat assistant answers in."""
    DEVELOPER = "developer"
    BUSINESS = "business"


class RepositoryRecord(BaseModel):
    """An analyzed (or queued) GitHub repository."""
    id: str
    github_url: str
    owner: str
    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = 0
    forks: int = 0
    status: AnalysisStatus = AnalysisStatus.PENDING
    analyzed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class RepoMetadata(BaseModel):
    """Repository metadata as reported by the GitHub API."""
    owner: str
    name: str
    description: str = "No description provided"
    language: str = "Unknown"
    stars: int = 0
    forks: int = 0
    topics: List[str] = Field(default_factory=list)
    default_branch: str = "main"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_private: bool = False
    is_fork: bool = False
    license: Optional[str] = None
    size: int = 0


class FunctionCode(BaseModel):
    """Source of one file, narrowed to a function when one was requested."""
    content: str
    full_content: str
    start_line: int = 1
    end_line: Optional[int] = None
    github_url: str
    language: str
    file_path: str
    function_name: Optional[str] = None
    found: bool = False


class FunctionAnalysis(BaseModel):
    """One source function discovered in a repository."""
    id: str
    repository_id: str
    file_path: str
    function_name: str
    function_signature: Optional[str] = None
    description: str
    parameters: Optional[Any] = None
    return_value: Optional[str] = None
    usage_example: Optional[str] = None
    complexity_level: Optional[ComplexityLevel] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime


class ExternalLink(BaseModel):
    title: str
    url: str


class QAItem(BaseModel):
    """A stored question, optionally answered, for a repository or function."""
    id: str
    repository_id: str
    function_id: str = "general"
    function_name: str = "General"
    question: str
    answer: Optional[str] = None
    question_type: str
    view_mode: Optional[ViewMode] = None
    content_format: str = "markdown"
    external_links: List[ExternalLink] = Field(default_factory=list)
    analogy_content: Optional[str] = None
    is_approved: bool = False
    created_at: datetime
    updated_at: datetime


class DocumentationProposal(BaseModel):
    id: str
    repository_id: str
    function_id: str
    function_name: str
    proposal_type: ProposalType
    ai_generated_content: Optional[str] = None
    user_content: Optional[str] = None
    status: ProposalStatus = ProposalStatus.PENDING
    created_at: datetime
    updated_at: datetime


class ChatConversation(BaseModel):
    id: str
    repository_id: str
    function_id: Optional[str] = None
    conversation_type: ChatStyle = ChatStyle.DEVELOPER
    title: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ChatMessage(BaseModel):
    id: str
    conversation_id: str
    role: str
    content: str
    created_at: datetime


class ArchitectureDoc(BaseModel):
    id: str
    repository_id: str
    section_type: str
    title: str
    content: str
    order_index: int = 0
    created_at: datetime


class BusinessExplanation(BaseModel):
    id: str
    repository_id: str
    category: str
    question: Optional[str] = None
    answer: str
    order_index: int = 0
    created_at: datetime


class KnowledgeHit(BaseModel):
    """Result from semantic search over generated documentation."""
    id: str
    content: str
    score: float
    kind: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
