"""
Data Models for Docu Buddy
==========================

Organized into three categories:
- schemas: Stored rows and shared domain models
- requests: API request validation models
- responses: API response models
"""

from docubuddy.models.schemas import (
    AnalysisStatus,
    ViewMode,
    ComplexityLevel,
    ProposalType,
    ProposalStatus,
    ChatStyle,
    RepositoryRecord,
    RepoMetadata,
    FunctionCode,
    FunctionAnalysis,
    ExternalLink,
    QAItem,
    DocumentationProposal,
    ChatConversation,
    ChatMessage,
    ArchitectureDoc,
    BusinessExplanation,
    KnowledgeHit,
)

from docubuddy.models.requests import (
    SubmitRepositoryRequest,
    GitHubMetadataRequest,
    FunctionCodeRequest,
    FunctionAnalysisCreate,
    RecordFunctionsRequest,
    ProposalRequest,
    ProposalUpdateRequest,
    GenerateQuestionsRequest,
    QACreateRequest,
    AskRequest,
    ConversationCreateRequest,
    ChatMessageRequest,
    SearchRequest,
)

from docubuddy.models.responses import (
    HealthResponse,
    SubmitRepositoryResponse,
    RepositoryListResponse,
    AnalysisProgressResponse,
    DeleteResponse,
    ChatReplyResponse,
    ChatQAResponse,
    DocumentsResponse,
    SearchResponse,
    ErrorResponse,
)

__all__ = [
    # Schemas
    "AnalysisStatus",
    "ViewMode",
    "ComplexityLevel",
    "ProposalType",
    "ProposalStatus",
    "ChatStyle",
    "RepositoryRecord",
    "RepoMetadata",
    "FunctionCode",
    "FunctionAnalysis",
    "ExternalLink",
    "QAItem",
    "DocumentationProposal",
    "ChatConversation",
    "ChatMessage",
    "ArchitectureDoc",
    "BusinessExplanation",
    "KnowledgeHit",
    # Requests
    "SubmitRepositoryRequest",
    "GitHubMetadataRequest",
    "FunctionCodeRequest",
    "FunctionAnalysisCreate",
    "RecordFunctionsRequest",
    "ProposalRequest",
    "ProposalUpdateRequest",
    "GenerateQuestionsRequest",
    "QACreateRequest",
    "AskRequest",
    "ConversationCreateRequest",
    "ChatMessageRequest",
    "SearchRequest",
    # Responses
    "HealthResponse",
    "SubmitRepositoryResponse",
    "RepositoryListResponse",
    "AnalysisProgressResponse",
    "DeleteResponse",
    "ChatReplyResponse",
    "ChatQAResponse",
    "DocumentsResponse",
    "SearchResponse",
    "ErrorResponse",
]
