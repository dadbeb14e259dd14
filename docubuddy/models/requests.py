"""
API Request Models - Pydantic models for request validation.
"""

from typing import Optional, List, Any
from pydantic import BaseModel, Field, field_validator

from docubuddy.models.schemas import ChatStyle, ComplexityLevel, ProposalStatus, ProposalType, ViewMode


def _github_url(v: str) -> str:
    v = v.strip()
    if not (v.startswith("https://github.com/") or v.startswith("http://github.com/")):
        raise ValueError("Must be a GitHub URL")
    return v


class SubmitRepositoryRequest(BaseModel):
    """
    Request to analyze a repository.

    The URL is checked by the analysis service, which answers 400 with a
    user-facing message when it is not a repository URL.

    Example:
        {"github_url": "https://github.com/openrewrite/rewrite"}
    """
    github_url: str = Field(
        ...,
        description="GitHub repository URL",
        examples=["https://github.com/owner/repo"]
    )


class GitHubMetadataRequest(BaseModel):
    """Request to scrape repository metadata without storing anything."""
    github_url: str = Field(..., description="GitHub repository URL")

    @field_validator("github_url")
    @classmethod
    def validate_github_url(cls, v: str) -> str:
        return _github_url(v)


class FunctionCodeRequest(BaseModel):
    """
    Request to fetch a file, optionally narrowed to one function.

    Example:
        {
            "github_url": "https://github.com/owner/repo",
            "file_path": "src/utils/auth.ts",
            "function_name": "validateToken"
        }
    """
    github_url: str = Field(..., description="GitHub repository URL")
    file_path: str = Field(..., min_length=1, description="Path of the file inside the repository")
    function_name: Optional[str] = Field(default=None, description="Function to locate in the file")
    ref: Optional[str] = Field(default=None, description="Branch, tag or commit; default branch when omitted")

    @field_validator("github_url")
    @classmethod
    def validate_github_url(cls, v: str) -> str:
        return _github_url(v)


class FunctionAnalysisCreate(BaseModel):
    """One function analysis to record."""
    file_path: str = Field(..., min_length=1)
    function_name: str = Field(..., min_length=1)
    function_signature: Optional[str] = None
    description: str = Field(..., min_length=1)
    parameters: Optional[Any] = None
    return_value: Optional[str] = None
    usage_example: Optional[str] = None
    complexity_level: Optional[ComplexityLevel] = None
    tags: List[str] = Field(default_factory=list)


class RecordFunctionsRequest(BaseModel):
    functions: List[FunctionAnalysisCreate] = Field(..., min_length=1)


class ProposalRequest(BaseModel):
    """Request a documentation proposal for a function."""
    proposal_type: ProposalType = Field(
        default=ProposalType.DOCUMENTATION,
        description="documentation, test or business_logic"
    )


class ProposalUpdateRequest(BaseModel):
    """Review a proposal: approve/reject and/or attach edited content."""
    status: Optional[ProposalStatus] = None
    user_content: Optional[str] = None


class GenerateQuestionsRequest(BaseModel):
    view_mode: ViewMode = Field(default=ViewMode.DEV, description="dev or business")


class QACreateRequest(BaseModel):
    """A manually written Q&A item."""
    question: str = Field(..., min_length=3, max_length=2000)
    answer: Optional[str] = None
    question_type: str = "general"
    view_mode: Optional[ViewMode] = None
    function_id: str = "general"
    function_name: str = "General"


class AskRequest(BaseModel):
    """
    Ask the enhanced responder a question.

    Example:
        {
            "question": "What business problem does this project solve?",
            "view_mode": "business"
        }
    """
    question: str = Field(..., min_length=3, max_length=2000)
    view_mode: ViewMode = ViewMode.DEV
    question_type: Optional[str] = None


class ConversationCreateRequest(BaseModel):
    conversation_type: ChatStyle = ChatStyle.DEVELOPER
    function_id: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=200)


class ChatMessageRequest(BaseModel):
    """A user message; ``style`` overrides the conversation's own style."""
    message: str = Field(..., min_length=1, max_length=4000)
    style: Optional[ChatStyle] = None


class SearchRequest(BaseModel):
    """
    Semantic search over a repository's generated documentation.

    Example:
        {"query": "how are tests run", "top_k": 5}
    """
    query: str = Field(..., min_length=2, max_length=500)
    top_k: int = Field(default=5, ge=1, le=50)
    kind: Optional[str] = Field(
        default=None,
        description="Restrict to qa, function or architecture documents"
    )
