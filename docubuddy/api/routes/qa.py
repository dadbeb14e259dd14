"""
Q&A Endpoints - Starter questions, the enhanced responder and approvals.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from docubuddy.core.dependencies import get_analysis_service, get_qa_service, get_store
from docubuddy.api.middleware.error_handler import RecordNotFoundError
from docubuddy.models.requests import AskRequest, GenerateQuestionsRequest, QACreateRequest
from docubuddy.models.responses import ErrorResponse
from docubuddy.models.schemas import QAItem, ViewMode
from docubuddy.services.analysis_service import AnalysisService
from docubuddy.services.qa_service import QAService
from docubuddy.services.store import Store


router = APIRouter(tags=["Q&A"])


@router.post(
    "/repositories/{repository_id}/questions",
    response_model=List[QAItem],
    status_code=status.HTTP_201_CREATED,
    summary="Generate Questions",
    description="Generate five starter questions for the dev or business view",
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse, "description": "LLM not configured"}
    }
)
async def generate_questions(
    repository_id: str,
    request: GenerateQuestionsRequest,
    qa_service: QAService = Depends(get_qa_service)
) -> List[QAItem]:
    return await qa_service.generate_questions(repository_id, request.view_mode)


@router.get(
    "/repositories/{repository_id}/qa",
    response_model=List[QAItem],
    summary="List Q&A Items",
    description="Stored questions and answers, newest first",
    responses={404: {"model": ErrorResponse}}
)
async def list_qa(
    repository_id: str,
    function_id: Optional[str] = Query(default=None),
    view_mode: Optional[ViewMode] = Query(default=None),
    store: Store = Depends(get_store),
    qa_service: QAService = Depends(get_qa_service)
) -> List[QAItem]:
    qa_service.repository(repository_id)
    return store.list_qa_items(
        repository_id,
        function_id=function_id,
        view_mode=view_mode.value if view_mode else None
    )


@router.post(
    "/repositories/{repository_id}/qa",
    response_model=QAItem,
    status_code=status.HTTP_201_CREATED,
    summary="Add Q&A Item",
    description="Store a manually written question and optional answer",
    responses={404: {"model": ErrorResponse}}
)
async def create_qa(
    repository_id: str,
    request: QACreateRequest,
    store: Store = Depends(get_store),
    qa_service: QAService = Depends(get_qa_service),
    analysis_service: AnalysisService = Depends(get_analysis_service)
) -> QAItem:
    qa_service.repository(repository_id)
    item = store.insert_qa_items(repository_id, [request.model_dump(mode="json")])[0]
    await analysis_service.index(repository_id, qa_items=[item])
    return item


@router.post(
    "/repositories/{repository_id}/ask",
    response_model=QAItem,
    status_code=status.HTTP_201_CREATED,
    summary="Ask a Question",
    description="Answer a question for the dev or business audience and store it",
    responses={
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse, "description": "LLM call failed"},
        503: {"model": ErrorResponse, "description": "LLM not configured"}
    }
)
async def ask_question(
    repository_id: str,
    request: AskRequest,
    qa_service: QAService = Depends(get_qa_service)
) -> QAItem:
    return await qa_service.ask(
        repository_id,
        request.question,
        view_mode=request.view_mode,
        question_type=request.question_type
    )


@router.post(
    "/qa/{qa_id}/approve",
    response_model=QAItem,
    summary="Approve Q&A Item",
    responses={404: {"model": ErrorResponse}}
)
async def approve_qa(
    qa_id: str,
    store: Store = Depends(get_store)
) -> QAItem:
    if store.get_qa_item(qa_id) is None:
        raise RecordNotFoundError("Q&A item", qa_id)
    return store.approve_qa_item(qa_id)
