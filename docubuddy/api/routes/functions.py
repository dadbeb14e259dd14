"""
Function Endpoints - Function analyses and their documentation proposals.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from docubuddy.core.dependencies import get_analysis_service, get_qa_service, get_store
from docubuddy.api.middleware.error_handler import RecordNotFoundError
from docubuddy.models.requests import ProposalRequest, ProposalUpdateRequest, RecordFunctionsRequest
from docubuddy.models.responses import ErrorResponse
from docubuddy.models.schemas import DocumentationProposal, FunctionAnalysis, QAItem
from docubuddy.services.analysis_service import AnalysisService
from docubuddy.services.qa_service import QAService
from docubuddy.services.store import Store


router = APIRouter(tags=["Functions"])


@router.post(
    "/repositories/{repository_id}/functions",
    response_model=List[FunctionAnalysis],
    status_code=status.HTTP_201_CREATED,
    summary="Record Function Analyses",
    responses={404: {"model": ErrorResponse}}
)
async def record_functions(
    repository_id: str,
    request: RecordFunctionsRequest,
    store: Store = Depends(get_store),
    qa_service: QAService = Depends(get_qa_service),
    analysis_service: AnalysisService = Depends(get_analysis_service)
) -> List[FunctionAnalysis]:
    """Store analyses of source functions and add them to the knowledge index."""
    qa_service.repository(repository_id)

    created = [
        store.create_function_analysis(repository_id, **function.model_dump(mode="json"))
        for function in request.functions
    ]
    await analysis_service.index(repository_id, functions=created)
    return created


@router.get(
    "/repositories/{repository_id}/functions",
    response_model=List[FunctionAnalysis],
    summary="List Function Analyses",
    responses={404: {"model": ErrorResponse}}
)
async def list_functions(
    repository_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    store: Store = Depends(get_store),
    qa_service: QAService = Depends(get_qa_service)
) -> List[FunctionAnalysis]:
    qa_service.repository(repository_id)
    return store.list_function_analyses(repository_id, limit=limit)


@router.post(
    "/functions/{function_id}/questions",
    response_model=List[QAItem],
    status_code=status.HTTP_201_CREATED,
    summary="Generate Function Questions",
    description="Store five templated developer and business questions about a function",
    responses={404: {"model": ErrorResponse}}
)
async def generate_function_questions(
    function_id: str,
    qa_service: QAService = Depends(get_qa_service)
) -> List[QAItem]:
    return await qa_service.generate_function_questions(function_id)


@router.post(
    "/functions/{function_id}/proposals",
    response_model=DocumentationProposal,
    status_code=status.HTTP_201_CREATED,
    summary="Propose Documentation",
    description="Draft documentation, tests or a business explanation for a function",
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse, "description": "LLM not configured"}
    }
)
async def propose_documentation(
    function_id: str,
    request: ProposalRequest,
    qa_service: QAService = Depends(get_qa_service)
) -> DocumentationProposal:
    return await qa_service.propose(function_id, request.proposal_type)


@router.get(
    "/repositories/{repository_id}/proposals",
    response_model=List[DocumentationProposal],
    summary="List Proposals",
    responses={404: {"model": ErrorResponse}}
)
async def list_proposals(
    repository_id: str,
    function_id: Optional[str] = Query(default=None),
    store: Store = Depends(get_store),
    qa_service: QAService = Depends(get_qa_service)
) -> List[DocumentationProposal]:
    qa_service.repository(repository_id)
    return store.list_proposals(repository_id, function_id=function_id)


@router.patch(
    "/proposals/{proposal_id}",
    response_model=DocumentationProposal,
    summary="Review Proposal",
    description="Approve or reject a proposal and/or attach edited content",
    responses={404: {"model": ErrorResponse}}
)
async def update_proposal(
    proposal_id: str,
    request: ProposalUpdateRequest,
    store: Store = Depends(get_store)
) -> DocumentationProposal:
    if store.get_proposal(proposal_id) is None:
        raise RecordNotFoundError("Proposal", proposal_id)
    return store.update_proposal(
        proposal_id,
        status=request.status,
        user_content=request.user_content
    )
