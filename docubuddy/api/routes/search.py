"""
Documents and Search Endpoints - Architecture docs, business explanations
and semantic search over everything generated for a repository.
"""

from typing import List

from fastapi import APIRouter, Depends

from docubuddy.core.dependencies import get_analysis_service, get_knowledge_service, get_qa_service, get_store
from docubuddy.models.requests import SearchRequest
from docubuddy.models.responses import DocumentsResponse, ErrorResponse, SearchResponse
from docubuddy.models.schemas import ArchitectureDoc, BusinessExplanation
from docubuddy.services.analysis_service import AnalysisService
from docubuddy.services.knowledge_service import KnowledgeService
from docubuddy.services.qa_service import QAService
from docubuddy.services.store import Store


router = APIRouter(tags=["Documents"])


@router.post(
    "/repositories/{repository_id}/architecture",
    response_model=DocumentsResponse,
    summary="Generate Architecture Docs",
    description="(Re)generate architecture sections and business explanations",
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse, "description": "LLM not configured"}
    }
)
async def generate_architecture(
    repository_id: str,
    analysis_service: AnalysisService = Depends(get_analysis_service)
) -> DocumentsResponse:
    architecture_docs, explanations = await analysis_service.write_documents(repository_id)
    return DocumentsResponse(
        architecture_docs=architecture_docs,
        business_explanations=explanations
    )


@router.get(
    "/repositories/{repository_id}/architecture",
    response_model=List[ArchitectureDoc],
    summary="Architecture Docs",
    responses={404: {"model": ErrorResponse}}
)
async def list_architecture(
    repository_id: str,
    store: Store = Depends(get_store),
    qa_service: QAService = Depends(get_qa_service)
) -> List[ArchitectureDoc]:
    qa_service.repository(repository_id)
    return store.list_architecture_docs(repository_id)


@router.get(
    "/repositories/{repository_id}/business-explanations",
    response_model=List[BusinessExplanation],
    summary="Business Explanations",
    responses={404: {"model": ErrorResponse}}
)
async def list_business_explanations(
    repository_id: str,
    store: Store = Depends(get_store),
    qa_service: QAService = Depends(get_qa_service)
) -> List[BusinessExplanation]:
    qa_service.repository(repository_id)
    return store.list_business_explanations(repository_id)


@router.post(
    "/repositories/{repository_id}/search",
    response_model=SearchResponse,
    summary="Search Documentation",
    description="Semantic search over generated Q&A, function and architecture documents",
    responses={404: {"model": ErrorResponse}}
)
async def search_documentation(
    repository_id: str,
    request: SearchRequest,
    qa_service: QAService = Depends(get_qa_service),
    knowledge_service: KnowledgeService = Depends(get_knowledge_service)
) -> SearchResponse:
    qa_service.repository(repository_id)
    results = await knowledge_service.search(
        repository_id,
        request.query,
        top_k=request.top_k,
        kind=request.kind
    )
    return SearchResponse(
        query=request.query,
        results=results,
        total_results=len(results)
    )
