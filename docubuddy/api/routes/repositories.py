"""
Repository Endpoints - Submission, status and GitHub passthroughs.

Submitting a repository stores a record right away and runs the analysis
pipeline as a background task; clients poll the status endpoint.
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status

from docubuddy.core.dependencies import get_analysis_service, get_github_service, get_store
from docubuddy.api.middleware.error_handler import InvalidRepositoryURLError, RepositoryNotFoundError
from docubuddy.models.requests import FunctionCodeRequest, GitHubMetadataRequest, SubmitRepositoryRequest
from docubuddy.models.responses import (
    AnalysisProgressResponse,
    DeleteResponse,
    ErrorResponse,
    RepositoryListResponse,
    SubmitRepositoryResponse,
)
from docubuddy.models.schemas import AnalysisStatus, FunctionCode, RepoMetadata, RepositoryRecord
from docubuddy.services.analysis_service import AnalysisService
from docubuddy.services.github_service import GitHubService, parse_github_url
from docubuddy.services.store import Store


router = APIRouter(tags=["Repositories"])


def _require_github_url(github_url: str) -> None:
    try:
        parse_github_url(github_url)
    except ValueError:
        raise InvalidRepositoryURLError(github_url)


@router.post(
    "/repositories",
    response_model=SubmitRepositoryResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit Repository",
    description="Register a GitHub repository and start analyzing it in the background",
    responses={
        200: {"description": "Repository already analyzed or analysis in progress"},
        202: {"description": "Analysis started"},
        400: {"model": ErrorResponse, "description": "Invalid GitHub URL"}
    }
)
async def submit_repository(
    request: SubmitRepositoryRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    analysis_service: AnalysisService = Depends(get_analysis_service)
) -> SubmitRepositoryResponse:
    """
    Submit a repository.

    - New, pending or failed repositories are (re)analyzed: 202
    - Completed repositories are returned as they are: 200
    - Repositories being analyzed are returned as in progress: 200
    """
    record, started = analysis_service.submit(request.github_url)

    if started:
        background_tasks.add_task(analysis_service.run_analysis, record.id)
        message = "Analysis started"
    else:
        response.status_code = status.HTTP_200_OK
        if record.status == AnalysisStatus.COMPLETED:
            message = "Repository already analyzed"
        else:
            message = "Analysis in progress"

    return SubmitRepositoryResponse(repository=record, started=started, message=message)


@router.get(
    "/repositories",
    response_model=RepositoryListResponse,
    summary="List Repositories",
    description="Recently submitted repositories, newest first"
)
async def list_repositories(
    limit: int = Query(default=20, ge=1, le=100),
    status_filter: Optional[AnalysisStatus] = Query(default=None, alias="status"),
    store: Store = Depends(get_store)
) -> RepositoryListResponse:
    repositories = store.list_repositories(limit=limit, status=status_filter)
    return RepositoryListResponse(repositories=repositories, total=len(repositories))


@router.get(
    "/repositories/{repository_id}",
    response_model=RepositoryRecord,
    summary="Get Repository",
    responses={404: {"model": ErrorResponse}}
)
async def get_repository(
    repository_id: str,
    store: Store = Depends(get_store)
) -> RepositoryRecord:
    record = store.get_repository(repository_id)
    if record is None:
        raise RepositoryNotFoundError(repository_id)
    return record


@router.get(
    "/repositories/{repository_id}/status",
    response_model=AnalysisProgressResponse,
    summary="Analysis Status",
    description="Status of the analysis plus counts of generated content",
    responses={404: {"model": ErrorResponse}}
)
async def get_repository_status(
    repository_id: str,
    analysis_service: AnalysisService = Depends(get_analysis_service)
) -> AnalysisProgressResponse:
    return AnalysisProgressResponse(**analysis_service.progress(repository_id))


@router.delete(
    "/repositories/{repository_id}",
    response_model=DeleteResponse,
    summary="Delete Repository",
    description="Delete a repository with everything generated for it",
    responses={404: {"model": ErrorResponse}}
)
async def delete_repository(
    repository_id: str,
    analysis_service: AnalysisService = Depends(get_analysis_service)
) -> DeleteResponse:
    await analysis_service.delete(repository_id)
    return DeleteResponse(id=repository_id)


@router.post(
    "/github/metadata",
    response_model=RepoMetadata,
    summary="Scrape Repository Metadata",
    description="Fetch repository metadata from GitHub without storing it",
    responses={
        403: {"model": ErrorResponse, "description": "Private repository or rate limit"},
        404: {"model": ErrorResponse, "description": "Repository not found"}
    }
)
async def scrape_repository(
    request: GitHubMetadataRequest,
    github_service: GitHubService = Depends(get_github_service)
) -> RepoMetadata:
    _require_github_url(request.github_url)
    return await github_service.fetch_repository_metadata(request.github_url)


@router.post(
    "/github/code",
    response_model=FunctionCode,
    summary="Fetch Function Code",
    description="Fetch a file from GitHub, narrowed to one function when a name is given"
,
    responses={
        404: {"model": ErrorResponse, "description": "File not found"},
        502: {"model": ErrorResponse, "description": "GitHub API failure"}
    }
)
async def fetch_code(
    request: FunctionCodeRequest,
    github_service: GitHubService = Depends(get_github_service)
) -> FunctionCode:
    _require_github_url(request.github_url)
    return await github_service.fetch_function_code(
        request.github_url,
        request.file_path,
        function_name=request.function_name,
        ref=request.ref
    )
