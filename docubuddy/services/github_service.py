"""
GitHub Service - Repository metadata and file contents via the GitHub REST API.

Handles:
- Parsing and validating GitHub URLs
- Fetching repository metadata (stars, language, description, ...)
- Fetching a file and narrowing it to a single function
"""

import base64
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from docubuddy.api.middleware.error_handler import (
    GitHubAccessError,
    GitHubAPIError,
    RecordNotFoundError,
    RepositoryNotFoundError,
)
from docubuddy.models.schemas import FunctionCode, RepoMetadata
from docubuddy.services.function_locator import language_from_path, locate_function

logger = logging.getLogger(__name__)


@dataclass
class RepoInfo:
    """Parsed repository information."""
    owner: str
    name: str
    url: str
    branch: Optional[str] = None


@dataclass
class GitHubServiceConfig:
    """Configuration for the GitHub service."""
    api_url: str = "https://api.github.com"
    token: Optional[str] = None
    timeout_seconds: float = 30.0
    user_agent: str = "DocuBuddy-CodeAnalyzer/1.0"


# Regex patterns for GitHub URLs
_GITHUB_PATTERNS = [
    r"https?://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$",
    r"git@github\.com:([^/]+)/([^/]+?)(?:\.git)?$",
    r"https?://github\.com/([^/]+)/([^/]+)/tree/([^/]+)/?",
]

# What the submission form accepts; stricter than parse_github_url
_SUBMISSION_PATTERN = re.compile(r"^https://github\.com/[a-zA-Z0-9\-_]+/[a-zA-Z0-9\-_.]+/?$")


def is_github_url(path_or_url: str) -> bool:
    """Check if the input looks like a GitHub URL."""
    return bool(
        path_or_url.startswith("https://github.com/")
        or path_or_url.startswith("http://github.com/")
        or path_or_url.startswith("git@github.com:")
    )


def validate_submission_url(url: str) -> bool:
    """Whether ``url`` is acceptable as a new repository submission."""
    return bool(_SUBMISSION_PATTERN.match(url or ""))


def parse_github_url(url: str) -> RepoInfo:
    """Parse a GitHub URL into components."""
    url = url.strip()
    for pattern in _GITHUB_PATTERNS:
        match = re.match(pattern, url)
        if match:
            groups = match.groups()
            owner = groups[0]
            name = groups[1]
            if name.endswith(".git"):
                name = name[:-4]
            branch = groups[2] if len(groups) > 2 else None
            return RepoInfo(
                owner=owner, name=name,
                url=f"https://github.com/{owner}/{name}",
                branch=branch,
            )
    raise ValueError(f"Invalid GitHub URL: {url}")


def decode_content(encoded: str) -> str:
    """Decode the base64 ``content`` field of a GitHub contents response."""
    raw = base64.b64decode("".join(encoded.split()))
    return raw.decode("utf-8", errors="replace")


class GitHubService:
    """
    Thin async client for the two GitHub calls Docu Buddy needs.

    Usage:
        service = GitHubService(GitHubServiceConfig(token="..."))
        metadata = await service.fetch_repository_metadata("https://github.com/o/r")
        code = await service.fetch_function_code(url, "src/app.ts", "handler")
    """

    def __init__(
        self,
        config: Optional[GitHubServiceConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config or GitHubServiceConfig()
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.config.user_agent,
        }
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    async def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> httpx.Response:
        """GET ``path`` relative to the API root; transport failures become GitHubAPIError."""
        async with httpx.AsyncClient(
            base_url=self.config.api_url,
            headers=self._headers(),
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                return await client.get(path, params=params)
            except httpx.HTTPError as e:
                logger.error(f"GitHub request failed for {path}: {e}")
                raise GitHubAPIError(f"GitHub API request failed: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError("Malformed response from GitHub", upstream_status=response.status_code) from e

    def _raise_for_status(self, response: httpx.Response, repo: str) -> None:
        if response.is_success:
            return
        if response.status_code == 404:
            raise RepositoryNotFoundError(repo)
        if response.status_code == 403:
            raise GitHubAccessError()
        raise GitHubAPIError(
            f"GitHub API error: {response.reason_phrase or response.status_code}",
            upstream_status=response.status_code
        )

    async def fetch_repository_metadata(self, github_url: str) -> RepoMetadata:
        """
        Fetch repository metadata.

        Raises:
            ValueError: If the URL is not a GitHub repository URL
            RepositoryNotFoundError: 404 from GitHub
            GitHubAccessError: 403 from GitHub
            GitHubAPIError: Any other failure
        """
        info = parse_github_url(github_url)
        logger.info(f"Fetching metadata for {info.owner}/{info.name}")

        response = await self._get(f"/repos/{info.owner}/{info.name}")
        self._raise_for_status(response, f"{info.owner}/{info.name}")
        data: Dict[str, Any] = self._json(response)

        license_info = data.get("license") or {}
        return RepoMetadata(
            owner=(data.get("owner") or {}).get("login") or info.owner,
            name=data.get("name") or info.name,
            description=data.get("description") or "No description provided",
            language=data.get("language") or "Unknown",
            stars=data.get("stargazers_count") or 0,
            forks=data.get("forks_count") or 0,
            topics=data.get("topics") or [],
            default_branch=data.get("default_branch") or "main",
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            is_private=bool(data.get("private")),
            is_fork=bool(data.get("fork")),
            license=license_info.get("name"),
            size=data.get("size") or 0,
        )

    async def fetch_function_code(
        self,
        github_url: str,
        file_path: str,
        function_name: Optional[str] = None,
        ref: Optional[str] = None
    ) -> FunctionCode:
        """
        Fetch a file and, if ``function_name`` is given, narrow it to that function.

        When the function cannot be located the whole file is returned with
        ``found=False`` and ``start_line=1``. Without ``ref`` the default branch
        is read and the link points at ``main``.

        Raises:
            RecordNotFoundError: No such file (or ref) in the repository
            GitHubAccessError: 403 from GitHub
            GitHubAPIError: Any other failure, or the path is a directory
        """
        info = parse_github_url(github_url)
        file_path = file_path.lstrip("/")
        logger.info(f"Fetching {file_path} from {info.owner}/{info.name}")

        response = await self._get(
            f"/repos/{info.owner}/{info.name}/contents/{file_path}",
            params={"ref": ref} if ref else None
        )
        if response.status_code == 404:
            raise RecordNotFoundError("File", file_path)
        self._raise_for_status(response, f"{info.owner}/{info.name}")
        data = self._json(response)

        if not isinstance(data, dict) or data.get("type") != "file":
            raise GitHubAPIError("Path does not point to a file")

        full_content = decode_content(data.get("content", ""))
        language = language_from_path(file_path)

        content = full_content
        start_line = 1
        end_line = None
        found = False

        if function_name:
            span = locate_function(full_content, function_name, language)
            if span:
                content = span.code
                start_line = span.start_line
                end_line = span.end_line
                found = True
            else:
                logger.info(f"Function {function_name} not found in {file_path}; returning whole file")

        return FunctionCode(
            content=content,
            full_content=full_content,
            start_line=start_line,
            end_line=end_line,
            github_url=f"{info.url}/blob/{ref or 'main'}/{file_path}",
            language=language,
            file_path=file_path,
            function_name=function_name,
            found=found,
        )
