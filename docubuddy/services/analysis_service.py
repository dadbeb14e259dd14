"""
Analysis Service - Repository submission and the background analysis pipeline.

PIPELINE:
---------
    submit(url) ──► repository row (pending) ──► run_analysis(id)
                                                   │
                  status = analyzing ◄─────────────┘
                  fetch GitHub metadata
                  dev + business starter questions
                  architecture docs + business explanations (optional)
                  knowledge index
                  status = completed  (failed on any error)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from docubuddy.agents.architecture_writer import ArchitectureWriter, BusinessExplainer
from docubuddy.agents.question_generator import QuestionGenerator
from docubuddy.api.middleware.error_handler import InvalidRepositoryURLError, RepositoryNotFoundError
from docubuddy.models.schemas import (
    AnalysisStatus,
    ArchitectureDoc,
    BusinessExplanation,
    RepositoryRecord,
    ViewMode,
)
from docubuddy.services.github_service import GitHubService, parse_github_url, validate_submission_url
from docubuddy.services.knowledge_service import KnowledgeService
from docubuddy.services.store import Store

logger = logging.getLogger(__name__)


@dataclass
class AnalysisConfig:
    """Configuration for the analysis pipeline."""
    generate_architecture_docs: bool = True
    index_knowledge: bool = True


class AnalysisService:
    """
    Runs repository analysis.

    Usage:
        record, started = service.submit("https://github.com/owner/repo")
        if started:
            background_tasks.add_task(service.run_analysis, record.id)
    """

    def __init__(
        self,
        store: Store,
        github_service: GitHubService,
        question_generator: QuestionGenerator,
        architecture_writer: Optional[ArchitectureWriter] = None,
        business_explainer: Optional[BusinessExplainer] = None,
        knowledge_service: Optional[KnowledgeService] = None,
        config: Optional[AnalysisConfig] = None
    ):
        self.store = store
        self.github_service = github_service
        self.question_generator = question_generator
        self.architecture_writer = architecture_writer
        self.business_explainer = business_explainer
        self.knowledge_service = knowledge_service
        self.config = config or AnalysisConfig()

    def submit(self, github_url: str) -> Tuple[RepositoryRecord, bool]:
        """
        Register a repository for analysis.

        Returns:
            (record, started) where ``started`` tells the caller to schedule
            ``run_analysis`` for the record.

        Raises:
            InvalidRepositoryURLError: URL is not a github.com repository URL
        """
        github_url = github_url.strip()
        if not validate_submission_url(github_url):
            raise InvalidRepositoryURLError(github_url)

        info = parse_github_url(github_url)
        # Trailing slash and .git variants map to one record
        existing = self.store.get_repository_by_url(info.url)

        if existing is None:
            record = self.store.create_repository(
                github_url=info.url,
                owner=info.owner,
                name=info.name,
                status=AnalysisStatus.PENDING,
            )
            logger.info(f"Registered repository {info.owner}/{info.name}")
            return record, True

        if existing.status == AnalysisStatus.COMPLETED:
            logger.info(f"Repository {info.owner}/{info.name} already analyzed")
            return existing, False

        if existing.status == AnalysisStatus.ANALYZING:
            logger.info(f"Repository {info.owner}/{info.name} is already being analyzed")
            return existing, False

        # pending or failed: start over
        record = self.store.set_repository_status(existing.id, AnalysisStatus.PENDING)
        logger.info(f"Restarting analysis of {info.owner}/{info.name} (was {existing.status.value})")
        return record, True

    async def run_analysis(self, repository_id: str) -> None:
        """
        Analyze a registered repository.

        Runs as a background task, so errors are logged and recorded as the
        ``failed`` status instead of being raised.
        """
        record = self.store.get_repository(repository_id)
        if record is None:
            logger.error(f"Cannot analyze unknown repository {repository_id}")
            return

        self.store.set_repository_status(repository_id, AnalysisStatus.ANALYZING)
        logger.info(f"Analyzing {record.owner}/{record.name}")

        try:
            metadata = await self.github_service.fetch_repository_metadata(record.github_url)
            record = self.store.apply_metadata(repository_id, metadata)

            stale = self.store.delete_starter_questions(repository_id)
            if stale:
                logger.info(f"Dropped {len(stale)} starter questions from an earlier run")
                await self.forget(repository_id, kind="qa", source_ids=stale)

            qa_items = []
            for view_mode in (ViewMode.DEV, ViewMode.BUSINESS):
                questions = await self.question_generator.generate(record, view_mode)
                qa_items.extend(self.store.insert_qa_items(repository_id, [
                    {
                        "question": q["question"],
                        "question_type": q["question_type"],
                        "view_mode": view_mode.value,
                    }
                    for q in questions
                ]))

            if self.config.generate_architecture_docs:
                await self.write_documents(repository_id, index=False)

            await self.index(
                repository_id,
                qa_items=qa_items,
                functions=self.store.list_function_analyses(repository_id),
                architecture_docs=self.store.list_architecture_docs(repository_id),
            )

        except Exception as e:
            logger.exception(f"Analysis of {record.owner}/{record.name} failed: {e}")
            self.store.set_repository_status(repository_id, AnalysisStatus.FAILED)
            return

        self.store.set_repository_status(repository_id, AnalysisStatus.COMPLETED)
        logger.info(f"Analysis of {record.owner}/{record.name} completed")

    async def write_documents(
        self,
        repository_id: str,
        index: bool = True
    ) -> Tuple[List[ArchitectureDoc], List[BusinessExplanation]]:
        """(Re)generate architecture sections and business explanations."""
        record = self.store.get_repository(repository_id)
        if record is None:
            raise RepositoryNotFoundError(repository_id)

        architecture_docs: List[ArchitectureDoc] = []
        explanations: List[BusinessExplanation] = []

        if self.architecture_writer is not None:
            functions = self.store.list_function_analyses(repository_id)
            sections = await self.architecture_writer.write(record, functions)
            architecture_docs = self.store.replace_architecture_docs(repository_id, sections)
            await self.forget(repository_id, kind="architecture")

        if self.business_explainer is not None:
            items = await self.business_explainer.explain(record)
            explanations = self.store.replace_business_explanations(repository_id, items)

        if index:
            await self.index(repository_id, architecture_docs=architecture_docs)

        logger.info(
            f"Wrote {len(architecture_docs)} architecture sections and "
            f"{len(explanations)} business explanations for {record.owner}/{record.name}"
        )
        return architecture_docs, explanations

    async def index(self, repository_id: str, **documents: Any) -> int:
        """Add generated documents to the knowledge index; failures are only logged."""
        if not self.config.index_knowledge or self.knowledge_service is None:
            return 0
        try:
            return await self.knowledge_service.index(repository_id, **documents)
        except Exception as e:
            logger.exception(f"Knowledge indexing failed for repository {repository_id}: {e}")
            return 0

    async def forget(self, repository_id: str, **scope: Any) -> None:
        """Drop documents from the knowledge index; failures are only logged."""
        if self.knowledge_service is None:
            return
        try:
            await self.knowledge_service.forget(repository_id, **scope)
        except Exception as e:
            logger.exception(f"Could not drop indexed documents of {repository_id}: {e}")

    async def delete(self, repository_id: str) -> None:
        """Remove a repository, its generated rows and its indexed documents."""
        if not self.store.delete_repository(repository_id):
            raise RepositoryNotFoundError(repository_id)

        await self.forget(repository_id)

        logger.info(f"Deleted repository {repository_id}")

    def progress(self, repository_id: str) -> Dict[str, Any]:
        """Status of a repository plus counts of what has been generated so far."""
        record = self.store.get_repository(repository_id)
        if record is None:
            raise RepositoryNotFoundError(repository_id)

        return {
            "repository_id": record.id,
            "status": record.status,
            "analyzed_at": record.analyzed_at,
            "qa_items": self.store.count_rows("function_qa", repository_id),
            "functions": self.store.count_rows("function_analyses", repository_id),
            "architecture_sections": self.store.count_rows("architecture_docs", repository_id),
        }
