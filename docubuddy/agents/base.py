"""
Base classes for the generator agents.

Every agent is a small LLM-backed component: it formats stored rows into a
prompt, calls the model, and shapes the reply into plain data. Persisting
the result is the caller's job.
"""

from abc import ABC
from enum import Enum
from typing import Any, Optional

from docubuddy.models.schemas import RepositoryRecord


class AgentRole(Enum):
    """Defines the role of each agent in the system."""
    QUESTION_GENERATOR = "question_generator"
    DOCUMENTATION_WRITER = "documentation_writer"
    QA_RESPONDER = "qa_responder"
    CHAT_ASSISTANT = "chat_assistant"
    CHAT_QA_EXTRACTOR = "chat_qa_extractor"
    ARCHITECTURE_WRITER = "architecture_writer"
    BUSINESS_EXPLAINER = "business_explainer"


def repository_context(repo: RepositoryRecord) -> str:
    """The repository block shared by most prompts."""
    return (
        f"- Name: {repo.name}\n"
        f"- Owner: {repo.owner}\n"
        f"- Description: {repo.description or 'No description available'}\n"
        f"- Language: {repo.language or 'Not specified'}\n"
        f"- Stars: {repo.stars or 0}\n"
        f"- URL: {repo.github_url}"
    )


def is_openrewrite(repo: RepositoryRecord) -> bool:
    return repo.owner.lower() == "openrewrite" and repo.name.lower() == "rewrite"


class BaseAgent(ABC):
    """
    Base class for all agents.

    Agents never talk to the store; they receive rows and return results.
    """

    role: AgentRole

    def __init__(self, llm_client: Any):
        """
        Initialize agent with LLM client.

        Args:
            llm_client: Object exposing ``generate`` and ``chat`` coroutines
                (normally ``docubuddy.services.llm_service.LLMClient``)
        """
        self.llm = llm_client

    async def _call_llm(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **options: Any
    ) -> str:
        """
        Make a call to the LLM.

        Args:
            prompt: User prompt to send
            system_prompt: Optional system prompt
            **options: model, temperature, max_tokens

        Returns:
            LLM response text
        """
        return await self.llm.generate(prompt, system_prompt, **options)
