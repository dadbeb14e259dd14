"""
Chat QA Extractor - Turns a chat conversation into a single Q&A question.

The LLM decides whether the conversation is technical or business focused
and condenses it into one clear question. The caller answers that question
with the QA responder and falls back to ``fallback_answer`` when that fails.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from docubuddy.agents.base import AgentRole, BaseAgent
from docubuddy.models.schemas import ChatMessage, RepositoryRecord, ViewMode
from docubuddy.services.llm_service import parse_json_response

logger = logging.getLogger(__name__)


EXTRACTION_PROMPT = """Based on the following conversation, determine if the questions are more technical (dev) or business-focused.
Then extract or create a clear, concise question that summarizes what the user is asking.

Conversation:
{conversation}

Repository Context:
- Name: {name}
- Owner: {owner}
- Description: {description}
- Language: {language}

Return your answer as JSON:
{{
  "question": "The extracted or improved question",
  "questionType": "Either 'development', 'architecture', 'setup', 'business', 'benefits', 'workflow', or another appropriate category",
  "viewMode": "Either 'dev' or 'business'"
}}"""

FALLBACK_PROMPT = """Based on the conversation below, provide a concise answer to the user's questions about the repository.

Conversation:
{conversation}

Repository:
- Name: {name}
- Owner: {owner}
- Description: {description}
- Language: {language}

Provide a useful, technical response with markdown formatting."""


@dataclass
class ExtractedQuestion:
    question: str
    question_type: str
    view_mode: ViewMode


def format_conversation(messages: Sequence[ChatMessage]) -> str:
    return "\n\n".join(f"{m.role}: {m.content}" for m in messages)


def last_user_message(messages: Sequence[ChatMessage]) -> str:
    for message in reversed(messages):
        if message.role == "user":
            return message.content
    return messages[-1].content if messages else ""


class ChatQAExtractor(BaseAgent):
    """Condenses a conversation into one question, and answers it cheaply when needed."""

    role = AgentRole.CHAT_QA_EXTRACTOR

    def __init__(self, llm_client: Any, model: str = "gpt-4o-mini"):
        super().__init__(llm_client)
        self.model = model

    def _prompt_fields(self, repo: RepositoryRecord, messages: Sequence[ChatMessage]) -> dict:
        return {
            "conversation": format_conversation(messages),
            "name": repo.name,
            "owner": repo.owner,
            "description": repo.description or "No description available",
            "language": repo.language or "Not specified",
        }

    async def extract(
        self,
        repo: RepositoryRecord,
        messages: Sequence[ChatMessage],
        function_id: Optional[str] = None
    ) -> ExtractedQuestion:
        reply = await self._call_llm(
            EXTRACTION_PROMPT.format(**self._prompt_fields(repo, messages)),
            model=self.model,
            temperature=0.3,
            max_tokens=500,
        )

        default_type = "development" if function_id else "general"
        try:
            payload = parse_json_response(reply)
            question = str(payload.get("question") or "").strip()
            if not question:
                raise ValueError("No question in extraction reply")
        except ValueError:
            logger.warning("Could not parse extracted question; using last user message")
            return ExtractedQuestion(
                question=last_user_message(messages),
                question_type=default_type,
                view_mode=ViewMode.DEV,
            )

        try:
            view_mode = ViewMode(payload.get("viewMode") or "dev")
        except ValueError:
            view_mode = ViewMode.DEV

        return ExtractedQuestion(
            question=question,
            question_type=str(payload.get("questionType") or default_type),
            view_mode=view_mode,
        )

    async def fallback_answer(self, repo: RepositoryRecord, messages: Sequence[ChatMessage]) -> str:
        return await self._call_llm(
            FALLBACK_PROMPT.format(**self._prompt_fields(repo, messages)),
            model=self.model,
            temperature=0.5,
            max_tokens=1000,
        )
