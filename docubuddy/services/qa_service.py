"""
QA Service - Questions, answers, proposals and chat for analyzed repositories.

Each operation loads the rows it needs, hands them to one agent, and
persists what comes back. New answers are added to the knowledge index.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from docubuddy.agents.chat_assistant import ChatAssistant, ChatReply
from docubuddy.agents.chat_qa_extractor import ChatQAExtractor
from docubuddy.agents.documentation_writer import DocumentationWriter
from docubuddy.agents.qa_responder import QAResponder
from docubuddy.agents.question_generator import QuestionGenerator, function_questions
from docubuddy.api.middleware.error_handler import (
    AppException,
    RecordNotFoundError,
    RepositoryNotFoundError,
)
from docubuddy.models.schemas import (
    ChatConversation,
    ChatMessage,
    ChatStyle,
    DocumentationProposal,
    FunctionAnalysis,
    ProposalType,
    QAItem,
    RepositoryRecord,
    ViewMode,
)
from docubuddy.services.analysis_service import AnalysisService
from docubuddy.services.store import Store

logger = logging.getLogger(__name__)


@dataclass
class ChatQAResult:
    """Question distilled from a chat and its answer."""
    question: str
    answer: str
    question_type: str
    view_mode: ViewMode
    qa_item: Optional[QAItem] = None


class QAService:
    """
    Glue between stored rows and the generator agents.

    Usage:
        item = await qa_service.ask(repo_id, "How is auth handled?", ViewMode.DEV)
    """

    def __init__(
        self,
        store: Store,
        analysis_service: AnalysisService,
        question_generator: QuestionGenerator,
        qa_responder: QAResponder,
        documentation_writer: DocumentationWriter,
        chat_assistant: ChatAssistant,
        chat_qa_extractor: ChatQAExtractor
    ):
        self.store = store
        self.analysis_service = analysis_service
        self.question_generator = question_generator
        self.qa_responder = qa_responder
        self.documentation_writer = documentation_writer
        self.chat_assistant = chat_assistant
        self.chat_qa_extractor = chat_qa_extractor

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def repository(self, repository_id: str) -> RepositoryRecord:
        record = self.store.get_repository(repository_id)
        if record is None:
            raise RepositoryNotFoundError(repository_id)
        return record

    def function(self, function_id: str) -> FunctionAnalysis:
        function = self.store.get_function_analysis(function_id)
        if function is None:
            raise RecordNotFoundError("Function", function_id)
        return function

    def conversation(self, conversation_id: str) -> ChatConversation:
        conversation = self.store.get_conversation(conversation_id)
        if conversation is None:
            raise RecordNotFoundError("Conversation", conversation_id)
        return conversation

    # ------------------------------------------------------------------
    # Questions and answers
    # ------------------------------------------------------------------

    async def generate_questions(self, repository_id: str, view_mode: ViewMode) -> List[QAItem]:
        """Generate and store starter questions for one audience."""
        repo = self.repository(repository_id)
        view_mode = ViewMode(view_mode)
        questions = await self.question_generator.generate(repo, view_mode)
        items = self.store.insert_qa_items(repository_id, [
            {
                "question": q["question"],
                "question_type": q["question_type"],
                "view_mode": view_mode.value,
            }
            for q in questions
        ])
        await self.analysis_service.index(repository_id, qa_items=items)
        return items

    async def generate_function_questions(self, function_id: str) -> List[QAItem]:
        function = self.function(function_id)
        return self.store.insert_qa_items(function.repository_id, function_questions(function))

    async def ask(
        self,
        repository_id: str,
        question: str,
        view_mode: ViewMode = ViewMode.DEV,
        question_type: Optional[str] = None
    ) -> QAItem:
        """Answer a question with the enhanced responder and store the result."""
        repo = self.repository(repository_id)
        payload = await self.qa_responder.answer(repo, question, view_mode, question_type)
        item = self.store.insert_qa_items(repository_id, [payload])[0]
        await self.analysis_service.index(repository_id, qa_items=[item])
        return item

    async def propose(self, function_id: str, proposal_type: ProposalType) -> DocumentationProposal:
        """Draft a documentation proposal for a function; stored as pending."""
        function = self.function(function_id)
        proposal_type = ProposalType(proposal_type)
        content = await self.documentation_writer.write(function, proposal_type)
        proposal = self.store.create_proposal(
            repository_id=function.repository_id,
            function_id=function.id,
            function_name=function.function_name,
            proposal_type=proposal_type.value,
            ai_generated_content=content,
        )
        logger.info(f"Stored {proposal_type.value} proposal for {function.function_name}")
        return proposal

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    async def send_message(
        self,
        conversation_id: str,
        message: str,
        style: Optional[ChatStyle] = None
    ) -> Tuple[ChatReply, List[ChatMessage]]:
        """
        Reply to ``message`` and append both turns to the conversation.

        ``style`` defaults to the conversation's own type.
        """
        conversation = self.conversation(conversation_id)
        repo = self.repository(conversation.repository_id)
        style = ChatStyle(style or conversation.conversation_type)

        history = self.store.list_messages(conversation_id)
        functions = self.store.list_function_analyses(repo.id, limit=10)

        reply = await self.chat_assistant.reply(repo, functions, history, message, style)
        stored = self.store.add_messages(conversation_id, [
            ("user", message),
            ("assistant", reply.response),
        ])
        return reply, stored

    async def qa_from_chat(self, conversation_id: str) -> ChatQAResult:
        """
        Turn a conversation into a stored Q&A item.

        When the full responder fails, a cheaper answer is returned instead
        and nothing is stored.
        """
        conversation = self.conversation(conversation_id)
        repo = self.repository(conversation.repository_id)
        messages = self.store.list_messages(conversation_id)
        if not messages:
            raise RecordNotFoundError("Messages for conversation", conversation_id)

        extracted = await self.chat_qa_extractor.extract(repo, messages, conversation.function_id)

        try:
            item = await self.ask(
                repo.id,
                extracted.question,
                extracted.view_mode,
                extracted.question_type,
            )
        except AppException as e:
            logger.warning(f"Enhanced responder failed ({e.message}); using fallback answer")
            answer = await self.chat_qa_extractor.fallback_answer(repo, messages)
            return ChatQAResult(
                question=extracted.question,
                answer=answer,
                question_type=extracted.question_type,
                view_mode=extracted.view_mode,
            )

        return ChatQAResult(
            question=item.question,
            answer=item.answer or "",
            question_type=item.question_type,
            view_mode=item.view_mode or extracted.view_mode,
            qa_item=item,
        )
