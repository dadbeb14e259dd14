"""
Generator Agents for Docu Buddy
===============================

Each agent wraps one kind of LLM call. Agents receive stored rows, build a
prompt, and return plain data; services decide what gets persisted.

    QuestionGenerator     starter questions per audience (dev / business)
    function_questions    templated per-function questions (no LLM)
    DocumentationWriter   documentation / test / business-logic proposals
    QAResponder           full answers with links and analogies
    ChatAssistant         developer or business chat replies
    ChatQAExtractor       condenses a chat into one Q&A question
    ArchitectureWriter    architecture overview and data flow sections
    BusinessExplainer     short business FAQ

USAGE:
------
    from docubuddy.agents import QAResponder

    responder = QAResponder(llm_client)
    item = await responder.answer(repo, "How are tests run?", ViewMode.DEV)
"""

from docubuddy.agents.base import AgentRole, BaseAgent
from docubuddy.agents.question_generator import QuestionGenerator, function_questions
from docubuddy.agents.documentation_writer import DocumentationWriter
from docubuddy.agents.qa_responder import QAResponder
from docubuddy.agents.chat_assistant import ChatAssistant, ChatReply
from docubuddy.agents.chat_qa_extractor import ChatQAExtractor, ExtractedQuestion
from docubuddy.agents.architecture_writer import ArchitectureWriter, BusinessExplainer

__all__ = [
    # Base classes
    "AgentRole",
    "BaseAgent",
    # Agents
    "QuestionGenerator",
    "function_questions",
    "DocumentationWriter",
    "QAResponder",
    "ChatAssistant",
    "ChatReply",
    "ChatQAExtractor",
    "ExtractedQuestion",
    "ArchitectureWriter",
    "BusinessExplainer",
]
