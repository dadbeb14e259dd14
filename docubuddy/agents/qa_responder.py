"""
QA Responder - Answers a free-form question about a repository.

The answer is written for one audience (developer or business). Business
answers also get a short everyday analogy from a second, cheaper call.
"""

import logging
from typing import Any, Dict, List, Optional

from docubuddy.agents.base import AgentRole, BaseAgent, repository_context
from docubuddy.models.schemas import RepositoryRecord, ViewMode

logger = logging.getLogger(__name__)


DEV_SYSTEM_PROMPT = """You are an expert software architect and senior developer. Answer questions about software repositories from a technical perspective.

Repository Context:
{context}

Instructions:
- Focus on technical implementation, architecture, and code quality
- Provide specific, actionable technical guidance
- Include code examples where relevant
- Explain best practices and potential pitfalls
- Use markdown formatting with proper code highlighting

Answer Format:
- Start with a technical overview
- Use ## for main sections like "Implementation", "Best Practices", "Considerations"
- Include a "Technical Recommendations" section
- End with specific next steps"""

BUSINESS_SYSTEM_PROMPT = """You are an expert business analyst and requirements engineer. Answer questions about software repositories from a business perspective.

Repository Context:
{context}

Instructions:
- Focus on business value, functionality, and requirements
- Use business-friendly language, avoid technical jargon
- Explain how features solve business problems
- Use markdown formatting for better readability

Answer Format:
- Start with a brief executive summary
- Use ## for main sections
- Include a "Business Impact" section
- End with actionable next steps"""

USER_PROMPT = """Question: {question}

Repository: {owner}/{name}
Description: {description}
Programming Language: {language}

Please provide a comprehensive answer using the repository context above. Focus on {focus}."""

ANALOGY_PROMPT = """Create a simple business analogy to explain this concept: {question}

Repository: {name}
Context: {description}

Make it relatable to everyday business operations. Keep it to 2-3 sentences."""

LANGUAGE_DOCS = {
    "python": "https://docs.python.org/3/",
    "javascript": "https://developer.mozilla.org/en-US/docs/Web/JavaScript",
    "typescript": "https://www.typescriptlang.org/docs/",
    "java": "https://docs.oracle.com/en/java/",
    "kotlin": "https://kotlinlang.org/docs/home.html",
    "go": "https://go.dev/doc/",
    "rust": "https://doc.rust-lang.org/book/",
    "ruby": "https://www.ruby-lang.org/en/documentation/",
    "php": "https://www.php.net/docs.php",
    "c#": "https://learn.microsoft.com/en-us/dotnet/csharp/",
    "c++": "https://en.cppreference.com/",
    "c": "https://en.cppreference.com/w/c",
    "swift": "https://www.swift.org/documentation/",
    "scala": "https://docs.scala-lang.org/",
}


def external_links(repo: RepositoryRecord) -> List[Dict[str, str]]:
    """Repository link plus language documentation when the language is known."""
    links = [{"title": f"{repo.name} Repository", "url": repo.github_url}]
    docs_url = LANGUAGE_DOCS.get((repo.language or "").lower())
    if docs_url:
        links.append({"title": f"{repo.language} Documentation", "url": docs_url})
    return links


def default_question_type(view_mode: ViewMode) -> str:
    return "business" if view_mode == ViewMode.BUSINESS else "development"


class QAResponder(BaseAgent):
    """Produces a complete Q&A item (answer, links, analogy) ready to store."""

    role = AgentRole.QA_RESPONDER

    def __init__(self, llm_client: Any, model: str = "gpt-4o", analogy_model: str = "gpt-4o-mini"):
        super().__init__(llm_client)
        self.model = model
        self.analogy_model = analogy_model

    async def answer(
        self,
        repo: RepositoryRecord,
        question: str,
        view_mode: ViewMode = ViewMode.DEV,
        question_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Answer ``question`` for the given audience.

        Returns:
            Dict accepted by ``Store.insert_qa_items``
        """
        view_mode = ViewMode(view_mode)
        business = view_mode == ViewMode.BUSINESS
        template = BUSINESS_SYSTEM_PROMPT if business else DEV_SYSTEM_PROMPT

        answer = await self._call_llm(
            USER_PROMPT.format(
                question=question,
                owner=repo.owner,
                name=repo.name,
                description=repo.description or "No description available",
                language=repo.language or "Not specified",
                focus="business value and functionality" if business
                else "technical implementation and architecture",
            ),
            template.format(context=repository_context(repo)),
            model=self.model,
            temperature=0.3,
            max_tokens=2000,
        )

        analogy = None
        if business:
            analogy = await self._call_llm(
                ANALOGY_PROMPT.format(
                    question=question,
                    name=repo.name,
                    description=repo.description or "No description available",
                ),
                model=self.analogy_model,
                temperature=0.7,
                max_tokens=150,
            )

        logger.info(f"Answered {view_mode.value} question for {repo.owner}/{repo.name}")

        return {
            "function_id": "general",
            "function_name": "General",
            "question": question,
            "answer": answer,
            "question_type": question_type or default_question_type(view_mode),
            "view_mode": view_mode.value,
            "content_format": "markdown",
            "external_links": external_links(repo),
            "analogy_content": analogy,
        }
