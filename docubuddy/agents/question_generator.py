"""
Question Generator - Seeds a repository with starter questions.

Two flavours:
- ``QuestionGenerator``: five repository-level questions per view mode,
  written by the LLM, with a fixed fallback set when the reply is unusable.
- ``function_questions``: five templated per-function questions, no LLM.
"""

import logging
from typing import Any, Dict, List, Optional

from docubuddy.agents.base import AgentRole, BaseAgent, is_openrewrite, repository_context
from docubuddy.models.schemas import FunctionAnalysis, RepositoryRecord, ViewMode
from docubuddy.services.llm_service import parse_json_response

logger = logging.getLogger(__name__)


QUESTION_COUNT = 5

DEV_FOCUS = """Focus Areas for Developer Questions:
1. Development Environment Setup - How to get started quickly
2. Code Architecture - Understanding the structure and patterns
3. Critical Functions - Most important code areas to understand
4. Testing & Quality - How to test and maintain code quality
5. Integration & Deployment - How the system connects and deploys"""

OPENREWRITE_DEV_FOCUS = """Focus Areas for OpenRewrite Developer Questions:
1. Recipe Development - How to create custom transformation recipes
2. AST Manipulation - Working with Abstract Syntax Trees and visitors
3. Build Tool Integration - Maven/Gradle plugin usage and configuration
4. Testing Strategies - Testing recipes and transformations effectively
5. Advanced Patterns - Visitor patterns, execution contexts, and recipe composition"""

BUSINESS_FOCUS = """Focus Areas for Business Questions:
1. Business Value & Benefits - What problems does this solve?
2. Functionality & Features - What can the system do?
3. Requirements Coverage - What business needs are met?
4. Workflow Implementation - How are business processes handled?
5. Compliance & Standards - What business rules are enforced?"""

OPENREWRITE_BUSINESS_FOCUS = """Focus Areas for OpenRewrite Business Questions:
1. ROI & Cost Savings - Quantifiable benefits of automated refactoring
2. Risk Mitigation - How automation reduces migration and upgrade risks
3. Developer Productivity - Impact on team efficiency and satisfaction
4. Technical Debt Reduction - Business case for code modernization
5. Compliance & Security - Meeting regulatory and security requirements"""

QUESTION_TYPES = {
    ViewMode.DEV: ["setup", "development", "architecture", "testing", "deployment"],
    ViewMode.BUSINESS: ["benefits", "business", "requirements", "workflow", "compliance"],
}

SYSTEM_PROMPT_TEMPLATE = """You are {persona}. Generate exactly 5 high-quality {audience} questions for a GitHub repository.

Repository Context:
{context}

{focus}

Return exactly 5 questions in this JSON format:
{{
  "questions": [
    {{"question": "...", "question_type": "{first_type}", "priority": 1}}
  ]
}}
Allowed question types: {types}.
{closing}"""


def fallback_questions(repo: RepositoryRecord, view_mode: ViewMode) -> List[Dict[str, Any]]:
    """Fixed question set used when the LLM reply cannot be used."""
    name = repo.name
    if view_mode == ViewMode.DEV:
        if is_openrewrite(repo):
            texts = [
                ("How do I create a custom OpenRewrite recipe to transform specific Java patterns?", "development"),
                ("How do I set up OpenRewrite in my Maven or Gradle build?", "setup"),
                ("What is the visitor pattern in OpenRewrite and how do I use it for AST traversal?", "architecture"),
                ("How do I test my OpenRewrite recipes to ensure they work correctly?", "testing"),
                ("How can I integrate OpenRewrite into my CI/CD pipeline for automated refactoring?", "deployment"),
            ]
        else:
            texts = [
                (f"How do I set up the development environment for {name}?", "setup"),
                (f"What is the overall architecture of {name}?", "architecture"),
                (f"What are the most critical functions in {name} that I should understand?", "development"),
                (f"How do I run tests for {name}?", "testing"),
                (f"How is {name} deployed and integrated?", "deployment"),
            ]
    else:
        if is_openrewrite(repo):
            texts = [
                ("What is the ROI and cost savings of using OpenRewrite for automated code modernization?", "benefits"),
                ("How does OpenRewrite reduce business risks during framework migrations and upgrades?", "business"),
                ("What impact does OpenRewrite have on developer productivity and team satisfaction?", "workflow"),
                ("How does automated refactoring help meet compliance and security requirements?", "compliance"),
                ("What business requirements does OpenRewrite address for enterprise development teams?", "requirements"),
            ]
        else:
            texts = [
                (f"What are the main business benefits and key USPs of {name}?", "benefits"),
                (f"What business functionality does {name} provide?", "business"),
                (f"How does {name} address core business requirements?", "requirements"),
                (f"What business workflows are implemented in {name}?", "workflow"),
                (f"What compliance and business standards does {name} follow?", "compliance"),
            ]
    return [
        {"question": text, "question_type": question_type, "priority": priority}
        for priority, (text, question_type) in enumerate(texts, start=1)
    ]


def _clean_questions(payload: Dict[str, Any], view_mode: ViewMode) -> Optional[List[Dict[str, Any]]]:
    """Validate the ``questions`` list of an LLM reply; None when unusable."""
    raw = payload.get("questions")
    if not isinstance(raw, list):
        return None

    default_type = QUESTION_TYPES[view_mode][0]
    questions = []
    for priority, entry in enumerate(raw, start=1):
        if not isinstance(entry, dict):
            continue
        text = str(entry.get("question") or "").strip()
        if not text:
            continue
        questions.append({
            "question": text,
            "question_type": str(entry.get("question_type") or default_type),
            "priority": entry.get("priority") or priority,
        })
    return questions[:QUESTION_COUNT] or None


class QuestionGenerator(BaseAgent):
    """Writes repository-level starter questions for one audience."""

    role = AgentRole.QUESTION_GENERATOR

    def __init__(self, llm_client: Any, model: str = "gpt-4o-mini"):
        super().__init__(llm_client)
        self.model = model

    def _system_prompt(self, repo: RepositoryRecord, view_mode: ViewMode) -> str:
        openrewrite = is_openrewrite(repo)
        types = QUESTION_TYPES[view_mode]
        if view_mode == ViewMode.DEV:
            return SYSTEM_PROMPT_TEMPLATE.format(
                persona="an expert software architect and developer mentor",
                audience="developer",
                context=repository_context(repo),
                focus=OPENREWRITE_DEV_FOCUS if openrewrite else DEV_FOCUS,
                first_type=types[0],
                types=", ".join(types),
                closing="Make questions specific to this repository's technology stack and apparent complexity.",
            )
        return SYSTEM_PROMPT_TEMPLATE.format(
            persona="an expert business analyst and requirements engineer",
            audience="business",
            context=repository_context(repo),
            focus=OPENREWRITE_BUSINESS_FOCUS if openrewrite else BUSINESS_FOCUS,
            first_type=types[0],
            types=", ".join(types),
            closing="Focus on business value, not technical implementation. Use business-friendly language.",
        )

    async def generate(self, repo: RepositoryRecord, view_mode: ViewMode) -> List[Dict[str, Any]]:
        """
        Generate starter questions.

        Returns:
            Dicts with question, question_type, priority. Always non-empty:
            an unparseable reply yields the fallback set.
        """
        view_mode = ViewMode(view_mode)
        audience = "developer" if view_mode == ViewMode.DEV else "business"
        reply = await self._call_llm(
            f"Generate {QUESTION_COUNT} specialized {audience} questions for the {repo.name} repository.",
            self._system_prompt(repo, view_mode),
            model=self.model,
            temperature=0.7,
            max_tokens=1000,
        )

        try:
            questions = _clean_questions(parse_json_response(reply), view_mode)
        except ValueError:
            questions = None

        if not questions:
            logger.warning(f"Unusable question reply for {repo.owner}/{repo.name}; using fallback set")
            questions = fallback_questions(repo, view_mode)

        return questions


def function_questions(function: FunctionAnalysis) -> List[Dict[str, Any]]:
    """Templated developer and business questions about one function."""
    name = function.function_name
    templates = [
        (f"How would you test the edge cases for {name}?", "developer"),
        (f"What business scenarios would require calling {name}?", "business"),
        (f"Are there any performance considerations when using {name}?", "developer"),
        (f"How does {name} handle error conditions?", "developer"),
        (f"What user actions trigger the {name} function?", "business"),
    ]
    return [
        {
            "function_id": function.id,
            "function_name": name,
            "question": question,
            "question_type": question_type,
        }
        for question, question_type in templates
    ]
