"""
Architecture Writer and Business Explainer - Repository-level documents.

``ArchitectureWriter`` drafts the architecture overview and data-flow
sections; ``BusinessExplainer`` produces a short FAQ in business language.
"""

import logging
from typing import Any, Dict, List, Sequence

from docubuddy.agents.base import AgentRole, BaseAgent, repository_context
from docubuddy.models.schemas import FunctionAnalysis, RepositoryRecord
from docubuddy.services.llm_service import parse_json_response

logger = logging.getLogger(__name__)


ARCHITECTURE_SYSTEM_PROMPT = """You are an expert software architect writing onboarding documentation.
Write clear Markdown. Use ## headings and bullet points. Do not invent file names
that are not listed in the context."""

SECTIONS = [
    (
        "overview",
        "Architecture Overview",
        "Describe the overall architecture of this repository: main components, "
        "their responsibilities and how they relate to each other.",
    ),
    (
        "data_flow",
        "Data Flow",
        "Describe how data and requests flow through this repository, from entry "
        "points to storage or output.",
    ),
]

ARCHITECTURE_PROMPT = """{instruction}

Repository Context:
{context}

Known functions:
{functions}"""

BUSINESS_SYSTEM_PROMPT = """You are an expert business analyst. Explain software to non-technical stakeholders.
Respond with JSON only."""

BUSINESS_PROMPT = """Write up to 5 short business explanations for this repository.

Repository Context:
{context}

Return JSON in this format:
{{
  "explanations": [
    {{"category": "value", "question": "What problem does it solve?", "answer": "..."}}
  ]
}}
Use categories such as value, users, workflow, risk, cost."""

MAX_EXPLANATIONS = 5


def describe_functions(functions: Sequence[FunctionAnalysis], limit: int = 20) -> str:
    lines = [
        f"- {f.function_name} ({f.file_path}): {f.description}"
        for f in list(functions)[:limit]
    ]
    return "\n".join(lines) or "- None analyzed yet"


class ArchitectureWriter(BaseAgent):
    """Writes the architecture sections, one LLM call per section."""

    role = AgentRole.ARCHITECTURE_WRITER

    def __init__(self, llm_client: Any, model: str = "gpt-4o-mini"):
        super().__init__(llm_client)
        self.model = model

    async def write(
        self,
        repo: RepositoryRecord,
        functions: Sequence[FunctionAnalysis] = ()
    ) -> List[Dict[str, Any]]:
        context = repository_context(repo)
        function_list = describe_functions(functions)

        sections = []
        for order_index, (section_type, title, instruction) in enumerate(SECTIONS, start=1):
            content = await self._call_llm(
                ARCHITECTURE_PROMPT.format(
                    instruction=instruction,
                    context=context,
                    functions=function_list,
                ),
                ARCHITECTURE_SYSTEM_PROMPT,
                model=self.model,
                temperature=0.3,
                max_tokens=1200,
            )
            sections.append({
                "section_type": section_type,
                "title": title,
                "content": content,
                "order_index": order_index,
            })

        return sections


class BusinessExplainer(BaseAgent):
    """Writes a handful of business FAQ entries; empty when the reply is unusable."""

    role = AgentRole.BUSINESS_EXPLAINER

    def __init__(self, llm_client: Any, model: str = "gpt-4o-mini"):
        super().__init__(llm_client)
        self.model = model

    async def explain(self, repo: RepositoryRecord) -> List[Dict[str, Any]]:
        reply = await self._call_llm(
            BUSINESS_PROMPT.format(context=repository_context(repo)),
            BUSINESS_SYSTEM_PROMPT,
            model=self.model,
            temperature=0.5,
            max_tokens=1000,
        )

        try:
            raw = parse_json_response(reply).get("explanations")
        except ValueError:
            logger.warning(f"Unparseable business explanations for {repo.owner}/{repo.name}")
            return []

        if not isinstance(raw, list):
            return []

        explanations = []
        for entry in raw:
            if not isinstance(entry, dict) or not entry.get("answer"):
                continue
            explanations.append({
                "category": str(entry.get("category") or "general"),
                "question": entry.get("question"),
                "answer": str(entry["answer"]),
                "order_index": len(explanations) + 1,
            })
        return explanations[:MAX_EXPLANATIONS]
