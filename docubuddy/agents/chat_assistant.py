"""
Chat Assistant - Conversational help about a repository.

Two voices share one implementation: a developer voice focused on
implementation detail and a business voice that translates the same
context into impact and risk.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from docubuddy.agents.base import AgentRole, BaseAgent
from docubuddy.models.schemas import ChatMessage, ChatStyle, FunctionAnalysis, RepositoryRecord


DEVELOPER_PROMPT = """You are Docu Buddy's Technical Implementation Assistant. Your role is to provide actionable, implementation-focused guidance that helps developers understand, modify, and improve code efficiently.

CORE PRINCIPLES:
- Lead with implementation strategy and architectural context
- Provide concrete code examples and patterns when relevant
- Highlight potential pitfalls and common mistakes to avoid

RESPONSE STRUCTURE:
1. **Implementation Overview**
2. **Architecture Impact**
3. **Code Examples** (when applicable)
4. **Performance & Scalability**
5. **Next Steps**

TONE: Technical but clear, practical, solution-oriented"""

BUSINESS_PROMPT = """You are Docu Buddy's Business Intelligence Assistant. Your role is to translate technical concepts into business language that executives, product managers, and stakeholders can understand and act upon.

CORE PRINCIPLES:
- Always explain the business impact first, then the technical details
- Use analogies and real-world examples that non-technical people understand
- Focus on ROI, timelines, risks, and strategic implications

RESPONSE STRUCTURE:
1. **Business Impact Summary**
2. **What This Really Means**
3. **Key Metrics** (time, cost, risk level)
4. **Strategic Implications**
5. **Recommended Actions**

TONE: Professional but accessible. Avoid technical jargon and code examples."""

STYLE_SETTINGS = {
    ChatStyle.DEVELOPER: (DEVELOPER_PROMPT, "Technical Context", 0.6),
    ChatStyle.BUSINESS: (BUSINESS_PROMPT, "Business Context", 0.7),
}

# Only the first functions are summarized into the system prompt
CONTEXT_FUNCTION_LIMIT = 10


@dataclass
class ChatReply:
    """Assistant reply plus presentation hints."""
    response: str
    response_style: ChatStyle
    metrics: Dict[str, str] = field(default_factory=dict)


def build_context(repo: RepositoryRecord, functions: Sequence[FunctionAnalysis]) -> str:
    functions = list(functions)[:CONTEXT_FUNCTION_LIMIT]
    file_names = ", ".join(f.file_path.split("/")[-1] for f in functions) or "Not analyzed"
    complexity = ", ".join(
        f"{f.function_name}: {f.complexity_level.value if f.complexity_level else 'unknown'}"
        for f in functions
    ) or "Not analyzed"
    return (
        f"Repository: {repo.name} ({repo.language or 'Mixed'})\n"
        f"GitHub URL: {repo.github_url}\n"
        f"Description: {repo.description or 'No description available'}\n"
        f"- {len(functions)} functions analyzed\n"
        f"- File Structure: {file_names}\n"
        f"- Complexity Levels: {complexity}"
    )


def reply_metrics(response: str, style: ChatStyle) -> Dict[str, str]:
    code_examples = "Yes" if "```" in response else "Patterns Included"
    if style == ChatStyle.BUSINESS:
        return {
            "business_impact": "Summarized in response",
            "risk_level": "Assessed in response",
            "code_examples": code_examples,
        }
    return {
        "implementation_time": "Estimated in response",
        "complexity_level": "Technical Detail",
        "code_examples": code_examples,
    }


class ChatAssistant(BaseAgent):
    """Replies to the next user message of a conversation."""

    role = AgentRole.CHAT_ASSISTANT

    def __init__(self, llm_client: Any, model: str = "gpt-4"):
        super().__init__(llm_client)
        self.model = model

    async def reply(
        self,
        repo: RepositoryRecord,
        functions: Sequence[FunctionAnalysis],
        history: Sequence[ChatMessage],
        message: str,
        style: ChatStyle = ChatStyle.DEVELOPER
    ) -> ChatReply:
        style = ChatStyle(style)
        system_prompt, context_title, temperature = STYLE_SETTINGS[style]

        messages: List[Dict[str, str]] = [{
            "role": "system",
            "content": f"{system_prompt}\n\n{context_title}:\n{build_context(repo, functions)}",
        }]
        messages.extend({"role": m.role, "content": m.content} for m in history)
        messages.append({"role": "user", "content": message})

        response = await self.llm.chat(
            messages,
            model=self.model,
            temperature=temperature,
            max_tokens=1200,
        )

        return ChatReply(
            response=response,
            response_style=style,
            metrics=reply_metrics(response, style),
        )
