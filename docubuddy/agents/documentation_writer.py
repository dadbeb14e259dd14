"""
Documentation Writer - Drafts documentation proposals for a function.

A proposal is a reviewable draft: API docs, unit tests, or a plain-language
explanation of the business logic.
"""

import json
from typing import Any

from docubuddy.agents.base import AgentRole, BaseAgent
from docubuddy.models.schemas import FunctionAnalysis, ProposalType


SYSTEM_PROMPT = (
    "You are an expert software developer and technical writer. "
    "Provide high-quality, accurate documentation and explanations."
)

DOCUMENTATION_PROMPT = """Generate comprehensive documentation for this function:

Function Name: {function_name}
Function Signature: {function_signature}
Description: {description}
Parameters: {parameters}
Return Value: {return_value}
Complexity: {complexity_level}

Please provide:
1. Complete documentation comment block
2. Clear parameter descriptions
3. Return value description
4. Usage examples
5. Any important notes or warnings

Format as doc comments that can be directly inserted into code."""

TEST_PROMPT = """Generate comprehensive unit tests for this function:

Function Name: {function_name}
Function Signature: {function_signature}
Description: {description}
Parameters: {parameters}
Return Value: {return_value}
Usage Example: {usage_example}

Please provide:
1. Test cases covering normal scenarios
2. Edge cases and error conditions
3. Mock data setup if needed
4. Clear test descriptions

Format as ready-to-use test code."""

BUSINESS_LOGIC_PROMPT = """Explain the business logic and purpose of this function in simple terms:

Function Name: {function_name}
Description: {description}
Parameters: {parameters}
Return Value: {return_value}
Usage Example: {usage_example}

Please provide:
1. What business problem this function solves
2. When and why it would be used
3. What inputs it expects and what outputs it provides
4. Any business rules or constraints
5. How it fits into the larger application workflow

Write in plain language that non-technical stakeholders can understand."""

PROMPTS = {
    ProposalType.DOCUMENTATION: DOCUMENTATION_PROMPT,
    ProposalType.TEST: TEST_PROMPT,
    ProposalType.BUSINESS_LOGIC: BUSINESS_LOGIC_PROMPT,
}


class DocumentationWriter(BaseAgent):
    """Writes the AI draft of a documentation proposal."""

    role = AgentRole.DOCUMENTATION_WRITER

    def __init__(self, llm_client: Any, model: str = "gpt-4"):
        super().__init__(llm_client)
        self.model = model

    def build_prompt(self, function: FunctionAnalysis, proposal_type: ProposalType) -> str:
        # Raises ValueError for anything outside ProposalType
        template = PROMPTS[ProposalType(proposal_type)]
        return template.format(
            function_name=function.function_name,
            function_signature=function.function_signature or "Not provided",
            description=function.description,
            parameters=json.dumps(function.parameters, indent=2),
            return_value=function.return_value or "Not provided",
            usage_example=function.usage_example or "Not provided",
            complexity_level=function.complexity_level.value if function.complexity_level else "unknown",
        )

    async def write(self, function: FunctionAnalysis, proposal_type: ProposalType) -> str:
        prompt = self.build_prompt(function, proposal_type)
        return await self._call_llm(
            prompt,
            SYSTEM_PROMPT,
            model=self.model,
            temperature=0.3,
            max_tokens=2000,
        )
