"""
Docu Buddy
==========

Turns a GitHub repository URL into browsable documentation: developer and
business Q&A, function-level documentation proposals, architecture notes
and a repository-aware chat, all generated through an LLM and stored in a
relational backend.

Components:
- agents: LLM-backed generators (questions, answers, docs, chat)
- services: GitHub access, LLM client, persistence, knowledge search
- api: FastAPI endpoints
- models: Pydantic data models
- core: Configuration and dependencies
"""

__version__ = "1.0.0"
