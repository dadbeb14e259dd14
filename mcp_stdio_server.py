#!/usr/bin/env python3
"""
MCP Server (stdio) - Docu Buddy tools for MCP clients.

Exposes the core Docu Buddy operations over the standard MCP stdio
protocol, sharing the HTTP API's database, knowledge index and settings.

Add to the client config:
    {
      "mcpServers": {
        "docubuddy": {
          "command": "docubuddy-mcp"
        }
      }
    }

Tools:
  analyze_repository       register a repository and run the analysis pipeline
  fetch_function_code      fetch a file from GitHub, narrowed to one function
  ask_repository_question  answer a dev or business question about a repository
  search_documentation     semantic search over generated documentation
"""

import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import BaseModel, Field, ValidationError

from docubuddy.api.middleware.error_handler import AppException, RepositoryNotFoundError
from docubuddy.core.config import get_settings
from docubuddy.core.dependencies import (
    get_analysis_service,
    get_github_service,
    get_knowledge_service,
    get_qa_service,
    get_store,
)
from docubuddy.models.schemas import RepositoryRecord, ViewMode
from docubuddy.services.github_service import parse_github_url

# Configure logging to stderr (stdout is for MCP protocol)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("mcp_docubuddy")


# =============================================================================
# INPUT SCHEMAS
# =============================================================================


class AnalyzeRepositoryInput(BaseModel):
    github_url: str = Field(..., description="GitHub repository URL", min_length=10)


class FetchCodeInput(BaseModel):
    github_url: str = Field(..., description="GitHub repository URL", min_length=10)
    file_path: str = Field(..., description="Path of the file inside the repository", min_length=1)
    function_name: Optional[str] = Field(None, description="Function to locate in the file")
    ref: Optional[str] = Field(None, description="Branch, tag or commit")


class AskQuestionInput(BaseModel):
    github_url: str = Field(..., description="URL of an analyzed repository", min_length=10)
    question: str = Field(..., min_length=3, max_length=2000)
    view_mode: ViewMode = Field(ViewMode.DEV, description="dev or business")


class SearchInput(BaseModel):
    github_url: str = Field(..., description="URL of an analyzed repository", min_length=10)
    query: str = Field(..., min_length=2, max_length=500)
    top_k: int = Field(5, ge=1, le=30)


# =============================================================================
# TOOL HANDLERS
# =============================================================================


def _text(payload: Dict[str, Any]) -> List[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2, default=str))]


def _stored_repository(github_url: str) -> RepositoryRecord:
    try:
        url = parse_github_url(github_url).url
    except ValueError:
        raise RepositoryNotFoundError(github_url)
    record = get_store().get_repository_by_url(url)
    if record is None:
        raise RepositoryNotFoundError(url)
    return record


async def handle_analyze_repository(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Runs the pipeline inline; the call returns once analysis has finished."""
    input_data = AnalyzeRepositoryInput(**arguments)
    analysis_service = get_analysis_service()

    record, started = analysis_service.submit(input_data.github_url)
    if started:
        await analysis_service.run_analysis(record.id)

    progress = analysis_service.progress(record.id)
    return {
        "success": True,
        "started": started,
        "repository": get_store().get_repository(record.id).model_dump(mode="json"),
        "progress": progress,
    }


async def handle_fetch_code(arguments: Dict[str, Any]) -> Dict[str, Any]:
    input_data = FetchCodeInput(**arguments)
    code = await get_github_service().fetch_function_code(
        input_data.github_url,
        input_data.file_path,
        function_name=input_data.function_name,
        ref=input_data.ref,
    )
    return {"success": True, "code": code.model_dump(mode="json")}


async def handle_ask_question(arguments: Dict[str, Any]) -> Dict[str, Any]:
    input_data = AskQuestionInput(**arguments)
    record = _stored_repository(input_data.github_url)
    item = await get_qa_service().ask(record.id, input_data.question, input_data.view_mode)
    return {"success": True, "qa": item.model_dump(mode="json")}


async def handle_search(arguments: Dict[str, Any]) -> Dict[str, Any]:
    input_data = SearchInput(**arguments)
    record = _stored_repository(input_data.github_url)
    hits = await get_knowledge_service().search(record.id, input_data.query, top_k=input_data.top_k)
    return {
        "success": True,
        "query": input_data.query,
        "results": [hit.model_dump(mode="json") for hit in hits],
        "total_results": len(hits),
    }


HANDLERS: Dict[str, Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]] = {
    "analyze_repository": handle_analyze_repository,
    "fetch_function_code": handle_fetch_code,
    "ask_repository_question": handle_ask_question,
    "search_documentation": handle_search,
}


async def call_tool_safely(name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatch a tool call; failures come back as ``success: false`` payloads."""
    handler = HANDLERS.get(name)
    if handler is None:
        logger.warning(f"Unknown tool requested: {name}")
        return {"success": False, "error": f"Unknown tool: {name}", "error_code": "UNKNOWN_TOOL"}

    try:
        return await handler(arguments)
    except ValidationError as e:
        return {"success": False, "error": f"Invalid input: {e}", "error_code": "VALIDATION_ERROR"}
    except AppException as e:
        logger.warning(f"{name} failed: {e.message}")
        return {"success": False, "error": e.message, "error_code": e.error_code}
    except Exception as e:
        logger.exception(f"Error during {name}: {e}")
        return {"success": False, "error": str(e), "error_code": "INTERNAL_ERROR"}


# =============================================================================
# MCP SERVER IMPLEMENTATION
# =============================================================================


def _schema(properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}


_GITHUB_URL = {"type": "string", "description": "GitHub repository URL (e.g., https://github.com/owner/repo)"}


def create_mcp_server() -> Server:
    """Create and configure the MCP server."""
    server = Server("docubuddy")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [
            Tool(
                name="analyze_repository",
                description="""Analyze a GitHub repository with Docu Buddy.

Fetches repository metadata, generates developer and business starter
questions and architecture docs, and indexes them for search. Already
analyzed repositories are returned without re-running the analysis.""",
                inputSchema=_schema({"github_url": _GITHUB_URL}, ["github_url"]),
            ),
            Tool(
                name="fetch_function_code",
                description="Fetch a file from GitHub. With function_name, return only that function and its line range.",
                inputSchema=_schema({
                    "github_url": _GITHUB_URL,
                    "file_path": {"type": "string", "description": "Path of the file in the repository"},
                    "function_name": {"type": "string", "description": "Function to locate"},
                    "ref": {"type": "string", "description": "Branch, tag or commit"},
                }, ["github_url", "file_path"]),
            ),
            Tool(
                name="ask_repository_question",
                description="Answer a question about an analyzed repository, for developers (dev) or business readers (business).",
                inputSchema=_schema({
                    "github_url": _GITHUB_URL,
                    "question": {"type": "string"},
                    "view_mode": {"type": "string", "enum": ["dev", "business"], "default": "dev"},
                }, ["github_url", "question"]),
            ),
            Tool(
                name="search_documentation",
                description="Semantic search over the Q&A, function and architecture docs generated for a repository.",
                inputSchema=_schema({
                    "github_url": _GITHUB_URL,
                    "query": {"type": "string"},
                    "top_k": {"type": "integer", "default": 5, "minimum": 1, "maximum": 30},
                }, ["github_url", "query"]),
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        return _text(await call_tool_safely(name, arguments))

    return server


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


async def main():
    """Main async entry point for the MCP server."""
    settings = get_settings()

    logger.info(f"Starting {settings.app_name} MCP Server v{settings.app_version}")
    logger.info(f"Database: {settings.database_path}")

    server = create_mcp_server()

    logger.info("MCP Server ready, waiting for connections...")

    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options()
        )


def run():
    """Synchronous entry point for console script."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
