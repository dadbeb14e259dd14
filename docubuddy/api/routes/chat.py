"""
Chat Endpoints - Conversations with the developer or business assistant.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from docubuddy.core.dependencies import get_qa_service, get_store
from docubuddy.models.requests import ChatMessageRequest, ConversationCreateRequest
from docubuddy.models.responses import ChatQAResponse, ChatReplyResponse, ErrorResponse
from docubuddy.models.schemas import ChatConversation, ChatMessage
from docubuddy.services.qa_service import QAService
from docubuddy.services.store import Store


router = APIRouter(tags=["Chat"])


@router.post(
    "/repositories/{repository_id}/conversations",
    response_model=ChatConversation,
    status_code=status.HTTP_201_CREATED,
    summary="Start Conversation",
    responses={404: {"model": ErrorResponse}}
)
async def create_conversation(
    repository_id: str,
    request: ConversationCreateRequest,
    store: Store = Depends(get_store),
    qa_service: QAService = Depends(get_qa_service)
) -> ChatConversation:
    qa_service.repository(repository_id)
    return store.create_conversation(
        repository_id,
        conversation_type=request.conversation_type.value,
        function_id=request.function_id,
        title=request.title
    )


@router.get(
    "/repositories/{repository_id}/conversations",
    response_model=List[ChatConversation],
    summary="List Conversations",
    responses={404: {"model": ErrorResponse}}
)
async def list_conversations(
    repository_id: str,
    store: Store = Depends(get_store),
    qa_service: QAService = Depends(get_qa_service)
) -> List[ChatConversation]:
    qa_service.repository(repository_id)
    return store.list_conversations(repository_id)


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=List[ChatMessage],
    summary="List Messages",
    description="Messages of a conversation in chronological order",
    responses={404: {"model": ErrorResponse}}
)
async def list_messages(
    conversation_id: str,
    store: Store = Depends(get_store),
    qa_service: QAService = Depends(get_qa_service)
) -> List[ChatMessage]:
    qa_service.conversation(conversation_id)
    return store.list_messages(conversation_id)


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=ChatReplyResponse,
    summary="Send Message",
    description="Send a message and get the assistant's reply",
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse, "description": "LLM not configured"}
    }
)
async def send_message(
    conversation_id: str,
    request: ChatMessageRequest,
    qa_service: QAService = Depends(get_qa_service)
) -> ChatReplyResponse:
    reply, messages = await qa_service.send_message(
        conversation_id,
        request.message,
        style=request.style
    )
    return ChatReplyResponse(
        response=reply.response,
        response_style=reply.response_style,
        metrics=reply.metrics,
        messages=messages
    )


@router.post(
    "/conversations/{conversation_id}/qa",
    response_model=ChatQAResponse,
    summary="Q&A From Conversation",
    description="Condense a conversation into a question and answer it",
    responses={404: {"model": ErrorResponse}}
)
async def qa_from_conversation(
    conversation_id: str,
    qa_service: QAService = Depends(get_qa_service)
) -> ChatQAResponse:
    result = await qa_service.qa_from_chat(conversation_id)
    return ChatQAResponse(
        question=result.question,
        answer=result.answer,
        question_type=result.question_type,
        view_mode=result.view_mode,
        qa_item=result.qa_item
    )
