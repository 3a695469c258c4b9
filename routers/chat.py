import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from assistant import ask_ai, route_message
from dependencies import get_ai_client
from schemas import AIChatRequest, AIChatResponse, ChatMessageOut, ChatRequest, ChatResponse
from storage import Storage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatResponse,
    summary="Ask the Pharmacovigilance Assistant",
    description="Answers from the built-in rule table and returns quick-reply options. Every exchange is logged."
)
def chat(data: ChatRequest, storage: Storage = Depends(get_storage)):
    try:
        reply = route_message(data.message, storage)
        storage.chat_messages.create(message=data.message, response=reply.message)
    except SQLAlchemyError:
        logger.exception("Chat request failed")
        raise HTTPException(status_code=500, detail="Failed to process your query")
    return {
        "message": reply.message,
        "options": [vars(option) for option in reply.options],
    }


@router.get("/chat/messages", response_model=List[ChatMessageOut], summary="Chat Log")
def chat_messages(storage: Storage = Depends(get_storage)):
    try:
        return storage.chat_messages.get_all()
    except SQLAlchemyError:
        logger.exception("Failed to list chat messages")
        raise HTTPException(status_code=500, detail="An error occurred while fetching chat messages")


@router.post("/ai-chat", response_model=AIChatResponse,
    summary="Ask the AI Assistant",
    description="Sends the message and recent conversation to the AI model. If the model cannot be reached "
                "the rule-based answer is returned with connectionError set."
)
def ai_chat(data: AIChatRequest, storage: Storage = Depends(get_storage), client=Depends(get_ai_client)):
    if client is None:
        raise HTTPException(status_code=503, detail="AI assistant is not configured")
    history = [turn.model_dump() for turn in data.conversationHistory]
    try:
        reply = ask_ai(client, data.message, history, storage)
        storage.chat_messages.create(message=data.message, response=reply.response)
    except SQLAlchemyError:
        logger.exception("AI chat request failed")
        raise HTTPException(status_code=500, detail="Failed to process AI chat request. Please try again.")
    return {
        "response": reply.response,
        "conversationId": uuid.uuid4().hex,
        "connectionError": reply.connection_error,
    }
