"""AI assistant completion route."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.auth import CurrentUser, get_current_user
from src.c2_chat_service import ChatService
from src.core.http_errors import http_error

logger = logging.getLogger(__name__)


class CompletionRequest(BaseModel):
    contents: Optional[List[Dict[str, Any]]] = Field(None, description="Gemini-format conversation")
    generation_config: Optional[Dict[str, Any]] = Field(
        None, alias="generationConfig", description="Gemini generationConfig"
    )

    model_config = {"populate_by_name": True}


def create_chat_router():
    router = APIRouter(tags=["chat"])

    @router.post("/chat/completion")
    async def completion(request: CompletionRequest, current_user: CurrentUser = Depends(get_current_user)):
        """Forward a conversation to the configured LLM and return its Gemini-format answer."""
        try:
            return await ChatService.generate_completion(request.contents, request.generation_config)
        except Exception as e:
            raise http_error(e, "generate completion")

    return router
